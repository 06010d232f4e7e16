"""
catscii - cat photos rendered as ASCII art over HTTP.
"""
__version__ = "1.0.0"
