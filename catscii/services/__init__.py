"""
Image pipeline services: fetch, decode, render and coordinate.
"""
