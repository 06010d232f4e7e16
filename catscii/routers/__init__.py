"""
API Routers for catscii.
"""
from .art import router as art_router
from .health import router as health_router

__all__ = ["art_router", "health_router"]
