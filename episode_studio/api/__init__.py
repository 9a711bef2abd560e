"""API package for Episode Studio"""

from .routes import router

__all__ = ["router"]
