"""
Routes package for the Newsroom backend.
This package contains all the route modules for the application.
"""

from . import images, media, posts, static

__all__ = ["images", "media", "posts", "static"]
