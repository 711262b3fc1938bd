"""
Models package for the Newsroom backend.
Contains data models and validation schemas.
"""

from .post import Post, PostUpsert, PostPage
from .image import ImageRecord, ImageInfo

__all__ = ["Post", "PostUpsert", "PostPage", "ImageRecord", "ImageInfo"]
