"""
Services package for the Newsroom backend.
Contains business logic layer for the application.
"""

from .media_store import MediaStore
from .post_service import PostService
from .token_verifier import GoogleTokenVerifier, Identity, TokenVerifier, VerificationError

__all__ = [
    "MediaStore",
    "PostService",
    "GoogleTokenVerifier",
    "Identity",
    "TokenVerifier",
    "VerificationError",
]
