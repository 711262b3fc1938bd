"""
FastAPI dependency providers.
Everything here reads objects that create_app stored on app.state at startup.
"""

from fastapi import Depends, Request

from .config import Settings
from .database import Database
from .services.media_store import MediaStore
from .services.post_service import PostService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_media_store(db: Database = Depends(get_database)) -> MediaStore:
    return MediaStore(db)


def get_post_service(
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> PostService:
    return PostService(db, page_limit=settings.posts_page_limit)
