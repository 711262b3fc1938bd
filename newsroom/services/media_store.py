"""
Image persistence for the Newsroom backend.
Stores original and thumbnail bytes together with their metadata, keyed by name.
"""

from __future__ import annotations

from typing import List, Optional

from loguru import logger

from ..database import Database, QueryFailedError
from ..models.image import ImageInfo, ImageRecord


class MediaStore:
    """Service class for image records."""

    def __init__(self, db: Database):
        self._db = db

    async def put(
        self,
        imagename: str,
        main: bytes,
        thumbnail: bytes,
        caption: Optional[str] = None,
        show_thumbnail: bool = True,
    ) -> None:
        """
        Create or overwrite an image record.

        Main and thumbnail bytes are written by a single statement, so readers
        never observe a mismatched pair.
        """
        try:
            await self._db.execute(
                """
                INSERT INTO images (imagename, caption, main, thumbnail, showthumbnail, updated_at)
                VALUES ($1, $2, $3, $4, $5, now())
                ON CONFLICT (imagename) DO UPDATE SET
                    caption = EXCLUDED.caption,
                    main = EXCLUDED.main,
                    thumbnail = EXCLUDED.thumbnail,
                    showthumbnail = EXCLUDED.showthumbnail,
                    updated_at = EXCLUDED.updated_at
                """,
                imagename,
                caption,
                main,
                thumbnail,
                show_thumbnail,
            )
        except Exception as exc:
            logger.exception(f"Failed to store image '{imagename}': {exc}")
            raise QueryFailedError("Storing image failed.") from exc
        logger.info(f"Image stored: {imagename} ({len(main)} bytes)")

    async def get(self, imagename: str) -> Optional[ImageRecord]:
        """Return the image stored under ``imagename`` or None."""
        try:
            row = await self._db.fetchrow(
                """
                SELECT imagename, caption, main, thumbnail, showthumbnail
                FROM images WHERE imagename = $1
                """,
                imagename,
            )
        except Exception as exc:
            logger.exception(f"Failed to load image '{imagename}': {exc}")
            raise QueryFailedError("Loading image failed.") from exc
        if row is None:
            return None
        return ImageRecord(
            imagename=row["imagename"],
            caption=row["caption"],
            main=bytes(row["main"]),
            thumbnail=bytes(row["thumbnail"]),
            showthumbnail=row["showthumbnail"],
        )

    async def get_info(self, imagename: str) -> Optional[ImageInfo]:
        """Return metadata for ``imagename`` without loading its bytes."""
        try:
            row = await self._db.fetchrow(
                "SELECT imagename, caption, showthumbnail FROM images WHERE imagename = $1",
                imagename,
            )
        except Exception as exc:
            logger.exception(f"Failed to load image info '{imagename}': {exc}")
            raise QueryFailedError("Loading image info failed.") from exc
        if row is None:
            return None
        return ImageInfo(
            imagename=row["imagename"],
            caption=row["caption"],
            showthumbnail=row["showthumbnail"],
        )

    async def list_names(self) -> List[str]:
        """Return all image names, most recently written first."""
        try:
            rows = await self._db.fetch(
                "SELECT imagename FROM images ORDER BY updated_at DESC, imagename ASC"
            )
        except Exception as exc:
            logger.exception(f"Failed to list images: {exc}")
            raise QueryFailedError("Listing images failed.") from exc
        return [row["imagename"] for row in rows]
