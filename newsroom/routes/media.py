"""
Public routes serving stored image and thumbnail bytes.
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from loguru import logger

from ..config import Settings
from ..dependencies import get_media_store, get_settings
from ..models.image import ImageInfo
from ..services.media_store import MediaStore
from ..utils.image_codec import transcode
from ..utils.validation import is_valid_image_name

router = APIRouter()

OCTET_STREAM = "application/octet-stream"


async def _serve(name: str, thumbnail: bool, settings: Settings, store: MediaStore) -> Response:
    if not is_valid_image_name(name):
        raise HTTPException(status_code=400, detail="Invalid image name")

    record = await store.get(name)
    if record is None:
        logger.warning(f"Image '{name}' requested but not stored")
        if settings.strict_missing_images:
            raise HTTPException(status_code=404, detail="Image not found")
        return Response(content=b"", media_type=OCTET_STREAM)

    data = record.thumbnail if thumbnail else record.main
    loop = asyncio.get_running_loop()
    body = await loop.run_in_executor(None, transcode, data, record.imagename)
    return Response(content=body, media_type=OCTET_STREAM)


@router.get("/images/{name}")
async def get_image(
    name: str,
    settings: Settings = Depends(get_settings),
    store: MediaStore = Depends(get_media_store),
):
    """Stream the stored image, re-encoded for its name's extension."""
    return await _serve(name, False, settings, store)


@router.get("/thumbnail/{name}")
async def get_thumbnail(
    name: str,
    settings: Settings = Depends(get_settings),
    store: MediaStore = Depends(get_media_store),
):
    """Stream the stored thumbnail, re-encoded for its name's extension."""
    return await _serve(name, True, settings, store)


@router.get("/imageinfo/{name}", response_model=ImageInfo)
async def get_image_info(name: str, store: MediaStore = Depends(get_media_store)):
    info = await store.get_info(name)
    if info is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return info
