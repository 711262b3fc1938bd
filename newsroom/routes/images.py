"""
Image upload and listing routes for the Newsroom backend.
Both routes require an admin identity token.
"""

import asyncio
from typing import List, Mapping, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.datastructures import UploadFile

from ..config import Settings
from ..database import StoreError
from ..dependencies import get_media_store, get_settings
from ..middleware.auth_middleware import AdminPrincipal, require_admin
from ..services.media_store import MediaStore
from ..utils import image_codec
from ..utils.validation import coerce_bool, is_valid_image_name

router = APIRouter()

MULTIPART_OVERHEAD = 64 * 1024


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _build_thumbnail(data: bytes, imagename: str, size: int) -> bytes:
    """Decode the upload and encode its thumbnail in the name's format."""
    image = image_codec.decode(data)
    thumb = image_codec.thumbnail(image, size, size)
    return image_codec.encode_for_filename(thumb, imagename)


def declared_length_exceeds(headers: Mapping[str, str], limit: int) -> bool:
    """True when the request announces a body larger than ``limit`` bytes."""
    declared = headers.get("content-length", "").strip()
    return declared.isdigit() and int(declared) > limit


async def _read_limited(request: Request, limit: int) -> Optional[bytes]:
    """Read the raw body, giving up once it grows past ``limit`` bytes."""
    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def _clean_caption(caption: Optional[str]) -> Optional[str]:
    if caption is None:
        return None
    caption = caption.strip()
    return caption or None


@router.post("/upload/image", response_model=List[str])
async def upload_image(
    request: Request,
    admin: AdminPrincipal = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    store: MediaStore = Depends(get_media_store),
):
    """
    Upload an image and store it together with its thumbnail.

    Accepts either a multipart form with a ``file`` part (and optional
    ``imagename``, ``caption`` and ``showthumbnail`` fields) or a raw request
    body named by the ``filename`` query parameter.
    """
    too_large = _error(
        413,
        f"File too large. Maximum file size is {settings.max_upload_size // (1024 * 1024)}MB.",
    )
    content_type = request.headers.get("content-type", "")
    multipart = content_type.lower().startswith("multipart/form-data")
    # Multipart bodies carry boundaries and form fields on top of the file
    body_limit = settings.max_upload_size + (MULTIPART_OVERHEAD if multipart else 0)
    if declared_length_exceeds(request.headers, body_limit):
        logger.warning(f"Rejected upload from {admin.subject}: declared body over {body_limit} bytes")
        return too_large

    if multipart:
        form = await request.form()
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            return _error(400, "No file part")
        data = await upload.read()
        imagename = form.get("imagename") or upload.filename
        caption = form.get("caption")
        show_thumbnail = coerce_bool(form.get("showthumbnail"), default=True)
    else:
        data = await _read_limited(request, settings.max_upload_size)
        if data is None:
            return too_large
        imagename = request.query_params.get("filename")
        caption = request.query_params.get("caption")
        show_thumbnail = coerce_bool(request.query_params.get("showthumbnail"), default=True)

    if len(data) > settings.max_upload_size:
        return too_large

    if not isinstance(imagename, str) or not is_valid_image_name(imagename):
        return _error(400, "Invalid image name.")

    loop = asyncio.get_running_loop()
    try:
        thumbnail = await loop.run_in_executor(
            None, _build_thumbnail, data, imagename, settings.thumbnail_size
        )
    except image_codec.DecodeError as exc:
        logger.warning(f"Rejected upload '{imagename}' from {admin.subject}: {exc}")
        return _error(400, "Unsupported or corrupt image.")
    except image_codec.EncodeError as exc:
        logger.warning(f"Rejected upload '{imagename}' from {admin.subject}: {exc}")
        return _error(400, "Unsupported image format for this file name.")

    try:
        await store.put(
            imagename,
            data,
            thumbnail,
            caption=_clean_caption(caption if isinstance(caption, str) else None),
            show_thumbnail=show_thumbnail,
        )
        names = await store.list_names()
    except StoreError as exc:
        logger.error(f"Error storing upload '{imagename}': {exc}")
        return _error(500, "Failed to store image")

    logger.info(f"Image uploaded: {imagename} by {admin.subject}")
    return names


@router.post("/getimages", response_model=List[str])
async def get_images(
    admin: AdminPrincipal = Depends(require_admin),
    store: MediaStore = Depends(get_media_store),
):
    """Return the names of all stored images, most recent first."""
    return await store.list_names()
