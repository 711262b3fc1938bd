"""
Image decoding, thumbnailing and re-encoding helpers.

All functions are stateless byte transformations built on Pillow. They are
CPU bound; async callers should run them in an executor.
"""

import io
import os
from typing import Optional

from PIL import Image, UnidentifiedImageError
from loguru import logger

THUMBNAIL_SIZE = (100, 100)

_JPEG_FORMATS = {"JPEG", "MPO"}
# Converted to RGB for every target other than JPEG
_COLOR_SPACE_MODES = {"CMYK", "YCbCr", "LAB", "HSV"}


class ImageCodecError(Exception):
    """Base class for image codec failures."""


class DecodeError(ImageCodecError):
    """The bytes are not an image in any supported format."""


class EncodeError(ImageCodecError):
    """The image cannot be written in the requested format."""


def decode(data: bytes) -> Image.Image:
    """Decode raw image bytes, detecting the container format from content."""
    if not data:
        raise DecodeError("Empty image data")
    try:
        image = Image.open(io.BytesIO(data))
        # Pillow decodes lazily; force the pixel data so truncated files fail here
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Unsupported or corrupt image data: {exc}") from exc
    return image


def thumbnail(image: Image.Image, width: int = THUMBNAIL_SIZE[0], height: int = THUMBNAIL_SIZE[1]) -> Image.Image:
    """Return a copy of ``image`` fitted into a ``width`` x ``height`` box.

    The aspect ratio is preserved and images already inside the box are not
    enlarged.
    """
    copy = image.copy()
    copy.thumbnail((width, height))
    return copy


def format_for_filename(filename: str) -> Optional[str]:
    """Return the Pillow format name matching the file extension, if any."""
    _, ext = os.path.splitext(filename or "")
    if not ext:
        return None
    return Image.registered_extensions().get(ext.lower())


def _prepare_for_format(image: Image.Image, target_format: str) -> Image.Image:
    if target_format in _JPEG_FORMATS:
        if image.mode in ("RGBA", "LA", "P"):
            # Flatten transparency onto a white background
            rgba = image.convert("RGBA")
            rgb_img = Image.new("RGB", rgba.size, (255, 255, 255))
            rgb_img.paste(rgba, mask=rgba.split()[-1])
            return rgb_img
        if image.mode not in ("RGB", "L", "CMYK"):
            return image.convert("RGB")
        return image
    if image.mode in _COLOR_SPACE_MODES:
        return image.convert("RGB")
    return image


def _fallback_mode(image: Image.Image) -> str:
    if "A" in image.getbands() or "transparency" in image.info:
        return "RGBA"
    return "RGB"


def _save(image: Image.Image, target_format: str) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=target_format)
    return buffer.getvalue()


def encode(image: Image.Image, target_format: Optional[str]) -> bytes:
    """Serialize ``image`` in ``target_format`` (a Pillow format name).

    Pixel modes the format cannot store (16-bit, float, palette variants) are
    retried once as RGB or RGBA.
    """
    if not target_format:
        raise EncodeError("No target format")
    target_format = target_format.upper()
    Image.init()
    if target_format not in Image.SAVE:
        raise EncodeError(f"Unsupported output format '{target_format}'")

    prepared = _prepare_for_format(image, target_format)
    try:
        return _save(prepared, target_format)
    except (OSError, ValueError, KeyError) as exc:
        fallback = _fallback_mode(prepared)
        if prepared.mode == fallback:
            raise EncodeError(f"Failed to encode image as {target_format}: {exc}") from exc
        logger.debug(f"Retrying {target_format} encode of mode {prepared.mode} as {fallback}: {exc}")

    try:
        return _save(_prepare_for_format(prepared.convert(fallback), target_format), target_format)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(f"Failed to encode image as {target_format}: {exc}") from exc


def encode_for_filename(image: Image.Image, filename: str) -> bytes:
    """Serialize ``image`` in the format implied by ``filename``'s extension."""
    target_format = format_for_filename(filename)
    if target_format is None:
        raise EncodeError(f"No image format for file name '{filename}'")
    return encode(image, target_format)


def transcode(data: bytes, filename: str) -> bytes:
    """
    Re-encode stored image bytes for delivery.

    Decodes ``data`` and writes it again in the format implied by ``filename``.
    Any codec failure is logged and yields an empty body so the request can
    still complete.
    """
    try:
        return encode_for_filename(decode(data), filename)
    except ImageCodecError as exc:
        logger.warning(f"Serving empty body for image '{filename}': {exc}")
        return b""
