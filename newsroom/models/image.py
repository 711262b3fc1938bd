"""
Image data models for the Newsroom backend.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel


@dataclass(frozen=True, slots=True)
class ImageRecord:
    """A stored image together with its thumbnail bytes."""

    imagename: str
    caption: Optional[str]
    main: bytes
    thumbnail: bytes
    showthumbnail: bool


class ImageInfo(BaseModel):
    """Public metadata of a stored image, without any bytes."""

    imagename: str
    caption: Optional[str] = None
    showthumbnail: bool = True
