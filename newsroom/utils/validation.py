"""
Validation utilities for the Newsroom backend.
Contains common validation functions used across the application.
"""

import os
from pathlib import Path
from typing import Any, Optional

MAX_IMAGE_NAME_LENGTH = 255


def is_valid_image_name(name: Optional[str]) -> bool:
    """Validate an image name so it can double as a URL path segment."""
    if not name or not name.strip() or name != name.strip():
        return False

    if len(name) > MAX_IMAGE_NAME_LENGTH:
        return False

    # Disallow traversal and path-like names
    if name in (".", "..") or "/" in name or "\\" in name:
        return False

    return "\0" not in name


def coerce_bool(value: Any, default: bool = False) -> bool:
    """Interpret form and query values such as "on", "true" or "0"."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized:
            return default
        return normalized in {"true", "1", "yes", "on"}
    return bool(value)


def safe_static_path(root: str, relative: str) -> Optional[Path]:
    """
    Resolve ``relative`` inside ``root``.

    Returns None when the result would escape ``root``.
    """
    abs_root = os.path.abspath(root)
    abs_path = os.path.abspath(os.path.normpath(os.path.join(abs_root, relative)))
    if not abs_path.startswith(abs_root + os.path.sep):
        return None
    return Path(abs_path)
