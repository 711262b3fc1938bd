"""
Utils package for the Newsroom backend.
Contains utility functions and helpers.
"""

from .validation import (
    is_valid_image_name,
    coerce_bool,
    safe_static_path,
)

__all__ = [
    'is_valid_image_name',
    'coerce_bool',
    'safe_static_path',
]
