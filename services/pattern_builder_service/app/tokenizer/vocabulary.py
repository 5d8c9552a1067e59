"""
Static lookup tables used to recognize filename segments.

All tables are built once at import time and are read-only afterwards.
"""

import re
from types import MappingProxyType

from .models import ImageRole

DELIMITER_CLASS = r"[_\-.\s]"
DELIMITER_PATTERN = re.compile(DELIMITER_CLASS + "+")

CAMERA_SYNONYMS: MappingProxyType[ImageRole, frozenset[str]] = MappingProxyType(
    {
        ImageRole.OVERVIEW: frozenset({"overview", "ov", "ovr", "ovw", "scene", "full"}),
        ImageRole.FRONT: frozenset({"front", "f", "fr", "forward"}),
        ImageRole.REAR: frozenset({"rear", "r", "rr", "back", "behind"}),
    }
)

ALL_CAMERA_SYNONYMS: frozenset[str] = frozenset().union(*CAMERA_SYNONYMS.values())

IMAGE_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg", "png", "bmp", "tiff", "gif"})

DATE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\d{4}-\d{2}-\d{2}"),  # 2024-01-15
    re.compile(r"\d{2}-\d{2}-\d{4}"),  # 01-15-2024
    re.compile(r"\d{8}"),  # 20240115
    re.compile(r"\d{4}\d{2}\d{2}"),  # 20240115
    re.compile(r"\d{2}\d{2}\d{4}"),  # 01152024
)

INDEX_PATTERN = re.compile(r"\d{1,6}")

# Consecutive numeric segments merged into one date token
_YEAR = re.compile(r"\d{4}")
_TWO_DIGITS = re.compile(r"\d{2}")
DATE_MERGE_SEQUENCES: tuple[tuple[re.Pattern, re.Pattern, re.Pattern], ...] = (
    (_YEAR, _TWO_DIGITS, _TWO_DIGITS),
    (_TWO_DIGITS, _TWO_DIGITS, _YEAR),
)


def is_image_extension(value: str) -> bool:
    """Check if a segment is a known image extension."""
    return value.lower() in IMAGE_EXTENSIONS


def is_camera_synonym(value: str) -> bool:
    """Check if a segment is any camera/side synonym."""
    return value.lower() in ALL_CAMERA_SYNONYMS


def is_date(value: str) -> bool:
    """Check if a segment matches one of the supported date formats."""
    return any(pattern.fullmatch(value) for pattern in DATE_PATTERNS)


def is_index(value: str) -> bool:
    """Check if a segment is a short numeric index."""
    return INDEX_PATTERN.fullmatch(value) is not None


def role_for_synonym(value: str) -> ImageRole | None:
    """Get the image role a camera/side synonym refers to."""
    lower = value.lower()
    for role, synonyms in CAMERA_SYNONYMS.items():
        if lower in synonyms:
            return role
    return None
