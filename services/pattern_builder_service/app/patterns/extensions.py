"""
Flexible image extension matching for generated patterns.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg", "png", "tiff", "tif", "bmp", "gif", "webp"})

ANY_IMAGE_EXTENSION_PATTERN = r"(?i:\.(jpg|jpeg|png|tiff?|bmp|gif|webp))"

_FLEXIBLE_MARKER = "jpg|jpeg|png|tiff"

# Rewrites applied to regex source text, in this order. Each one only matches
# an escaped dot directly followed by letters or a letter class, which the
# replacement never contains, so a rewritten extension is not rewritten again.
_CASE_INSENSITIVE_EXTENSION = re.compile(r"\(\?i:\\\.(?:\([a-zA-Z|]+\)|[a-zA-Z]{3,4})\)")
_BRACKETED_EXTENSION = re.compile(r"\\\.(?:\[[a-zA-Z]{2}\]){3,4}(?=\$|$)")
_LITERAL_EXTENSION = re.compile(r"\\\.[a-zA-Z]{3,4}(?=[^\w\\]|$)")


@dataclass(frozen=True)
class ExtensionRecommendation:
    """Whether a sample set would benefit from flexible extension matching."""

    recommend_flexible_matching: bool
    detected_extensions: frozenset[str] = field(default_factory=frozenset)
    reasoning: str = ""


def get_extension(filename: str | None) -> str:
    """Lower-cased text after the last dot, or an empty string."""
    if not filename:
        return ""
    _, dot, extension = filename.rpartition(".")
    if not dot or not extension:
        return ""
    return extension.lower()


def has_image_extension(filename: str | None) -> bool:
    """Check if a filename ends in a supported image extension."""
    return get_extension(filename) in SUPPORTED_IMAGE_EXTENSIONS


def unique_extensions(filenames: Iterable[str]) -> frozenset[str]:
    """Distinct non-empty extensions used by a set of filenames."""
    return frozenset(ext for ext in (get_extension(name) for name in filenames) if ext)


def generate_extension_pattern(extensions: Iterable[str] | None, case_sensitive: bool = False) -> str:
    """
    Build a pattern matching any of the given extensions.

    Args:
        extensions: Extensions without the leading dot
        case_sensitive: Whether to omit the case-insensitive scope

    Returns:
        Extension alternation, or the any-image pattern when none are given
    """
    names = sorted(set(extensions or []))
    if not names:
        return ANY_IMAGE_EXTENSION_PATTERN

    alternation = r"\.(" + "|".join(re.escape(name) for name in names) + ")"
    return alternation if case_sensitive else f"(?i:{alternation})"


def has_flexible_extension_matching(pattern: str | None) -> bool:
    """Check if a pattern already accepts any supported image extension."""
    return pattern is not None and _FLEXIBLE_MARKER in pattern


def apply_extension_matching(pattern: str | None, enabled: bool) -> str | None:
    """
    Replace literal extensions in a regex with the any-image extension pattern.

    Handles case-insensitive extension groups such as ``(?i:\\.jpg)``,
    per-letter classes such as ``\\.[jJ][pP][gG]`` at the end of the pattern,
    and plain escaped extensions such as ``\\.jpg``. Patterns that already
    match flexibly are returned unchanged.

    Args:
        pattern: Regex source text
        enabled: Whether flexible matching is switched on

    Returns:
        The rewritten pattern, or the input when disabled or empty
    """
    if not pattern or not enabled or has_flexible_extension_matching(pattern):
        return pattern

    modified = _CASE_INSENSITIVE_EXTENSION.sub(lambda _: ANY_IMAGE_EXTENSION_PATTERN, pattern)
    modified = _BRACKETED_EXTENSION.sub(lambda _: ANY_IMAGE_EXTENSION_PATTERN, modified)
    modified = _LITERAL_EXTENSION.sub(lambda _: ANY_IMAGE_EXTENSION_PATTERN, modified)

    if modified != pattern:
        logger.debug(f"Applied flexible extension matching: {pattern} -> {modified}")
    return modified


def validate_extension(
    filename: str | None, use_any_extension: bool, specific_extensions: Iterable[str] | None = None
) -> bool:
    """Check a filename's extension against flexible or specific matching."""
    if not filename:
        return False

    allowed = set(specific_extensions or [])
    if use_any_extension or not allowed:
        return has_image_extension(filename)
    return get_extension(filename) in allowed


def analyze_extension_usage(filenames: list[str] | None) -> ExtensionRecommendation:
    """
    Recommend flexible matching when a sample set mixes image extensions.

    Args:
        filenames: Sample filenames

    Returns:
        ExtensionRecommendation with the detected extensions and reasoning
    """
    if not filenames:
        return ExtensionRecommendation(False, frozenset(), "No files to analyze")

    extensions = unique_extensions(filenames)
    if not extensions:
        return ExtensionRecommendation(False, extensions, "No file extensions found")

    if len(extensions) == 1:
        (extension,) = extensions
        return ExtensionRecommendation(False, extensions, f"All files use .{extension} extension")

    listed = ", ".join(f".{ext}" for ext in sorted(extensions))
    if extensions <= SUPPORTED_IMAGE_EXTENSIONS:
        return ExtensionRecommendation(
            True, extensions, f"Multiple image extensions found ({listed}) - recommend flexible matching"
        )
    return ExtensionRecommendation(
        False, extensions, "Mixed file types found - specific extension matching recommended"
    )
