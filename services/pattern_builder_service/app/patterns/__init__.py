"""
Pattern synthesis, extension flexibility and pattern configurations.
"""

from .configuration import PatternConfiguration
from .extensions import (
    ANY_IMAGE_EXTENSION_PATTERN,
    SUPPORTED_IMAGE_EXTENSIONS,
    ExtensionRecommendation,
    analyze_extension_usage,
    apply_extension_matching,
    generate_extension_pattern,
    get_extension,
    has_flexible_extension_matching,
    has_image_extension,
    unique_extensions,
    validate_extension,
)
from .generator import PatternGenerator, count_capturing_groups

__all__ = [
    "ANY_IMAGE_EXTENSION_PATTERN",
    "SUPPORTED_IMAGE_EXTENSIONS",
    "ExtensionRecommendation",
    "PatternConfiguration",
    "PatternGenerator",
    "analyze_extension_usage",
    "apply_extension_matching",
    "count_capturing_groups",
    "generate_extension_pattern",
    "get_extension",
    "has_flexible_extension_matching",
    "has_image_extension",
    "unique_extensions",
    "validate_extension",
]
