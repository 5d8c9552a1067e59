"""
Unit tests for flexible extension matching.
"""

import re

import pytest

from services.pattern_builder_service.app.patterns.extensions import (
    ANY_IMAGE_EXTENSION_PATTERN,
    analyze_extension_usage,
    apply_extension_matching,
    generate_extension_pattern,
    get_extension,
    has_flexible_extension_matching,
    has_image_extension,
    unique_extensions,
    validate_extension,
)

ANY = ANY_IMAGE_EXTENSION_PATTERN


class TestApplyExtensionMatching:
    """Test suite for rewriting extensions in regex text."""

    @pytest.mark.parametrize(
        "pattern,expected",
        [
            (r"^front\.jpg$", "^front" + ANY + "$"),
            (r"(?i).*_front\.jpeg$", "(?i).*_front" + ANY + "$"),
            (r"^a(?i:\.jpg)$", "^a" + ANY + "$"),
            (r"^a(?i:\.(jpg|png))$", "^a" + ANY + "$"),
            (r"^a\.[jJ][pP][gG]$", "^a" + ANY + "$"),
            (r"^a\.[jJ][pP][eE][gG]", "^a" + ANY),
            (r".*\.jpg", ".*" + ANY),
        ],
    )
    def test_rewrites(self, pattern, expected):
        """Test each supported extension form is replaced."""
        assert apply_extension_matching(pattern, True) == expected

    def test_rewritten_pattern_matches_other_extensions(self):
        """Test a rewritten suffix pattern accepts any image extension in any case."""
        pattern = apply_extension_matching(r"(?i).*_front\.jpg$", True)

        assert re.fullmatch(pattern, "car_front.PNG")
        assert re.fullmatch(pattern, "car_front.tif")
        assert not re.fullmatch(pattern, "car_front.txt")

    def test_idempotent(self):
        """Test rewriting an already flexible pattern changes nothing."""
        once = apply_extension_matching(r"^front\.jpg$", True)

        assert apply_extension_matching(once, True) == once
        assert has_flexible_extension_matching(once)

    def test_inner_segments_are_not_rewritten(self):
        """Test escaped dots inside a name are left alone."""
        assert apply_extension_matching(r".*\.rear\.jpg", True) == r".*\.rear" + ANY

    @pytest.mark.parametrize("pattern", [None, ""])
    def test_empty_patterns(self, pattern):
        """Test empty input is returned unchanged."""
        assert apply_extension_matching(pattern, True) == pattern

    def test_disabled(self):
        """Test nothing is rewritten when flexible matching is off."""
        assert apply_extension_matching(r"^front\.jpg$", False) == r"^front\.jpg$"

    def test_pattern_without_extension(self):
        """Test patterns without an extension are unchanged."""
        assert apply_extension_matching("(?i).*front.*", True) == "(?i).*front.*"

    def test_case_insensitive_literal_is_not_flexible(self):
        """Test a single case-insensitive extension does not count as flexible."""
        assert not has_flexible_extension_matching(r"(?i:\.jpg)")
        assert not has_flexible_extension_matching(None)


class TestExtensionHelpers:
    """Test suite for extension helper functions."""

    @pytest.mark.parametrize(
        "filename,extension",
        [
            ("a.JPG", "jpg"),
            ("archive.tar.GZ", "gz"),
            ("noext", ""),
            ("trailing.", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_get_extension(self, filename, extension):
        """Test extensions are lower-cased text after the last dot."""
        assert get_extension(filename) == extension

    def test_has_image_extension(self):
        """Test supported image extensions are recognised."""
        assert has_image_extension("a.webp")
        assert has_image_extension("a.TIF")
        assert not has_image_extension("a.txt")
        assert not has_image_extension(None)

    def test_unique_extensions(self):
        """Test extensions are collected case-insensitively and empties dropped."""
        assert unique_extensions(["a.jpg", "b.JPG", "c.png", "README"]) == frozenset({"jpg", "png"})

    def test_generate_extension_pattern(self):
        """Test extension alternations are sorted and optionally case-insensitive."""
        assert generate_extension_pattern(["png", "jpg", "png"]) == r"(?i:\.(jpg|png))"
        assert generate_extension_pattern(["png", "jpg"], case_sensitive=True) == r"\.(jpg|png)"
        assert generate_extension_pattern([]) == ANY
        assert generate_extension_pattern(None) == ANY

    @pytest.mark.parametrize(
        "filename,use_any,specific,expected",
        [
            ("a.PNG", True, None, True),
            ("a.txt", True, None, False),
            ("a.png", False, ["jpg"], False),
            ("a.jpg", False, ["jpg"], True),
            ("a.gif", False, [], True),
            ("", True, None, False),
        ],
    )
    def test_validate_extension(self, filename, use_any, specific, expected):
        """Test extension validation for flexible and specific matching."""
        assert validate_extension(filename, use_any, specific) is expected


class TestAnalyzeExtensionUsage:
    """Test suite for extension recommendations."""

    def test_no_files(self):
        """Test an empty sample set gets no recommendation."""
        result = analyze_extension_usage([])

        assert not result.recommend_flexible_matching
        assert result.reasoning == "No files to analyze"

    def test_no_extensions(self):
        """Test filenames without extensions get no recommendation."""
        result = analyze_extension_usage(["README", "Makefile"])

        assert not result.recommend_flexible_matching
        assert result.reasoning == "No file extensions found"

    def test_single_extension(self):
        """Test a uniform extension gets no recommendation."""
        result = analyze_extension_usage(["a.jpg", "b.JPG"])

        assert not result.recommend_flexible_matching
        assert result.detected_extensions == frozenset({"jpg"})
        assert result.reasoning == "All files use .jpg extension"

    def test_mixed_image_extensions(self):
        """Test several image extensions recommend flexible matching."""
        result = analyze_extension_usage(["a.png", "b.jpg"])

        assert result.recommend_flexible_matching
        assert result.reasoning == "Multiple image extensions found (.jpg, .png) - recommend flexible matching"

    def test_mixed_file_types(self):
        """Test non-image extensions argue for specific matching."""
        result = analyze_extension_usage(["a.jpg", "b.txt"])

        assert not result.recommend_flexible_matching
        assert result.reasoning == "Mixed file types found - specific extension matching recommended"
