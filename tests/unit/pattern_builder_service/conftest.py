"""Pytest configuration and fixtures for pattern_builder_service tests."""

import pytest

from services.pattern_builder_service.app.cache.tokenization_cache import TokenizationCache
from services.pattern_builder_service.app.config import Settings
from services.pattern_builder_service.app.rules.models import RoleRule, RuleType
from services.pattern_builder_service.app.tokenizer.models import ImageRole
from services.pattern_builder_service.app.tokenizer.tokenizer import FilenameTokenizer


@pytest.fixture
def distinct_id_filenames():
    """One file per group ID, so the ID segment is unique across the set."""
    return [
        "CAM_ABC123_front.jpg",
        "CAM_XYZ789_rear.jpg",
        "CAM_DEF456_front.jpg",
        "CAM_GHI012_rear.jpg",
    ]


@pytest.fixture
def grouped_filenames():
    """Three vehicles, each with front and rear images and one with an overview."""
    return [
        "CAM_ABC123_front.jpg",
        "CAM_ABC123_rear.jpg",
        "CAM_XYZ789_front.jpg",
        "CAM_XYZ789_rear.jpg",
        "CAM_DEF456_front.jpg",
        "CAM_DEF456_rear.jpg",
        "CAM_DEF456_overview.jpg",
    ]


@pytest.fixture
def default_rules():
    """One CONTAINS rule per role."""
    return [
        RoleRule(ImageRole.OVERVIEW, RuleType.CONTAINS, "overview"),
        RoleRule(ImageRole.FRONT, RuleType.CONTAINS, "front"),
        RoleRule(ImageRole.REAR, RuleType.CONTAINS, "rear"),
    ]


@pytest.fixture
def cache():
    """Small cache so eviction is easy to trigger."""
    return TokenizationCache(max_tokens=10, max_analyses=4, max_memory_mb=50)


@pytest.fixture
def tokenizer(cache):
    """Tokenizer backed by the small cache."""
    return FilenameTokenizer(cache=cache)


@pytest.fixture
def settings():
    """Settings with explicit values, independent of the environment."""
    return Settings(
        cache_max_tokens=100,
        cache_max_analyses=10,
        cache_max_memory_mb=10,
        max_files_for_analysis=500,
        validation_debounce_ms=20,
        flexible_extensions=False,
    )
