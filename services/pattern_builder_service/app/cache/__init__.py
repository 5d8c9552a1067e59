"""
Caching for tokenization and sample-set analysis results.
"""

from .tokenization_cache import TokenizationCache, generate_filenames_key

__all__ = [
    "TokenizationCache",
    "generate_filenames_key",
]
