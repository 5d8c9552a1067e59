"""In-memory cache for tokenized filenames and sample-set analyses."""

import hashlib
import logging
import threading
from collections.abc import Iterable
from typing import Any

from services.pattern_builder_service.app.tokenizer.models import Token, TokenAnalysis

logger = logging.getLogger(__name__)

BYTES_PER_CHAR = 2
BYTES_PER_TOKEN = 100
BYTES_PER_ANALYZED_FILE = 50
BYTES_PER_SUGGESTION = 200

TOKEN_EVICTION_FRACTION = 0.2
TOKEN_CLEANUP_RATIO = 0.8
ANALYSIS_EVICTION_FRACTION = 0.5


def generate_filenames_key(filenames: Iterable[str] | None) -> str:
    """Generate an order-independent cache key for a set of filenames.

    Missing entries are skipped. Names are NUL-joined; filenames never contain NUL.
    """
    names = sorted(name for name in filenames or [] if name is not None)
    if not names:
        return "empty"
    key_string = "\0".join(names)
    return hashlib.md5(key_string.encode()).hexdigest()


class TokenizationCache:
    """Thread-safe cache with a memory ceiling and coarse eviction.

    Entries are evicted in insertion order once an entry-count ceiling is
    exceeded, which approximates (but is not) least-recently-used eviction.
    """

    def __init__(
        self,
        max_tokens: int = 10_000,
        max_analyses: int = 100,
        max_memory_mb: int = 50,
    ) -> None:
        """
        Initialize the cache.

        Args:
            max_tokens: Maximum tokenized filenames kept
            max_analyses: Maximum sample-set analyses kept
            max_memory_mb: Estimated memory ceiling; writes are rejected above it
        """
        self.max_tokens = max_tokens
        self.max_analyses = max_analyses
        self.max_memory_bytes = max_memory_mb * 1024 * 1024

        self._token_cache: dict[str, list[Token]] = {}
        self._analysis_cache: dict[str, TokenAnalysis] = {}
        self._lock = threading.RLock()
        self._estimated_memory = 0
        self._hits = 0
        self._misses = 0
        self._rejected_writes = 0

    # Token cache

    def get_cached_tokens(self, filename: str) -> list[Token] | None:
        """Get cached tokens for a filename, or None when not cached."""
        with self._lock:
            tokens = self._token_cache.get(filename)
            if tokens is None:
                self._misses += 1
                return None
            self._hits += 1
            return list(tokens)

    def cache_tokens(self, filename: str, tokens: list[Token]) -> bool:
        """
        Cache tokens for a filename.

        Returns:
            True if the entry was stored, False if the memory ceiling rejected it
        """
        with self._lock:
            if self.is_memory_limit_exceeded():
                self._reject("tokens", filename)
                return False

            self._token_cache[filename] = list(tokens)
            self._estimated_memory += self._token_entry_size(filename, tokens)

            if len(self._token_cache) > self.max_tokens or self.is_memory_limit_exceeded():
                self._cleanup_tokens()
            return True

    # Analysis cache

    def get_cached_analysis(self, filenames_key: str) -> TokenAnalysis | None:
        """Get a cached analysis by sample-set key, or None when not cached."""
        with self._lock:
            analysis = self._analysis_cache.get(filenames_key)
            if analysis is None:
                self._misses += 1
                return None
            self._hits += 1
            return analysis

    def cache_analysis(self, filenames_key: str, analysis: TokenAnalysis) -> bool:
        """
        Cache an analysis for a sample-set key.

        Returns:
            True if the entry was stored, False if the memory ceiling rejected it
        """
        with self._lock:
            if self.is_memory_limit_exceeded():
                self._reject("analysis", filenames_key)
                return False

            self._analysis_cache[filenames_key] = analysis
            self._estimated_memory += self._analysis_entry_size(filenames_key, analysis)

            if len(self._analysis_cache) > self.max_analyses or self.is_memory_limit_exceeded():
                self._cleanup_analyses()
            return True

    @staticmethod
    def generate_filenames_key(filenames: Iterable[str] | None) -> str:
        """Generate an order-independent cache key for a set of filenames."""
        return generate_filenames_key(filenames)

    # Housekeeping

    def is_memory_limit_exceeded(self) -> bool:
        """Check if the estimated memory usage is above the ceiling."""
        return self._estimated_memory > self.max_memory_bytes

    def clear_cache(self) -> None:
        """Clear all cached data and statistics."""
        with self._lock:
            self._token_cache.clear()
            self._analysis_cache.clear()
            self._estimated_memory = 0
            self._hits = 0
            self._misses = 0
            self._rejected_writes = 0

    def size(self) -> int:
        """Number of cached tokenized filenames."""
        with self._lock:
            return len(self._token_cache)

    def analysis_size(self) -> int:
        """Number of cached analyses."""
        with self._lock:
            return len(self._analysis_cache)

    @property
    def estimated_memory_usage(self) -> int:
        """Estimated memory held by cached entries, in bytes."""
        return self._estimated_memory

    @property
    def hit_rate(self) -> float:
        """Cache hit rate as a percentage (0-100)."""
        with self._lock:
            total = self._hits + self._misses
            return self._hits / total * 100 if total > 0 else 0.0

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "tokens": len(self._token_cache),
                "analyses": len(self._analysis_cache),
                "cache_hits": self._hits,
                "cache_misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
                "rejected_writes": self._rejected_writes,
                "estimated_memory_bytes": self._estimated_memory,
                "estimated_memory_mb": self._estimated_memory // (1024 * 1024),
            }

    def _reject(self, kind: str, key: str) -> None:
        self._rejected_writes += 1
        logger.warning(
            f"Cache memory ceiling reached ({self._estimated_memory} bytes), not caching {kind} for {key[:64]}"
        )

    def _cleanup_tokens(self) -> None:
        if len(self._token_cache) <= self.max_tokens * TOKEN_CLEANUP_RATIO:
            return

        to_remove = max(
            int(len(self._token_cache) * TOKEN_EVICTION_FRACTION),
            len(self._token_cache) - self.max_tokens,
        )
        for key in list(self._token_cache)[:to_remove]:
            del self._token_cache[key]
        logger.debug(f"Evicted {to_remove} tokenized filenames from cache")
        self._recalculate_memory_usage()

    def _cleanup_analyses(self) -> None:
        if len(self._analysis_cache) <= self.max_analyses * ANALYSIS_EVICTION_FRACTION:
            return

        to_remove = max(
            int(len(self._analysis_cache) * ANALYSIS_EVICTION_FRACTION),
            len(self._analysis_cache) - self.max_analyses,
        )
        for key in list(self._analysis_cache)[:to_remove]:
            del self._analysis_cache[key]
        logger.debug(f"Evicted {to_remove} analyses from cache")
        self._recalculate_memory_usage()

    def _recalculate_memory_usage(self) -> None:
        usage = sum(self._token_entry_size(k, v) for k, v in self._token_cache.items())
        usage += sum(self._analysis_entry_size(k, v) for k, v in self._analysis_cache.items())
        self._estimated_memory = usage

    @staticmethod
    def _token_entry_size(filename: str, tokens: list[Token]) -> int:
        return len(filename) * BYTES_PER_CHAR + len(tokens) * BYTES_PER_TOKEN

    @staticmethod
    def _analysis_entry_size(key: str, analysis: TokenAnalysis) -> int:
        return (
            len(key) * BYTES_PER_CHAR
            + len(analysis.filenames) * BYTES_PER_ANALYZED_FILE
            + len(analysis.suggestions) * BYTES_PER_SUGGESTION
        )
