"""
Filename tokenizer and sample-set analyzer.
"""

import logging
from typing import TYPE_CHECKING

from .inference import TypeInferenceEngine
from .models import Token, TokenAnalysis
from .vocabulary import DATE_MERGE_SEQUENCES, DELIMITER_PATTERN

if TYPE_CHECKING:
    from services.pattern_builder_service.app.cache.tokenization_cache import TokenizationCache

logger = logging.getLogger(__name__)

DATE_SEGMENT_COUNT = 3


class FilenameTokenizer:
    """Splits filenames into positional segments and analyzes sample sets."""

    def __init__(
        self,
        cache: "TokenizationCache | None" = None,
        inference: TypeInferenceEngine | None = None,
    ) -> None:
        """
        Initialize the tokenizer.

        Args:
            cache: Optional cache for tokens and analyses
            inference: Type inference engine used by analyze()
        """
        self.cache = cache
        self.inference = inference or TypeInferenceEngine()

    def tokenize(self, filename: str | None) -> list[Token]:
        """
        Tokenize a single filename.

        Args:
            filename: Filename to tokenize

        Returns:
            Tokens in order with dense positions; empty for blank input
        """
        if filename is None or not filename.strip():
            return []

        if self.cache is not None:
            try:
                cached = self.cache.get_cached_tokens(filename)
            except Exception as e:
                logger.warning(f"Token cache lookup failed for {filename}, recomputing: {e}")
                cached = None
            if cached is not None:
                return cached

        parts = [part for part in DELIMITER_PATTERN.split(filename) if part]
        tokens = self._merge_date_tokens([Token(value=part, position=i) for i, part in enumerate(parts)])

        if self.cache is not None:
            try:
                self.cache.cache_tokens(filename, tokens)
            except Exception as e:
                logger.warning(f"Could not cache tokens for {filename}, continuing uncached: {e}")

        return tokens

    def tokenize_batch(self, filenames: list[str]) -> dict[str, list[Token]]:
        """Tokenize multiple filenames, keyed by filename."""
        return {filename: self.tokenize(filename) for filename in filenames}

    def _merge_date_tokens(self, tokens: list[Token]) -> list[Token]:
        """
        Merge consecutive numeric tokens that form a date.

        Args:
            tokens: Tokens straight from splitting

        Returns:
            Tokens with YYYY/MM/DD and MM/DD/YYYY runs joined, positions renumbered
        """
        merged: list[Token] = []
        i = 0
        while i < len(tokens):
            window = tokens[i : i + DATE_SEGMENT_COUNT]
            if len(window) == DATE_SEGMENT_COUNT and self._is_date_run(window):
                merged.append(Token(value="-".join(t.value for t in window), position=window[0].position))
                i += DATE_SEGMENT_COUNT
            else:
                merged.append(tokens[i])
                i += 1

        return [token.with_position(position) for position, token in enumerate(merged)]

    @staticmethod
    def _is_date_run(window: list[Token]) -> bool:
        return any(
            all(pattern.fullmatch(token.value) for pattern, token in zip(sequence, window, strict=True))
            for sequence in DATE_MERGE_SEQUENCES
        )

    def analyze(self, filenames: list[str] | None) -> TokenAnalysis:
        """
        Analyze a sample set of filenames.

        Args:
            filenames: Filenames to analyze

        Returns:
            TokenAnalysis with labelled tokens, suggestions and per-type confidence
        """
        if not filenames:
            return TokenAnalysis()

        cache_key = None
        if self.cache is not None:
            try:
                cache_key = self.cache.generate_filenames_key(filenames)
                cached = self.cache.get_cached_analysis(cache_key)
            except Exception as e:
                logger.warning(f"Analysis cache lookup failed, recomputing: {e}")
                cached = None
            if cached is not None:
                return cached

        tokenized = self.tokenize_batch(filenames)
        suggestions = self.inference.suggest_token_types(tokenized)
        labelled = self.inference.apply_suggestions(tokenized, suggestions)
        analysis = TokenAnalysis(
            filenames=tuple(filenames),
            tokenized_filenames=labelled,
            suggestions=tuple(suggestions),
            confidence_scores=self.inference.calculate_confidence_scores(suggestions),
        )

        if self.cache is not None and cache_key is not None:
            try:
                self.cache.cache_analysis(cache_key, analysis)
            except Exception as e:
                logger.warning(f"Could not cache analysis, continuing uncached: {e}")

        logger.info(f"Analyzed {len(filenames)} filenames, {len(suggestions)} type suggestions")
        return analysis
