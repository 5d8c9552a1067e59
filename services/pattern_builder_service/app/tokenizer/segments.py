"""
User labelling of filename segments that inference could not type.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from .models import Token, TokenType

logger = logging.getLogger(__name__)

CUSTOM_TOKEN_CONFIDENCE = 0.8
FREE_TEXT_CONFIDENCE = 0.9


class SegmentAction(Enum):
    """What to do with a labelled unknown segment."""

    IGNORE = "ignore"
    CUSTOM_TOKEN = "custom_token"
    FREE_TEXT = "free_text"

    @property
    def description(self) -> str:
        return _ACTION_DESCRIPTIONS[self]


_ACTION_DESCRIPTIONS = {
    SegmentAction.IGNORE: "Ignore this segment",
    SegmentAction.CUSTOM_TOKEN: "Treat as custom token",
    SegmentAction.FREE_TEXT: "Free text (variable content)",
}


@dataclass(frozen=True)
class SegmentLabel:
    """A user decision about one segment value."""

    segment_value: str
    action: SegmentAction
    custom_label: str | None = None


@dataclass(frozen=True)
class UnknownSegmentSummary:
    """Labelled/unlabelled breakdown of unknown segments in a sample set."""

    all_segments: frozenset[str] = field(default_factory=frozenset)
    labeled_segments: frozenset[str] = field(default_factory=frozenset)
    unlabeled_segments: frozenset[str] = field(default_factory=frozenset)

    @property
    def has_unlabeled_segments(self) -> bool:
        return bool(self.unlabeled_segments)

    @property
    def total_count(self) -> int:
        return len(self.all_segments)


class UnknownSegmentHandler:
    """Stores segment labels (case-insensitive) and applies them to tokens."""

    def __init__(self) -> None:
        self._labels: dict[str, SegmentLabel] = {}

    def label_segment(self, segment_value: str, action: SegmentAction, custom_label: str | None = None) -> None:
        """Record how a segment value should be treated."""
        self._labels[segment_value.lower()] = SegmentLabel(segment_value, action, custom_label)
        logger.debug(f"Labelled segment '{segment_value}' as {action.value}")

    def get_label(self, segment_value: str) -> SegmentLabel | None:
        return self._labels.get(segment_value.lower())

    def should_ignore(self, segment_value: str) -> bool:
        label = self.get_label(segment_value)
        return label is not None and label.action == SegmentAction.IGNORE

    def identify_unknown_segments(self, tokens: list[Token]) -> list[str]:
        """Distinct UNKNOWN token values that have not been labelled yet, in order."""
        unknown = [
            token.value
            for token in tokens
            if token.suggested_type == TokenType.UNKNOWN and token.value.lower() not in self._labels
        ]
        return list(dict.fromkeys(unknown))

    def apply_labels(self, tokens: list[Token]) -> list[Token]:
        """
        Apply stored labels to a token list.

        Ignored segments are dropped, custom tokens become SUFFIX and free
        text stays UNKNOWN with a user-level confidence. Positions of the
        result are renumbered densely from 0.

        Args:
            tokens: Labelled tokens from analysis

        Returns:
            New token list
        """
        processed: list[Token] = []
        for token in tokens:
            label = self.get_label(token.value)
            if label is None:
                processed.append(token)
            elif label.action == SegmentAction.CUSTOM_TOKEN:
                processed.append(token.with_type(TokenType.SUFFIX, CUSTOM_TOKEN_CONFIDENCE))
            elif label.action == SegmentAction.FREE_TEXT:
                processed.append(token.with_type(TokenType.UNKNOWN, FREE_TEXT_CONFIDENCE))

        return [token.with_position(position) for position, token in enumerate(processed)]

    def summarize(self, tokenized_filenames: Mapping[str, list[Token]]) -> UnknownSegmentSummary:
        """Summarize unknown segments (lower-cased) across a sample set."""
        all_segments: set[str] = set()
        for tokens in tokenized_filenames.values():
            all_segments.update(t.value.lower() for t in tokens if t.suggested_type == TokenType.UNKNOWN)

        labeled = {value for value in all_segments if value in self._labels}
        return UnknownSegmentSummary(
            all_segments=frozenset(all_segments),
            labeled_segments=frozenset(labeled),
            unlabeled_segments=frozenset(all_segments - labeled),
        )

    def labels(self) -> dict[str, SegmentLabel]:
        return dict(self._labels)

    def clear(self) -> None:
        self._labels.clear()
