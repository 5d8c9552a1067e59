"""
Data models for the tokenizer module.
"""

from dataclasses import dataclass, field, replace
from enum import Enum


class TokenType(Enum):
    """Semantic types a filename segment can be inferred as."""

    PREFIX = "prefix"
    SUFFIX = "suffix"
    GROUP_ID = "group_id"
    CAMERA_SIDE = "camera_side"
    DATE = "date"
    INDEX = "index"
    EXTENSION = "extension"
    UNKNOWN = "unknown"


_ROLE_PRECEDENCE = {"overview": 1, "front": 2, "rear": 3}


class ImageRole(Enum):
    """Capture viewpoint of an image. Lower precedence is evaluated first."""

    OVERVIEW = "overview"
    FRONT = "front"
    REAR = "rear"

    @property
    def precedence(self) -> int:
        """Evaluation order of this role (1 is evaluated first)."""
        return _ROLE_PRECEDENCE[self.value]

    @classmethod
    def in_precedence_order(cls) -> list["ImageRole"]:
        """Roles sorted by precedence: overview, front, rear."""
        return sorted(cls, key=lambda role: role.precedence)


def _clamp(confidence: float) -> float:
    return max(0.0, min(1.0, confidence))


@dataclass(frozen=True)
class Token:
    """One delimiter-separated segment of a filename."""

    value: str
    position: int
    suggested_type: TokenType = TokenType.UNKNOWN
    confidence: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", _clamp(self.confidence))

    def with_type(self, suggested_type: TokenType, confidence: float) -> "Token":
        """Return a copy of this token labelled with a new type."""
        return replace(self, suggested_type=suggested_type, confidence=confidence)

    def with_position(self, position: int) -> "Token":
        """Return a copy of this token at a new position."""
        return replace(self, position=position)


@dataclass(frozen=True)
class TokenSuggestion:
    """A type suggestion for one token position across a sample set."""

    type: TokenType
    description: str
    examples: tuple[str, ...] = ()
    confidence: float = 0.0
    position: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "examples", tuple(self.examples))
        object.__setattr__(self, "confidence", _clamp(self.confidence))


@dataclass(frozen=True)
class TokenAnalysis:
    """Result of analyzing a sample set of filenames."""

    filenames: tuple[str, ...] = ()
    tokenized_filenames: dict[str, list[Token]] = field(default_factory=dict)
    suggestions: tuple[TokenSuggestion, ...] = ()
    confidence_scores: dict[TokenType, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "filenames", tuple(self.filenames))
        object.__setattr__(self, "suggestions", tuple(self.suggestions))

    @property
    def file_count(self) -> int:
        """Number of filenames analyzed."""
        return len(self.filenames)

    def tokens_for(self, filename: str) -> list[Token]:
        """Get the labelled tokens for a filename, or an empty list."""
        return list(self.tokenized_filenames.get(filename, []))

    def best_suggestion(self) -> TokenSuggestion | None:
        """Get the highest confidence suggestion, if any."""
        if not self.suggestions:
            return None
        return max(self.suggestions, key=lambda s: s.confidence)

    def suggestions_for_type(self, token_type: TokenType) -> list[TokenSuggestion]:
        """Get all suggestions of a given type."""
        return [s for s in self.suggestions if s.type == token_type]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "filenames": list(self.filenames),
            "tokenized_filenames": {
                filename: [
                    {
                        "value": t.value,
                        "position": t.position,
                        "type": t.suggested_type.value,
                        "confidence": t.confidence,
                    }
                    for t in tokens
                ]
                for filename, tokens in self.tokenized_filenames.items()
            },
            "suggestions": [
                {
                    "type": s.type.value,
                    "description": s.description,
                    "examples": list(s.examples),
                    "confidence": s.confidence,
                    "position": s.position,
                }
                for s in self.suggestions
            ],
            "confidence_scores": {t.value: score for t, score in self.confidence_scores.items()},
        }
