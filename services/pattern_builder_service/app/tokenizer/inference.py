"""
Statistical inference of token types across a sample set of filenames.
"""

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from statistics import mean

from services.pattern_builder_service.app.config import InferenceThresholds

from .models import ImageRole, Token, TokenSuggestion, TokenType
from .vocabulary import CAMERA_SYNONYMS, is_camera_synonym, is_date, is_image_extension, is_index, role_for_synonym

logger = logging.getLogger(__name__)

# Types whose membership can be checked from the value alone
_TYPE_PREDICATES: dict[TokenType, Callable[[str], bool]] = {
    TokenType.EXTENSION: is_image_extension,
    TokenType.CAMERA_SIDE: is_camera_synonym,
    TokenType.DATE: is_date,
    TokenType.INDEX: is_index,
}


def _fraction(values: list[str], predicate: Callable[[str], bool]) -> float:
    if not values:
        return 0.0
    return sum(1 for v in values if predicate(v)) / len(values)


class TypeInferenceEngine:
    """Infers per-position token types from many tokenized filenames."""

    def __init__(self, thresholds: InferenceThresholds | None = None) -> None:
        """
        Initialize the inference engine.

        Args:
            thresholds: Cut-offs and weights; defaults reproduce the stock heuristics
        """
        self.thresholds = thresholds or InferenceThresholds()

    def suggest_token_types(self, tokenized_filenames: Mapping[str, list[Token]]) -> list[TokenSuggestion]:
        """
        Suggest token types for every position seen in the sample set.

        Args:
            tokenized_filenames: Map of filename to its tokens

        Returns:
            Suggestions ordered by position
        """
        if not tokenized_filenames:
            return []

        total_files = len(tokenized_filenames)
        suggestions: list[TokenSuggestion] = []

        for position, values in sorted(self.group_tokens_by_position(tokenized_filenames).items()):
            suggestions.extend(self.analyze_position(position, values, total_files))

        logger.debug(f"Inferred {len(suggestions)} suggestions from {total_files} filenames")
        return suggestions

    def group_tokens_by_position(self, tokenized_filenames: Mapping[str, list[Token]]) -> dict[int, list[str]]:
        """Collect token values by position across all filenames."""
        by_position: dict[int, list[str]] = defaultdict(list)
        for tokens in tokenized_filenames.values():
            for token in tokens:
                by_position[token.position].append(token.value)
        return dict(by_position)

    def analyze_position(self, position: int, values: list[str], total_files: int) -> list[TokenSuggestion]:
        """
        Score one token position against every type heuristic.

        Args:
            position: Token position being analyzed
            values: Every value seen at this position (one per filename)
            total_files: Number of filenames in the sample set

        Returns:
            Suggestions that cleared their thresholds
        """
        t = self.thresholds
        suggestions: list[TokenSuggestion] = []
        if not values:
            return suggestions

        unique_values = list(dict.fromkeys(values))
        uniqueness = len(unique_values) / len(values)
        examples = tuple(unique_values[: t.max_examples])

        def suggest(token_type: TokenType, description: str, confidence: float) -> None:
            suggestions.append(
                TokenSuggestion(
                    type=token_type,
                    description=description,
                    examples=examples,
                    confidence=confidence,
                    position=position,
                )
            )

        # Extensions can only sit at a position every filename reaches
        if len(values) == total_files:
            extension_confidence = _fraction(unique_values, is_image_extension)
            if extension_confidence > t.extension:
                suggest(TokenType.EXTENSION, "File extension", extension_confidence)

        camera_confidence = _fraction(unique_values, is_camera_synonym)
        if camera_confidence > t.camera_side:
            suggest(TokenType.CAMERA_SIDE, "Camera position or image side", camera_confidence)

        date_confidence = _fraction(unique_values, is_date)
        if date_confidence > t.date:
            suggest(TokenType.DATE, "Date or timestamp", date_confidence)

        index_confidence = _fraction(unique_values, is_index)
        if index_confidence > t.index:
            suggest(TokenType.INDEX, "Numeric index or sequence", index_confidence)

        if (
            uniqueness > t.group_id_uniqueness
            and camera_confidence < t.group_id_exclusion
            and date_confidence < t.group_id_exclusion
            and index_confidence < t.group_id_exclusion
        ):
            suggest(TokenType.GROUP_ID, "Vehicle group identifier", uniqueness * t.group_id_weight)

        if uniqueness < t.fixed_uniqueness:
            if position == 0:
                suggest(TokenType.PREFIX, "Fixed prefix", (1.0 - uniqueness) * t.prefix_weight)
            else:
                suggest(TokenType.SUFFIX, "Fixed suffix", (1.0 - uniqueness) * t.suffix_weight)

        return suggestions

    def calculate_confidence_scores(self, suggestions: Iterable[TokenSuggestion]) -> dict[TokenType, float]:
        """Average suggestion confidence per token type."""
        by_type: dict[TokenType, list[float]] = defaultdict(list)
        for suggestion in suggestions:
            by_type[suggestion.type].append(suggestion.confidence)
        return {token_type: mean(scores) for token_type, scores in by_type.items()}

    def accepts(self, suggestion: TokenSuggestion, token: Token) -> bool:
        """
        Check whether a suggestion applies to a token.

        Value-typed suggestions (extension, camera/side, date, index) apply when
        their predicate accepts the value. Positional suggestions (group ID,
        prefix, suffix) apply to every token at the position they were inferred
        for. Any suggestion also applies to its own examples at its position.
        """
        predicate = _TYPE_PREDICATES.get(suggestion.type)
        if predicate is not None:
            if predicate(token.value):
                return True
        elif suggestion.position is not None and suggestion.position == token.position:
            return True
        return suggestion.position == token.position and token.value in suggestion.examples

    def best_suggestion_for(self, token: Token, suggestions: Iterable[TokenSuggestion]) -> TokenSuggestion | None:
        """Find the highest confidence suggestion accepting a token."""
        best: TokenSuggestion | None = None
        for suggestion in suggestions:
            if self.accepts(suggestion, token) and (best is None or suggestion.confidence > best.confidence):
                best = suggestion
        return best

    def apply_suggestions(
        self, tokenized_filenames: Mapping[str, list[Token]], suggestions: list[TokenSuggestion]
    ) -> dict[str, list[Token]]:
        """
        Label every token with its best suggestion.

        Tokens are immutable, so labelled copies are returned and the input
        token lists are left untouched.

        Args:
            tokenized_filenames: Map of filename to unlabelled tokens
            suggestions: Suggestions produced for the same sample set

        Returns:
            Map of filename to labelled tokens
        """
        labelled: dict[str, list[Token]] = {}
        for filename, tokens in tokenized_filenames.items():
            relabelled = []
            for token in tokens:
                best = self.best_suggestion_for(token, suggestions)
                if best is None:
                    relabelled.append(token.with_type(TokenType.UNKNOWN, 0.0))
                else:
                    relabelled.append(token.with_type(best.type, best.confidence))
            labelled[filename] = relabelled
        return labelled

    def reclassify(self, token: Token, token_type: TokenType) -> Token:
        """Apply a manual type override to a token."""
        return token.with_type(token_type, self.thresholds.manual_override_confidence)

    @staticmethod
    def role_for_value(value: str) -> ImageRole | None:
        """Get the image role a camera/side token value refers to."""
        return role_for_synonym(value)

    @staticmethod
    def camera_values_by_role(tokenized_filenames: Mapping[str, list[Token]]) -> dict[ImageRole, list[str]]:
        """Collect distinct camera/side values seen in labelled tokens, by role."""
        found: dict[ImageRole, list[str]] = {role: [] for role in CAMERA_SYNONYMS}
        for tokens in tokenized_filenames.values():
            for token in tokens:
                if token.suggested_type != TokenType.CAMERA_SIDE:
                    continue
                role = role_for_synonym(token.value)
                if role is not None and token.value not in found[role]:
                    found[role].append(token.value)
        return found
