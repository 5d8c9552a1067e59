"""
Regex synthesis for group extraction and role classification.
"""

import logging
import re
from itertools import combinations

from services.pattern_builder_service.app.rules.engine import RuleEngine
from services.pattern_builder_service.app.rules.models import RoleRule, RuleType
from services.pattern_builder_service.app.tokenizer.models import ImageRole, Token
from services.pattern_builder_service.app.tokenizer.vocabulary import DELIMITER_CLASS, DELIMITER_PATTERN
from services.pattern_builder_service.app.validation.models import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
    ValidationWarning,
    ValidationWarningType,
)

from .configuration import PatternConfiguration
from .extensions import apply_extension_matching

logger = logging.getLogger(__name__)

DELIMITER_FRAGMENT = DELIMITER_CLASS + "+"
EDGE_DELIMITERS = DELIMITER_CLASS + "*"
SEGMENT_FRAGMENT = r"[^_\-.\s]+"


def count_capturing_groups(pattern: str | None) -> int:
    """
    Count capturing groups in a regex.

    Compiles the pattern when possible. Patterns that do not compile are
    scanned instead, skipping escapes and character classes and counting
    ``(`` not followed by ``?`` plus named ``(?P<`` groups.
    """
    if not pattern:
        return 0

    try:
        return re.compile(pattern).groups
    except re.error:
        pass

    count = 0
    in_class = False
    escaped = False
    for i, char in enumerate(pattern):
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        elif char == "(" and not in_class:
            rest = pattern[i + 1 :]
            if not rest.startswith("?") or rest.startswith("?P<"):
                count += 1
    return count


def _regex_error(pattern: str | None) -> str | None:
    if not pattern or not pattern.strip():
        return None
    try:
        re.compile(pattern)
    except re.error as e:
        return str(e)
    return None


class PatternGenerator:
    """Builds and validates the regexes of a pattern configuration."""

    def __init__(self, rule_engine: RuleEngine | None = None) -> None:
        self.rule_engine = rule_engine or RuleEngine()

    def generate_group_pattern(self, tokens: list[Token] | None, group_token: Token | None) -> str:
        """
        Generate a regex with one capturing group around the group ID segment.

        Leading and trailing delimiters are tolerated, since the tokenizer drops
        them. A merged date chosen as the group ID is captured as it appears in
        the filename, so ``2024_01_15`` comes back with its own delimiters rather
        than as the token value ``2024-01-15``.

        Args:
            tokens: Tokens of a representative filename
            group_token: Token selected as the group ID

        Returns:
            Anchored regex, or an empty string for an empty token list

        Raises:
            ValueError: If group_token is None or its position is not among the tokens
        """
        if not tokens:
            return ""
        if group_token is None:
            raise ValueError("Group ID token cannot be None")

        by_position: dict[int, Token] = {}
        for token in tokens:
            by_position.setdefault(token.position, token)
        if group_token.position not in by_position:
            raise ValueError(f"Group ID token position {group_token.position} is not present in the tokens")

        fragments = []
        for position in sorted(by_position):
            fragment = self._segment_fragment(by_position[position].value)
            fragments.append(f"({fragment})" if position == group_token.position else fragment)
        pattern = f"^{EDGE_DELIMITERS}" + DELIMITER_FRAGMENT.join(fragments) + f"{EDGE_DELIMITERS}$"
        logger.debug(f"Generated group pattern {pattern} for group position {group_token.position}")
        return pattern

    @staticmethod
    def _segment_fragment(value: str) -> str:
        # Merged tokens such as dates span several delimiter-separated parts
        parts = len([part for part in DELIMITER_PATTERN.split(value) if part])
        if parts <= 1:
            return SEGMENT_FRAGMENT
        return f"{SEGMENT_FRAGMENT}(?:{DELIMITER_FRAGMENT}{SEGMENT_FRAGMENT}){{{parts - 1}}}"

    def generate_role_pattern(self, rules: list[RoleRule] | None, role: ImageRole) -> str | None:
        """Generate the regex classifying a role from its rules."""
        return self.rule_engine.generate_regex_pattern(rules, role)

    def validate_group_pattern(self, pattern: str | None) -> ValidationResult:
        """Check a group pattern is non-empty, compiles and has one capturing group."""
        if not pattern or not pattern.strip():
            return ValidationResult.failure(ValidationError.of(ValidationErrorType.EMPTY_GROUP_PATTERN))

        error = _regex_error(pattern)
        if error is not None:
            return ValidationResult.failure(
                ValidationError.of(
                    ValidationErrorType.REGEX_SYNTAX_ERROR,
                    f"Group pattern has invalid regex syntax: {error}",
                    context=pattern,
                )
            )

        groups = count_capturing_groups(pattern)
        if groups == 0:
            return ValidationResult.failure(
                ValidationError.of(
                    ValidationErrorType.NO_CAPTURING_GROUPS,
                    context="Ensure the Group ID token is properly selected",
                )
            )
        if groups > 1:
            return ValidationResult.failure(
                ValidationError.of(
                    ValidationErrorType.MULTIPLE_CAPTURING_GROUPS,
                    f"Group pattern contains {groups} capturing groups - only one is allowed",
                    context="Remove extra parentheses or use non-capturing groups (?:...)",
                )
            )
        return ValidationResult.success()

    def validate_patterns(self, config: PatternConfiguration | None) -> ValidationResult:
        """
        Validate a full pattern configuration.

        Args:
            config: Configuration to check

        Returns:
            ValidationResult covering the group pattern, role patterns, role rules
            and the regex syntax of every pattern
        """
        if config is None:
            return ValidationResult.failure(
                ValidationError.of(ValidationErrorType.NO_GROUP_ID_SELECTED, "Pattern configuration cannot be None")
            )

        errors: list[ValidationError] = []
        warnings: list[ValidationWarning] = []

        if not config.group_pattern or not config.group_pattern.strip():
            if config.group_id_token is None:
                errors.append(ValidationError.of(ValidationErrorType.NO_GROUP_ID_SELECTED))
            else:
                errors.append(ValidationError.of(ValidationErrorType.EMPTY_GROUP_PATTERN))
        elif _regex_error(config.group_pattern) is None:
            errors.extend(self.validate_group_pattern(config.group_pattern).errors)

        has_role_patterns = config.has_role_patterns()
        if not has_role_patterns:
            errors.append(
                ValidationError.of(
                    ValidationErrorType.NO_ROLE_PATTERNS,
                    context="Define rules for front, rear, or overview images",
                )
            )
        if not config.overview_pattern or not config.overview_pattern.strip():
            warnings.append(
                ValidationWarning.of(
                    ValidationWarningType.NO_OVERVIEW_IMAGES,
                    "No overview pattern defined - some images may not be categorized",
                )
            )

        if not config.role_rules:
            if not has_role_patterns:
                errors.append(ValidationError.of(ValidationErrorType.NO_ROLE_RULES_DEFINED))
        else:
            for rule in config.role_rules:
                if rule.is_empty:
                    errors.append(
                        ValidationError.of(
                            ValidationErrorType.INVALID_RULE_VALUE,
                            f"Rule value cannot be empty for {rule.target_role.value} role",
                        )
                    )
            warnings.extend(self._overlap_warnings(config.role_rules))

        for name, pattern in (
            ("Group pattern", config.group_pattern),
            ("Front pattern", config.front_pattern),
            ("Rear pattern", config.rear_pattern),
            ("Overview pattern", config.overview_pattern),
        ):
            error = _regex_error(pattern)
            if error is not None:
                errors.append(
                    ValidationError.of(
                        ValidationErrorType.REGEX_SYNTAX_ERROR,
                        f"{name} has invalid regex syntax: {error}",
                        context="Check for unescaped special characters or unmatched parentheses",
                    )
                )

        return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))

    @staticmethod
    def _overlap_warnings(rules: list[RoleRule]) -> list[ValidationWarning]:
        # Only CONTAINS rules are compared; one value containing the other overlaps
        warnings = []
        for first, second in combinations(rules, 2):
            if first.target_role == second.target_role:
                continue
            if first.rule_type != RuleType.CONTAINS or second.rule_type != RuleType.CONTAINS:
                continue
            if first.is_empty or second.is_empty:
                continue
            a, b = first.rule_value.casefold(), second.rule_value.casefold()
            if a in b or b in a:
                warnings.append(
                    ValidationWarning.of(
                        ValidationWarningType.OVERLAPPING_RULES,
                        f"Rules for {first.target_role.value} and {second.target_role.value} may overlap",
                    )
                )
        return warnings

    def build_configuration(
        self,
        tokens: list[Token],
        group_token: Token | None,
        rules: list[RoleRule],
        flexible_extensions: bool = False,
    ) -> PatternConfiguration:
        """
        Assemble a configuration from the selected group ID token and role rules.

        Args:
            tokens: Tokens of a representative filename
            group_token: Token selected as the group ID
            rules: Role rules
            flexible_extensions: Accept any supported image extension in every pattern

        Returns:
            PatternConfiguration with all four patterns generated
        """
        config = PatternConfiguration(
            role_rules=list(rules),
            tokens=list(tokens),
            group_id_token=group_token,
        )
        config.group_pattern = apply_extension_matching(
            self.generate_group_pattern(tokens, group_token), flexible_extensions
        )
        for role in ImageRole.in_precedence_order():
            pattern = self.generate_role_pattern(rules, role) or ""
            config.set_pattern_for(role, apply_extension_matching(pattern, flexible_extensions))

        logger.info(
            f"Built configuration: group={config.group_pattern!r}, "
            f"roles={[role.value for role in ImageRole if config.pattern_for(role)]}"
        )
        return config
