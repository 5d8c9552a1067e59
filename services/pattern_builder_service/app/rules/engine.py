"""
Precedence-based rule evaluation and role pattern synthesis.
"""

import logging
import re
from collections.abc import Iterable
from functools import lru_cache

from services.pattern_builder_service.app.exceptions import InvalidRegexRuleError, RuleConfigurationError
from services.pattern_builder_service.app.tokenizer.inference import TypeInferenceEngine
from services.pattern_builder_service.app.tokenizer.models import ImageRole, TokenAnalysis
from services.pattern_builder_service.app.validation.models import (
    ValidationError,
    ValidationErrorType,
    ValidationResult,
    ValidationWarning,
    ValidationWarningType,
)

from .models import RoleRule, RuleType

logger = logging.getLogger(__name__)

CASE_INSENSITIVE_FLAG = "(?i)"


@lru_cache(maxsize=256)
def _compile_rule_regex(pattern: str, case_sensitive: bool) -> re.Pattern:
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise InvalidRegexRuleError(pattern, str(e)) from e


def _scope_flag(fragment: str) -> str:
    """Turn a leading global (?i) into a scoped group so fragments can be joined."""
    if fragment.startswith(CASE_INSENSITIVE_FLAG):
        return f"(?i:{fragment[len(CASE_INSENSITIVE_FLAG):]})"
    return fragment


class RuleEngine:
    """Classifies filenames into image roles using ordered role rules."""

    def classify(self, filename: str | None, rules: list[RoleRule] | None) -> ImageRole | None:
        """
        Classify a filename by the first matching rule.

        Roles are evaluated overview, front, rear; within a role rules run by
        ascending priority.

        Args:
            filename: Filename to classify
            rules: Role rules to evaluate

        Returns:
            The matched role, or None when no rule matches

        Raises:
            ValueError: If filename is blank or rules is None
            RuleConfigurationError: If a regex rule does not compile
        """
        if filename is None or not filename.strip():
            raise ValueError("Filename cannot be None or empty")
        if rules is None:
            raise ValueError("Rules cannot be None")

        for role in ImageRole.in_precedence_order():
            for rule in self.rules_for_role(rules, role):
                if self.matches_rule(filename, rule):
                    return role
        return None

    @staticmethod
    def rules_for_role(rules: Iterable[RoleRule], role: ImageRole) -> list[RoleRule]:
        """Rules targeting a role, sorted by priority (stable)."""
        return sorted((rule for rule in rules if rule.target_role == role), key=lambda rule: rule.priority)

    def matches_rule(self, filename: str, rule: RoleRule) -> bool:
        """Check if a single rule matches a filename. Empty rule values never match."""
        if rule.is_empty:
            return False

        if rule.rule_type == RuleType.REGEX_OVERRIDE:
            return _compile_rule_regex(rule.rule_value, rule.case_sensitive).fullmatch(filename) is not None

        target = filename if rule.case_sensitive else filename.casefold()
        value = rule.rule_value if rule.case_sensitive else rule.rule_value.casefold()

        if rule.rule_type == RuleType.EQUALS:
            return target == value
        if rule.rule_type == RuleType.CONTAINS:
            return value in target
        if rule.rule_type == RuleType.STARTS_WITH:
            return target.startswith(value)
        if rule.rule_type == RuleType.ENDS_WITH:
            return target.endswith(value)

        raise RuleConfigurationError(f"Unsupported rule type: {rule.rule_type}")

    def generate_regex_pattern(self, rules: list[RoleRule] | None, role: ImageRole) -> str | None:
        """
        Synthesize a regex matching filenames of a role.

        Args:
            rules: Role rules to convert
            role: Role to build the pattern for

        Returns:
            A single fragment, a non-capturing disjunction of fragments, or
            None when no non-empty rule targets the role

        Raises:
            RuleConfigurationError: If rules is None or a regex rule does not compile
        """
        if rules is None:
            raise RuleConfigurationError("Rules cannot be None")

        fragments = [
            fragment
            for fragment in (self._rule_fragment(rule) for rule in self.rules_for_role(rules, role))
            if fragment
        ]
        if not fragments:
            return None
        if len(fragments) == 1:
            return fragments[0]
        return "(?:" + "|".join(_scope_flag(fragment) for fragment in fragments) + ")"

    def _rule_fragment(self, rule: RoleRule) -> str | None:
        if rule.is_empty:
            return None

        flag = "" if rule.case_sensitive else CASE_INSENSITIVE_FLAG

        if rule.rule_type == RuleType.REGEX_OVERRIDE:
            _compile_rule_regex(rule.rule_value, rule.case_sensitive)
            return flag + rule.rule_value

        value = re.escape(rule.rule_value)
        if rule.rule_type == RuleType.EQUALS:
            return f"{flag}^{value}$"
        if rule.rule_type == RuleType.CONTAINS:
            return f"{flag}.*{value}.*"
        if rule.rule_type == RuleType.STARTS_WITH:
            return f"{flag}^{value}.*"
        if rule.rule_type == RuleType.ENDS_WITH:
            return f"{flag}.*{value}$"

        raise RuleConfigurationError(f"Unsupported rule type: {rule.rule_type}")

    def classify_filenames(
        self, filenames: Iterable[str | None], rules: list[RoleRule] | None
    ) -> dict[ImageRole, list[str]]:
        """
        Classify many filenames.

        Returns:
            Every role mapped to its filenames; blank and unmatched names are skipped
        """
        if filenames is None:
            raise ValueError("Filenames cannot be None")
        if rules is None:
            raise ValueError("Rules cannot be None")

        results: dict[ImageRole, list[str]] = {role: [] for role in ImageRole.in_precedence_order()}
        for filename in filenames:
            if filename is None or not filename.strip():
                continue
            role = self.classify(filename, rules)
            if role is not None:
                results[role].append(filename)
        return results

    def validate_rules(self, rules: list[RoleRule] | None) -> ValidationResult:
        """
        Validate a rule set.

        Empty rule values and roles without rules are warnings; regex rules
        that do not compile are errors. A rule set is only valid when it has
        no errors and contains at least one rule.

        Raises:
            RuleConfigurationError: If rules is None
        """
        if rules is None:
            raise RuleConfigurationError("Rules list cannot be None")

        errors: list[ValidationError] = []
        warnings: list[ValidationWarning] = []

        for number, rule in enumerate(rules, start=1):
            if rule.is_empty:
                warnings.append(
                    ValidationWarning.of(
                        ValidationWarningType.EMPTY_RULE_VALUE,
                        f"Rule {number} has empty value and will not match any files",
                    )
                )
            elif rule.rule_type == RuleType.REGEX_OVERRIDE:
                try:
                    _compile_rule_regex(rule.rule_value, rule.case_sensitive)
                except InvalidRegexRuleError as e:
                    errors.append(
                        ValidationError.of(
                            ValidationErrorType.INVALID_REGEX_PATTERN,
                            f"Rule {number} has invalid regex pattern: {e.reason}",
                            context=rule.rule_value,
                        )
                    )

        roles_with_rules = {rule.target_role for rule in rules}
        for role in ImageRole.in_precedence_order():
            if role not in roles_with_rules:
                warnings.append(
                    ValidationWarning.of(
                        ValidationWarningType.MISSING_ROLE_RULES,
                        f"No rules defined for {role.value} role - files will not be classified as {role.value}",
                        context=role.value,
                    )
                )

        is_valid = not errors and bool(rules)
        logger.debug(f"Validated {len(rules)} rules: {len(errors)} errors, {len(warnings)} warnings")
        return ValidationResult(is_valid=is_valid, errors=tuple(errors), warnings=tuple(warnings))

    def suggest_rules(
        self, analysis: TokenAnalysis, existing_rules: Iterable[RoleRule] | None = None
    ) -> list[RoleRule]:
        """
        Propose CONTAINS rules for camera/side values found in an analysis.

        Args:
            analysis: Analysis with labelled tokens
            existing_rules: Rules already configured; values they cover are skipped

        Returns:
            New rules in role precedence order
        """
        covered = {
            (rule.target_role, rule.rule_value.casefold())
            for rule in existing_rules or []
            if rule.rule_type == RuleType.CONTAINS
        }

        suggestions: list[RoleRule] = []
        for role, values in TypeInferenceEngine.camera_values_by_role(analysis.tokenized_filenames).items():
            for value in values:
                if (role, value.casefold()) in covered:
                    continue
                covered.add((role, value.casefold()))
                suggestions.append(RoleRule(target_role=role, rule_type=RuleType.CONTAINS, rule_value=value))
        return suggestions
