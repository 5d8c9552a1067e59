"""
Validation of a pattern configuration against sample filenames.
"""

import logging

from services.pattern_builder_service.app.exceptions import RuleConfigurationError
from services.pattern_builder_service.app.patterns.configuration import PatternConfiguration
from services.pattern_builder_service.app.patterns.generator import PatternGenerator
from services.pattern_builder_service.app.rules.models import RoleRule, RuleType
from services.pattern_builder_service.app.tokenizer.models import ImageRole

from .grouping import GroupingEngine, GroupingResult
from .models import ValidationError, ValidationErrorType, ValidationResult, ValidationWarning, ValidationWarningType

logger = logging.getLogger(__name__)

LOW_MATCH_RATE_THRESHOLD = 0.5


def effective_role_rules(config: PatternConfiguration) -> list[RoleRule]:
    """
    Rules used to assign roles for a configuration.

    Configurations built from hand-written role patterns carry no rules; each
    non-empty role pattern then acts as a case-insensitive regex rule.
    """
    if config.role_rules:
        return list(config.role_rules)
    return [
        RoleRule(target_role=role, rule_type=RuleType.REGEX_OVERRIDE, rule_value=config.pattern_for(role), priority=1)
        for role in ImageRole.in_precedence_order()
        if config.pattern_for(role) and config.pattern_for(role).strip()
    ]


class SampleValidator:
    """Checks how well a configuration groups and classifies sample files."""

    def __init__(
        self,
        generator: PatternGenerator | None = None,
        grouping_engine: GroupingEngine | None = None,
    ) -> None:
        self.generator = generator or PatternGenerator()
        self.grouping_engine = grouping_engine or GroupingEngine(self.generator.rule_engine)

    def group(self, config: PatternConfiguration, filenames: list[str]) -> GroupingResult:
        """Group sample files with a configuration's group pattern and rules."""
        return self.grouping_engine.group_and_assign_roles(
            filenames, config.group_pattern, effective_role_rules(config)
        )

    def validate_against_samples(self, config: PatternConfiguration, filenames: list[str] | None) -> ValidationResult:
        """
        Test a configuration against sample filenames.

        Args:
            config: Configuration to test
            filenames: Sample filenames

        Returns:
            ValidationResult with sample-specific errors and warnings only
        """
        if not filenames:
            return ValidationResult.with_warnings([ValidationWarning.of(ValidationWarningType.NO_SAMPLE_FILES)])

        if not config.group_pattern or not config.group_pattern.strip():
            return ValidationResult.success()

        errors: list[ValidationError] = []
        warnings: list[ValidationWarning] = []

        try:
            result = self.group(config, filenames)
        except RuleConfigurationError as e:
            logger.warning(f"Role rules failed against samples: {e}")
            return ValidationResult.failure(
                ValidationError.of(ValidationErrorType.INVALID_REGEX_PATTERN, str(e), context=e.pattern)
            )

        if result.matched_count == 0:
            errors.append(
                ValidationError.of(ValidationErrorType.NO_FILES_MATCHED, "Group pattern doesn't match any sample files")
            )
        elif result.matched_count < len(filenames) * LOW_MATCH_RATE_THRESHOLD:
            warnings.append(
                ValidationWarning.of(
                    ValidationWarningType.LOW_MATCH_RATE,
                    f"Group pattern only matches {result.matched_count} of {len(filenames)} sample files",
                )
            )

        incomplete = result.groups_with_missing_roles
        if incomplete:
            warnings.append(
                ValidationWarning.of(
                    ValidationWarningType.INCOMPLETE_GROUPS,
                    f"{len(incomplete)} groups are missing required image roles",
                    context=", ".join(incomplete[:10]),
                )
            )

        return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))

    def validate(self, config: PatternConfiguration | None, filenames: list[str] | None) -> ValidationResult:
        """Validate a configuration's patterns and then test it against samples."""
        base = self.generator.validate_patterns(config)
        if config is None:
            return base
        return base.combine(self.validate_against_samples(config, filenames))
