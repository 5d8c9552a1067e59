"""
Validation outcome models shared by rule, pattern and sample validation.
"""

from dataclasses import dataclass, field
from enum import Enum


class ValidationErrorType(Enum):
    """Problems that make a configuration unusable."""

    NO_GROUP_ID_SELECTED = "no_group_id_selected"
    NO_ROLE_RULES_DEFINED = "no_role_rules_defined"
    NO_FILES_MATCHED = "no_files_matched"
    REGEX_SYNTAX_ERROR = "regex_syntax_error"
    EMPTY_GROUP_PATTERN = "empty_group_pattern"
    NO_ROLE_PATTERNS = "no_role_patterns"
    INVALID_RULE_VALUE = "invalid_rule_value"
    MULTIPLE_CAPTURING_GROUPS = "multiple_capturing_groups"
    NO_CAPTURING_GROUPS = "no_capturing_groups"
    INVALID_RULE_CONFIGURATION = "invalid_rule_configuration"
    INVALID_REGEX_PATTERN = "invalid_regex_pattern"

    @property
    def default_message(self) -> str:
        return _ERROR_MESSAGES[self]


class ValidationWarningType(Enum):
    """Problems worth reporting that do not block a configuration."""

    OVERLAPPING_RULES = "overlapping_rules"
    NO_OVERVIEW_IMAGES = "no_overview_images"
    EMPTY_RULE_VALUE = "empty_rule_value"
    MISSING_ROLE_RULES = "missing_role_rules"
    NO_SAMPLE_FILES = "no_sample_files"
    LOW_MATCH_RATE = "low_match_rate"
    INCOMPLETE_GROUPS = "incomplete_groups"

    @property
    def default_message(self) -> str:
        return _WARNING_MESSAGES[self]


_ERROR_MESSAGES = {
    ValidationErrorType.NO_GROUP_ID_SELECTED: "Please select a token to use as Group ID",
    ValidationErrorType.NO_ROLE_RULES_DEFINED: "Please define rules for identifying image roles",
    ValidationErrorType.NO_FILES_MATCHED: "No files match the current pattern - try adjusting Group ID",
    ValidationErrorType.REGEX_SYNTAX_ERROR: "Invalid regular expression syntax",
    ValidationErrorType.EMPTY_GROUP_PATTERN: "Group pattern cannot be empty",
    ValidationErrorType.NO_ROLE_PATTERNS: "At least one role pattern must be defined",
    ValidationErrorType.INVALID_RULE_VALUE: "Rule value cannot be empty",
    ValidationErrorType.MULTIPLE_CAPTURING_GROUPS: (
        "Group pattern contains multiple capturing groups - only one is allowed"
    ),
    ValidationErrorType.NO_CAPTURING_GROUPS: "Group pattern must contain exactly one capturing group",
    ValidationErrorType.INVALID_RULE_CONFIGURATION: "Invalid rule configuration",
    ValidationErrorType.INVALID_REGEX_PATTERN: "Invalid regex pattern in rule",
}

_WARNING_MESSAGES = {
    ValidationWarningType.OVERLAPPING_RULES: "Role rules have overlapping patterns",
    ValidationWarningType.NO_OVERVIEW_IMAGES: "No overview images found - consider adding overview rules",
    ValidationWarningType.EMPTY_RULE_VALUE: "Rule has empty value and will not match any files",
    ValidationWarningType.MISSING_ROLE_RULES: "No rules defined for image role",
    ValidationWarningType.NO_SAMPLE_FILES: "No sample files available for pattern testing",
    ValidationWarningType.LOW_MATCH_RATE: "Pattern matches fewer files than expected",
    ValidationWarningType.INCOMPLETE_GROUPS: "Some groups are missing required image roles",
}


@dataclass(frozen=True)
class ValidationError:
    """A blocking validation problem."""

    type: ValidationErrorType
    message: str
    context: str | None = None

    @classmethod
    def of(
        cls, error_type: ValidationErrorType, message: str | None = None, context: str | None = None
    ) -> "ValidationError":
        """Create an error, falling back to the type's default message."""
        return cls(type=error_type, message=message or error_type.default_message, context=context)


@dataclass(frozen=True)
class ValidationWarning:
    """A non-blocking validation problem."""

    type: ValidationWarningType
    message: str
    context: str | None = None

    @classmethod
    def of(
        cls, warning_type: ValidationWarningType, message: str | None = None, context: str | None = None
    ) -> "ValidationWarning":
        """Create a warning, falling back to the type's default message."""
        return cls(type=warning_type, message=message or warning_type.default_message, context=context)


@dataclass(frozen=True)
class ValidationResult:
    """Aggregated outcome of a validation pass."""

    is_valid: bool = True
    errors: tuple[ValidationError, ...] = field(default_factory=tuple)
    warnings: tuple[ValidationWarning, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def failure(cls, errors: ValidationError | list[ValidationError]) -> "ValidationResult":
        if isinstance(errors, ValidationError):
            errors = [errors]
        return cls(is_valid=False, errors=tuple(errors))

    @classmethod
    def with_warnings(cls, warnings: list[ValidationWarning]) -> "ValidationResult":
        return cls(is_valid=True, warnings=tuple(warnings))

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def error_messages(self) -> list[str]:
        return [error.message for error in self.errors]

    def warning_messages(self) -> list[str]:
        return [warning.message for warning in self.warnings]

    def has_error_type(self, error_type: ValidationErrorType) -> bool:
        return any(error.type == error_type for error in self.errors)

    def has_warning_type(self, warning_type: ValidationWarningType) -> bool:
        return any(warning.type == warning_type for warning in self.warnings)

    def combine(self, other: "ValidationResult | None") -> "ValidationResult":
        """Merge two results; the combination is valid only if both are."""
        if other is None:
            return self
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "is_valid": self.is_valid,
            "errors": [{"type": e.type.value, "message": e.message, "context": e.context} for e in self.errors],
            "warnings": [{"type": w.type.value, "message": w.message, "context": w.context} for w in self.warnings],
        }
