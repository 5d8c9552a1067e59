"""Exceptions raised by the filename pattern builder engine."""

from typing import Any


class PatternBuilderError(Exception):
    """Base exception for pattern builder errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize pattern builder error.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.details = details or {}


class RuleConfigurationError(PatternBuilderError):
    """Exception raised when role rules cannot be evaluated as configured."""

    def __init__(
        self,
        message: str,
        pattern: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize rule configuration error.

        Args:
            message: Error message
            pattern: Offending regex pattern text, if any
            details: Additional error details
        """
        error_details = details or {}
        if pattern is not None:
            error_details["pattern"] = pattern
        super().__init__(message, error_details)
        self.pattern = pattern


class InvalidRegexRuleError(RuleConfigurationError):
    """Exception raised when a REGEX_OVERRIDE rule does not compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        """Initialize invalid regex error.

        Args:
            pattern: The regex text from the rule
            reason: Compiler error message
        """
        super().__init__(f"Invalid regex pattern in rule: {pattern} ({reason})", pattern=pattern)
        self.reason = reason
