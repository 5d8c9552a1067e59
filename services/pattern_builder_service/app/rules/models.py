"""
Data models for role classification rules.
"""

from dataclasses import dataclass
from enum import Enum

from services.pattern_builder_service.app.tokenizer.models import ImageRole


class RuleType(Enum):
    """How a rule value is compared against a filename."""

    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    REGEX_OVERRIDE = "regex_override"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class RoleRule:
    """A rule assigning filenames to an image role.

    Lower ``priority`` values are evaluated first within a role.
    """

    target_role: ImageRole = ImageRole.FRONT
    rule_type: RuleType = RuleType.CONTAINS
    rule_value: str = ""
    case_sensitive: bool = False
    priority: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.rule_value or not self.rule_value.strip()

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "target_role": self.target_role.value,
            "rule_type": self.rule_type.value,
            "rule_value": self.rule_value,
            "case_sensitive": self.case_sensitive,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RoleRule":
        """Create a rule from a serialized dictionary."""
        return cls(
            target_role=ImageRole(data.get("target_role", ImageRole.FRONT.value)),
            rule_type=RuleType(data.get("rule_type", RuleType.CONTAINS.value)),
            rule_value=data.get("rule_value") or "",
            case_sensitive=bool(data.get("case_sensitive", False)),
            priority=int(data.get("priority", 0)),
        )
