"""
Pattern configuration produced by the pattern builder.
"""

from dataclasses import dataclass, field

from services.pattern_builder_service.app.rules.models import RoleRule
from services.pattern_builder_service.app.tokenizer.models import ImageRole, Token, TokenType


def _has_pattern(pattern: str | None) -> bool:
    return bool(pattern and pattern.strip())


def _token_to_dict(token: Token) -> dict:
    return {
        "value": token.value,
        "position": token.position,
        "type": token.suggested_type.value,
        "confidence": token.confidence,
    }


def _token_from_dict(data: dict) -> Token:
    return Token(
        value=data["value"],
        position=int(data["position"]),
        suggested_type=TokenType(data.get("type", TokenType.UNKNOWN.value)),
        confidence=float(data.get("confidence", 0.0)),
    )


@dataclass
class PatternConfiguration:
    """Group pattern, role patterns and the choices they were built from.

    A usable configuration has a non-empty group pattern with exactly one
    capturing group and at least one non-empty role pattern.
    """

    group_pattern: str = ""
    front_pattern: str = ""
    rear_pattern: str = ""
    overview_pattern: str = ""
    role_rules: list[RoleRule] = field(default_factory=list)
    tokens: list[Token] = field(default_factory=list)
    group_id_token: Token | None = None

    def is_valid(self) -> bool:
        """Check the group pattern and at least one role pattern are set."""
        return _has_pattern(self.group_pattern) and self.has_role_patterns()

    def has_role_patterns(self) -> bool:
        return any(_has_pattern(self.pattern_for(role)) for role in ImageRole)

    def pattern_for(self, role: ImageRole) -> str:
        """Get the regex classifying a role."""
        if role == ImageRole.OVERVIEW:
            return self.overview_pattern
        if role == ImageRole.FRONT:
            return self.front_pattern
        return self.rear_pattern

    def set_pattern_for(self, role: ImageRole, pattern: str | None) -> None:
        """Set the regex classifying a role."""
        pattern = pattern or ""
        if role == ImageRole.OVERVIEW:
            self.overview_pattern = pattern
        elif role == ImageRole.FRONT:
            self.front_pattern = pattern
        else:
            self.rear_pattern = pattern

    def add_role_rule(self, rule: RoleRule | None) -> None:
        if rule is not None:
            self.role_rules.append(rule)

    def remove_role_rule(self, rule: RoleRule) -> bool:
        """Remove a rule; returns False when it was not present."""
        try:
            self.role_rules.remove(rule)
        except ValueError:
            return False
        return True

    def copy(self) -> "PatternConfiguration":
        """Copy with independent rule and token lists."""
        return PatternConfiguration(
            group_pattern=self.group_pattern,
            front_pattern=self.front_pattern,
            rear_pattern=self.rear_pattern,
            overview_pattern=self.overview_pattern,
            role_rules=list(self.role_rules),
            tokens=list(self.tokens),
            group_id_token=self.group_id_token,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "group_pattern": self.group_pattern,
            "front_pattern": self.front_pattern,
            "rear_pattern": self.rear_pattern,
            "overview_pattern": self.overview_pattern,
            "role_rules": [rule.to_dict() for rule in self.role_rules],
            "tokens": [_token_to_dict(token) for token in self.tokens],
            "group_id_token": _token_to_dict(self.group_id_token) if self.group_id_token else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PatternConfiguration":
        """Create a configuration from a serialized dictionary."""
        group_id_token = data.get("group_id_token")
        return cls(
            group_pattern=data.get("group_pattern") or "",
            front_pattern=data.get("front_pattern") or "",
            rear_pattern=data.get("rear_pattern") or "",
            overview_pattern=data.get("overview_pattern") or "",
            role_rules=[RoleRule.from_dict(rule) for rule in data.get("role_rules") or []],
            tokens=[_token_from_dict(token) for token in data.get("tokens") or []],
            group_id_token=_token_from_dict(group_id_token) if group_id_token else None,
        )
