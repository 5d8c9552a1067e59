"""
Role rules and the engine that evaluates them.
"""

from .engine import RuleEngine
from .models import RoleRule, RuleType

__all__ = [
    "RoleRule",
    "RuleEngine",
    "RuleType",
]
