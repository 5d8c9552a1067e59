"""
Grouping of sample filenames by group ID and role assignment within groups.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from services.pattern_builder_service.app.rules.engine import RuleEngine
from services.pattern_builder_service.app.rules.models import RoleRule
from services.pattern_builder_service.app.tokenizer.models import ImageRole

logger = logging.getLogger(__name__)

REQUIRED_ROLES = frozenset({ImageRole.FRONT, ImageRole.REAR})

NO_GROUP_MATCH_REASON = "Filename doesn't match group pattern"
EMPTY_GROUP_ID_REASON = "Group pattern matched but captured empty group ID"
NO_ROLE_MATCH_REASON = "No role rules matched this file"
NO_CAPTURING_GROUP_REASON = "Group pattern has no capturing group"


@dataclass
class GroupingResult:
    """Outcome of grouping a sample set and assigning roles."""

    total_files: int = 0
    groups: dict[str, list[str]] = field(default_factory=dict)
    file_to_group_id: dict[str, str] = field(default_factory=dict)
    file_to_role: dict[str, ImageRole] = field(default_factory=dict)
    unmatched_files: list[str] = field(default_factory=list)
    unmatched_reasons: dict[str, str] = field(default_factory=dict)

    @property
    def matched_count(self) -> int:
        """Files the group pattern extracted a group ID from."""
        return len(self.file_to_group_id)

    @property
    def group_count(self) -> int:
        return len(self.groups)

    @property
    def groups_with_missing_roles(self) -> list[str]:
        """Group IDs lacking a front or rear image (overview is optional)."""
        missing = []
        for group_id, filenames in self.groups.items():
            roles = {self.file_to_role[name] for name in filenames if name in self.file_to_role}
            if not REQUIRED_ROLES <= roles:
                missing.append(group_id)
        return missing

    def roles_for_group(self, group_id: str) -> set[ImageRole]:
        return {self.file_to_role[name] for name in self.groups.get(group_id, []) if name in self.file_to_role}

    def _mark_unmatched(self, filename: str, reason: str) -> None:
        self.unmatched_files.append(filename)
        self.unmatched_reasons[filename] = reason


class GroupingEngine:
    """Groups filenames with a group pattern and assigns roles with role rules."""

    def __init__(self, rule_engine: RuleEngine | None = None) -> None:
        self.rule_engine = rule_engine or RuleEngine()

    def group_and_assign_roles(
        self, filenames: Iterable[str], group_pattern: str, role_rules: list[RoleRule] | None
    ) -> GroupingResult:
        """
        Group filenames by their extracted group ID and assign a role to each.

        The group pattern is compiled case-insensitively and searched in every
        filename; its first capturing group is the group ID. Files that do not
        match, capture an empty ID or match no role rule are reported as
        unmatched with a reason.

        Args:
            filenames: Sample filenames
            group_pattern: Regex with one capturing group
            role_rules: Rules assigning roles within groups

        Returns:
            GroupingResult

        Raises:
            RuleConfigurationError: If a regex role rule does not compile
        """
        filenames = list(filenames)
        result = GroupingResult(total_files=len(filenames))

        try:
            group_regex = re.compile(group_pattern, re.IGNORECASE)
        except (re.error, TypeError) as e:
            logger.warning(f"Invalid group pattern {group_pattern!r}: {e}")
            for filename in filenames:
                result._mark_unmatched(filename, f"Invalid group pattern: {e}")
            return result

        if group_regex.groups < 1:
            for filename in filenames:
                result._mark_unmatched(filename, NO_CAPTURING_GROUP_REASON)
            return result

        for filename in filenames:
            match = group_regex.search(filename)
            if match is None:
                result._mark_unmatched(filename, NO_GROUP_MATCH_REASON)
                continue

            group_id = match.group(1)
            if group_id is None or not group_id.strip():
                result._mark_unmatched(filename, EMPTY_GROUP_ID_REASON)
                continue

            result.groups.setdefault(group_id, []).append(filename)
            result.file_to_group_id[filename] = group_id

        self._assign_roles(result, role_rules or [])
        logger.debug(
            f"Grouped {result.matched_count}/{result.total_files} files into {result.group_count} groups, "
            f"{len(result.unmatched_files)} unmatched"
        )
        return result

    def _assign_roles(self, result: GroupingResult, role_rules: list[RoleRule]) -> None:
        for group_id in list(result.groups):
            assigned = []
            for filename in result.groups[group_id]:
                role = self.rule_engine.classify(filename, role_rules)
                if role is None:
                    result._mark_unmatched(filename, NO_ROLE_MATCH_REASON)
                else:
                    result.file_to_role[filename] = role
                    assigned.append(filename)

            if assigned:
                result.groups[group_id] = assigned
            else:
                del result.groups[group_id]
