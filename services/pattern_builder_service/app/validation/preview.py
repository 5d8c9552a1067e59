"""
Per-file preview rows and summary statistics for a configuration.
"""

import logging
from dataclasses import dataclass, field

from services.pattern_builder_service.app.exceptions import RuleConfigurationError
from services.pattern_builder_service.app.patterns.configuration import PatternConfiguration
from services.pattern_builder_service.app.tokenizer.models import ImageRole

from .grouping import REQUIRED_ROLES, GroupingResult
from .sample_validator import SampleValidator

logger = logging.getLogger(__name__)

HEALTHY_MATCH_PERCENTAGE = 80.0
HEALTHY_INCOMPLETE_RATIO = 0.2


@dataclass(frozen=True)
class FilenamePreview:
    """How one filename is grouped and classified."""

    filename: str
    group_id: str | None = None
    role: ImageRole | None = None
    matched: bool = False
    unmatched_reason: str | None = None
    error_message: str | None = None

    @classmethod
    def success(cls, filename: str, group_id: str, role: ImageRole) -> "FilenamePreview":
        return cls(filename=filename, group_id=group_id, role=role, matched=True)

    @classmethod
    def unmatched(cls, filename: str, reason: str) -> "FilenamePreview":
        return cls(filename=filename, unmatched_reason=reason)

    @classmethod
    def error(cls, filename: str, message: str) -> "FilenamePreview":
        return cls(filename=filename, error_message=message)

    @property
    def has_error(self) -> bool:
        return bool(self.error_message and self.error_message.strip())

    @property
    def is_successful(self) -> bool:
        return self.matched and not self.has_error


@dataclass(frozen=True)
class PreviewSummary:
    """Aggregate statistics over a list of previews."""

    total_files: int = 0
    matched_files: int = 0
    role_counts: dict[ImageRole, int] = field(default_factory=dict)
    unmatched_filenames: tuple[str, ...] = ()
    group_roles: dict[str, frozenset[ImageRole]] = field(default_factory=dict)
    incomplete_groups: tuple[str, ...] = ()
    error_messages: tuple[str, ...] = ()

    @classmethod
    def from_previews(cls, previews: list[FilenamePreview] | None) -> "PreviewSummary":
        """Summarize preview rows."""
        previews = previews or []
        role_counts = {role: 0 for role in ImageRole.in_precedence_order()}
        group_roles: dict[str, set[ImageRole]] = {}
        unmatched = []
        errors = []
        matched = 0

        for preview in previews:
            if preview.matched:
                matched += 1
                if preview.role is not None:
                    role_counts[preview.role] += 1
                    if preview.group_id and preview.group_id.strip():
                        group_roles.setdefault(preview.group_id, set()).add(preview.role)
            else:
                unmatched.append(preview.filename)

            if preview.has_error:
                errors.append(f"{preview.filename}: {preview.error_message}")

        # Overview is optional; front and rear are not
        incomplete = [group_id for group_id, roles in group_roles.items() if not REQUIRED_ROLES <= roles]

        return cls(
            total_files=len(previews),
            matched_files=matched,
            role_counts=role_counts,
            unmatched_filenames=tuple(unmatched),
            group_roles={group_id: frozenset(roles) for group_id, roles in group_roles.items()},
            incomplete_groups=tuple(incomplete),
            error_messages=tuple(errors),
        )

    @property
    def unmatched_files(self) -> int:
        return self.total_files - self.matched_files

    @property
    def match_percentage(self) -> float:
        return self.matched_files * 100.0 / self.total_files if self.total_files else 0.0

    @property
    def has_errors(self) -> bool:
        return bool(self.error_messages)

    @property
    def has_warnings(self) -> bool:
        return bool(self.incomplete_groups) or bool(self.unmatched_filenames)

    def role_count(self, role: ImageRole) -> int:
        return self.role_counts.get(role, 0)

    def is_healthy(self) -> bool:
        """At least 80% of files matched and under 20% of groups incomplete."""
        if self.has_errors:
            return False
        if self.total_files == 0:
            return True
        if self.match_percentage < HEALTHY_MATCH_PERCENTAGE:
            return False
        if self.group_roles:
            return len(self.incomplete_groups) / len(self.group_roles) < HEALTHY_INCOMPLETE_RATIO
        return True


def previews_from_grouping(result: GroupingResult, filenames: list[str]) -> list[FilenamePreview]:
    """Turn a grouping result into one preview row per filename, in input order."""
    previews = []
    for filename in filenames:
        role = result.file_to_role.get(filename)
        group_id = result.file_to_group_id.get(filename)
        if role is not None and group_id is not None:
            previews.append(FilenamePreview.success(filename, group_id, role))
        else:
            previews.append(FilenamePreview.unmatched(filename, result.unmatched_reasons.get(filename, "No match")))
    return previews


def build_previews(
    filenames: list[str] | None,
    config: PatternConfiguration | None,
    validator: SampleValidator | None = None,
) -> tuple[list[FilenamePreview], PreviewSummary]:
    """
    Preview how a configuration groups and classifies filenames.

    Args:
        filenames: Filenames to preview
        config: Configuration to apply; None previews an empty configuration
        validator: Validator providing the grouping engine

    Returns:
        Preview rows in input order and their summary
    """
    filenames = list(filenames or [])
    config = config or PatternConfiguration()
    validator = validator or SampleValidator()

    try:
        result = validator.group(config, filenames)
        previews = previews_from_grouping(result, filenames)
    except RuleConfigurationError as e:
        logger.warning(f"Preview failed: {e}")
        previews = [FilenamePreview.error(filename, f"Processing error: {e}") for filename in filenames]

    return previews, PreviewSummary.from_previews(previews)
