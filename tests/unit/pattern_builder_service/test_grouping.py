"""
Unit tests for grouping sample files and assigning roles.
"""

import pytest

from services.pattern_builder_service.app.exceptions import RuleConfigurationError
from services.pattern_builder_service.app.rules.models import RoleRule, RuleType
from services.pattern_builder_service.app.tokenizer.models import ImageRole
from services.pattern_builder_service.app.validation.grouping import (
    EMPTY_GROUP_ID_REASON,
    NO_CAPTURING_GROUP_REASON,
    NO_GROUP_MATCH_REASON,
    NO_ROLE_MATCH_REASON,
    GroupingEngine,
)

GROUP_PATTERN = r"^CAM_([A-Z0-9]+)_"


@pytest.fixture
def engine():
    return GroupingEngine()


class TestGroupAndAssignRoles:
    """Test suite for GroupingEngine.group_and_assign_roles."""

    def test_complete_groups(self, engine, grouped_filenames, default_rules):
        """Test every file is grouped and classified."""
        result = engine.group_and_assign_roles(grouped_filenames, GROUP_PATTERN, default_rules)

        assert result.total_files == 7
        assert result.matched_count == 7
        assert result.group_count == 3
        assert result.unmatched_files == []
        assert result.groups_with_missing_roles == []
        assert result.groups["DEF456"] == [
            "CAM_DEF456_front.jpg",
            "CAM_DEF456_rear.jpg",
            "CAM_DEF456_overview.jpg",
        ]
        assert result.roles_for_group("DEF456") == {ImageRole.FRONT, ImageRole.REAR, ImageRole.OVERVIEW}
        assert result.file_to_role["CAM_ABC123_rear.jpg"] == ImageRole.REAR

    def test_file_outside_pattern(self, engine, grouped_filenames, default_rules):
        """Test files the group pattern does not match are reported."""
        result = engine.group_and_assign_roles([*grouped_filenames, "README"], GROUP_PATTERN, default_rules)

        assert result.unmatched_files == ["README"]
        assert result.unmatched_reasons["README"] == NO_GROUP_MATCH_REASON
        assert result.matched_count == 7

    def test_file_without_role(self, engine, grouped_filenames, default_rules):
        """Test grouped files no rule classifies are unmatched but still counted as grouped."""
        result = engine.group_and_assign_roles(
            [*grouped_filenames, "CAM_ABC123_side.jpg"], GROUP_PATTERN, default_rules
        )

        assert result.unmatched_reasons == {"CAM_ABC123_side.jpg": NO_ROLE_MATCH_REASON}
        assert "CAM_ABC123_side.jpg" not in result.groups["ABC123"]
        assert result.matched_count == 8

    def test_group_with_missing_role(self, engine, grouped_filenames, default_rules):
        """Test groups lacking front or rear are reported."""
        result = engine.group_and_assign_roles(
            [*grouped_filenames, "CAM_ONLY01_front.jpg"], GROUP_PATTERN, default_rules
        )

        assert result.groups_with_missing_roles == ["ONLY01"]

    def test_overview_is_optional(self, engine, default_rules):
        """Test a group with front and rear but no overview is complete."""
        result = engine.group_and_assign_roles(
            ["CAM_A1_front.jpg", "CAM_A1_rear.jpg"], GROUP_PATTERN, default_rules
        )

        assert result.groups_with_missing_roles == []

    def test_group_without_classified_files_is_dropped(self, engine, default_rules):
        """Test groups left empty after role assignment are removed."""
        result = engine.group_and_assign_roles(["CAM_ZZZ_side.jpg"], GROUP_PATTERN, default_rules)

        assert result.groups == {}
        assert result.file_to_group_id == {"CAM_ZZZ_side.jpg": "ZZZ"}

    def test_invalid_group_pattern(self, engine, grouped_filenames, default_rules):
        """Test a group pattern that does not compile leaves every file unmatched."""
        result = engine.group_and_assign_roles(grouped_filenames, "(", default_rules)

        assert result.unmatched_files == grouped_filenames
        assert all(reason.startswith("Invalid group pattern:") for reason in result.unmatched_reasons.values())
        assert result.matched_count == 0

    def test_pattern_without_capturing_group(self, engine, grouped_filenames, default_rules):
        """Test a group pattern without a capturing group leaves every file unmatched."""
        result = engine.group_and_assign_roles(grouped_filenames, "^CAM_", default_rules)

        assert len(result.unmatched_files) == 7
        assert set(result.unmatched_reasons.values()) == {NO_CAPTURING_GROUP_REASON}

    def test_pattern_is_case_insensitive(self, engine, grouped_filenames, default_rules):
        """Test group patterns ignore case."""
        result = engine.group_and_assign_roles(grouped_filenames, r"^cam_([a-z0-9]+)_", default_rules)

        assert set(result.groups) == {"ABC123", "XYZ789", "DEF456"}

    def test_empty_capture(self, engine, default_rules):
        """Test a match capturing an empty group ID is unmatched."""
        result = engine.group_and_assign_roles(["CAM_ABC123_front.jpg"], r"^CAM_([0-9]*)", default_rules)

        assert result.unmatched_reasons == {"CAM_ABC123_front.jpg": EMPTY_GROUP_ID_REASON}

    def test_no_rules(self, engine, grouped_filenames):
        """Test missing rules leave every grouped file unclassified."""
        result = engine.group_and_assign_roles(grouped_filenames, GROUP_PATTERN, None)

        assert result.groups == {}
        assert set(result.unmatched_reasons.values()) == {NO_ROLE_MATCH_REASON}

    def test_invalid_regex_rule_raises(self, engine, grouped_filenames):
        """Test a regex rule that does not compile propagates."""
        rules = [RoleRule(ImageRole.FRONT, RuleType.REGEX_OVERRIDE, "[")]

        with pytest.raises(RuleConfigurationError):
            engine.group_and_assign_roles(grouped_filenames, GROUP_PATTERN, rules)
