"""
Tests for the work item, sprint and team member models.
"""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from planwise.engine.models import (
    ItemStatus,
    Priority,
    Sprint,
    SprintStatus,
    TeamMember,
    WorkItem,
    priority_rank,
)


class TestPriorityRank:

    def test_ordering(self):
        ranks = [priority_rank(p) for p in (Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL)]
        assert ranks == [1, 2, 3, 4]

    def test_accepts_plain_strings(self):
        assert priority_rank("high") == 3

    def test_unknown_priority(self):
        with pytest.raises(ValueError):
            priority_rank("urgent")


class TestWorkItem:

    def test_defaults(self):
        item = WorkItem(id="item_1", priority="medium", story_points=3)

        assert item.status == ItemStatus.BACKLOG
        assert item.business_value is None
        assert item.due_date is None
        assert item.dependencies == []
        assert item.blocked_by == []
        assert item.is_completed is False

    def test_due_date_keeps_its_type(self):
        assert type(WorkItem(id="a", priority="low", story_points=1,
                             due_date=date(2026, 3, 5)).due_date) is date
        assert isinstance(WorkItem(id="a", priority="low", story_points=1,
                                   due_date=datetime(2026, 3, 5, 12)).due_date, datetime)

    @pytest.mark.parametrize("points", [0, -1])
    def test_story_points_must_be_positive(self, points):
        with pytest.raises(ValidationError):
            WorkItem(id="a", priority="low", story_points=points)

    def test_business_value_not_negative(self):
        with pytest.raises(ValidationError):
            WorkItem(id="a", priority="low", story_points=1, business_value=-2)

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValidationError):
            WorkItem(id="a", priority="urgent", story_points=1)

    def test_cannot_depend_on_itself(self):
        with pytest.raises(ValidationError, match="cannot depend on itself"):
            WorkItem(id="a", priority="low", story_points=1, dependencies=["a"])

    def test_cannot_block_itself(self):
        with pytest.raises(ValidationError, match="cannot block itself"):
            WorkItem(id="a", priority="low", story_points=1, blocked_by=["a"])

    def test_items_are_immutable(self, make_item):
        item = make_item()
        with pytest.raises(ValidationError):
            item.priority = Priority.CRITICAL

    def test_completed(self, make_item):
        assert make_item(status="completed").is_completed is True


class TestSprint:

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="before it starts"):
            Sprint(id="s1", start_date=date(2026, 3, 14), end_date=date(2026, 3, 1))

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValidationError):
            Sprint(id="s1", capacity_points=-5)

    @pytest.mark.parametrize("status, accepts", [
        (SprintStatus.PLANNING, True),
        (SprintStatus.ACTIVE, True),
        (SprintStatus.COMPLETED, False),
        (SprintStatus.CANCELLED, False),
    ])
    def test_accepts_assignments(self, make_sprint, status, accepts):
        assert make_sprint(status=status).accepts_assignments is accepts


class TestTeamMember:

    def test_defaults(self):
        member = TeamMember(id="m1")
        assert member.availability == 100
        assert member.efficiency == 1.0
        assert member.skills == []

    @pytest.mark.parametrize("availability", [-1, 101])
    def test_availability_is_a_percentage(self, availability):
        with pytest.raises(ValidationError):
            TeamMember(id="m1", availability=availability)
