"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pytest

sys.path.append(os.path.join(os.getcwd(), "src"))

# Settings are read once at import, so the environment must be in place first
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOG_LEVEL", "warning")

from planwise.engine.models import Sprint, TeamMember, WorkItem  # noqa: E402


# Monday morning, mid-sprint
AS_OF = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

SPRINT_LENGTH = timedelta(days=14)


def due_in(days: int) -> date:
    """A due date that is `days` days away from AS_OF after rounding up."""
    return (AS_OF + timedelta(days=days)).date()


# =============================================================================
# Builders
# =============================================================================

def build_item(item_id: str = "item_1", **overrides) -> WorkItem:
    """Work item with neutral defaults: medium, 3 points, no date, no links."""
    data = {
        "id": item_id,
        "title": f"Story {item_id}",
        "priority": "medium",
        "status": "backlog",
        "story_points": 3,
    }
    data.update(overrides)
    return WorkItem(**data)


def build_sprint(sprint_id: str = "sprint_1", **overrides) -> Sprint:
    data = {
        "id": sprint_id,
        "name": f"Sprint {sprint_id}",
        "capacity_points": 40,
        "status": "planning",
    }
    data.update(overrides)
    return Sprint(**data)


def build_member(member_id: str = "member_1", **overrides) -> TeamMember:
    data = {
        "id": member_id,
        "name": f"Member {member_id}",
        "capacity_points": 20,
        "availability": 100,
        "velocity": 18,
        "efficiency": 0.9,
        "points_assigned": 0,
        "skills": [],
    }
    data.update(overrides)
    return TeamMember(**data)


def build_history(
    completed: Sequence[float],
    committed: Optional[Sequence[float]] = None,
    first_start: date = date(2025, 9, 1),
) -> List[Sprint]:
    """Completed sprints back to back, oldest first."""
    sprints = []
    for index, points in enumerate(completed):
        start = first_start + SPRINT_LENGTH * index
        sprints.append(
            Sprint(
                id=f"hist_{index + 1}",
                name=f"Sprint {index + 1}",
                capacity_points=40,
                committed_points=committed[index] if committed else 0,
                completed_points=points,
                start_date=start,
                end_date=start + SPRINT_LENGTH - timedelta(days=1),
                status="completed",
            )
        )
    return sprints


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def as_of() -> datetime:
    return AS_OF


@pytest.fixture
def clock():
    return lambda: AS_OF


@pytest.fixture(name="due_in")
def due_in_fixture():
    return due_in


@pytest.fixture
def make_item():
    return build_item


@pytest.fixture
def make_sprint():
    return build_sprint


@pytest.fixture
def make_member():
    return build_member


@pytest.fixture
def make_history():
    return build_history


# =============================================================================
# Test Markers
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
