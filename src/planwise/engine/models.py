"""
Domain models shared by the analyzers.

Work items, sprints and team members are validated pydantic records. They carry
no behaviour beyond validation: every score, conflict or metric is derived on
demand by the analyzers and never written back onto these objects.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Priority(str, Enum):
    """Priority tiers, lowest first."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ItemStatus(str, Enum):
    """Lifecycle status of a story or task."""
    BACKLOG = "backlog"
    IN_SPRINT = "in_sprint"
    IN_PROGRESS = "in_progress"
    TESTING = "testing"
    BLOCKED = "blocked"
    COMPLETED = "completed"


class SprintStatus(str, Enum):
    """Sprint lifecycle: planning -> active -> completed (or cancelled)."""
    PLANNING = "planning"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Canonical ordering used for every priority comparison.
PRIORITY_RANK: Dict[Priority, int] = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.CRITICAL: 4,
}

HIGH_PRIORITIES = frozenset({Priority.HIGH, Priority.CRITICAL})


def priority_rank(priority: Priority) -> int:
    """Ordinal rank of a priority tier (low=1 .. critical=4)."""
    return PRIORITY_RANK[Priority(priority)]


class WorkItem(BaseModel):
    """A story or task in the backlog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    priority: Priority
    status: ItemStatus = ItemStatus.BACKLOG
    story_points: float = Field(..., gt=0, description="Relative size estimate")
    business_value: Optional[float] = Field(None, ge=0)
    due_date: Optional[Union[datetime, date]] = None
    dependencies: List[str] = Field(default_factory=list)
    blocked_by: List[str] = Field(default_factory=list)
    assignee_id: Optional[str] = None
    required_skills: List[str] = Field(default_factory=list)
    epic: Optional[str] = None

    @model_validator(mode="after")
    def _check_self_reference(self) -> "WorkItem":
        if self.id in self.dependencies:
            raise ValueError(f"Work item {self.id} cannot depend on itself")
        if self.id in self.blocked_by:
            raise ValueError(f"Work item {self.id} cannot block itself")
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == ItemStatus.COMPLETED


class Sprint(BaseModel):
    """A time-boxed iteration with a point capacity."""

    id: str = Field(..., min_length=1)
    name: str = ""
    capacity_points: float = Field(0, ge=0)
    committed_points: float = Field(0, ge=0)
    completed_points: float = Field(0, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: SprintStatus = SprintStatus.PLANNING
    assigned_stories: List[WorkItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_dates(self) -> "Sprint":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(
                f"Sprint {self.id} ends ({self.end_date}) before it starts ({self.start_date})"
            )
        return self

    @property
    def accepts_assignments(self) -> bool:
        """Stories may only be added or removed while planning or active."""
        return self.status in (SprintStatus.PLANNING, SprintStatus.ACTIVE)


class TeamMember(BaseModel):
    """A team member as seen by capacity planning."""

    id: str = Field(..., min_length=1)
    name: str = ""
    capacity_points: float = Field(0, ge=0, description="Story points per sprint")
    availability: float = Field(100, ge=0, le=100, description="Percent available this sprint")
    velocity: float = Field(0, ge=0, description="Average points actually completed")
    efficiency: float = Field(1.0, ge=0, description="Actual vs planned ratio")
    points_assigned: float = Field(0, ge=0)
    skills: List[str] = Field(default_factory=list)
