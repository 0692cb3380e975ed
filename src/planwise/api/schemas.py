from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from planwise.engine.capacity_planner import CapacityRisk, UtilizationBand
from planwise.engine.conflict_detector import ConflictSeverity, ConflictType
from planwise.engine.models import Priority, Sprint, TeamMember, WorkItem
from planwise.engine.velocity_calculator import VelocityTrend


def _check_unique_ids(values: list, kind: str) -> list:
    seen = set()
    for value in values:
        if value.id in seen:
            raise ValueError(f"Duplicate {kind} id: {value.id}")
        seen.add(value.id)
    return values


# =============================================================================
# REQUESTS
# =============================================================================

class ItemsRequest(BaseModel):
    items: List[WorkItem]
    as_of: Optional[datetime] = Field(None, description="Reference time; defaults to now")

    @field_validator("items")
    @classmethod
    def unique_items(cls, items: List[WorkItem]) -> List[WorkItem]:
        return _check_unique_ids(items, "work item")


class CapacityRequest(BaseModel):
    sprint: Sprint
    candidate_items: List[WorkItem] = Field(default_factory=list)

    @field_validator("candidate_items")
    @classmethod
    def unique_candidates(cls, items: List[WorkItem]) -> List[WorkItem]:
        return _check_unique_ids(items, "work item")


class TeamCapacityRequest(BaseModel):
    members: List[TeamMember]
    sprint: Optional[Sprint] = None

    @field_validator("members")
    @classmethod
    def unique_members(cls, members: List[TeamMember]) -> List[TeamMember]:
        return _check_unique_ids(members, "team member")


class VelocityRequest(BaseModel):
    sprints: List[Sprint]
    start: Optional[date] = None
    end: Optional[date] = None

    @field_validator("sprints")
    @classmethod
    def unique_sprints(cls, sprints: List[Sprint]) -> List[Sprint]:
        return _check_unique_ids(sprints, "sprint")


# =============================================================================
# RESPONSES
# =============================================================================

class PriorityScoreResponse(BaseModel):
    item_id: str
    score: float
    suggested_priority: Priority

    model_config = ConfigDict(from_attributes=True)


class PrioritySuggestionResponse(BaseModel):
    item_id: str
    current_priority: Priority
    suggested_priority: Priority
    score: float
    reason: str
    confidence: str

    model_config = ConfigDict(from_attributes=True)


class ConflictResponse(BaseModel):
    item_id: str
    conflict_type: ConflictType
    severity: ConflictSeverity
    description: str
    related_item_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ConflictReportResponse(BaseModel):
    conflicts: List[ConflictResponse]
    total_conflicts: int
    by_type: Dict[str, int]
    by_severity: Dict[str, int]


class CapacityMetricsResponse(BaseModel):
    sprint_id: str
    capacity_points: float
    total_assigned_points: float
    total_selected_points: float
    new_total_points: float
    available_capacity: float
    utilization_rate: float
    is_over_capacity: bool
    remaining_capacity: float
    utilization_band: UtilizationBand
    warnings: List[str]

    model_config = ConfigDict(from_attributes=True)


class TeamCapacityResponse(BaseModel):
    member_count: int
    total_capacity: float
    adjusted_capacity: float
    total_assigned: float
    available_capacity: float
    utilization_rate: float
    risk_level: CapacityRisk
    average_velocity: float
    average_efficiency: float
    unassigned_stories: int
    unassigned_points: float

    model_config = ConfigDict(from_attributes=True)


class VelocityRangeResponse(BaseModel):
    min: float
    max: float

    model_config = ConfigDict(from_attributes=True)


class VelocityMetricsResponse(BaseModel):
    sprint_count: int
    average_velocity: float
    median_velocity: float
    velocity_range: VelocityRangeResponse
    trend: VelocityTrend
    trend_percentage: float
    consistency: float
    predictability: float
    completion_rate: float
    recommended_capacity: int
    analysis: str
    recommendations: List[str]

    model_config = ConfigDict(from_attributes=True)
