"""
Capacity Planner

Checks a proposed story selection against a sprint's point capacity and
summarizes team capacity for sprint planning.

Nothing here commits an assignment: the caller applies the plan as a separate
action once the numbers look right.

Usage:
    planner = CapacityPlanner()

    # What happens if these stories join the sprint?
    metrics = planner.plan_capacity(sprint, candidate_items)

    # Team-level view
    summary = planner.summarize_team(members, sprint)
    member = planner.recommend_assignee(item, members)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .base import AnalyzerBase
from .models import Sprint, SprintStatus, TeamMember, WorkItem


class UtilizationBand(str, Enum):
    """How full a sprint would be."""
    LOW = "low"
    HEALTHY = "healthy"
    HIGH = "high"
    OVER = "over"


class CapacityRisk(str, Enum):
    """Team capacity risk levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class CapacityMetrics:
    """Capacity picture of a sprint after adding a story selection."""
    sprint_id: str
    capacity_points: float
    total_assigned_points: float
    total_selected_points: float
    new_total_points: float
    available_capacity: float  # before the selection
    utilization_rate: float  # percentage, not clamped
    is_over_capacity: bool
    remaining_capacity: float  # negative when over capacity
    utilization_band: UtilizationBand
    warnings: List[str] = field(default_factory=list)


@dataclass
class TeamCapacitySummary:
    """Availability-adjusted capacity of a team for one sprint."""
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


class CapacityPlanner(AnalyzerBase):
    """
    Sprint capacity calculations.

    Utilization bands:
    ```
    > 100%  over
    >  90%  high
    >= 70%  healthy
    else    low
    ```
    """

    OVER_UTILIZATION = 100.0
    HIGH_UTILIZATION = 90.0
    HEALTHY_UTILIZATION = 70.0

    # Team risk thresholds on availability-adjusted utilization
    TEAM_HIGH_RISK = 95.0
    TEAM_MEDIUM_RISK = 85.0

    # Members loaded at or above this share of capacity get no new work
    MAX_ASSIGNEE_LOAD = 90.0

    def run(self, sprint: Sprint, candidate_items: Sequence[WorkItem]) -> CapacityMetrics:
        """Plan a story selection against a sprint."""
        return self.plan_capacity(sprint, candidate_items)

    def plan_capacity(
        self,
        sprint: Sprint,
        candidate_items: Sequence[WorkItem],
    ) -> CapacityMetrics:
        """
        Calculate sprint capacity after adding the candidate items.

        Args:
            sprint: Target sprint, with its current assigned stories
            candidate_items: Stories proposed for addition

        Returns:
            CapacityMetrics; the sprint is not modified
        """
        capacity = sprint.capacity_points
        total_assigned = sum(story.story_points for story in sprint.assigned_stories)
        total_selected = sum(item.story_points for item in candidate_items)
        new_total = total_assigned + total_selected

        utilization_rate = self.percentage(new_total, capacity)
        is_over_capacity = new_total > capacity
        remaining = capacity - new_total

        warnings = self._collect_warnings(sprint, candidate_items)
        if is_over_capacity:
            warnings.append(
                f"Selected stories exceed sprint capacity by {abs(remaining):g} points. "
                "Consider removing some stories or increasing sprint capacity."
            )

        self.logger.debug(
            "Capacity planned",
            sprint_id=sprint.id,
            new_total=new_total,
            capacity=capacity,
            over=is_over_capacity,
        )

        return CapacityMetrics(
            sprint_id=sprint.id,
            capacity_points=capacity,
            total_assigned_points=total_assigned,
            total_selected_points=total_selected,
            new_total_points=new_total,
            available_capacity=capacity - total_assigned,
            utilization_rate=round(utilization_rate, 2),
            is_over_capacity=is_over_capacity,
            remaining_capacity=remaining,
            utilization_band=self.utilization_band(utilization_rate),
            warnings=warnings,
        )

    def utilization_band(self, utilization_rate: float) -> UtilizationBand:
        """Classify a utilization percentage."""
        if utilization_rate > self.OVER_UTILIZATION:
            return UtilizationBand.OVER
        if utilization_rate > self.HIGH_UTILIZATION:
            return UtilizationBand.HIGH
        if utilization_rate >= self.HEALTHY_UTILIZATION:
            return UtilizationBand.HEALTHY
        return UtilizationBand.LOW

    def assignable_items(
        self,
        items: Sequence[WorkItem],
        sprints: Sequence[Sprint],
    ) -> List[WorkItem]:
        """
        Items that may still be planned into a sprint.

        Completed items and items already assigned to an active sprint are
        excluded.
        """
        in_active_sprint = {
            story.id
            for sprint in sprints
            if sprint.status == SprintStatus.ACTIVE
            for story in sprint.assigned_stories
        }
        return [
            item for item in items
            if not item.is_completed and item.id not in in_active_sprint
        ]

    def summarize_team(
        self,
        members: Sequence[TeamMember],
        sprint: Optional[Sprint] = None,
    ) -> TeamCapacitySummary:
        """
        Summarize team capacity, adjusted for each member's availability.

        Args:
            members: Team members with their capacity and current load
            sprint: Optional sprint whose unassigned stories are counted

        Returns:
            TeamCapacitySummary
        """
        total_capacity = sum(m.capacity_points for m in members)
        adjusted_capacity = sum(m.capacity_points * m.availability / 100 for m in members)
        total_assigned = sum(m.points_assigned for m in members)
        utilization_rate = self.percentage(total_assigned, adjusted_capacity)

        unassigned = []
        if sprint is not None:
            unassigned = [s for s in sprint.assigned_stories if not s.assignee_id]

        return TeamCapacitySummary(
            member_count=len(members),
            total_capacity=total_capacity,
            adjusted_capacity=round(adjusted_capacity, 2),
            total_assigned=total_assigned,
            available_capacity=round(adjusted_capacity - total_assigned, 2),
            utilization_rate=round(utilization_rate, 2),
            risk_level=self._team_risk(utilization_rate),
            average_velocity=round(self.safe_mean(m.velocity for m in members), 2),
            average_efficiency=round(self.safe_mean(m.efficiency for m in members), 2),
            unassigned_stories=len(unassigned),
            unassigned_points=sum(s.story_points for s in unassigned),
        )

    def recommend_assignee(
        self,
        item: WorkItem,
        members: Sequence[TeamMember],
    ) -> Optional[TeamMember]:
        """
        Pick the available member whose skills best cover the item.

        Members at or above MAX_ASSIGNEE_LOAD percent of their capacity are
        skipped. Ties go to the member listed first.
        """
        best: Optional[TeamMember] = None
        best_score = -1.0

        for member in members:
            # Zero capacity means no room at all
            if member.capacity_points == 0:
                continue
            if self.percentage(member.points_assigned, member.capacity_points) >= self.MAX_ASSIGNEE_LOAD:
                continue

            score = self.skill_match_score(member, item)
            if score > best_score:
                best, best_score = member, score

        return best

    @staticmethod
    def skill_match_score(member: TeamMember, item: WorkItem) -> float:
        """Percentage of the item's required skills the member has."""
        if not item.required_skills:
            return 100.0
        skills = set(member.skills)
        matching = sum(1 for skill in item.required_skills if skill in skills)
        return matching / len(item.required_skills) * 100.0

    def _team_risk(self, utilization_rate: float) -> CapacityRisk:
        if utilization_rate > self.TEAM_HIGH_RISK:
            return CapacityRisk.HIGH
        if utilization_rate > self.TEAM_MEDIUM_RISK:
            return CapacityRisk.MEDIUM
        return CapacityRisk.LOW

    def _collect_warnings(
        self,
        sprint: Sprint,
        candidate_items: Sequence[WorkItem],
    ) -> List[str]:
        """Problems with the selection other than raw capacity."""
        warnings = []

        if not sprint.accepts_assignments:
            warnings.append(
                f"Sprint {sprint.id} is {sprint.status.value}; its stories can no longer change"
            )

        assigned_ids = {story.id for story in sprint.assigned_stories}
        for item in candidate_items:
            if item.id in assigned_ids:
                warnings.append(f"Story {item.id} is already in sprint {sprint.id}")
            elif item.is_completed:
                warnings.append(f"Story {item.id} is already completed")

        return warnings
