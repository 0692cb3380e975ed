"""
Priority Calculator

Calculates an urgency score for each work item from additive factors:
- Priority tier (rank x 10)
- Business value (x 2)
- Size (story points, capped at 13)
- Due date proximity (+15 / +10 / +5)
- Blocked status (+20)
- Open blockers (-10)

The score maps back to a suggested priority tier through fixed thresholds.

Usage:
    calculator = PriorityCalculator(clock=lambda: as_of)

    # Score a single item
    score = calculator.score(item)

    # Rank the open backlog and propose tier changes
    ranked = calculator.rank_items(items)
    suggestions = calculator.suggest_priorities(items)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .base import AnalyzerBase
from .models import ItemStatus, Priority, WorkItem, priority_rank


@dataclass
class PriorityComponents:
    """Breakdown of priority score components."""
    item_id: str
    base_score: float
    business_value_score: float
    size_score: float
    due_date_score: float
    blocked_status_score: float
    blocker_penalty: float
    total_score: float


@dataclass
class PriorityScore:
    """Score of one work item with the tier it suggests."""
    item_id: str
    score: float
    suggested_priority: Priority


@dataclass
class PrioritySuggestion:
    """A proposed tier change for an item whose score disagrees with its priority."""
    item_id: str
    current_priority: Priority
    suggested_priority: Priority
    score: float
    reason: str
    confidence: str  # 'high', 'medium', 'low'


class PriorityCalculator(AnalyzerBase):
    """
    Calculates priority scores for work items.

    Priority Score Formula:
    ```
    score = rank(priority) * 10
          + business_value * 2
          + min(story_points, 13)
          + due_date_urgency
          + 20 if status == blocked
          - 10 if blocked_by is non-empty
    ```

    The tier thresholds are fixed constants and are not configurable.
    """

    RANK_MULTIPLIER = 10
    BUSINESS_VALUE_MULTIPLIER = 2

    # Size contribution is capped at the largest common estimate
    MAX_SIZE_CONTRIBUTION = 13

    # (days until due, bonus) checked in order
    DUE_DATE_BONUSES = (
        (7, 15),
        (14, 10),
        (30, 5),
    )

    BLOCKED_STATUS_BONUS = 20
    BLOCKER_PENALTY = 10

    # (minimum score, tier) checked in order
    TIER_THRESHOLDS = (
        (60, Priority.CRITICAL),
        (45, Priority.HIGH),
        (30, Priority.MEDIUM),
    )

    SUGGESTION_REASONS = {
        Priority.CRITICAL: ("High business value, urgent due date, or blocked status", "high"),
        Priority.HIGH: ("High story points or approaching deadline", "medium"),
        Priority.MEDIUM: ("Medium complexity and business value", "medium"),
        Priority.LOW: ("Lower urgency, can be scheduled later", "low"),
    }

    def run(self, items: Sequence[WorkItem]) -> List[PriorityScore]:
        """Rank the open items of a backlog."""
        return self.rank_items(items)

    def score(self, item: WorkItem, now: Optional[datetime] = None) -> float:
        """Calculate the priority score of a single item."""
        return self.score_breakdown(item, now).total_score

    def score_breakdown(
        self,
        item: WorkItem,
        now: Optional[datetime] = None,
    ) -> PriorityComponents:
        """
        Calculate every additive term of an item's score.

        Args:
            item: Work item to score
            now: Reference time; defaults to the analyzer clock

        Returns:
            PriorityComponents whose total is the item's score
        """
        base_score = priority_rank(item.priority) * self.RANK_MULTIPLIER

        business_value_score = 0.0
        if item.business_value is not None:
            business_value_score = item.business_value * self.BUSINESS_VALUE_MULTIPLIER

        size_score = min(item.story_points, self.MAX_SIZE_CONTRIBUTION)

        due_date_score = self._calculate_due_date_score(item, now)

        blocked_status_score = 0
        if item.status == ItemStatus.BLOCKED:
            blocked_status_score = self.BLOCKED_STATUS_BONUS

        # Items waiting on others cannot start yet
        blocker_penalty = self.BLOCKER_PENALTY if item.blocked_by else 0

        total_score = (
            base_score
            + business_value_score
            + size_score
            + due_date_score
            + blocked_status_score
            - blocker_penalty
        )

        return PriorityComponents(
            item_id=item.id,
            base_score=base_score,
            business_value_score=business_value_score,
            size_score=size_score,
            due_date_score=due_date_score,
            blocked_status_score=blocked_status_score,
            blocker_penalty=blocker_penalty,
            total_score=total_score,
        )

    def suggest_priority(self, score: float) -> Priority:
        """Map a score to its suggested tier."""
        for threshold, tier in self.TIER_THRESHOLDS:
            if score >= threshold:
                return tier
        return Priority.LOW

    def rank_items(
        self,
        items: Sequence[WorkItem],
        now: Optional[datetime] = None,
    ) -> List[PriorityScore]:
        """
        Score every open item and order them by descending score.

        Completed items are left out. The sort is stable, so equal scores keep
        their input order.
        """
        now = now or self.now()

        scores = []
        for item in items:
            if item.is_completed:
                continue
            score = self.score(item, now)
            scores.append(
                PriorityScore(
                    item_id=item.id,
                    score=score,
                    suggested_priority=self.suggest_priority(score),
                )
            )

        scores.sort(key=lambda s: s.score, reverse=True)

        self.logger.debug("Ranked work items", count=len(scores))
        return scores

    def suggest_priorities(
        self,
        items: Sequence[WorkItem],
        now: Optional[datetime] = None,
    ) -> List[PrioritySuggestion]:
        """
        Propose tier changes for items whose score disagrees with their priority.

        Args:
            items: Backlog items
            now: Reference time; defaults to the analyzer clock

        Returns:
            Suggestions in ranking order
        """
        by_id: Dict[str, WorkItem] = {item.id: item for item in items}
        suggestions = []

        for ranked in self.rank_items(items, now):
            current = by_id[ranked.item_id].priority
            if current == ranked.suggested_priority:
                continue

            reason, confidence = self.SUGGESTION_REASONS[ranked.suggested_priority]
            suggestions.append(
                PrioritySuggestion(
                    item_id=ranked.item_id,
                    current_priority=current,
                    suggested_priority=ranked.suggested_priority,
                    score=ranked.score,
                    reason=reason,
                    confidence=confidence,
                )
            )

        self.logger.info(
            "Priority suggestions generated",
            items=len(items),
            suggestions=len(suggestions),
        )
        return suggestions

    def get_score_summary(
        self,
        items: Sequence[WorkItem],
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Min/max/average score of the open items, for dashboard headers."""
        scores = [s.score for s in self.rank_items(items, now)]
        if not scores:
            return {'count': 0, 'min_score': 0.0, 'max_score': 0.0, 'avg_score': 0.0}

        return {
            'count': len(scores),
            'min_score': min(scores),
            'max_score': max(scores),
            'avg_score': round(self.safe_mean(scores), 2),
        }

    def _calculate_due_date_score(
        self,
        item: WorkItem,
        now: Optional[datetime],
    ) -> float:
        """
        Calculate the bonus for an approaching due date.

        Overdue items fall in the most urgent bucket.
        """
        days_until = self.days_until(item.due_date, now)
        if days_until is None:
            return 0

        for max_days, bonus in self.DUE_DATE_BONUSES:
            if days_until <= max_days:
                return bonus
        return 0
