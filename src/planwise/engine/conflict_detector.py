"""
Conflict Detector

Scans a backlog for priority conflicts between related items.

Conflict Types:
- Dependency (an item outranks something it depends on)
- Resource (an assignee holds too many high/critical items)
- Deadline (a low priority item is due within a week)

Usage:
    detector = ConflictDetector(clock=lambda: as_of)

    # All conflicts, grouped by item
    conflicts = detector.detect_conflicts(items)

    # Counts by type and severity
    summary = detector.summarize(conflicts)
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .base import AnalyzerBase
from .models import HIGH_PRIORITIES, Priority, WorkItem, priority_rank


class ConflictType(str, Enum):
    """Types of conflicts."""
    DEPENDENCY = "dependency"
    RESOURCE = "resource"
    DEADLINE = "deadline"


class ConflictSeverity(str, Enum):
    """Severity levels for conflicts."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class ConflictRecord:
    """Represents a detected conflict."""
    item_id: str
    conflict_type: ConflictType
    severity: ConflictSeverity
    description: str

    # The other item involved, for dependency conflicts
    related_item_id: Optional[str] = None


@dataclass
class ConflictSummary:
    """Summary of a conflict detection run."""
    total_conflicts: int
    by_type: Dict[str, int] = field(default_factory=dict)
    by_severity: Dict[str, int] = field(default_factory=dict)
    affected_items: List[str] = field(default_factory=list)


class ConflictDetector(AnalyzerBase):
    """
    Detects priority conflicts in a collection of work items.

    Completed items are never reported and do not count toward an
    assignee's load, but they still resolve as dependencies.
    """

    # Other high/critical items an assignee may hold before overload
    OVERLOAD_THRESHOLD = 3

    # Low priority items due within this many days are flagged
    DEADLINE_WARNING_DAYS = 7

    def run(self, items: Sequence[WorkItem]) -> List[ConflictRecord]:
        """Run full conflict detection."""
        return self.detect_conflicts(items)

    def detect_conflicts(
        self,
        items: Sequence[WorkItem],
        now: Optional[datetime] = None,
    ) -> List[ConflictRecord]:
        """
        Detect all types of conflicts.

        Args:
            items: Work items to check
            now: Reference time; defaults to the analyzer clock

        Returns:
            Conflicts grouped by item, in input order
        """
        now = now or self.now()
        by_id: Dict[str, WorkItem] = {item.id: item for item in items}
        high_priority_load = self._count_high_priority_load(items)

        conflicts: List[ConflictRecord] = []
        for item in items:
            if item.is_completed:
                continue
            conflicts.extend(self.detect_dependency_conflicts(item, by_id))
            conflicts.extend(self.detect_resource_conflicts(item, high_priority_load))
            conflicts.extend(self.detect_deadline_conflicts(item, now))

        self.logger.info(
            "Conflict detection complete",
            items=len(items),
            conflicts=len(conflicts),
        )
        return conflicts

    def detect_dependency_conflicts(
        self,
        item: WorkItem,
        by_id: Dict[str, WorkItem],
    ) -> List[ConflictRecord]:
        """
        Flag dependencies ranked below the item that needs them.

        Dependency ids outside the collection are skipped.
        """
        conflicts = []
        for dependency_id in item.dependencies:
            dependency = by_id.get(dependency_id)
            if dependency is None:
                continue

            if priority_rank(item.priority) > priority_rank(dependency.priority):
                label = dependency.title or dependency.id
                conflicts.append(
                    ConflictRecord(
                        item_id=item.id,
                        conflict_type=ConflictType.DEPENDENCY,
                        severity=ConflictSeverity.HIGH,
                        description=f'Story has higher priority than its dependency "{label}"',
                        related_item_id=dependency.id,
                    )
                )
        return conflicts

    def detect_resource_conflicts(
        self,
        item: WorkItem,
        high_priority_load: Dict[str, int],
    ) -> List[ConflictRecord]:
        """Flag a high/critical item whose assignee already holds too many."""
        if not item.assignee_id or item.priority not in HIGH_PRIORITIES:
            return []

        # The load includes this item itself
        others = high_priority_load.get(item.assignee_id, 0) - 1
        if others < self.OVERLOAD_THRESHOLD:
            return []

        return [
            ConflictRecord(
                item_id=item.id,
                conflict_type=ConflictType.RESOURCE,
                severity=ConflictSeverity.MEDIUM,
                description=f"Assignee has too many high-priority stories ({others + 1})",
            )
        ]

    def detect_deadline_conflicts(
        self,
        item: WorkItem,
        now: Optional[datetime] = None,
    ) -> List[ConflictRecord]:
        """Flag a low priority item with an imminent due date."""
        if item.priority != Priority.LOW:
            return []

        days_until = self.days_until(item.due_date, now)
        if days_until is None or days_until > self.DEADLINE_WARNING_DAYS:
            return []

        return [
            ConflictRecord(
                item_id=item.id,
                conflict_type=ConflictType.DEADLINE,
                severity=ConflictSeverity.HIGH,
                description=f"Story has low priority but urgent deadline ({days_until} days)",
            )
        ]

    def summarize(self, conflicts: Sequence[ConflictRecord]) -> ConflictSummary:
        """Count conflicts by type and severity."""
        by_type: Dict[str, int] = defaultdict(int)
        by_severity: Dict[str, int] = defaultdict(int)
        affected: List[str] = []

        for conflict in conflicts:
            by_type[conflict.conflict_type.value] += 1
            by_severity[conflict.severity.value] += 1
            if conflict.item_id not in affected:
                affected.append(conflict.item_id)

        return ConflictSummary(
            total_conflicts=len(conflicts),
            by_type=dict(by_type),
            by_severity=dict(by_severity),
            affected_items=affected,
        )

    def _count_high_priority_load(self, items: Sequence[WorkItem]) -> Dict[str, int]:
        """Open high/critical items per assignee."""
        load: Dict[str, int] = defaultdict(int)
        for item in items:
            if item.is_completed or not item.assignee_id:
                continue
            if item.priority in HIGH_PRIORITIES:
                load[item.assignee_id] += 1
        return dict(load)
