"""
Planwise - Analytics Engine

Pure analyzers over an in-memory collection of work items and sprints:

- PriorityCalculator: Scores and ranks work items, suggests priority tiers
- ConflictDetector: Dependency, resource and deadline conflicts
- CapacityPlanner: Sprint capacity utilization and team capacity
- VelocityCalculator: Velocity, consistency and predictability statistics
"""

from .priority_calculator import PriorityCalculator
from .conflict_detector import ConflictDetector
from .capacity_planner import CapacityPlanner
from .velocity_calculator import VelocityCalculator

__all__ = [
    "PriorityCalculator",
    "ConflictDetector",
    "CapacityPlanner",
    "VelocityCalculator",
]
