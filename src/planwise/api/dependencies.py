from planwise.engine import (
    CapacityPlanner,
    ConflictDetector,
    PriorityCalculator,
    VelocityCalculator,
)
from planwise.engine.base import Clock, utc_now


# Analyzers are stateless apart from the clock, so one instance serves every request
_priority_calculator = PriorityCalculator()
_conflict_detector = ConflictDetector()
_capacity_planner = CapacityPlanner()
_velocity_calculator = VelocityCalculator()


def get_clock() -> Clock:
    return utc_now


def get_priority_calculator() -> PriorityCalculator:
    return _priority_calculator


def get_conflict_detector() -> ConflictDetector:
    return _conflict_detector


def get_capacity_planner() -> CapacityPlanner:
    return _capacity_planner


def get_velocity_calculator() -> VelocityCalculator:
    return _velocity_calculator
