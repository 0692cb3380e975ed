"""
Base Analyzer class for the backlog analytics engine.

Provides the injected clock, day arithmetic, logging and the zero-safe
arithmetic helpers every analyzer relies on.
"""

import math
from abc import ABC, abstractmethod
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Iterable, Optional, Union

from planwise.platform.logging import get_logger

Clock = Callable[[], datetime]

SECONDS_PER_DAY = 86400


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


class AnalyzerBase(ABC):
    """
    Base class for all analyzers.

    Provides:
    - Clock injection so due-date maths is deterministic
    - Common utility methods
    - Logging

    Analyzers hold no state other than their clock, so one instance can be
    shared freely between callers.
    """

    def __init__(self, clock: Optional[Clock] = None):
        """
        Initialize the analyzer.

        Args:
            clock: Callable returning the current datetime. Defaults to UTC now.
        """
        self.clock = clock or utc_now
        self.logger = get_logger(self.__class__.__name__)

    def now(self) -> datetime:
        """Get the current datetime from the injected clock."""
        return self.clock()

    def days_until(
        self,
        target: Optional[Union[datetime, date]],
        now: Optional[datetime] = None,
    ) -> Optional[int]:
        """
        Whole days until a target date, rounded up.

        Returns None when there is no target. Past targets give zero or a
        negative number.
        """
        if target is None:
            return None

        now = now or self.now()
        if not isinstance(target, datetime):
            target = datetime.combine(target, time.min)

        # Compare like with like when only one side carries a timezone
        if target.tzinfo is None and now.tzinfo is not None:
            target = target.replace(tzinfo=now.tzinfo)
        elif target.tzinfo is not None and now.tzinfo is None:
            now = now.replace(tzinfo=target.tzinfo)

        return math.ceil((target - now).total_seconds() / SECONDS_PER_DAY)

    @staticmethod
    def safe_mean(values: Iterable[float]) -> float:
        """Arithmetic mean, 0.0 for an empty collection."""
        values = list(values)
        if not values:
            return 0.0
        return sum(values) / len(values)

    @staticmethod
    def percentage(part: float, whole: float) -> float:
        """part / whole * 100, 0.0 when whole is zero."""
        if not whole:
            return 0.0
        return part / whole * 100.0

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round to the nearest integer with halves going up."""
        return math.floor(value + 0.5)

    @abstractmethod
    def run(self, *args, **kwargs) -> Any:
        """
        Main entry point for the analyzer.

        Must be implemented by subclasses.
        """
