"""
Velocity Calculator

Team velocity statistics over a history of completed sprints.

Metrics Tracked:
- Average, median and range of completed points
- Trend (last 3 sprints vs. the rest)
- Consistency (coefficient of variation based)
- Predictability (share of sprints within 20% of the mean)
- Recommended capacity for the next sprint
- Completion rate (completed vs committed points)

Usage:
    calculator = VelocityCalculator()

    metrics = calculator.analyze(sprints)
    metrics = calculator.analyze(sprints, start=date(2026, 1, 1))
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from statistics import pstdev
from typing import List, Optional, Sequence, Tuple

from .base import AnalyzerBase
from .models import Sprint, SprintStatus


class VelocityTrend(str, Enum):
    """Direction of recent velocity."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass
class VelocityRange:
    min: float = 0.0
    max: float = 0.0


@dataclass
class VelocityMetrics:
    """Velocity statistics for a sprint history."""
    sprint_count: int = 0

    # Core metrics
    average_velocity: float = 0.0
    median_velocity: float = 0.0
    velocity_range: VelocityRange = field(default_factory=VelocityRange)

    # Trend
    trend: VelocityTrend = VelocityTrend.STABLE
    trend_percentage: float = 0.0

    # Stability, percentages 0-100
    consistency: float = 0.0
    predictability: float = 0.0
    completion_rate: float = 0.0

    # Planning
    recommended_capacity: int = 0

    analysis: str = ""
    recommendations: List[str] = field(default_factory=list)


class VelocityCalculator(AnalyzerBase):
    """
    Calculates velocity statistics from completed sprints.

    Metrics are recomputed on every call; nothing is cached between calls.
    """

    # Number of latest sprints compared against the rest for the trend
    RECENT_SPRINTS = 3

    # Recent mean must move more than 10% off the older mean to count as a trend
    IMPROVING_RATIO = 1.1
    DECLINING_RATIO = 0.9

    # Sprints within this fraction of the mean count as predictable
    PREDICTABILITY_BAND = 0.2

    # Safety margin applied to the average for next-sprint planning
    CAPACITY_SAFETY_FACTOR = 0.85

    # Recommendation thresholds (percent)
    LOW_CONSISTENCY = 60
    LOW_PREDICTABILITY = 70
    LOW_COMPLETION_RATE = 80
    GOOD_CONSISTENCY = 70
    HIGH_CONSISTENCY = 80

    def run(self, sprints: Sequence[Sprint]) -> VelocityMetrics:
        """Analyze a sprint history."""
        return self.analyze(sprints)

    def analyze(
        self,
        sprints: Sequence[Sprint],
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> VelocityMetrics:
        """
        Calculate velocity metrics.

        Args:
            sprints: Sprint history, oldest first
            start: Only include sprints ending on or after this date
            end: Only include sprints ending on or before this date

        Returns:
            VelocityMetrics; all zeros with a stable trend when no completed
            sprint qualifies
        """
        history = self._select_sprints(sprints, start, end)
        if not history:
            self.logger.debug("No completed sprints to analyze", received=len(sprints))
            return VelocityMetrics(analysis="No completed sprints to analyze")

        velocities = [s.completed_points for s in history]
        average = self.safe_mean(velocities)

        trend, trend_percentage = self._calculate_trend(velocities)
        consistency = self._calculate_consistency(velocities, average)
        predictability = self._calculate_predictability(velocities, average)

        committed = [s for s in history if s.committed_points > 0]
        completion_rate = self.safe_mean(
            self.percentage(s.completed_points, s.committed_points) for s in committed
        )

        metrics = VelocityMetrics(
            sprint_count=len(history),
            average_velocity=round(average, 2),
            median_velocity=self.median(velocities),
            velocity_range=VelocityRange(min=min(velocities), max=max(velocities)),
            trend=trend,
            trend_percentage=round(trend_percentage, 2),
            consistency=round(consistency, 2),
            predictability=round(predictability, 2),
            completion_rate=round(completion_rate, 2),
            recommended_capacity=self.round_half_up(average * self.CAPACITY_SAFETY_FACTOR),
        )
        metrics.analysis = self._describe(metrics)
        metrics.recommendations = self._recommend(metrics, has_commitments=bool(committed))

        self.logger.info(
            "Velocity analyzed",
            sprints=metrics.sprint_count,
            average=metrics.average_velocity,
            trend=metrics.trend.value,
        )
        return metrics

    @staticmethod
    def median(values: Sequence[float]) -> float:
        """
        Middle value after sorting.

        Even-length series take the upper of the two middle values rather than
        their average.
        """
        if not values:
            return 0.0
        ordered = sorted(values)
        return ordered[len(ordered) // 2]

    def _select_sprints(
        self,
        sprints: Sequence[Sprint],
        start: Optional[date],
        end: Optional[date],
    ) -> List[Sprint]:
        """Completed sprints in range, oldest first."""
        history = [s for s in sprints if s.status == SprintStatus.COMPLETED]

        if start or end:
            history = [
                s for s in history
                if s.end_date is not None
                and (start is None or s.end_date >= start)
                and (end is None or s.end_date <= end)
            ]

        # Keep caller order unless every sprint can be placed by date
        if history and all(s.start_date for s in history):
            history = sorted(history, key=lambda s: s.start_date)

        return history

    def _calculate_trend(self, velocities: List[float]) -> Tuple[VelocityTrend, float]:
        """
        Compare the recent sprints with the older ones.

        Without an older baseline the trend is stable.
        """
        recent = velocities[-self.RECENT_SPRINTS:]
        older = velocities[:-self.RECENT_SPRINTS]
        if not older:
            return VelocityTrend.STABLE, 0.0

        recent_avg = self.safe_mean(recent)
        older_avg = self.safe_mean(older)
        trend_percentage = self.percentage(recent_avg - older_avg, older_avg)

        if recent_avg > older_avg * self.IMPROVING_RATIO:
            return VelocityTrend.IMPROVING, trend_percentage
        if recent_avg < older_avg * self.DECLINING_RATIO:
            return VelocityTrend.DECLINING, trend_percentage
        return VelocityTrend.STABLE, trend_percentage

    def _calculate_consistency(self, velocities: List[float], average: float) -> float:
        """100 x (1 - stddev / mean), never below zero."""
        if average <= 0:
            return 0.0
        return max(0.0, 100.0 * (1 - pstdev(velocities) / average))

    def _calculate_predictability(self, velocities: List[float], average: float) -> float:
        """Percentage of sprints within the band around the mean."""
        tolerance = average * self.PREDICTABILITY_BAND
        within = sum(1 for v in velocities if abs(v - average) <= tolerance)
        return self.percentage(within, len(velocities))

    def _describe(self, metrics: VelocityMetrics) -> str:
        if metrics.trend == VelocityTrend.IMPROVING:
            if metrics.consistency >= self.GOOD_CONSISTENCY:
                return "Excellent performance with consistent improvement"
            return "Good improvement trend, focus on consistency"
        if metrics.trend == VelocityTrend.DECLINING:
            return "Performance declining, investigate root causes"
        if metrics.consistency >= self.HIGH_CONSISTENCY:
            return "Stable performance, maintain current practices"
        return "Variable performance, improve predictability"

    def _recommend(self, metrics: VelocityMetrics, has_commitments: bool) -> List[str]:
        recommendations = []

        if metrics.trend == VelocityTrend.DECLINING:
            recommendations.append("Analyze recent sprints to identify performance issues")
            recommendations.append("Consider adjusting sprint commitments or team capacity")

        if metrics.consistency < self.LOW_CONSISTENCY:
            recommendations.append("Focus on improving story estimation accuracy")
            recommendations.append("Reduce scope changes during sprints")

        if metrics.predictability < self.LOW_PREDICTABILITY:
            recommendations.append("Work on more consistent velocity across sprints")
            recommendations.append("Address factors causing velocity fluctuations")

        if has_commitments and metrics.completion_rate < self.LOW_COMPLETION_RATE:
            recommendations.append("Commit to less work until completion rate recovers")
            recommendations.append("Review work allocation and team workload")

        if not recommendations:
            recommendations.append("Maintain current performance and continue monitoring")
            recommendations.append("Share best practices with other teams")

        return recommendations
