"""
Analytics API endpoints.

Endpoints:
- POST /api/v1/analytics/score - Ranked priority scores
- POST /api/v1/analytics/suggestions - Suggested priority changes
- POST /api/v1/analytics/conflicts - Priority conflicts
- POST /api/v1/analytics/capacity - Sprint capacity for a story selection
- POST /api/v1/analytics/team-capacity - Team capacity summary
- POST /api/v1/analytics/velocity - Velocity statistics

Every endpoint computes its result from the request body alone.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, status
from prometheus_client import Counter

from planwise.api import schemas
from planwise.api.dependencies import (
    get_capacity_planner,
    get_clock,
    get_conflict_detector,
    get_priority_calculator,
    get_velocity_calculator,
)
from planwise.engine import (
    CapacityPlanner,
    ConflictDetector,
    PriorityCalculator,
    VelocityCalculator,
)
from planwise.engine.base import Clock
from planwise.platform.logging import bind_analysis_context, get_logger

logger = get_logger(__name__)
router = APIRouter()

ANALYSIS_REQUESTS = Counter(
    "planwise_analysis_requests_total",
    "Analytics requests by operation and outcome",
    ["operation", "outcome"],
)


def _failed(operation: str, error: Exception) -> HTTPException:
    ANALYSIS_REQUESTS.labels(operation=operation, outcome="error").inc()
    logger.error("Analysis failed", operation=operation, error=str(error), exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to compute {operation}: {error}",
    )


@router.post("/score", response_model=List[schemas.PriorityScoreResponse])
def score_items(
    request: schemas.ItemsRequest,
    calculator: Annotated[PriorityCalculator, Depends(get_priority_calculator)],
    clock: Annotated[Clock, Depends(get_clock)],
):
    """
    Score and rank the open work items, highest score first.
    """
    bind_analysis_context("score", items=len(request.items))
    try:
        scores = calculator.rank_items(request.items, request.as_of or clock())
    except Exception as e:
        raise _failed("score", e)

    ANALYSIS_REQUESTS.labels(operation="score", outcome="ok").inc()
    return scores


@router.post("/suggestions", response_model=List[schemas.PrioritySuggestionResponse])
def suggest_priorities(
    request: schemas.ItemsRequest,
    calculator: Annotated[PriorityCalculator, Depends(get_priority_calculator)],
    clock: Annotated[Clock, Depends(get_clock)],
):
    """
    Suggest priority changes for items whose score disagrees with their tier.
    """
    bind_analysis_context("suggestions", items=len(request.items))
    try:
        suggestions = calculator.suggest_priorities(request.items, request.as_of or clock())
    except Exception as e:
        raise _failed("suggestions", e)

    ANALYSIS_REQUESTS.labels(operation="suggestions", outcome="ok").inc()
    return suggestions


@router.post("/conflicts", response_model=schemas.ConflictReportResponse)
def detect_conflicts(
    request: schemas.ItemsRequest,
    detector: Annotated[ConflictDetector, Depends(get_conflict_detector)],
    clock: Annotated[Clock, Depends(get_clock)],
):
    """
    Detect dependency, resource and deadline conflicts.
    """
    bind_analysis_context("conflicts", items=len(request.items))
    try:
        conflicts = detector.detect_conflicts(request.items, request.as_of or clock())
        summary = detector.summarize(conflicts)
    except Exception as e:
        raise _failed("conflicts", e)

    ANALYSIS_REQUESTS.labels(operation="conflicts", outcome="ok").inc()
    return schemas.ConflictReportResponse(
        conflicts=[schemas.ConflictResponse.model_validate(c) for c in conflicts],
        total_conflicts=summary.total_conflicts,
        by_type=summary.by_type,
        by_severity=summary.by_severity,
    )


@router.post("/capacity", response_model=schemas.CapacityMetricsResponse)
def plan_capacity(
    request: schemas.CapacityRequest,
    planner: Annotated[CapacityPlanner, Depends(get_capacity_planner)],
):
    """
    Capacity of a sprint if the candidate items were added.

    The sprint is not changed; committing the selection is a separate call.
    """
    bind_analysis_context(
        "capacity", sprint_id=request.sprint.id, candidates=len(request.candidate_items)
    )
    try:
        metrics = planner.plan_capacity(request.sprint, request.candidate_items)
    except Exception as e:
        raise _failed("capacity", e)

    ANALYSIS_REQUESTS.labels(operation="capacity", outcome="ok").inc()
    return metrics


@router.post("/team-capacity", response_model=schemas.TeamCapacityResponse)
def team_capacity(
    request: schemas.TeamCapacityRequest,
    planner: Annotated[CapacityPlanner, Depends(get_capacity_planner)],
):
    """
    Availability-adjusted capacity and risk for a team.
    """
    bind_analysis_context("team-capacity", members=len(request.members))
    try:
        summary = planner.summarize_team(request.members, request.sprint)
    except Exception as e:
        raise _failed("team-capacity", e)

    ANALYSIS_REQUESTS.labels(operation="team-capacity", outcome="ok").inc()
    return summary


@router.post("/velocity", response_model=schemas.VelocityMetricsResponse)
def analyze_velocity(
    request: schemas.VelocityRequest,
    calculator: Annotated[VelocityCalculator, Depends(get_velocity_calculator)],
):
    """
    Velocity statistics over the completed sprints in the request.
    """
    bind_analysis_context("velocity", sprints=len(request.sprints))

    if request.start and request.end and request.end < request.start:
        raise HTTPException(
            status_code=422,
            detail="end must not be before start",
        )

    try:
        metrics = calculator.analyze(request.sprints, request.start, request.end)
    except Exception as e:
        raise _failed("velocity", e)

    ANALYSIS_REQUESTS.labels(operation="velocity", outcome="ok").inc()
    return metrics
