"""
Biometrics API - Readiness, team comparison and recovery signals.

Endpoints:
- POST /api/v1/biometrics/readiness - Readiness breakdown for one record
- POST /api/v1/biometrics/display-readiness - Latest non-zero readiness of a series
- POST /api/v1/biometrics/team-average - Metric mean across a population
- POST /api/v1/biometrics/compare - Athlete vs. everyone else
- POST /api/v1/biometrics/alert - Recovery alert for a series
- POST /api/v1/biometrics/trend - Week-over-week training load trend
- POST /api/v1/biometrics/timeline - Readiness timeline with recovery events
- GET  /api/v1/biometrics/status - Status band for one reading
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from app.services.insights.cohort import compare_to_team, resolve_metric_name, team_average
from app.services.insights.models import (
    ReadinessBreakdown,
    RecoveryAlert,
    TeamComparison,
    TimelinePoint,
    TrainingLoadTrend,
)
from app.services.insights.readiness import create_readiness_scorer
from app.services.insights.signals import generate_alert, metric_status, training_load_trend

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class RecordRequest(BaseModel):
    record: Dict[str, Any] = Field(..., description="One biometric record, any key casing")


class SeriesRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list, description="Biometric records for one athlete")


class TeamAverageRequest(BaseModel):
    metric: str = Field(..., description="Biometric field (e.g., hrv_night)")
    exclude_athlete_id: Optional[str] = Field(None, description="Athlete left out of the average")
    population: List[Dict[str, Any]] = Field(default_factory=list)


class TeamAverageResponse(BaseModel):
    metric: str
    team_average: Optional[float] = Field(None, description="None when no valid record contributes")
    has_data: bool


class CompareRequest(BaseModel):
    metric: str
    athlete_id: str
    population: List[Dict[str, Any]] = Field(default_factory=list)


class DisplayReadinessResponse(BaseModel):
    readiness_score: float


class MetricStatusResponse(BaseModel):
    metric: str
    value: float
    status: str


def _known_metric(metric: str) -> str:
    field = resolve_metric_name(metric)
    if field is None:
        raise HTTPException(status_code=400, detail=f"Unknown biometric metric: {metric}")
    return field


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/readiness", response_model=ReadinessBreakdown)
async def readiness(request: RecordRequest):
    """
    Composite readiness (0-100). ``fields_used`` is empty when the record
    has no usable fields; the score is then 0 and should not be displayed.
    """
    return create_readiness_scorer().score_breakdown(request.record)


@router.post("/display-readiness", response_model=DisplayReadinessResponse)
async def display_readiness(request: SeriesRequest):
    score = create_readiness_scorer().display_readiness(request.records)
    return DisplayReadinessResponse(readiness_score=score)


@router.post("/team-average", response_model=TeamAverageResponse)
async def get_team_average(request: TeamAverageRequest):
    field = _known_metric(request.metric)
    average = team_average(field, request.exclude_athlete_id, request.population)
    return TeamAverageResponse(
        metric=field,
        team_average=round(average, 2) if average is not None else None,
        has_data=average is not None,
    )


@router.post("/compare", response_model=TeamComparison)
async def compare(request: CompareRequest):
    field = _known_metric(request.metric)
    return compare_to_team(field, request.athlete_id, request.population)


@router.post("/alert", response_model=RecoveryAlert)
async def alert(request: SeriesRequest):
    return generate_alert(request.records)


@router.post("/trend", response_model=TrainingLoadTrend)
async def trend(request: SeriesRequest):
    return training_load_trend(request.records)


@router.post("/timeline", response_model=List[TimelinePoint])
async def timeline(request: SeriesRequest):
    return create_readiness_scorer().readiness_timeline(request.records)


@router.get("/status", response_model=MetricStatusResponse)
async def status(
    metric: str = Query(..., description="Biometric field (e.g., spo2_night)"),
    value: float = Query(..., description="Reading to classify"),
):
    field = _known_metric(metric)
    return MetricStatusResponse(metric=field, value=value, status=metric_status(value, field))
