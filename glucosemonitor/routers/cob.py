"""Carbs/insulin-on-board router.

The dashboard posts its full current list of notes on every refresh (on
a timer and after every note change) and gets back freshly computed
values. Nothing is stored between calls.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from glucosemonitor.core.cob_engine import (
    compute_status,
    entry_timeline,
    predict_glucose,
    project,
)
from glucosemonitor.logging_config import get_logger
from glucosemonitor.schemas.cob import (
    COBStatusRequest,
    COBStatusResponse,
    GlucosePredictionResponse,
    PredictionRequest,
    ProjectionPointResponse,
    ProjectionRequest,
    ProjectionResponse,
    TimelineRequest,
    TimelineResponse,
)
from glucosemonitor.services.cob_settings import ConfigStore, get_config_store

logger = get_logger(__name__)

router = APIRouter(prefix="/api/cob", tags=["cob"])


def _evaluation_time(requested: datetime | None) -> datetime:
    return requested if requested is not None else datetime.now(UTC)


@router.post(
    "/status",
    response_model=COBStatusResponse,
    responses={422: {"description": "Invalid request body"}},
)
async def get_cob_status(
    body: COBStatusRequest,
    store: ConfigStore = Depends(get_config_store),
) -> COBStatusResponse:
    """Current carbs and insulin on board for the supplied entries."""
    status = compute_status(body.entries, store.get_config(), _evaluation_time(body.now))
    return COBStatusResponse.from_status(status)


@router.post(
    "/projection",
    response_model=ProjectionResponse,
    responses={422: {"description": "Invalid request body"}},
)
async def get_cob_projection(
    body: ProjectionRequest,
    store: ConfigStore = Depends(get_config_store),
) -> ProjectionResponse:
    """COB/IOB at fixed steps from now, for the dashboard chart.

    The default of 24 steps of 15 minutes covers the next six hours.
    """
    points = project(
        body.entries,
        store.get_config(),
        _evaluation_time(body.now),
        steps=body.steps,
        step_minutes=body.step_minutes,
    )
    return ProjectionResponse(
        step_minutes=body.step_minutes,
        points=[ProjectionPointResponse.from_point(p) for p in points],
    )


@router.post("/timeline", response_model=TimelineResponse)
async def get_entry_timeline(
    body: TimelineRequest,
    store: ConfigStore = Depends(get_config_store),
) -> TimelineResponse:
    """Decay timeline of a single entry over its active lifetime."""
    points = entry_timeline(body.entry, store.get_config(), step_minutes=body.step_minutes)
    return TimelineResponse(entry_id=body.entry.id, points=points)


@router.post("/prediction", response_model=GlucosePredictionResponse)
async def get_glucose_prediction(
    body: PredictionRequest,
    store: ConfigStore = Depends(get_config_store),
) -> GlucosePredictionResponse:
    """Glucose estimate once the carbs and insulin on board have acted."""
    prediction = predict_glucose(
        body.entries,
        store.get_config(),
        _evaluation_time(body.now),
        body.current_glucose,
        horizon_minutes=body.horizon_minutes,
    )
    logger.debug(
        "Computed glucose prediction",
        predicted=round(prediction.predicted_glucose, 1),
        trend=prediction.trend,
    )
    return GlucosePredictionResponse.from_prediction(prediction)
