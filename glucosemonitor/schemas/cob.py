"""Carbs/insulin-on-board request and response schemas.

Requests carry the full current list of log entries on every call; the
engine keeps nothing between calls. Responses are rounded for display
(grams to 1 dp, units and glucose to 2 dp).
"""

from datetime import datetime

from pydantic import BaseModel, Field

from glucosemonitor.config import settings
from glucosemonitor.core.cob_engine.constants import PREDICTION_HORIZON_MINUTES
from glucosemonitor.core.cob_engine.enums import CarbsLevel, GlucoseTrend, InsulinPhase
from glucosemonitor.core.cob_engine.models import (
    ActiveEntry,
    COBStatus,
    EntryTimelinePoint,
    GlucosePrediction,
    LogEntry,
    ProjectionPoint,
)

MAX_ENTRIES_PER_REQUEST = 2000


class COBStatusRequest(BaseModel):
    """Request schema for the current COB/IOB status."""

    entries: list[LogEntry] = Field(default_factory=list, max_length=MAX_ENTRIES_PER_REQUEST)
    now: datetime | None = Field(
        default=None,
        description="Evaluation time. Defaults to the server's current UTC time.",
    )


class ProjectionRequest(COBStatusRequest):
    """Request schema for the COB/IOB chart projection."""

    steps: int = Field(
        default_factory=lambda: settings.cob_projection_steps,
        ge=0,
        le=288,
        description="Number of points. Range: 0-288.",
    )
    step_minutes: float = Field(
        default_factory=lambda: settings.cob_projection_step_minutes,
        ge=1,
        le=240,
        description="Minutes between points. Range: 1-240.",
    )


class TimelineRequest(BaseModel):
    """Request schema for a single entry's decay timeline."""

    entry: LogEntry
    step_minutes: float = Field(default=15.0, ge=1, le=240)


class PredictionRequest(COBStatusRequest):
    """Request schema for a glucose prediction."""

    current_glucose: float = Field(
        ge=1.0, le=35.0, description="Latest glucose reading (mmol/L). Range: 1-35."
    )
    horizon_minutes: float = Field(default=PREDICTION_HORIZON_MINUTES, ge=0, le=720)


class ActiveEntryResponse(BaseModel):
    """One entry still contributing to COB or IOB."""

    id: str
    timestamp: datetime
    meal_type: str | None
    comment: str | None
    glucose_value: float | None
    carbs: float
    insulin: float
    elapsed_minutes: float
    carbs_remaining: float
    insulin_remaining: float

    @classmethod
    def from_active(cls, active: ActiveEntry) -> "ActiveEntryResponse":
        entry = active.entry
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            meal_type=entry.meal_type,
            comment=entry.comment,
            glucose_value=entry.glucose_value,
            carbs=entry.carbs,
            insulin=entry.insulin,
            elapsed_minutes=round(active.elapsed_minutes, 1),
            carbs_remaining=round(active.carbs_remaining, 1),
            insulin_remaining=round(active.insulin_remaining, 2),
        )


class COBStatusResponse(BaseModel):
    """Response schema for the current COB/IOB status."""

    evaluated_at: datetime
    current_cob: float
    insulin_on_board: float
    estimated_glucose_impact: float
    time_to_zero: float
    carbs_level: CarbsLevel
    insulin_phase: InsulinPhase
    cob_description: str
    iob_description: str
    active_entries: list[ActiveEntryResponse]

    @classmethod
    def from_status(cls, status: COBStatus) -> "COBStatusResponse":
        return cls(
            evaluated_at=status.evaluated_at,
            current_cob=round(status.current_cob, 1),
            insulin_on_board=round(status.insulin_on_board, 2),
            estimated_glucose_impact=round(status.estimated_glucose_impact, 2),
            time_to_zero=round(status.time_to_zero, 1),
            carbs_level=status.carbs_level,
            insulin_phase=status.insulin_phase,
            cob_description=status.cob_description,
            iob_description=status.iob_description,
            active_entries=[ActiveEntryResponse.from_active(a) for a in status.active_entries],
        )


class ProjectionPointResponse(BaseModel):
    time: datetime
    cob: float
    iob: float

    @classmethod
    def from_point(cls, point: ProjectionPoint) -> "ProjectionPointResponse":
        return cls(time=point.time, cob=round(point.cob, 1), iob=round(point.iob, 2))


class ProjectionResponse(BaseModel):
    """Response schema for the COB/IOB chart projection."""

    step_minutes: float
    points: list[ProjectionPointResponse]


class TimelineResponse(BaseModel):
    """Response schema for a single entry's decay timeline."""

    entry_id: str
    points: list[EntryTimelinePoint]


class GlucosePredictionResponse(BaseModel):
    """Response schema for a glucose prediction."""

    current_glucose: float
    predicted_glucose: float
    trend: GlucoseTrend
    confidence: float
    carb_contribution: float
    insulin_contribution: float
    horizon_minutes: float
    future_cob: float
    future_iob: float
    unit: str = "mmol/L"

    @classmethod
    def from_prediction(cls, prediction: GlucosePrediction) -> "GlucosePredictionResponse":
        return cls(
            current_glucose=prediction.current_glucose,
            predicted_glucose=round(prediction.predicted_glucose, 1),
            trend=prediction.trend,
            confidence=round(prediction.confidence, 2),
            carb_contribution=round(prediction.carb_contribution, 2),
            insulin_contribution=round(prediction.insulin_contribution, 2),
            horizon_minutes=prediction.horizon_minutes,
            future_cob=round(prediction.future_cob, 1),
            future_iob=round(prediction.future_iob, 2),
        )
