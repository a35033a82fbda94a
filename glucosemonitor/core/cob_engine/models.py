"""COB/IOB engine models.

Pure data models for the carbs/insulin-on-board engine. No database, no
HTTP. Everything is frozen: entries are a read-only snapshot for the
duration of a call, and derived values are recomputed on every call.
"""

from datetime import UTC, datetime
from typing import NamedTuple, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from glucosemonitor.core.cob_engine.constants import (
    MAX_DURATION_MINUTES,
    MAX_GLUCOSE_FACTOR,
)
from glucosemonitor.core.cob_engine.enums import (
    CarbsLevel,
    DecayCurve,
    GlucoseTrend,
    InsulinPhase,
)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class LogEntry(BaseModel):
    """One logged meal and/or insulin dose.

    Owned by the notes collaborator. Quantities are expected to be
    non-negative; negative values are clamped to zero by the aggregator
    rather than rejected here, so one bad note cannot blank the dashboard.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    timestamp: datetime
    carbs: float = Field(default=0.0, allow_inf_nan=False, description="Grams.")
    insulin: float = Field(default=0.0, allow_inf_nan=False, description="Units.")
    meal_type: str | None = Field(
        default=None,
        max_length=50,
        description="Breakfast, Lunch, Dinner, Snack, Correction, ...",
    )
    comment: str | None = None
    glucose_value: float | None = None

    @field_validator("timestamp")
    @classmethod
    def normalize_to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class EngineConfig(BaseModel):
    """Tunable model parameters for the COB/IOB engine.

    Exactly one instance is in effect at a time (see
    glucosemonitor.services.cob_settings). Durations and peaks are in
    minutes; the glucose factors convert grams / units into glucose units
    (mmol/L in this deployment).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    carb_absorption_minutes: float = Field(
        default=240.0,
        gt=0,
        le=MAX_DURATION_MINUTES,
        description=f"Total carb absorption time. Range: (0, {MAX_DURATION_MINUTES:g}].",
    )
    insulin_action_minutes: float = Field(
        default=240.0,
        gt=0,
        le=MAX_DURATION_MINUTES,
        description=f"Duration of insulin action. Range: (0, {MAX_DURATION_MINUTES:g}].",
    )
    carb_peak_minutes: float = Field(
        default=45.0,
        gt=0,
        le=MAX_DURATION_MINUTES,
        description="Time to peak carb absorption. Must be below carb_absorption_minutes.",
    )
    insulin_peak_minutes: float = Field(
        default=75.0,
        gt=0,
        le=MAX_DURATION_MINUTES,
        description="Time to peak insulin activity. Must be below insulin_action_minutes.",
    )
    carb_to_glucose_factor: float = Field(
        default=0.2,
        gt=0,
        le=MAX_GLUCOSE_FACTOR,
        description="Glucose rise per gram of carbohydrate on board.",
    )
    insulin_to_glucose_factor: float = Field(
        default=1.0,
        gt=0,
        le=MAX_GLUCOSE_FACTOR,
        description="Glucose drop per unit of insulin on board (ISF).",
    )
    carb_curve: DecayCurve = DecayCurve.bilinear
    insulin_curve: DecayCurve = DecayCurve.exponential

    @model_validator(mode="after")
    def check_peaks_within_duration(self) -> Self:
        """Each peak must fall strictly inside its active duration."""
        if self.carb_peak_minutes >= self.carb_absorption_minutes:
            msg = "carb_peak_minutes must be less than carb_absorption_minutes"
            raise ValueError(msg)
        if self.insulin_peak_minutes >= self.insulin_action_minutes:
            msg = "insulin_peak_minutes must be less than insulin_action_minutes"
            raise ValueError(msg)
        return self

    @property
    def max_active_minutes(self) -> float:
        """Age at which an entry is expired on both axes."""
        return max(self.carb_absorption_minutes, self.insulin_action_minutes)


class EngineConfigUpdate(BaseModel):
    """Partial engine configuration update.

    All fields are optional -- only provided fields are changed. Bounds are
    checked against the merged result by the config store, so a rejected
    update never leaves a half-applied configuration behind.
    """

    model_config = ConfigDict(extra="forbid")

    carb_absorption_minutes: float | None = None
    insulin_action_minutes: float | None = None
    carb_peak_minutes: float | None = None
    insulin_peak_minutes: float | None = None
    carb_to_glucose_factor: float | None = None
    insulin_to_glucose_factor: float | None = None
    carb_curve: DecayCurve | None = None
    insulin_curve: DecayCurve | None = None


class ActiveEntry(BaseModel):
    """An entry still contributing at the evaluation instant."""

    model_config = ConfigDict(frozen=True)

    entry: LogEntry
    elapsed_minutes: float
    carbs_remaining: float
    insulin_remaining: float


class Aggregate(NamedTuple):
    """Combined remaining amounts of all entries at one instant."""

    carbs_remaining: float
    insulin_remaining: float
    active_entries: list[ActiveEntry]


class COBStatus(BaseModel):
    """Current carbs/insulin-on-board snapshot."""

    model_config = ConfigDict(frozen=True)

    evaluated_at: datetime
    current_cob: float
    insulin_on_board: float
    active_entries: list[ActiveEntry] = Field(default_factory=list)
    estimated_glucose_impact: float
    time_to_zero: float = Field(ge=0, description="Minutes until COB and IOB reach zero.")
    carbs_level: CarbsLevel
    insulin_phase: InsulinPhase
    cob_description: str
    iob_description: str


class ProjectionPoint(BaseModel):
    """Projected COB/IOB at one future instant."""

    model_config = ConfigDict(frozen=True)

    time: datetime
    cob: float
    iob: float


class EntryTimelinePoint(BaseModel):
    """One step of a single entry's decay timeline."""

    model_config = ConfigDict(frozen=True)

    time: datetime
    elapsed_minutes: float
    carbs_remaining: float
    insulin_remaining: float
    carbs_percent: float = Field(ge=0, le=100)
    insulin_percent: float = Field(ge=0, le=100)
    is_insulin_peak: bool = False


class GlucosePrediction(BaseModel):
    """Estimated glucose after the on-board carbs and insulin act."""

    model_config = ConfigDict(frozen=True)

    current_glucose: float
    predicted_glucose: float
    trend: GlucoseTrend
    confidence: float = Field(ge=0, le=1)
    carb_contribution: float
    insulin_contribution: float
    horizon_minutes: float
    future_cob: float
    future_iob: float
