"""Glucose prediction from carbs and insulin on board.

A deliberately simple estimate for the dashboard: the full glucose effect
of everything currently on board is added to the current reading. The
future COB/IOB at the horizon is reported alongside for context but does
not change the estimate.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta

from glucosemonitor.core.cob_engine.aggregator import (
    aggregate,
    clamped_quantities,
    minutes_between,
)
from glucosemonitor.core.cob_engine.constants import (
    CONFIDENCE_ENTRY_COUNT,
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    EXTREME_GLUCOSE_CONFIDENCE_FACTOR,
    EXTREME_GLUCOSE_HIGH,
    EXTREME_GLUCOSE_LOW,
    MAX_PREDICTED_GLUCOSE,
    MIN_PREDICTED_GLUCOSE,
    PREDICTION_HORIZON_MINUTES,
    TREND_THRESHOLD,
)
from glucosemonitor.core.cob_engine.enums import GlucoseTrend
from glucosemonitor.core.cob_engine.models import (
    EngineConfig,
    GlucosePrediction,
    LogEntry,
    ensure_utc,
)


def glucose_trend(net_effect: float) -> GlucoseTrend:
    if net_effect > TREND_THRESHOLD:
        return GlucoseTrend.rising
    if net_effect < -TREND_THRESHOLD:
        return GlucoseTrend.falling
    return GlucoseTrend.stable


def prediction_confidence(
    carb_entries: int,
    insulin_entries: int,
    current_glucose: float | None,
) -> float:
    """Confidence in [0.5, 0.9] from data volume and how extreme the reading is."""
    confidence = CONFIDENCE_MEDIUM
    if carb_entries > CONFIDENCE_ENTRY_COUNT or insulin_entries > CONFIDENCE_ENTRY_COUNT:
        confidence = CONFIDENCE_HIGH
    elif carb_entries == 0 and insulin_entries == 0:
        confidence = CONFIDENCE_LOW

    if current_glucose is not None and not (
        EXTREME_GLUCOSE_LOW <= current_glucose <= EXTREME_GLUCOSE_HIGH
    ):
        confidence *= EXTREME_GLUCOSE_CONFIDENCE_FACTOR

    return max(CONFIDENCE_LOW, confidence)


def predict_glucose(
    entries: Sequence[LogEntry],
    config: EngineConfig,
    now: datetime,
    current_glucose: float,
    *,
    horizon_minutes: float = PREDICTION_HORIZON_MINUTES,
) -> GlucosePrediction:
    """Predict glucose once the carbs and insulin on board have acted.

    Args:
        entries: Full current list of log entries.
        config: Engine parameters in effect.
        now: Evaluation instant.
        current_glucose: Latest glucose reading (mmol/L).
        horizon_minutes: Look-ahead used for the reported future COB/IOB.

    Returns:
        GlucosePrediction with the clamped predicted value, trend and
        confidence.
    """
    now = ensure_utc(now)
    cob, iob, _ = aggregate(entries, now, config)
    future_cob, future_iob, _ = aggregate(
        entries, now + timedelta(minutes=horizon_minutes), config
    )

    carb_contribution = cob * config.carb_to_glucose_factor
    insulin_contribution = -iob * config.insulin_to_glucose_factor
    net_effect = carb_contribution + insulin_contribution

    predicted = current_glucose + net_effect
    predicted = max(MIN_PREDICTED_GLUCOSE, min(MAX_PREDICTED_GLUCOSE, predicted))

    # Confidence counts only entries still acting at now
    recent = [
        entry
        for entry in entries
        if 0 <= minutes_between(entry.timestamp, now) < config.max_active_minutes
    ]
    carb_entries = sum(1 for entry in recent if clamped_quantities(entry)[0] > 0)
    insulin_entries = sum(1 for entry in recent if clamped_quantities(entry)[1] > 0)

    return GlucosePrediction(
        current_glucose=current_glucose,
        predicted_glucose=predicted,
        trend=glucose_trend(net_effect),
        confidence=prediction_confidence(carb_entries, insulin_entries, current_glucose),
        carb_contribution=carb_contribution,
        insulin_contribution=insulin_contribution,
        horizon_minutes=horizon_minutes,
        future_cob=future_cob,
        future_iob=future_iob,
    )
