"""Current COB/IOB status.

Builds the dashboard snapshot: carbs and insulin on board, the entries
still contributing, the net glucose impact, and how long until everything
has cleared.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from glucosemonitor.core.cob_engine.aggregator import (
    aggregate,
    clamped_quantities,
    is_malformed,
    minutes_between,
)
from glucosemonitor.core.cob_engine.constants import (
    INSULIN_PEAK_WINDOW_MINUTES,
    LOW_COB_GRAMS,
    MODERATE_COB_GRAMS,
)
from glucosemonitor.core.cob_engine.enums import CarbsLevel, InsulinPhase
from glucosemonitor.core.cob_engine.models import (
    COBStatus,
    EngineConfig,
    LogEntry,
    ensure_utc,
)
from glucosemonitor.logging_config import get_logger

logger = get_logger(__name__)

_COB_DESCRIPTIONS: dict[CarbsLevel, str] = {
    CarbsLevel.none: "No carbs on board",
    CarbsLevel.low: "Low carbs on board",
    CarbsLevel.moderate: "Moderate carbs on board",
    CarbsLevel.high: "High carbs on board",
}

_PHASE_LABELS: dict[InsulinPhase, str] = {
    InsulinPhase.rising: "Insulin rising",
    InsulinPhase.peak: "Insulin at peak",
    InsulinPhase.falling: "Insulin falling",
}


def estimated_glucose_impact(cob: float, iob: float, config: EngineConfig) -> float:
    """Net glucose effect: carbs push up, insulin pushes down."""
    return cob * config.carb_to_glucose_factor - iob * config.insulin_to_glucose_factor


def time_to_zero(
    entries: Sequence[LogEntry],
    config: EngineConfig,
    now: datetime,
) -> float:
    """Minutes until both COB and IOB reach zero with no new entries.

    Closed form: every curve is exactly zero at the end of its duration, so
    each started entry clears ``duration - elapsed`` minutes from now on each
    axis it carries a quantity for. The answer is the latest of these.
    Entries logged after ``now`` are not counted.
    """
    now = ensure_utc(now)
    remaining = 0.0
    for entry in entries:
        elapsed = minutes_between(entry.timestamp, now)
        if elapsed < 0:
            continue
        carbs, insulin = clamped_quantities(entry)
        if carbs > 0:
            remaining = max(remaining, config.carb_absorption_minutes - elapsed)
        if insulin > 0:
            remaining = max(remaining, config.insulin_action_minutes - elapsed)
    return remaining


def carbs_level(cob: float) -> CarbsLevel:
    """Bucket a COB amount (grams) for the status badge."""
    if cob <= 0:
        return CarbsLevel.none
    if cob < LOW_COB_GRAMS:
        return CarbsLevel.low
    if cob < MODERATE_COB_GRAMS:
        return CarbsLevel.moderate
    return CarbsLevel.high


def insulin_phase(
    entries: Sequence[LogEntry],
    config: EngineConfig,
    now: datetime,
    iob: float,
) -> InsulinPhase:
    """Activity phase of the most recent insulin dose at ``now``."""
    if iob <= 0:
        return InsulinPhase.none

    now = ensure_utc(now)
    latest: LogEntry | None = None
    for entry in entries:
        if clamped_quantities(entry)[1] <= 0 or entry.timestamp > now:
            continue
        if latest is None or entry.timestamp > latest.timestamp:
            latest = entry

    if latest is None:
        return InsulinPhase.none

    elapsed = minutes_between(latest.timestamp, now)
    if elapsed < config.insulin_peak_minutes - INSULIN_PEAK_WINDOW_MINUTES:
        return InsulinPhase.rising
    if elapsed < config.insulin_peak_minutes + INSULIN_PEAK_WINDOW_MINUTES:
        return InsulinPhase.peak
    return InsulinPhase.falling


def describe_iob(phase: InsulinPhase, iob: float) -> str:
    """Short human-readable insulin status, e.g. 'Insulin at peak - 2.3u active'."""
    if phase == InsulinPhase.none or iob <= 0:
        return "No active insulin"
    return f"{_PHASE_LABELS[phase]} - {iob:.1f}u active"


def compute_status(
    entries: Sequence[LogEntry],
    config: EngineConfig,
    now: datetime,
) -> COBStatus:
    """Compute the current COB/IOB status.

    Deterministic: identical entries, config and ``now`` always give an
    identical status. Never raises for any list of entries under a valid
    configuration; entries with negative quantities are logged and counted
    as zero.

    Args:
        entries: Full current list of log entries.
        config: Engine parameters in effect.
        now: Evaluation instant.

    Returns:
        COBStatus snapshot.
    """
    now = ensure_utc(now)

    for entry in entries:
        if is_malformed(entry):
            logger.warning(
                "Log entry has negative quantity, counting it as zero",
                entry_id=entry.id,
                carbs=entry.carbs,
                insulin=entry.insulin,
            )

    cob, iob, active_entries = aggregate(entries, now, config)
    level = carbs_level(cob)
    phase = insulin_phase(entries, config, now, iob)

    status = COBStatus(
        evaluated_at=now,
        current_cob=cob,
        insulin_on_board=iob,
        active_entries=active_entries,
        estimated_glucose_impact=estimated_glucose_impact(cob, iob, config),
        time_to_zero=time_to_zero(entries, config, now),
        carbs_level=level,
        insulin_phase=phase,
        cob_description=_COB_DESCRIPTIONS[level],
        iob_description=describe_iob(phase, iob),
    )

    if logger.is_enabled_for(logging.DEBUG):
        logger.debug(
            "Computed COB status",
            entries=len(entries),
            active=len(active_entries),
            cob=round(cob, 2),
            iob=round(iob, 2),
        )
    return status
