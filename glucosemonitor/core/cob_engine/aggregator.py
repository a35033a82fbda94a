"""Entry aggregation.

Combines every still-active log entry into one carbs-remaining and one
insulin-remaining figure at a given instant. Everything else in the
engine (status, projection, prediction) is built on ``aggregate``.
"""

from collections.abc import Iterable
from datetime import datetime

from glucosemonitor.core.cob_engine.constants import ACTIVE_ENTRY_EPSILON
from glucosemonitor.core.cob_engine.decay import remaining_fraction
from glucosemonitor.core.cob_engine.models import (
    ActiveEntry,
    Aggregate,
    EngineConfig,
    LogEntry,
    ensure_utc,
)
from glucosemonitor.logging_config import get_logger

logger = get_logger(__name__)


def minutes_between(start: datetime, end: datetime) -> float:
    """Fractional minutes from ``start`` to ``end`` (negative if end is earlier)."""
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 60.0


def clamped_quantities(entry: LogEntry) -> tuple[float, float]:
    """Return (carbs, insulin) with negative values replaced by zero."""
    return max(0.0, entry.carbs), max(0.0, entry.insulin)


def is_malformed(entry: LogEntry) -> bool:
    """Whether the entry carries a negative quantity."""
    return entry.carbs < 0 or entry.insulin < 0


def entry_remaining(
    entry: LogEntry,
    elapsed_minutes: float,
    config: EngineConfig,
) -> tuple[float, float]:
    """Carbs and insulin from one entry still on board after ``elapsed_minutes``."""
    carbs, insulin = clamped_quantities(entry)

    carbs_remaining = 0.0
    if carbs > 0:
        carbs_remaining = carbs * remaining_fraction(
            elapsed_minutes,
            config.carb_absorption_minutes,
            config.carb_peak_minutes,
            config.carb_curve,
        )

    insulin_remaining = 0.0
    if insulin > 0:
        insulin_remaining = insulin * remaining_fraction(
            elapsed_minutes,
            config.insulin_action_minutes,
            config.insulin_peak_minutes,
            config.insulin_curve,
        )

    return carbs_remaining, insulin_remaining


def aggregate(
    entries: Iterable[LogEntry],
    at_time: datetime,
    config: EngineConfig,
    *,
    epsilon: float = ACTIVE_ENTRY_EPSILON,
) -> Aggregate:
    """Sum the remaining carbs and insulin of all entries at ``at_time``.

    Entries logged after ``at_time`` have not started yet and entries older
    than the longest configured duration have fully cleared; both are
    skipped. Entries sharing a timestamp are counted independently.
    Negative quantities count as zero.

    Args:
        entries: Snapshot of log entries. Not modified.
        at_time: Evaluation instant (naive datetimes are taken as UTC).
        config: Engine parameters.
        epsilon: An entry is listed as active while either of its remaining
            amounts exceeds this.

    Returns:
        Aggregate of (carbs_remaining, insulin_remaining, active_entries),
        active entries newest first.
    """
    at_time = ensure_utc(at_time)
    horizon = config.max_active_minutes

    carbs_total = 0.0
    insulin_total = 0.0
    active: list[ActiveEntry] = []

    for entry in entries:
        elapsed = minutes_between(entry.timestamp, at_time)
        if elapsed < 0 or elapsed >= horizon:
            continue

        carbs_remaining, insulin_remaining = entry_remaining(entry, elapsed, config)
        carbs_total += carbs_remaining
        insulin_total += insulin_remaining

        if carbs_remaining > epsilon or insulin_remaining > epsilon:
            active.append(
                ActiveEntry(
                    entry=entry,
                    elapsed_minutes=elapsed,
                    carbs_remaining=carbs_remaining,
                    insulin_remaining=insulin_remaining,
                )
            )

    # sort() is stable, so entries with equal timestamps keep input order
    active.sort(key=lambda item: item.entry.timestamp, reverse=True)

    return Aggregate(
        carbs_remaining=max(0.0, carbs_total),
        insulin_remaining=max(0.0, insulin_total),
        active_entries=active,
    )
