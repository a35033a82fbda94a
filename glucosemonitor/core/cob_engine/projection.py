"""Forward projections of carbs and insulin on board.

``project`` feeds the dashboard COB/IOB chart; ``entry_timeline`` shows how
a single logged entry decays over its lifetime.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from glucosemonitor.core.cob_engine.aggregator import (
    aggregate,
    clamped_quantities,
    entry_remaining,
)
from glucosemonitor.core.cob_engine.constants import (
    DEFAULT_TIMELINE_STEP_MINUTES,
    INSULIN_PEAK_WINDOW_MINUTES,
)
from glucosemonitor.core.cob_engine.models import (
    EngineConfig,
    EntryTimelinePoint,
    LogEntry,
    ProjectionPoint,
    ensure_utc,
)


def project(
    entries: Iterable[LogEntry],
    config: EngineConfig,
    now: datetime,
    steps: int = 24,
    step_minutes: float = 15.0,
) -> list[ProjectionPoint]:
    """Project COB and IOB at fixed steps starting at ``now``.

    Every point is an independent aggregation over the same entry snapshot,
    so entries never appear or disappear mid-projection.

    Args:
        entries: Log entries; materialised once before projecting.
        config: Engine parameters in effect.
        now: Time of the first point.
        steps: Number of points. Zero or negative gives an empty list.
        step_minutes: Spacing between points. Must be positive.

    Returns:
        ``steps`` points at now, now + step, now + 2*step, ...

    Raises:
        ValueError: If ``step_minutes`` is not positive (and steps > 0).
    """
    if steps <= 0:
        return []
    if step_minutes <= 0:
        msg = f"step_minutes must be positive, got {step_minutes}"
        raise ValueError(msg)

    now = ensure_utc(now)
    snapshot = tuple(entries)

    points: list[ProjectionPoint] = []
    for step in range(steps):
        at_time = now + timedelta(minutes=step * step_minutes)
        cob, iob, _ = aggregate(snapshot, at_time, config)
        points.append(ProjectionPoint(time=at_time, cob=cob, iob=iob))
    return points


def _percent(remaining: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return min(100.0, max(0.0, remaining / total * 100.0))


def entry_timeline(
    entry: LogEntry,
    config: EngineConfig,
    *,
    step_minutes: float = DEFAULT_TIMELINE_STEP_MINUTES,
    duration_minutes: float | None = None,
) -> list[EntryTimelinePoint]:
    """Decay timeline of one entry from its own timestamp.

    Covers the longest configured duration by default. The last point is
    always at ``duration_minutes``, even when ``step_minutes`` does not
    divide it, so the default timeline ends with the entry fully cleared.

    Raises:
        ValueError: If ``step_minutes`` is not positive.
    """
    if step_minutes <= 0:
        msg = f"step_minutes must be positive, got {step_minutes}"
        raise ValueError(msg)

    if duration_minutes is None:
        duration_minutes = config.max_active_minutes
    carbs, insulin = clamped_quantities(entry)
    steps = int(duration_minutes // step_minutes) + 1 if duration_minutes >= 0 else 0
    offsets = [step * step_minutes for step in range(steps)]
    if offsets and offsets[-1] < duration_minutes:
        offsets.append(duration_minutes)

    timeline: list[EntryTimelinePoint] = []
    for elapsed in offsets:
        carbs_remaining, insulin_remaining = entry_remaining(entry, elapsed, config)
        timeline.append(
            EntryTimelinePoint(
                time=entry.timestamp + timedelta(minutes=elapsed),
                elapsed_minutes=elapsed,
                carbs_remaining=carbs_remaining,
                insulin_remaining=insulin_remaining,
                carbs_percent=_percent(carbs_remaining, carbs),
                insulin_percent=_percent(insulin_remaining, insulin),
                is_insulin_peak=(
                    insulin > 0
                    and abs(elapsed - config.insulin_peak_minutes)
                    <= INSULIN_PEAK_WINDOW_MINUTES
                ),
            )
        )
    return timeline
