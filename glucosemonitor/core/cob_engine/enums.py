"""COB/IOB engine enums."""

from enum import StrEnum, auto


class DecayCurve(StrEnum):
    """Shape of the remaining-fraction curve for a substance.

    ``bilinear``: activity rises linearly to the peak, then falls linearly
    to zero at the end of the active duration.

    ``exponential``: Walsh/oref0-style exponential activity curve shaped by
    peak and duration. Falls back to ``linear`` when the peak is at or past
    half the duration.

    ``linear``: constant absorption rate; the peak is ignored.
    """

    bilinear = auto()
    exponential = auto()
    linear = auto()


class CarbsLevel(StrEnum):
    """Coarse carbs-on-board level shown on the dashboard badge."""

    none = auto()
    low = auto()
    moderate = auto()
    high = auto()


class InsulinPhase(StrEnum):
    """Where the most recent insulin dose is on its activity curve."""

    none = auto()
    rising = auto()
    peak = auto()
    falling = auto()


class GlucoseTrend(StrEnum):
    """Direction of the predicted glucose change."""

    rising = auto()
    stable = auto()
    falling = auto()
