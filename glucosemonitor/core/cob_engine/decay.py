"""Decay curves for carbs and insulin on board.

``remaining_fraction`` maps time since a dose to the fraction of that dose
still active. Every curve starts at 1.0 at (or before) the dose, reaches
0.0 at the end of the active duration, and is continuous and
non-increasing in between. ``activity_rate`` is its negative derivative:
the fraction of the dose absorbed per minute.

These are the simplified heuristics used for the dashboard metric, not a
physiological model.
"""

import math

from glucosemonitor.core.cob_engine.enums import DecayCurve


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def _exponential_shape(peak_minutes: float, total_minutes: float) -> tuple[float, float, float] | None:
    """Return (tau, a, S) for the exponential curve, or None if undefined.

    The time constant is only positive while the peak is before half the
    duration.
    """
    denom = 1.0 - 2.0 * peak_minutes / total_minutes
    if peak_minutes <= 0 or denom <= 0:
        return None
    tau = peak_minutes * (1.0 - peak_minutes / total_minutes) / denom
    a = 2.0 * tau / total_minutes
    scale = 1.0 / (1.0 - a + (1.0 + a) * math.exp(-total_minutes / tau))
    return tau, a, scale


def _linear_remaining(t: float, total: float) -> float:
    return 1.0 - t / total


def _bilinear_remaining(t: float, total: float, peak: float) -> float:
    # Triangular activity of area 1: rises to 2/total at the peak, then
    # falls back to zero at total.
    peak = min(max(peak, 0.0), total)
    if t < peak:
        return 1.0 - (t * t) / (total * peak)
    tail = total - t
    return (tail * tail) / (total * (total - peak))


def _exponential_remaining(t: float, total: float, peak: float) -> float:
    shape = _exponential_shape(peak, total)
    if shape is None:
        return _linear_remaining(t, total)
    tau, a, scale = shape
    decay = math.exp(-t / tau)
    return 1.0 - scale * ((t * t / (tau * total) - (1.0 - a) * (t / tau + 1.0)) * decay + (1.0 - a))


def remaining_fraction(
    elapsed_minutes: float,
    total_active_minutes: float,
    peak_minutes: float,
    curve: DecayCurve = DecayCurve.bilinear,
) -> float:
    """Fraction of a dose still active after ``elapsed_minutes``.

    Args:
        elapsed_minutes: Minutes since the entry was logged. Zero or
            negative means the dose is fully active.
        total_active_minutes: Minutes after which nothing remains.
        peak_minutes: Time of peak absorption/activity (curve shape).
        curve: Curve family to use.

    Returns:
        A value in [0.0, 1.0].
    """
    if elapsed_minutes <= 0:
        return 1.0
    if elapsed_minutes >= total_active_minutes:
        return 0.0

    if curve == DecayCurve.bilinear:
        fraction = _bilinear_remaining(elapsed_minutes, total_active_minutes, peak_minutes)
    elif curve == DecayCurve.exponential:
        fraction = _exponential_remaining(elapsed_minutes, total_active_minutes, peak_minutes)
    else:
        fraction = _linear_remaining(elapsed_minutes, total_active_minutes)

    return _clamp_unit(fraction)


def activity_rate(
    elapsed_minutes: float,
    total_active_minutes: float,
    peak_minutes: float,
    curve: DecayCurve = DecayCurve.bilinear,
) -> float:
    """Fraction of the dose absorbed per minute at ``elapsed_minutes``.

    Zero outside the active window. Integrates to 1.0 over the window.
    """
    if elapsed_minutes <= 0 or elapsed_minutes >= total_active_minutes:
        return 0.0

    t = elapsed_minutes
    total = total_active_minutes

    if curve == DecayCurve.bilinear:
        peak = min(max(peak_minutes, 0.0), total)
        height = 2.0 / total
        if t < peak:
            return height * t / peak
        return height * (total - t) / (total - peak)

    if curve == DecayCurve.exponential:
        shape = _exponential_shape(peak_minutes, total)
        if shape is not None:
            tau, _, scale = shape
            return max(0.0, scale / (tau * tau) * t * (1.0 - t / total) * math.exp(-t / tau))

    return 1.0 / total
