"""Carbs/insulin-on-board (COB/IOB) engine.

Estimates how much logged carbohydrate and insulin is still active at any
instant and projects it forward for the dashboard chart. Layers, leaves
first:

1. Decay model -- remaining fraction of one dose over time
2. Aggregator -- sum over all entries at one instant
3. Status -- current snapshot (COB, IOB, active entries, time to zero)
4. Projection -- aggregator evaluated at fixed future steps
5. Prediction -- glucose estimate from the current status

Every function here is pure: the entry list and the EngineConfig are
passed in on each call and nothing is cached between calls. The single
mutable configuration lives in glucosemonitor.services.cob_settings.

IMPORTANT: these are simplified decay-curve heuristics for an at-a-glance
dashboard metric. They are not a dosing calculator.
"""

from glucosemonitor.core.cob_engine.aggregator import aggregate
from glucosemonitor.core.cob_engine.constants import ACTIVE_ENTRY_EPSILON
from glucosemonitor.core.cob_engine.decay import activity_rate, remaining_fraction
from glucosemonitor.core.cob_engine.enums import (
    CarbsLevel,
    DecayCurve,
    GlucoseTrend,
    InsulinPhase,
)
from glucosemonitor.core.cob_engine.errors import ConfigValidationError
from glucosemonitor.core.cob_engine.models import (
    ActiveEntry,
    Aggregate,
    COBStatus,
    EngineConfig,
    EngineConfigUpdate,
    EntryTimelinePoint,
    GlucosePrediction,
    LogEntry,
    ProjectionPoint,
)
from glucosemonitor.core.cob_engine.prediction import predict_glucose
from glucosemonitor.core.cob_engine.projection import entry_timeline, project
from glucosemonitor.core.cob_engine.status import compute_status

__all__ = [
    "ACTIVE_ENTRY_EPSILON",
    "ActiveEntry",
    "Aggregate",
    "COBStatus",
    "CarbsLevel",
    "ConfigValidationError",
    "DecayCurve",
    "EngineConfig",
    "EngineConfigUpdate",
    "EntryTimelinePoint",
    "GlucosePrediction",
    "GlucoseTrend",
    "InsulinPhase",
    "LogEntry",
    "ProjectionPoint",
    "activity_rate",
    "aggregate",
    "compute_status",
    "entry_timeline",
    "predict_glucose",
    "project",
    "remaining_fraction",
]
