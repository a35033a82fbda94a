"""COB/IOB engine constants.

Defaults and display thresholds for the carbs/insulin-on-board engine.
These are DEFAULTS for an at-a-glance dashboard metric, not clinical
parameters -- the active model parameters live in EngineConfig and can
be changed at runtime through the settings endpoint.
"""

from typing import Final

# Active-entries view: an entry is listed while either remaining amount
# exceeds this (grams or units). Filters sub-visible tails from the UI;
# COB/IOB totals are not affected.
ACTIVE_ENTRY_EPSILON: Final[float] = 0.01

# Upper bounds accepted by EngineConfig. 12 h covers high-fat meals and
# long-acting insulin analogues used as boluses; factors above 50 glucose
# units per gram/unit are almost certainly a unit mistake.
MAX_DURATION_MINUTES: Final[float] = 720.0
MAX_GLUCOSE_FACTOR: Final[float] = 50.0

# Carbs-on-board level thresholds (grams), from the dashboard status badge.
LOW_COB_GRAMS: Final[float] = 5.0
MODERATE_COB_GRAMS: Final[float] = 15.0

# Insulin activity is reported as "peak" within this many minutes either
# side of the configured insulin peak time.
INSULIN_PEAK_WINDOW_MINUTES: Final[float] = 15.0

# Glucose prediction (mmol/L). Predictions are clamped to the meter range.
PREDICTION_HORIZON_MINUTES: Final[float] = 120.0
MIN_PREDICTED_GLUCOSE: Final[float] = 1.0
MAX_PREDICTED_GLUCOSE: Final[float] = 25.0
TREND_THRESHOLD: Final[float] = 0.5

# Prediction confidence. More logged entries -> higher confidence; readings
# outside 3-15 mmol/L are less predictable and get a 0.8 multiplier.
CONFIDENCE_HIGH: Final[float] = 0.9
CONFIDENCE_MEDIUM: Final[float] = 0.7
CONFIDENCE_LOW: Final[float] = 0.5
CONFIDENCE_ENTRY_COUNT: Final[int] = 3
EXTREME_GLUCOSE_LOW: Final[float] = 3.0
EXTREME_GLUCOSE_HIGH: Final[float] = 15.0
EXTREME_GLUCOSE_CONFIDENCE_FACTOR: Final[float] = 0.8

# Entry timeline resolution
DEFAULT_TIMELINE_STEP_MINUTES: Final[float] = 15.0
