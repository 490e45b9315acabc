"""
Deterministic agronomic tables and thresholds for irrigation planning.

Typical classroom values. This module centralizes constants so the
calculator, chart and exports stay consistent across services and tests.
"""

KC_TABLE = {
    "rice":      {"initial": 1.05, "mid": 1.20, "late": 0.95},
    "wheat":     {"initial": 0.70, "mid": 1.15, "late": 0.35},
    "maize":     {"initial": 0.70, "mid": 1.20, "late": 0.60},
    "cotton":    {"initial": 0.65, "mid": 1.15, "late": 0.70},
    "groundnut": {"initial": 0.70, "mid": 1.10, "late": 0.60},
    "sugarcane": {"initial": 0.45, "mid": 1.25, "late": 0.85},
    "tomato":    {"initial": 0.60, "mid": 1.15, "late": 0.80},
}

DEFAULT_KC = {"initial": 0.7, "mid": 1.0, "late": 0.5}

GROWTH_STAGES = ("initial", "mid", "late")

# Field capacity (% vol) by soil type
FIELD_CAPACITY = {"sandy": 12, "loam": 25, "clay": 35}
DEFAULT_FIELD_CAPACITY = 25

EFFECTIVE_RAIN_FRACTION = 0.8
MAX_SOIL_CREDIT_FRACTION = 0.6

DEFAULT_EFFICIENCY_PCT = 70.0
MIN_EFFICIENCY = 0.10
MAX_EFFICIENCY = 0.99

M2_PER_HA = 10000

LIGHT_DEPTH_MM = 5.0
MODERATE_DEPTH_MM = 15.0

SCHEDULE_NONE = "No irrigation needed today. Recheck tomorrow."
SCHEDULE_LIGHT = "Light irrigation: apply once today."
SCHEDULE_MODERATE = "Moderate irrigation: split into 2 cycles (morning & evening)."
SCHEDULE_HEAVY = "Heavy requirement: split into 3 cycles and verify field drainage."

STATUS_GOOD = "good"
STATUS_WARN = "warn"
STATUS_BAD = "bad"

PLACEHOLDER_DASH = "–"
