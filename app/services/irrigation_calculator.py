"""
Irrigation Plan Calculator Service.

Derives a daily irrigation requirement from:
- Crop coefficient (crop + growth stage)
- Reference evapotranspiration (ET0)
- Effective rainfall
- Stored soil moisture relative to field capacity
- Application efficiency of the irrigation system

All calculations are pure and never raise: malformed inputs fall back to
documented defaults and unknown stages propagate NaN to the output, which
is displayed as a dash.
"""
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, asdict
from datetime import datetime
import math
import re
import logging

from app.services.irrigation_rules import (
    KC_TABLE,
    DEFAULT_KC,
    GROWTH_STAGES,
    FIELD_CAPACITY,
    DEFAULT_FIELD_CAPACITY,
    EFFECTIVE_RAIN_FRACTION,
    MAX_SOIL_CREDIT_FRACTION,
    DEFAULT_EFFICIENCY_PCT,
    MIN_EFFICIENCY,
    MAX_EFFICIENCY,
    M2_PER_HA,
    LIGHT_DEPTH_MM,
    MODERATE_DEPTH_MM,
    SCHEDULE_NONE,
    SCHEDULE_LIGHT,
    SCHEDULE_MODERATE,
    SCHEDULE_HEAVY,
    STATUS_GOOD,
    STATUS_WARN,
    STATUS_BAD,
    PLACEHOLDER_DASH,
)

logger = logging.getLogger(__name__)

_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity)")


def parse_number(value: Any, default: float = math.nan) -> float:
    """
    Parse a form value into a float.

    Accepts numbers or strings with a leading numeric part ("12.5 mm" -> 12.5).
    Returns `default` when nothing numeric can be read or the result is NaN.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX.match(str(value))
        if not match:
            return default
        token = match.group(1)
        number = float(token.replace("Infinity", "inf"))
    if math.isnan(number):
        return default
    return number


def is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def _or_zero(value: Optional[float]) -> float:
    # Missing, NaN and 0 all collapse to 0
    if value is None or math.isnan(value):
        return 0.0
    return value


def _nan_max(a: float, b: float) -> float:
    """max() that returns NaN when either side is NaN."""
    if math.isnan(a) or math.isnan(b):
        return math.nan
    return max(a, b)


def _clamp(value: float, low: float, high: float) -> float:
    if math.isnan(value):
        return value
    return min(high, max(low, value))


def format_number(value: Optional[float], digits: int = 2) -> str:
    """Format to fixed decimals, or a dash for missing/non-finite values."""
    if not is_finite(value):
        return PLACEHOLDER_DASH
    return f"{value:.{digits}f}"


@dataclass
class PlanInput:
    """Form inputs for one plan calculation."""
    crop: str
    stage: str
    area_ha: float = math.nan
    et0: float = math.nan
    rain: float = 0.0
    soil_pct: float = 0.0
    soil_type: str = "loam"
    eff_pct: float = DEFAULT_EFFICIENCY_PCT

    @classmethod
    def from_raw(
        cls,
        crop: Optional[str],
        stage: Optional[str],
        area: Any = None,
        et0: Any = None,
        rain: Any = None,
        soil: Any = None,
        soil_type: Optional[str] = None,
        eff: Any = None,
    ) -> "PlanInput":
        """
        Build an input from raw form values.

        Area and ET0 stay NaN when unparsable (the calculator treats them as 0).
        Rain and soil moisture default to 0. Efficiency defaults to 70 %, and an
        efficiency of exactly 0 is treated as missing as well.
        """
        eff_pct = parse_number(eff, DEFAULT_EFFICIENCY_PCT)
        if eff_pct == 0:
            eff_pct = DEFAULT_EFFICIENCY_PCT
        return cls(
            crop=(crop or "").strip(),
            stage=(stage or "").strip(),
            area_ha=parse_number(area),
            et0=parse_number(et0),
            rain=parse_number(rain, 0.0),
            soil_pct=parse_number(soil, 0.0),
            soil_type=(soil_type or "").strip(),
            eff_pct=eff_pct,
        )


@dataclass(frozen=True)
class IrrigationPlan:
    """Derived irrigation plan. Depths in mm, volume in litres."""
    kc: float
    etc: float
    eff_rain: float
    soil_credit: float
    net: float
    gross_depth: float
    gross_litres: float
    eff: float
    schedule: str
    status_class: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class IrrigationPlanCalculator:
    """
    Calculator for daily irrigation requirements.

    Methodology:
    1. ETc = ET0 x Kc
    2. Effective rain = 80 % of gross rainfall
    3. Soil credit = relative saturation x 60 % of ETc
    4. Net = ETc - effective rain - soil credit (never negative)
    5. Gross depth = net / application efficiency
    6. Gross litres = gross depth x area (1 mm over 1 m2 = 1 L)
    """

    def get_kc(self, crop: str, stage: str) -> float:
        """
        Crop coefficient for a crop and stage.

        Unknown crops use the generic curve; an unknown stage yields NaN.
        """
        curve = KC_TABLE.get(crop, DEFAULT_KC)
        return curve.get(stage, math.nan)

    def get_field_capacity(self, soil_type: str) -> float:
        return FIELD_CAPACITY.get(soil_type) or DEFAULT_FIELD_CAPACITY

    def get_efficiency(self, eff_pct: Optional[float]) -> float:
        """Application efficiency as a fraction, clamped to [0.10, 0.99]."""
        pct = eff_pct
        if pct is None or math.isnan(pct) or pct == 0:
            pct = DEFAULT_EFFICIENCY_PCT
        return _clamp(pct / 100, MIN_EFFICIENCY, MAX_EFFICIENCY)

    def classify(self, gross_depth: float, gross_litres: float) -> Tuple[str, str]:
        """Schedule advice and status class; first matching rule wins."""
        if gross_litres == 0:
            return SCHEDULE_NONE, STATUS_GOOD
        if gross_depth <= LIGHT_DEPTH_MM:
            return SCHEDULE_LIGHT, STATUS_GOOD
        if gross_depth <= MODERATE_DEPTH_MM:
            return SCHEDULE_MODERATE, STATUS_WARN
        return SCHEDULE_HEAVY, STATUS_BAD

    def compute_plan(self, inp: PlanInput) -> IrrigationPlan:
        kc = self.get_kc(inp.crop, inp.stage)
        etc = _or_zero(inp.et0) * kc

        eff_rain = EFFECTIVE_RAIN_FRACTION * _or_zero(inp.rain)
        fc = self.get_field_capacity(inp.soil_type)
        rel = _clamp(_or_zero(inp.soil_pct) / fc, 0.0, 1.0)
        soil_credit = rel * MAX_SOIL_CREDIT_FRACTION * etc

        net = _nan_max(0.0, etc - eff_rain - soil_credit)
        eff = self.get_efficiency(inp.eff_pct)
        gross_depth = net / eff

        area_m2 = max(0.0, _or_zero(inp.area_ha) * M2_PER_HA)
        gross_litres = gross_depth * area_m2

        schedule, status_class = self.classify(gross_depth, gross_litres)

        if math.isnan(kc):
            logger.debug(f"Unknown stage '{inp.stage}' for crop '{inp.crop}', plan values are NaN")

        return IrrigationPlan(
            kc=kc,
            etc=etc,
            eff_rain=eff_rain,
            soil_credit=soil_credit,
            net=net,
            gross_depth=gross_depth,
            gross_litres=gross_litres,
            eff=eff,
            schedule=schedule,
            status_class=status_class,
        )

    def plan_summary(self, plan: IrrigationPlan) -> Dict[str, str]:
        """All plan fields formatted for display (2 decimals or a dash)."""
        return {
            "kc": format_number(plan.kc),
            "etc": format_number(plan.etc),
            "eff_rain": format_number(plan.eff_rain),
            "soil_credit": format_number(plan.soil_credit),
            "net": format_number(plan.net),
            "gross_depth": format_number(plan.gross_depth),
            "gross_litres": format_number(plan.gross_litres),
            "eff": format_number(plan.eff),
            "schedule": plan.schedule,
            "status_class": plan.status_class,
        }

    def build_run(
        self,
        inp: PlanInput,
        plan: IrrigationPlan,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Project a plan into a persisted run record.

        Keys match the stored layout: date, crop, stage, areaHa, et0, rain,
        etc, net, grossL. Non-finite numbers are stored as null.
        """
        now = now or datetime.now()
        return {
            "date": now.strftime("%Y-%m-%d %H:%M"),
            "crop": inp.crop,
            "stage": inp.stage,
            "areaHa": _json_number(inp.area_ha),
            "et0": _json_number(inp.et0),
            "rain": _json_number(inp.rain),
            "etc": _json_number(plan.etc, 2),
            "net": _json_number(plan.net, 2),
            "grossL": _json_number(plan.gross_litres, 0),
        }

    def get_available_crops(self) -> List[Dict[str, Any]]:
        """List of crops with their stage coefficients."""
        return [
            {"id": crop, "stages": [{"id": stage, "kc": curve[stage]} for stage in GROWTH_STAGES]}
            for crop, curve in KC_TABLE.items()
        ]

    def get_available_soil_types(self) -> List[Dict[str, Any]]:
        return [
            {"id": soil, "field_capacity_pct": fc}
            for soil, fc in FIELD_CAPACITY.items()
        ]


def _json_number(value: Optional[float], digits: Optional[int] = None):
    if not is_finite(value):
        return None
    if digits is None:
        return value
    if digits == 0:
        return int(round(value))
    return round(value, digits)


irrigation_calculator = IrrigationPlanCalculator()


def compute_plan(inp: PlanInput) -> IrrigationPlan:
    """Compute an irrigation plan with the shared calculator instance."""
    return irrigation_calculator.compute_plan(inp)
