"""
Pydantic schemas for the Irrigation Planner.
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Union
from enum import Enum


# ==================== ENUMS ====================

class GrowthStageEnum(str, Enum):
    """Crop growth stages with their own Kc."""
    INITIAL = "initial"
    MID = "mid"
    LATE = "late"


class StatusClassEnum(str, Enum):
    """Severity of the irrigation schedule."""
    GOOD = "good"
    WARN = "warn"
    BAD = "bad"


FormNumber = Optional[Union[float, str]]


# ==================== PLAN SCHEMAS ====================

class PlanRequest(BaseModel):
    """
    Raw form values for a plan calculation.

    Numbers may arrive as strings; unparsable values fall back to defaults
    instead of failing validation.
    """
    crop: str = Field(..., description="Crop name (rice, wheat, maize, ...)")
    stage: str = Field(..., description="Growth stage: initial, mid or late")
    area: FormNumber = Field(None, description="Field area in hectares")
    et0: FormNumber = Field(None, description="Reference evapotranspiration mm/day")
    rain: FormNumber = Field(None, description="Rainfall mm, default 0")
    soil: FormNumber = Field(None, description="Soil moisture % vol, default 0")
    soil_type: str = Field("loam", description="Soil type: sandy, loam or clay")
    eff: FormNumber = Field(None, description="Irrigation efficiency %, default 70")


class IrrigationPlanResult(BaseModel):
    """Derived plan; non-finite values are null."""
    kc: Optional[float] = None
    etc: Optional[float] = None
    eff_rain: Optional[float] = None
    soil_credit: Optional[float] = None
    net: Optional[float] = None
    gross_depth: Optional[float] = None
    gross_litres: Optional[float] = None
    eff: Optional[float] = None
    schedule: str
    status_class: StatusClassEnum


class PlanResponse(BaseModel):
    plan: IrrigationPlanResult
    summary: Dict[str, str]


# ==================== RUN SCHEMAS ====================

class RunRecord(BaseModel):
    """Persisted run, keys as stored. Values are passed through as found."""
    date: Any = None
    crop: Any = None
    stage: Any = None
    areaHa: Any = None
    et0: Any = None
    rain: Any = None
    etc: Any = None
    net: Any = None
    grossL: Any = None


class RunRow(BaseModel):
    index: int
    run: RunRecord
    cells: List[str]

    class Config:
        from_attributes = True


class RunListResponse(BaseModel):
    items: List[RunRow]
    total: int


# ==================== REFERENCE DATA ====================

class CropStageInfo(BaseModel):
    id: str
    kc: float


class CropInfo(BaseModel):
    id: str
    stages: List[CropStageInfo]


class SoilTypeInfo(BaseModel):
    id: str
    field_capacity_pct: float


class ReferenceDataResponse(BaseModel):
    crops: List[CropInfo]
    soil_types: List[SoilTypeInfo]
    stages: List[GrowthStageEnum] = [stage for stage in GrowthStageEnum]
    defaults: Dict[str, Any] = {}
