"""
Irrigation Planner Router.
Provides endpoints for plan calculations, charts and the saved run history.
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response, StreamingResponse
import io
import logging
import math

from app.core.config import settings
from app.database import SessionLocal
from app.schemas.irrigation_schemas import (
    PlanRequest,
    PlanResponse,
    IrrigationPlanResult,
    RunRow,
    RunListResponse,
    ReferenceDataResponse,
)
from app.services.irrigation_calculator import (
    irrigation_calculator,
    PlanInput,
    IrrigationPlan,
)
from app.services.irrigation_chart_service import render_chart_pdf
from app.services.irrigation_excel_service import irrigation_excel_service
from app.services.irrigation_rules import DEFAULT_EFFICIENCY_PCT, DEFAULT_FIELD_CAPACITY
from app.services.run_store import RunStore, RunTableRow, RunIndexError, SqlKeyValueBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/irrigation", tags=["irrigation"])


def get_run_store() -> RunStore:
    """Run store over the `kv_store` table."""
    return RunStore(SqlKeyValueBackend(SessionLocal), key=settings.RUNS_STORAGE_KEY)


def request_to_input(request: PlanRequest) -> PlanInput:
    return PlanInput.from_raw(
        crop=request.crop,
        stage=request.stage,
        area=request.area,
        et0=request.et0,
        rain=request.rain,
        soil=request.soil,
        soil_type=request.soil_type,
        eff=request.eff,
    )


def _finite_or_none(value: float):
    return value if math.isfinite(value) else None


def plan_to_result(plan: IrrigationPlan) -> IrrigationPlanResult:
    data = {
        key: (_finite_or_none(value) if isinstance(value, float) else value)
        for key, value in plan.to_dict().items()
    }
    return IrrigationPlanResult(**data)


def rows_to_response(rows: List[RunTableRow]) -> RunListResponse:
    items = [RunRow.model_validate(row) for row in rows]
    return RunListResponse(items=items, total=len(items))


@router.get("/crops", response_model=ReferenceDataResponse)
async def get_reference_data():
    """Crops with stage coefficients, soil types and form defaults."""
    return ReferenceDataResponse(
        crops=irrigation_calculator.get_available_crops(),
        soil_types=irrigation_calculator.get_available_soil_types(),
        defaults={
            "rain": 0,
            "soil": 0,
            "eff": DEFAULT_EFFICIENCY_PCT,
            "field_capacity_pct": DEFAULT_FIELD_CAPACITY,
        },
    )


@router.post("/plan", response_model=PlanResponse)
async def calculate_plan(request: PlanRequest):
    """
    Compute the irrigation plan for one set of form values.

    Never fails on malformed numbers: they fall back to documented defaults.
    """
    plan = irrigation_calculator.compute_plan(request_to_input(request))
    return PlanResponse(
        plan=plan_to_result(plan),
        summary=irrigation_calculator.plan_summary(plan),
    )


@router.post("/chart")
async def generate_plan_chart(request: PlanRequest):
    """Render the water balance chart of a plan as a PDF."""
    plan = irrigation_calculator.compute_plan(request_to_input(request))
    pdf_buffer = render_chart_pdf(plan)
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'inline; filename="irrigation_chart.pdf"'
        }
    )


@router.get("/runs", response_model=RunListResponse)
async def list_runs(store: RunStore = Depends(get_run_store)):
    """Saved runs, newest first."""
    return rows_to_response(store.render_runs())


@router.post("/runs", response_model=RunListResponse, status_code=status.HTTP_201_CREATED)
async def save_run(request: PlanRequest, store: RunStore = Depends(get_run_store)):
    """Compute a plan and store it as the newest run."""
    inp = request_to_input(request)
    plan = irrigation_calculator.compute_plan(inp)
    rows = store.add_run(irrigation_calculator.build_run(inp, plan))
    return rows_to_response(rows)


@router.delete("/runs/{index}", response_model=RunListResponse)
async def delete_run(index: int, store: RunStore = Depends(get_run_store)):
    """Delete the run at `index` of the latest listing."""
    try:
        rows = store.delete_run(index)
    except RunIndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return rows_to_response(rows)


@router.delete("/runs", status_code=status.HTTP_204_NO_CONTENT)
async def clear_runs(store: RunStore = Depends(get_run_store)):
    """Delete the whole run history."""
    store.clear_runs()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/runs/export/csv")
async def export_runs_csv(store: RunStore = Depends(get_run_store)):
    """Download the run history as CSV."""
    return StreamingResponse(
        io.BytesIO(store.export_csv().encode("utf-8")),
        media_type="text/csv",
        headers={
            "Content-Disposition": 'attachment; filename="irrigation_runs.csv"'
        }
    )


@router.get("/runs/export/excel")
async def export_runs_excel(store: RunStore = Depends(get_run_store)):
    """Download the run history as an Excel workbook."""
    excel_buffer = irrigation_excel_service.generate_runs_excel(store.load_runs())
    return StreamingResponse(
        excel_buffer,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": 'attachment; filename="irrigation_runs.xlsx"'
        }
    )
