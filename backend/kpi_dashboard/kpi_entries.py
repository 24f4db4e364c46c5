from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import BaseModel

from .services.kpi_import import KPIImportError, parse_kpi_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kpi-entries", tags=["kpi-entries"])

MAX_FILE_SIZE = 10 * 1024 * 1024


class KPIEntryPreview(BaseModel):
    date: date
    day_name: str
    week_number: int
    planned_revenue: float
    gross_revenue: float
    net_revenue: float
    burger_kitchen_revenue: float
    planned_labour_cost: float
    labour_cost: float
    planned_labour_pct: float
    labour_pct: float
    worked_hours: float
    labour_productivity: float
    food_cost: float
    food_cost_pct: float
    delivery_rate_20min: float
    delivery_rate_30min: float
    on_time_delivery_mins: float
    make_time_mins: float
    drive_time_mins: float
    order_count: float
    avg_order_value: float
    orders_per_run: float
    cash_difference: float | None
    manager: str


class KPIPreviewResponse(BaseModel):
    entries: list[KPIEntryPreview]


@router.post("/preview", response_model=KPIPreviewResponse)
async def preview_kpi_import(file: UploadFile = File(...)) -> KPIPreviewResponse:
    """
    Parse an uploaded CSV/.xlsx export without storing it.

    Example response:
    {
      "entries": [
        {"date": "2026-02-02", "day_name": "Monday", "week_number": 6, "net_revenue": 1545.78, ...}
      ]
    }
    """
    content = await file.read()
    if len(content) > MAX_FILE_SIZE:
        raise HTTPException(status_code=400, detail="File too large (max 10 MB)")

    try:
        entries = parse_kpi_file(content)
    except KPIImportError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    logger.info("Previewed %d KPI entries from %s", len(entries), file.filename)
    return KPIPreviewResponse(entries=[KPIEntryPreview(**asdict(entry)) for entry in entries])
