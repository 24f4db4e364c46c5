from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from .services.period_comparison import previous_period_range
from .services.period_dates import (
    InvalidPeriodKey,
    InvalidPeriodView,
    PeriodView,
    can_go_next,
    can_go_prev,
    convert_period_key,
    get_current_period,
    get_next_period,
    get_period_date_range,
    get_period_label,
    get_previous_period_key,
    month_options,
)
from .services.period_query import resolve_period, resolve_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/periods", tags=["periods"])


def _today() -> date:
    return date.today()


def _unprocessable(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


class PeriodResponse(BaseModel):
    view: PeriodView
    period_key: str
    start: date
    end: date
    label: str


class PreviousPeriod(BaseModel):
    period_key: str
    start: date
    end: date


class ResolvedPeriodResponse(PeriodResponse):
    prev_key: str
    next_key: str
    can_go_prev: bool
    can_go_next: bool
    previous_period: PreviousPeriod


class ConvertedPeriodResponse(BaseModel):
    view: PeriodView
    period_key: str


class MonthOptionItem(BaseModel):
    label: str
    value: str


def _period_response(view: PeriodView, period_key: str) -> PeriodResponse:
    period = get_period_date_range(view, period_key)
    return PeriodResponse(
        view=view,
        period_key=period_key,
        start=period.start,
        end=period.end,
        label=get_period_label(view, period_key),
    )


@router.get("/current", response_model=PeriodResponse)
def current_period(
    view: str | None = Query(default=None, description="week | month"),
) -> PeriodResponse:
    """
    The period containing today.

    Example response:
    {
      "view": "week",
      "period_key": "2026-W06",
      "start": "2026-02-02",
      "end": "2026-02-08",
      "label": "2 – 8 feb"
    }
    """
    resolved_view = resolve_view(view)
    return _period_response(resolved_view, get_current_period(resolved_view, today=_today()))


@router.get("/resolve", response_model=ResolvedPeriodResponse)
def resolve_dashboard_period(
    view: str | None = Query(default=None, description="week | month"),
    week: str | None = Query(default=None, description="YYYY-Www"),
    month: str | None = Query(default=None, description="YYYY-MM"),
) -> ResolvedPeriodResponse:
    """
    Resolve dashboard query params, falling back to the current period.

    Missing or unknown `view` means week; a missing or invalid key for the
    chosen view means the current period.
    """
    today = _today()
    resolved = resolve_period(view, week, month, today=today)
    key = resolved.period_key

    try:
        previous_key = get_previous_period_key(resolved.view, key)
        previous = previous_period_range(resolved.view, key)
        next_key = get_next_period(resolved.view, key)
        allow_next = can_go_next(resolved.view, key, today=today)
        allow_prev = can_go_prev(resolved.view, key)
    except InvalidPeriodKey as exc:
        # Valid key at the edge of the calendar with no neighbour to link to.
        logger.info("Rejected period resolution: %s", exc)
        raise _unprocessable(exc) from exc

    return ResolvedPeriodResponse(
        view=resolved.view,
        period_key=key,
        start=resolved.range.start,
        end=resolved.range.end,
        label=get_period_label(resolved.view, key),
        prev_key=previous_key,
        next_key=next_key,
        can_go_prev=allow_prev,
        can_go_next=allow_next,
        previous_period=PreviousPeriod(period_key=previous_key, start=previous.start, end=previous.end),
    )


@router.get("/range", response_model=PeriodResponse)
def period_range(
    view: str = Query(description="week | month"),
    key: str = Query(description="YYYY-Www or YYYY-MM"),
) -> PeriodResponse:
    """Strict lookup: an invalid view or key is a 422."""
    try:
        return _period_response(view, key)  # type: ignore[arg-type]
    except (InvalidPeriodKey, InvalidPeriodView) as exc:
        logger.info("Rejected period range request: %s", exc)
        raise _unprocessable(exc) from exc


@router.get("/convert", response_model=ConvertedPeriodResponse)
def convert_period(
    from_view: str = Query(description="week | month"),
    to_view: str = Query(description="week | month"),
    key: str = Query(description="Key under from_view"),
) -> ConvertedPeriodResponse:
    """
    Switch a period key to another view.

    Example: from_view=month&to_view=week&key=2026-02 -> {"view": "week", "period_key": "2026-W05"}
    """
    try:
        converted = convert_period_key(from_view, to_view, key)
    except (InvalidPeriodKey, InvalidPeriodView) as exc:
        logger.info("Rejected period conversion: %s", exc)
        raise _unprocessable(exc) from exc

    return ConvertedPeriodResponse(view=to_view, period_key=converted)  # type: ignore[arg-type]


@router.get("/month-options", response_model=list[MonthOptionItem])
def list_month_options(
    months: list[str] = Query(default=[], description="Known months, YYYY-MM"),
) -> list[MonthOptionItem]:
    """Selector options for the given months, newest first."""
    try:
        options = month_options(months)
    except InvalidPeriodKey as exc:
        raise _unprocessable(exc) from exc

    return [MonthOptionItem(label=option.label, value=option.value) for option in options]
