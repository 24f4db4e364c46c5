from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from .period_dates import (
    PERIOD_VIEWS,
    WEEK_VIEW,
    DateRange,
    InvalidPeriodKey,
    PeriodView,
    get_current_period,
    get_period_date_range,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPeriod:
    view: PeriodView
    period_key: str
    range: DateRange


def resolve_view(raw: str | None) -> PeriodView:
    """Accept "week" or "month"; anything else falls back to week."""
    if raw in PERIOD_VIEWS:
        return raw  # type: ignore[return-value]
    if raw:
        logger.debug("Unknown period view %r, falling back to %s", raw, WEEK_VIEW)
    return WEEK_VIEW


def resolve_period_key(view: PeriodView, raw: str | None, *, today: date | None = None) -> str:
    """Return `raw` when it is a valid key for `view`, else the current period."""
    current = get_current_period(view, today=today)
    if not raw:
        return current

    try:
        get_period_date_range(view, raw)
    except InvalidPeriodKey as exc:
        logger.debug("%s; using current period %s", exc, current)
        return current
    return raw


def resolve_period(
    view: str | None,
    week: str | None,
    month: str | None,
    *,
    today: date | None = None,
) -> ResolvedPeriod:
    """Resolve dashboard query params into a concrete period."""
    resolved_view = resolve_view(view)
    raw_key = week if resolved_view == WEEK_VIEW else month
    period_key = resolve_period_key(resolved_view, raw_key, today=today)

    return ResolvedPeriod(
        view=resolved_view,
        period_key=period_key,
        range=get_period_date_range(resolved_view, period_key),
    )
