from __future__ import annotations

import calendar
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal

from ..config import settings
from .period_labels import PeriodLocale, get_locale, month_label, month_option_label, week_label

PeriodView = Literal["week", "month"]

WEEK_VIEW: PeriodView = "week"
MONTH_VIEW: PeriodView = "month"
PERIOD_VIEWS: tuple[PeriodView, ...] = (WEEK_VIEW, MONTH_VIEW)

# Oldest month the period selector may step back to; per-deployment via settings.
EARLIEST_SUPPORTED_PERIOD = settings.earliest_supported_period

# Matched with fullmatch; ASCII digits only so every key has one spelling.
_WEEK_KEY_RE = re.compile(r"(\d{4})-W(\d{2})", re.ASCII)
_MONTH_KEY_RE = re.compile(r"(\d{4})-(\d{2})", re.ASCII)


class InvalidPeriodView(ValueError):
    def __init__(self, view: object) -> None:
        super().__init__(f"Unknown period view {view!r}; expected 'week' or 'month'")
        self.view = view


class InvalidPeriodKey(ValueError):
    """Raised when a period key is malformed or names a period that does not exist."""

    def __init__(self, view: str, key: object, reason: str) -> None:
        super().__init__(f"Invalid {view} key {key!r}: {reason}")
        self.view = view
        self.key = key
        self.reason = reason


@dataclass(frozen=True)
class DateRange:
    """First and last calendar day of a period, both inclusive."""

    start: date
    end: date

    @property
    def end_exclusive(self) -> date:
        return self.end + timedelta(days=1)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class MonthOption:
    label: str
    value: str


def validate_view(view: str) -> PeriodView:
    if view not in PERIOD_VIEWS:
        raise InvalidPeriodView(view)
    return view  # type: ignore[return-value]


def _resolve_locale(locale: PeriodLocale | None) -> PeriodLocale:
    if locale is not None:
        return locale
    return get_locale(settings.period_locale)


# ---------------------------------------------------------------------------
# Key parsing / formatting
# ---------------------------------------------------------------------------


def iso_weeks_in_year(year: int) -> int:
    """Number of ISO weeks (52 or 53) in an ISO week-numbering year."""
    # Dec 28 always falls in the last ISO week of its year.
    return date(year, 12, 28).isocalendar()[1]


def parse_iso_week(key: str) -> date:
    """Parse "2026-W06" into the Monday of that ISO week."""
    match = _WEEK_KEY_RE.fullmatch(key) if isinstance(key, str) else None
    if match is None:
        raise InvalidPeriodKey(WEEK_VIEW, key, "expected YYYY-Www")

    year, week = int(match.group(1)), int(match.group(2))
    try:
        return date.fromisocalendar(year, week, 1)
    except ValueError:
        raise InvalidPeriodKey(WEEK_VIEW, key, f"week {week:02d} does not exist in {year:04d}") from None


def format_iso_week(day: date) -> str:
    """ISO week key of the week containing `day`."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year:04d}-W{iso_week:02d}"


def parse_month_key(key: str) -> date:
    """Parse "2026-02" into the first day of that month."""
    match = _MONTH_KEY_RE.fullmatch(key) if isinstance(key, str) else None
    if match is None:
        raise InvalidPeriodKey(MONTH_VIEW, key, "expected YYYY-MM")

    year, month = int(match.group(1)), int(match.group(2))
    if year < 1 or month < 1 or month > 12:
        raise InvalidPeriodKey(MONTH_VIEW, key, "month out of range")
    return date(year, month, 1)


def format_month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def shift_months(month_start: date, offset: int) -> date:
    """First day of the month `offset` months away; the day of `month_start` is ignored."""
    absolute_index = (month_start.year * 12 + (month_start.month - 1)) + offset
    year, month_zero_based = divmod(absolute_index, 12)
    return date(year, month_zero_based + 1, 1)


def _month_end(month_start: date) -> date:
    return date(month_start.year, month_start.month, calendar.monthrange(month_start.year, month_start.month)[1])


def parse_period_key(view: str, key: str) -> date:
    """First day of the period `key` names under `view`."""
    if validate_view(view) == WEEK_VIEW:
        return parse_iso_week(key)
    return parse_month_key(key)


def format_period_key(view: str, day: date) -> str:
    """Key of the period under `view` that contains `day`."""
    if validate_view(view) == WEEK_VIEW:
        return format_iso_week(day)
    return format_month_key(day)


def period_start(view: str, key: str) -> date:
    return parse_period_key(view, key)


# ---------------------------------------------------------------------------
# Current period
# ---------------------------------------------------------------------------


def get_current_week(*, today: date | None = None) -> str:
    return format_iso_week(today or date.today())


def get_current_month(*, today: date | None = None) -> str:
    return format_month_key(today or date.today())


def get_current_period(view: str, *, today: date | None = None) -> str:
    return format_period_key(view, today or date.today())


# ---------------------------------------------------------------------------
# Ranges and navigation
# ---------------------------------------------------------------------------


def get_period_date_range(view: str, key: str) -> DateRange:
    """
    Inclusive calendar range for a period.

    Weeks run Monday through Sunday; months run from the 1st to the last day.
    Add one day to `end` (or use `end_exclusive`) for a half-open bound.
    """
    start = parse_period_key(view, key)
    if view == WEEK_VIEW:
        try:
            end = start + timedelta(days=6)
        except OverflowError:
            raise InvalidPeriodKey(view, key, "week ends past the last supported date") from None
        return DateRange(start=start, end=end)
    return DateRange(start=start, end=_month_end(start))


def _step(view: str, key: str, offset: int) -> str:
    start = parse_period_key(view, key)
    # date arithmetic past year 1 or 9999 raises OverflowError / ValueError.
    try:
        if view == WEEK_VIEW:
            return format_iso_week(start + timedelta(weeks=offset))
        return format_month_key(shift_months(start, offset))
    except (OverflowError, ValueError):
        raise InvalidPeriodKey(view, key, "no neighbouring period in the supported date range") from None


def get_next_period(view: str, key: str) -> str:
    return _step(view, key, 1)


def get_prev_period(view: str, key: str) -> str:
    return _step(view, key, -1)


def get_previous_period_key(view: str, key: str) -> str:
    """Key of the comparable period right before `key`, used for trend deltas."""
    return get_prev_period(view, key)


def can_go_prev(view: str, key: str, *, earliest: str | None = None) -> bool:
    """False once the previous period would start before the earliest supported month."""
    floor = parse_month_key(earliest or EARLIEST_SUPPORTED_PERIOD)
    previous_start = period_start(view, get_prev_period(view, key))
    return previous_start >= floor


def can_go_next(view: str, key: str, *, today: date | None = None) -> bool:
    """False when the next period has not started yet."""
    current = today or date.today()
    next_start = period_start(view, get_next_period(view, key))
    return next_start <= current


def convert_period_key(from_view: str, to_view: str, key: str) -> str:
    """
    Map a key onto another view using the first day of the source period.

    Week -> month picks the month of the week's Monday; month -> week picks the
    ISO week containing the 1st. Converting back does not always land on the
    original period.
    """
    validate_view(to_view)
    if from_view == to_view:
        # Identity, but the key must still be valid.
        parse_period_key(from_view, key)
        return key

    return format_period_key(to_view, parse_period_key(from_view, key))


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


def get_period_label(view: str, key: str, *, locale: PeriodLocale | None = None) -> str:
    """Display label: "3 – 9 feb" for weeks, "februari 2026" for months."""
    resolved_locale = _resolve_locale(locale)
    period = get_period_date_range(view, key)
    if view == WEEK_VIEW:
        return week_label(period.start, period.end, resolved_locale)
    return month_label(period.start, resolved_locale)


def month_options(keys: Iterable[str], *, locale: PeriodLocale | None = None) -> list[MonthOption]:
    """Selector options for known months, newest first, duplicates dropped."""
    resolved_locale = _resolve_locale(locale)
    month_starts = {parse_month_key(key) for key in keys}

    return [
        MonthOption(label=month_option_label(month_start, resolved_locale), value=format_month_key(month_start))
        for month_start in sorted(month_starts, reverse=True)
    ]
