import logging
from datetime import date

from kpi_dashboard.services.period_dates import DateRange
from kpi_dashboard.services.period_query import (
    ResolvedPeriod,
    resolve_period,
    resolve_period_key,
    resolve_view,
)

TODAY = date(2026, 2, 5)


def test_resolve_view_defaults_to_week() -> None:
    assert resolve_view(None) == "week"
    assert resolve_view("") == "week"
    assert resolve_view("year") == "week"
    assert resolve_view("month") == "month"
    assert resolve_view("week") == "week"


def test_resolve_period_key_keeps_valid_key() -> None:
    assert resolve_period_key("week", "2025-W40", today=TODAY) == "2025-W40"
    assert resolve_period_key("month", "2025-10", today=TODAY) == "2025-10"


def test_resolve_period_key_falls_back_to_current_period() -> None:
    assert resolve_period_key("week", None, today=TODAY) == "2026-W06"
    assert resolve_period_key("week", "2026-W99", today=TODAY) == "2026-W06"
    assert resolve_period_key("month", "2026-W06", today=TODAY) == "2026-02"
    assert resolve_period_key("month", "", today=TODAY) == "2026-02"


def test_resolve_period_key_logs_fallback(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="kpi_dashboard.services.period_query")
    resolve_period_key("week", "2026-W99", today=TODAY)
    assert "2026-W99" in caplog.text


def test_resolve_period_picks_param_for_view() -> None:
    resolved = resolve_period("month", "2026-W03", "2025-12", today=TODAY)
    assert resolved == ResolvedPeriod(
        view="month",
        period_key="2025-12",
        range=DateRange(start=date(2025, 12, 1), end=date(2025, 12, 31)),
    )

    resolved = resolve_period(None, "2026-W03", "2025-12", today=TODAY)
    assert resolved.view == "week"
    assert resolved.period_key == "2026-W03"
    assert resolved.range.start == date(2026, 1, 12)


def test_resolve_period_all_missing_is_current_week() -> None:
    resolved = resolve_period(None, None, None, today=TODAY)
    assert resolved.period_key == "2026-W06"
    assert resolved.range == DateRange(start=date(2026, 2, 2), end=date(2026, 2, 8))


def test_resolve_period_key_only_keeps_canonical_spelling() -> None:
    assert resolve_period_key("week", "2025-W40\n", today=TODAY) == "2026-W06"
    assert resolve_period_key("week", "٢٠٢٥-W40", today=TODAY) == "2026-W06"
    assert resolve_period_key("month", "２０２５-10", today=TODAY) == "2026-02"
