from __future__ import annotations

import io
from datetime import date, datetime

import openpyxl
import pytest

from kpi_dashboard.services.kpi_import import (
    KPIImportError,
    parse_date_string,
    parse_dutch_number,
    parse_kpi_csv_text,
    parse_kpi_file,
    parse_kpi_workbook,
)

WEEK_EXPORT_CSV = "\n".join(
    [
        "Weekrapport;;;;;;",
        "Vestiging Utrecht;;;;;;",
        "Datum;Dag;Netto Omzet;% Arbeidskosten;Orders;Kasverschil;Verantwoordelijk",
        "03-02-2026;dinsdag;€ 1.545,78;21,92%;130;-2,50;Sanne",
        "02-02-2026;maandag;€ 1.200,00;25%;110;#;Tom",
        "Totaal;;€ 2.745,78;;240;;",
        "02-02-2026;maandag;€ 1.250,00;24%;112;;Tom",
    ]
)


def _workbook_bytes(*sheets: list[list[object]]) -> bytes:
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for index, rows in enumerate(sheets):
        sheet = workbook.create_sheet(f"Week {index + 1}")
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_parse_dutch_number() -> None:
    assert parse_dutch_number("€ 1.545,78") == 1545.78
    assert parse_dutch_number("29,11") == 29.11
    assert parse_dutch_number("21,92%") == 21.92
    assert parse_dutch_number("13%") == 13.0
    assert parse_dutch_number("-2,50") == -2.5
    assert parse_dutch_number("42") == 42.0


def test_parse_dutch_number_blank_or_error_is_none() -> None:
    for value in (None, "", "   ", "#DIV/0!", "#", "abc", "€"):
        assert parse_dutch_number(value) is None, value


def test_parse_date_string() -> None:
    assert parse_date_string("03-02-2026") == date(2026, 2, 3)
    assert parse_date_string("3-2-2026") == date(2026, 2, 3)
    assert parse_date_string("2026-02-03") == date(2026, 2, 3)
    for value in (None, "", "31-02-2026", "02/03/2026", "Totaal", "2026-2-3"):
        assert parse_date_string(value) is None, value


def test_csv_export_with_preamble_and_summary_row() -> None:
    entries = parse_kpi_csv_text(WEEK_EXPORT_CSV)

    assert [entry.date for entry in entries] == [date(2026, 2, 2), date(2026, 2, 3)]

    tuesday = entries[1]
    assert tuesday.day_name == "Tuesday"
    assert tuesday.week_number == 6
    assert tuesday.net_revenue == 1545.78
    assert tuesday.labour_pct == 21.92
    assert tuesday.order_count == 130.0
    assert tuesday.cash_difference == -2.5
    assert tuesday.manager == "Sanne"
    assert tuesday.food_cost_pct == 0.0


def test_csv_repeated_date_keeps_last_row() -> None:
    monday = parse_kpi_csv_text(WEEK_EXPORT_CSV)[0]
    assert monday.net_revenue == 1250.0
    assert monday.labour_pct == 24.0
    assert monday.cash_difference is None


def test_csv_comma_delimited_with_iso_dates() -> None:
    text = "Date,Net Revenue,Orders,Manager\n2026-02-04,980.5,90,Alex\n"
    entries = parse_kpi_csv_text(text)
    assert len(entries) == 1
    assert entries[0].date == date(2026, 2, 4)
    assert entries[0].net_revenue == 980.5
    assert entries[0].manager == "Alex"


def test_csv_without_header_row_is_empty() -> None:
    assert parse_kpi_csv_text("1;2;3\n4;5;6\n") == []


def test_workbook_with_date_cells_and_fraction_percentages() -> None:
    content = _workbook_bytes(
        [
            ["KPI export februari"],
            ["Datum", "Netto Omzet", "% Arbeidskosten", "Food Cost %", "Orders", "Verantwoordelijk"],
            [datetime(2026, 2, 2), 1545.78, 0.219, 0.3, 120, "Sanne"],
            ["Totaal", 1545.78, 0.219, 0.3, 120, None],
        ],
        [
            ["Datum", "Netto Omzet", "% Arbeidskosten", "Food Cost %", "Orders", "Verantwoordelijk"],
            [datetime(2026, 2, 3), 1300, 0.25, 0.28, 100, "Tom"],
        ],
    )

    entries = parse_kpi_workbook(content)

    assert [entry.date for entry in entries] == [date(2026, 2, 2), date(2026, 2, 3)]
    monday = entries[0]
    assert monday.day_name == "Monday"
    assert monday.net_revenue == 1545.78
    assert monday.labour_pct == 21.9
    assert monday.food_cost_pct == 30.0
    assert monday.order_count == 120.0
    assert entries[1].manager == "Tom"


def test_parse_kpi_file_detects_format() -> None:
    workbook = _workbook_bytes([["Datum", "Netto Omzet"], [datetime(2026, 2, 2), 100]])
    assert parse_kpi_file(workbook)[0].net_revenue == 100.0

    csv_bytes = ("\ufeff" + WEEK_EXPORT_CSV).encode("utf-8")
    assert len(parse_kpi_file(csv_bytes)) == 2


def test_unreadable_workbooks_raise_import_error() -> None:
    with pytest.raises(KPIImportError):
        parse_kpi_file(b"PK\x03\x04 not really a zip archive")
    with pytest.raises(KPIImportError, match="xls"):
        parse_kpi_file(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64)
