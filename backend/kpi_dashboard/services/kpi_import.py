"""
KPI import: parse daily KPI exports (CSV or .xlsx) into entries.

Exports come from the till/back-office and are mostly Dutch: numbers use "."
for thousands and "," for decimals, dates are DD-MM-YYYY, and the header row
is somewhere in the first 20 rows. Column names vary between export
versions, so every field is looked up through a list of aliases.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

MAX_HEADER_SCAN_ROWS = 20

SUMMARY_KEYWORDS = (
    "totaal", "total", "gemiddeld", "average", "gemiddelde", "subtotaal",
    "weektotaal", "maandtotaal",
)
HEADER_KEYWORDS = ("datum", "date", "dag", "day", "omzet", "revenue", "arbeidskosten")

_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Excel serial day numbers count from this date.
EXCEL_EPOCH = date(1899, 12, 30)
# Serial numbers in this window are treated as dates (roughly 2009-2064).
_EXCEL_SERIAL_RANGE = (40000, 60000)

_DUTCH_DATE_RE = re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})", re.ASCII)
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

# field -> column aliases, first match wins.
NUMBER_COLUMNS: dict[str, tuple[str, ...]] = {
    "planned_revenue": ("Gepland Netto", "Gepland Omzet", "Omzet Begroot", "Planned Revenue"),
    "gross_revenue": ("Bruto Omzet", "Omzet Bruto", "Gross Revenue"),
    "net_revenue": ("Netto Omzet", "Omzet Netto", "Net Revenue"),
    "burger_kitchen_revenue": ("Bruto BK =TB+Uber", "BK Omzet", "Burger Kitchen Omzet"),
    "planned_labour_cost": ("Gepland AK", "Arbeidskosten Begroot", "Planned Labour"),
    "labour_cost": ("€ Arbeidskosten", "Arbeidskosten", "Labour Cost"),
    "worked_hours": ("Gewerte Uren", "Gewerkte uren", "Worked Hours", "Uren"),
    "labour_productivity": ("Productiviteit", "Arbeidsproduc", "Arbeidsproductiviteit", "Productivity"),
    "food_cost": ("Food Cost", "Voedselkosten", "COGS"),
    "on_time_delivery_mins": ("OTD", "Bezorgtijd", "On Time Delivery"),
    "make_time_mins": ("MT", "Maaktijd", "Bereidtijd", "Make Time"),
    "drive_time_mins": ("DT", "Rijdtijd", "Rijtijd", "Drive Time"),
    "order_count": ("Orders", "Bestellingen", "Aantal bestellingen"),
    "avg_order_value": ("Gem. ow", "Gemiddelde OW", "Gem. bestelbedrag", "Avg Order Value"),
    "orders_per_run": ("OPR", "Bestellingen per rit", "Orders per run"),
}

PERCENT_COLUMNS: dict[str, tuple[str, ...]] = {
    "planned_labour_pct": ("Gepland AK%", "Gepland % Arbeidskosten", "Begroot Arbeids%"),
    "labour_pct": ("% Arbeidskosten", "Arbeids%", "Labour %"),
    "food_cost_pct": ("Food Cost %", "Voedselkosten %", "COGS %"),
    "delivery_rate_20min": (
        "20 min", "20 min bezorgd", "Bezorgd binnen 20 min %", "% binnen 20 min", "20 min %",
    ),
    "delivery_rate_30min": (
        "30 min", "30 min bezorgd", "Bezorgd binnen 30 min %", "% binnen 30 min", "30 min %",
    ),
}

CASH_DIFFERENCE_COLUMNS = ("Kasverschil", "Cash Difference")
MANAGER_COLUMNS = ("Verantwoordelijk", "Manager", "Vestigingsmanager")


class KPIImportError(ValueError):
    pass


@dataclass(frozen=True)
class ParsedKPIEntry:
    date: date
    day_name: str
    week_number: int
    planned_revenue: float = 0.0
    gross_revenue: float = 0.0
    net_revenue: float = 0.0
    burger_kitchen_revenue: float = 0.0
    planned_labour_cost: float = 0.0
    labour_cost: float = 0.0
    planned_labour_pct: float = 0.0
    labour_pct: float = 0.0
    worked_hours: float = 0.0
    labour_productivity: float = 0.0
    food_cost: float = 0.0
    food_cost_pct: float = 0.0
    delivery_rate_20min: float = 0.0
    delivery_rate_30min: float = 0.0
    on_time_delivery_mins: float = 0.0
    make_time_mins: float = 0.0
    drive_time_mins: float = 0.0
    order_count: float = 0.0
    avg_order_value: float = 0.0
    orders_per_run: float = 0.0
    cash_difference: float | None = None
    manager: str = ""


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def _round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def parse_dutch_number(value: str | None) -> float | None:
    """
    "€ 1.545,78" -> 1545.78, "29,11" -> 29.11, "21,92%" -> 21.92, "13%" -> 13.0

    Blank cells and spreadsheet errors ("#DIV/0!") give None.
    """
    if value is None:
        return None

    text = value.strip()
    if text.startswith("€"):
        text = text[1:].strip()
    if text.endswith("%"):
        text = text[:-1].strip()
    if not text or text.startswith("#"):
        return None

    if "." in text and "," in text:
        text = text.replace(".", "").replace(",", ".")
    elif "," in text:
        text = text.replace(",", ".")

    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return _round2(float(number))


def parse_date_string(value: str | None) -> date | None:
    """DD-MM-YYYY (Dutch exports) or YYYY-MM-DD; anything else is None."""
    if not value:
        return None

    text = value.strip()
    try:
        dutch = _DUTCH_DATE_RE.fullmatch(text)
        if dutch:
            day, month, year = (int(part) for part in dutch.groups())
            return date(year, month, day)
        if _ISO_DATE_RE.fullmatch(text):
            return date.fromisoformat(text)
    except ValueError:
        return None
    return None


def _cell_number(value: Any) -> float | None:
    if value is None or isinstance(value, (bool, date)):
        return None
    if isinstance(value, (int, float)):
        return _round2(value)
    return parse_dutch_number(str(value))


def _cell_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        low, high = _EXCEL_SERIAL_RANGE
        if low < value < high:
            return EXCEL_EPOCH + timedelta(days=int(value))
        return None
    if isinstance(value, str):
        return parse_date_string(value)
    return None


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


# ---------------------------------------------------------------------------
# Row handling
# ---------------------------------------------------------------------------


def _find_header_row(rows: list[list[Any]]) -> int | None:
    for index, row in enumerate(rows[:MAX_HEADER_SCAN_ROWS]):
        for cell in row:
            if isinstance(cell, str) and any(keyword in cell.lower().strip() for keyword in HEADER_KEYWORDS):
                return index
    return None


def _is_summary_row(cells: list[Any]) -> bool:
    for cell in cells:
        if isinstance(cell, str):
            lower = cell.lower().strip()
            if any(keyword in lower for keyword in SUMMARY_KEYWORDS):
                return True
    return False


def _lookup(row: dict[str, Any], aliases: tuple[str, ...]) -> Any:
    for name in aliases:
        value = row.get(name)
        if value is not None and value != "":
            return value
    return None


def _row_date(cells: list[Any], date_column: int | None) -> date | None:
    if date_column is not None and date_column < len(cells):
        found = _cell_date(cells[date_column])
        if found is not None:
            return found
    # Some exports carry no "Datum" header; take the first date-like cell.
    for cell in cells:
        found = _cell_date(cell)
        if found is not None:
            return found
    return None


def _percentage(value: Any, *, fraction_percentages: bool) -> float:
    number = _cell_number(value)
    if number is None:
        return 0.0
    # Excel stores 21.9% as 0.219 in cells formatted as percentages.
    if fraction_percentages and isinstance(value, (int, float)) and 0 < number < 1:
        return _round2(value * 100)
    return number


def _parse_rows(rows: list[list[Any]], *, fraction_percentages: bool, min_cells: int = 1) -> list[ParsedKPIEntry]:
    header_index = _find_header_row(rows)
    if header_index is None:
        return []

    headers = [_cell_text(cell) or f"__col_{index}" for index, cell in enumerate(rows[header_index])]
    date_column = next(
        (index for index, header in enumerate(headers) if header.lower() in ("datum", "date")),
        None,
    )

    entries: list[ParsedKPIEntry] = []
    for cells in rows[header_index + 1:]:
        if len([cell for cell in cells if cell not in (None, "")]) < min_cells:
            continue
        if _is_summary_row(cells):
            continue

        entry_date = _row_date(cells, date_column)
        if entry_date is None:
            continue

        row = {header: cells[index] if index < len(cells) else None for index, header in enumerate(headers)}
        values: dict[str, Any] = {
            field: _cell_number(_lookup(row, aliases)) or 0.0 for field, aliases in NUMBER_COLUMNS.items()
        }
        values.update(
            {
                field: _percentage(_lookup(row, aliases), fraction_percentages=fraction_percentages)
                for field, aliases in PERCENT_COLUMNS.items()
            }
        )

        entries.append(
            ParsedKPIEntry(
                date=entry_date,
                day_name=_DAY_NAMES[entry_date.weekday()],
                week_number=entry_date.isocalendar()[1],
                cash_difference=_cell_number(_lookup(row, CASH_DIFFERENCE_COLUMNS)),
                manager=_cell_text(_lookup(row, MANAGER_COLUMNS)),
                **values,
            )
        )

    return entries


def _dedupe_by_date(entries: list[ParsedKPIEntry]) -> list[ParsedKPIEntry]:
    # Later rows (or sheets) win for a repeated date.
    by_date = {entry.date: entry for entry in entries}
    return [by_date[day] for day in sorted(by_date)]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_kpi_csv_text(text: str) -> list[ParsedKPIEntry]:
    """Parse CSV text; ";" is the delimiter when present, else ","."""
    delimiter = ";" if ";" in text else ","
    rows = [row for row in csv.reader(io.StringIO(text), delimiter=delimiter) if row]
    entries = _parse_rows(rows, fraction_percentages=False, min_cells=3)
    logger.info("Parsed %d KPI rows from CSV", len(entries))
    return _dedupe_by_date(entries)


def parse_kpi_workbook(content: bytes) -> list[ParsedKPIEntry]:
    """Parse every sheet of an .xlsx workbook and merge the entries by date."""
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (BadZipFile, InvalidFileException, KeyError, OSError) as exc:
        logger.warning("Could not open KPI workbook: %s", exc)
        raise KPIImportError("File is not a readable .xlsx workbook") from exc

    entries: list[ParsedKPIEntry] = []
    try:
        for sheet in workbook.worksheets:
            rows = [list(row) for row in sheet.iter_rows(values_only=True)]
            sheet_entries = _parse_rows(rows, fraction_percentages=True)
            if not sheet_entries:
                logger.debug("Sheet %r has no KPI rows", sheet.title)
            entries.extend(sheet_entries)
    finally:
        workbook.close()

    logger.info("Parsed %d KPI rows from workbook", len(entries))
    return _dedupe_by_date(entries)


def parse_kpi_file(content: bytes) -> list[ParsedKPIEntry]:
    """Parse an uploaded KPI export, detecting .xlsx by its zip signature."""
    if content[:2] == b"PK":
        return parse_kpi_workbook(content)
    if content[:2] == b"\xd0\xcf":
        raise KPIImportError("Legacy .xls workbooks are not supported; save as .xlsx or CSV")
    return parse_kpi_csv_text(content.decode("utf-8-sig", errors="replace"))
