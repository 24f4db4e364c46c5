from __future__ import annotations

from dataclasses import dataclass
from datetime import date

RANGE_SEPARATOR = " – "


@dataclass(frozen=True)
class PeriodLocale:
    """Month names used when rendering period labels."""

    code: str
    month_names: tuple[str, ...]
    month_abbreviations: tuple[str, ...]

    def month_name(self, month: int) -> str:
        return self.month_names[month - 1]

    def month_abbreviation(self, month: int) -> str:
        return self.month_abbreviations[month - 1]


DUTCH = PeriodLocale(
    code="nl",
    month_names=(
        "januari", "februari", "maart", "april", "mei", "juni",
        "juli", "augustus", "september", "oktober", "november", "december",
    ),
    month_abbreviations=(
        "jan", "feb", "mrt", "apr", "mei", "jun",
        "jul", "aug", "sep", "okt", "nov", "dec",
    ),
)

ENGLISH = PeriodLocale(
    code="en",
    month_names=(
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
    month_abbreviations=(
        "Jan", "Feb", "Mar", "Apr", "May", "Jun",
        "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
    ),
)

LOCALES: dict[str, PeriodLocale] = {locale.code: locale for locale in (DUTCH, ENGLISH)}


def get_locale(code: str) -> PeriodLocale:
    try:
        return LOCALES[code.strip().lower()]
    except KeyError:
        raise ValueError(f"Unsupported period locale: {code!r}") from None


def week_label(start: date, end: date, locale: PeriodLocale) -> str:
    """
    Render a Monday..Sunday range, keeping repeated parts off the left side.

    "3 – 9 feb", "26 jan – 1 feb", "29 dec 2025 – 4 jan 2026"
    """
    end_text = f"{end.day} {locale.month_abbreviation(end.month)}"

    if start.year != end.year:
        start_text = f"{start.day} {locale.month_abbreviation(start.month)} {start.year}"
        return f"{start_text}{RANGE_SEPARATOR}{end_text} {end.year}"

    if start.month != end.month:
        start_text = f"{start.day} {locale.month_abbreviation(start.month)}"
        return f"{start_text}{RANGE_SEPARATOR}{end_text}"

    return f"{start.day}{RANGE_SEPARATOR}{end_text}"


def month_label(month_start: date, locale: PeriodLocale) -> str:
    return f"{locale.month_name(month_start.month)} {month_start.year}"


def month_option_label(month_start: date, locale: PeriodLocale) -> str:
    """Short selector label such as "Feb 2026"."""
    abbreviation = locale.month_abbreviation(month_start.month)
    return f"{abbreviation[:1].upper()}{abbreviation[1:]} {month_start.year}"
