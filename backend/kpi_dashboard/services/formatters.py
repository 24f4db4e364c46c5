from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

# nl-NL puts a no-break space between the euro sign and the amount.
EURO_PREFIX = "€ "


def _to_decimal(value: float | int | Decimal) -> Decimal:
    # str() first so 25.55 rounds like the literal, not its binary approximation.
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _dutch_grouping(value: Decimal, places: int) -> str:
    """Render with "." thousands and "," decimals, e.g. 1234.5 -> "1.234,50"."""
    quantized = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    english = f"{quantized:,.{places}f}"
    return english.replace(",", "_").replace(".", ",").replace("_", ".")


def format_eur(value: float | int | Decimal) -> str:
    """Whole euros: 1234.56 -> "€ 1.235"."""
    return EURO_PREFIX + _dutch_grouping(_to_decimal(value), 0)


def format_eur_with_cents(value: float | int | Decimal) -> str:
    """Euros and cents: 1234.5 -> "€ 1.234,50"."""
    return EURO_PREFIX + _dutch_grouping(_to_decimal(value), 2)


def format_pct(value: float | int | Decimal) -> str:
    """One decimal with a point separator, matching the dashboard cards: "25.6%"."""
    quantized = _to_decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{quantized}%"


def format_number(value: float | int | Decimal) -> str:
    """Dutch grouping with at most three decimals: 1234 -> "1.234", 1234.5 -> "1.234,5"."""
    text = _dutch_grouping(_to_decimal(value), 3)
    whole, _, fraction = text.partition(",")
    fraction = fraction.rstrip("0")
    if whole in ("-0", "") and not fraction:
        return "0"
    return f"{whole},{fraction}" if fraction else whole


def format_euro_axis(value: float | int | Decimal) -> str:
    """Chart axis ticks in thousands: 1500 -> "€1.5k"."""
    thousands = (_to_decimal(value) / 1000).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"€{thousands}k"
