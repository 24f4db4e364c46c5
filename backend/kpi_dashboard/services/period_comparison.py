from __future__ import annotations

from dataclasses import dataclass

from .period_dates import DateRange, get_period_date_range, get_previous_period_key


@dataclass(frozen=True)
class KPISummary:
    total_net_revenue: float = 0.0
    avg_labour_pct: float = 0.0
    total_orders: int = 0
    avg_labour_productivity: float = 0.0
    avg_food_cost_pct: float = 0.0
    avg_prime_cost_pct: float = 0.0


@dataclass(frozen=True)
class PeriodComparison:
    """
    Deltas against the previous period.

    Revenue, orders and productivity are relative changes in percent; labour,
    food cost and prime cost are already percentages, so they are reported as
    percentage-point differences.
    """

    revenue_change: float
    labour_change: float
    orders_change: float
    productivity_change: float
    food_cost_change: float
    prime_cost_change: float


def previous_period_range(view: str, key: str) -> DateRange:
    return get_period_date_range(view, get_previous_period_key(view, key))


def pct_change(current: float, previous: float) -> float:
    """Relative change in percent; unrounded, formatting is left to the caller."""
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def compare_summaries(current: KPISummary, previous: KPISummary) -> PeriodComparison:
    return PeriodComparison(
        revenue_change=pct_change(current.total_net_revenue, previous.total_net_revenue),
        labour_change=current.avg_labour_pct - previous.avg_labour_pct,
        orders_change=pct_change(current.total_orders, previous.total_orders),
        productivity_change=pct_change(current.avg_labour_productivity, previous.avg_labour_productivity),
        food_cost_change=current.avg_food_cost_pct - previous.avg_food_cost_pct,
        prime_cost_change=current.avg_prime_cost_pct - previous.avg_prime_cost_pct,
    )
