"""
Half-over-half growth comparison for a range of orders.

Orders are sorted by date and split at n // 2. The first half is reported as
"previousPeriod" and the second as "currentPeriod"; the labels follow the
split, whatever the caller considers more recent.
"""

from .money import round_money
from .normalize import NormalizedOrders

METRICS = ("orders", "revenue", "avgOrderValue")


def growth_rate(current: float, previous: float) -> float:
    """Percentage change; 0 whenever the previous value is not positive."""
    return (current - previous) / previous * 100 if previous > 0 else 0.0


def _half_metrics(half) -> dict:
    count = len(half)
    revenue = float(half["approved_total"].sum())
    return {
        "orders": count,
        "revenue": revenue,
        "avgOrderValue": revenue / count if count > 0 else 0.0,
    }


def _rounded(metrics: dict) -> dict:
    return {
        name: value if isinstance(value, int) else round_money(value)
        for name, value in metrics.items()
    }


def compare_halves(normalized: NormalizedOrders) -> dict:
    """{previousPeriod, currentPeriod, growth}; all zeros for an empty range."""
    orders = normalized.orders.sort_values("order_date", kind="mergesort")
    midpoint = len(orders) // 2

    previous = _half_metrics(orders.iloc[:midpoint])
    current = _half_metrics(orders.iloc[midpoint:])
    growth = {
        metric: float(growth_rate(current[metric], previous[metric])) for metric in METRICS
    }

    return {
        "previousPeriod": _rounded(previous),
        "currentPeriod": _rounded(current),
        "growth": _rounded(growth),
    }
