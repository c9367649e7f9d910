"""
Per-bucket and whole-range aggregation of normalized orders.

Sums are accumulated unrounded; money is rounded once when a report value
is produced.
"""

from dataclasses import dataclass
from datetime import datetime

import numpy as np
import pandas as pd

from .money import round_money
from .normalize import APPROVED, NormalizedOrders
from .periods import TimeBucket
from .snapshot import Snapshot

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass(frozen=True)
class PeriodReport:
    """Order count, revenue and AOV for one bucket."""

    bucket: TimeBucket
    order_count: int
    revenue: float
    average_order_value: float


def assign_buckets(order_dates: pd.Series, buckets: list[TimeBucket]) -> np.ndarray:
    """
    Position of the bucket containing each date, or -1 when none does.

    Buckets must be sorted and non-overlapping, so the last bucket starting
    at or before a date is the only one that can contain it.
    """
    if not buckets:
        return np.full(len(order_dates), -1, dtype=np.int64)

    starts = np.array([b.start for b in buckets], dtype="datetime64[ns]")
    ends = np.array([b.end for b in buckets], dtype="datetime64[ns]")
    dates = order_dates.to_numpy(dtype="datetime64[ns]")

    positions = np.searchsorted(starts, dates, side="right") - 1
    candidate = np.clip(positions, 0, None)
    inside = (positions >= 0) & (dates <= ends[candidate])
    return np.where(inside, positions, -1).astype(np.int64)


def aggregate_periods(
    normalized: NormalizedOrders, buckets: list[TimeBucket]
) -> list[PeriodReport]:
    """One PeriodReport per bucket, in bucket order."""
    orders = normalized.orders
    positions = assign_buckets(orders["order_date"], buckets)
    assigned = positions >= 0

    counts = np.bincount(positions[assigned], minlength=len(buckets))
    revenue = np.bincount(
        positions[assigned],
        weights=orders["approved_total"].to_numpy(dtype=float)[assigned],
        minlength=len(buckets),
    )

    reports = []
    for bucket, count, total in zip(buckets, counts, revenue):
        count = int(count)
        average = total / count if count > 0 else 0.0
        reports.append(
            PeriodReport(
                bucket=bucket,
                order_count=count,
                revenue=round_money(total),
                average_order_value=round_money(average),
            )
        )
    return reports


def series_payload(reports: list[PeriodReport]) -> dict[str, list[dict]]:
    """Chart series: orderData, revenueData and avgOrderValueData."""

    def point(report: PeriodReport, value: float | int) -> dict:
        return {
            "period": report.bucket.key,
            "label": report.bucket.label,
            "value": value,
            "date": report.bucket.start,
        }

    return {
        "orderData": [point(r, r.order_count) for r in reports],
        "revenueData": [point(r, r.revenue) for r in reports],
        "avgOrderValueData": [point(r, r.average_order_value) for r in reports],
    }


def compute_overview(normalized: NormalizedOrders) -> dict:
    """Headline totals for the whole range."""
    orders = normalized.orders
    items = normalized.items

    total_orders = len(orders)
    total_revenue = float(orders["approved_total"].sum())
    average = total_revenue / total_orders if total_orders > 0 else 0.0

    return {
        "totalOrders": total_orders,
        "totalRevenue": round_money(total_revenue),
        "averageOrderValue": round_money(average),
        "totalItemsSold": int(items["quantity"].sum()),
        "uniqueProducts": int(items["product_id"].nunique()),
        "uniqueBuyers": int(orders["buyer_id"].nunique()),
        "uniqueSellers": int(items["seller_id"].nunique()),
    }


def weekday_sales(normalized: NormalizedOrders) -> list[dict]:
    """Revenue and order count per weekday, always 7 entries Sun..Sat."""
    orders = normalized.orders
    # pandas counts Monday as 0; shift so Sunday is 0
    weekday = (orders["order_date"].dt.dayofweek + 1) % 7
    revenue = orders["approved_total"].groupby(weekday).sum()
    counts = orders["order_id"].groupby(weekday).count()

    return [
        {
            "day": name,
            "revenue": round_money(revenue.get(index, 0.0)),
            "orders": int(counts.get(index, 0)),
        }
        for index, name in enumerate(WEEKDAY_NAMES)
    ]


def recent_orders(normalized: NormalizedOrders, limit: int = 10) -> list[dict]:
    """Latest orders first, each with its counting line items."""
    latest = normalized.orders.sort_values(
        ["order_date", "order_id"], ascending=[False, False], kind="mergesort"
    ).head(limit)
    items_by_order = {
        order_id: group for order_id, group in normalized.items.groupby("order_id", sort=False)
    }

    result = []
    for order in latest.itertuples(index=False):
        lines = items_by_order.get(order.order_id, normalized.items.iloc[0:0])
        result.append(
            {
                "id": _plain(order.order_id),
                "orderDate": _as_datetime(order.order_date),
                "items": [
                    {
                        "productId": _plain(line.product_id),
                        "title": line.title,
                        "quantity": int(line.quantity),
                        "price": round_money(line.unit_price),
                        "approvalStatus": line.approval_status,
                    }
                    for line in lines.itertuples(index=False)
                ],
                "totalAmount": round_money(order.approved_total),
            }
        )
    return result


def _plain(value):
    """numpy scalars to Python scalars so reports stay JSON-serializable."""
    return value.item() if isinstance(value, np.generic) else value


def _as_datetime(value) -> datetime:
    return pd.Timestamp(value).to_pydatetime()


def activity_summary(snapshot: Snapshot) -> dict:
    """
    Payment and participation counts over every order in the range.

    Unlike the revenue figures these read the raw snapshot: unpaid orders
    are counted as processing payments, and a seller is active once one of
    their products has an approved line item, paid or not.
    """
    orders = snapshot.orders
    paid = orders["payment_completed"].fillna(False).astype(bool)

    items = snapshot.items
    approved = items[items["approval_status"] == APPROVED]
    seller_ids = approved["product_id"].map(
        snapshot.products.drop_duplicates("product_id").set_index("product_id")["seller_id"]
    )
    active_sellers = seller_ids[seller_ids.isin(snapshot.sellers["seller_id"])]

    return {
        "completedPayments": int(paid.sum()),
        "processingPayments": int((~paid).sum()),
        "activeBuyers": int(orders["buyer_id"].nunique()),
        "activeSellers": int(active_sellers.nunique()),
    }
