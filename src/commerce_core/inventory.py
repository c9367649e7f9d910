"""
Day-by-day stock reconstruction for a single product.

Products only store the quantity recorded at creation; historical stock is
derived by replaying approved sales against it:

    running = initial - sold before the window
    for each day: emit max(0, running), then subtract that day's sales

current_stock is computed separately over the whole history up to "now"
and is not taken from the last point of the series. The two can differ
when the window ends before today.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Mapping

import numpy as np
import pandas as pd

from .normalize import APPROVED
from .periods import Clock, end_of_day, start_of_day
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    return value.item() if isinstance(value, np.generic) else value


@dataclass(frozen=True)
class InventoryProduct:
    """The product fields the replay needs."""

    product_id: Any
    title: str
    stock_quantity: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping) -> "InventoryProduct":
        return cls(
            product_id=_plain(row["product_id"]),
            title=row["title"],
            stock_quantity=int(row["stock_quantity"]),
            created_at=pd.Timestamp(row["created_at"]).to_pydatetime(),
        )


@dataclass(frozen=True)
class InventoryPoint:
    """
    Stock at the start of a day and units sold during it.

    running_stock is the unclamped value; it goes negative when a product
    has been oversold and is kept for diagnostics only.
    """

    date: date
    stock: int
    sold: int
    running_stock: int

    def to_payload(self) -> dict:
        return {"date": self.date.isoformat(), "stock": self.stock, "sold": self.sold}


@dataclass
class InventoryReconstruction:
    product: InventoryProduct
    current_stock: int
    series: list[InventoryPoint]
    sold_before_start: int
    final_running_stock: int

    @property
    def oversold(self) -> bool:
        return self.final_running_stock < 0


def product_sales_history(snapshot: Snapshot, product_id: Any) -> pd.DataFrame:
    """Line items for one product with their order dates (all approval statuses)."""
    items = snapshot.items[snapshot.items["product_id"] == product_id]
    order_dates = snapshot.orders.drop_duplicates("order_id").set_index("order_id")["order_date"]
    history = items[["order_id", "quantity", "approval_status"]].copy()
    history["order_date"] = pd.to_datetime(history["order_id"].map(order_dates))
    return history.dropna(subset=["order_date"]).reset_index(drop=True)


def reconstruct_inventory(
    product: InventoryProduct,
    history: pd.DataFrame,
    start: datetime | None = None,
    end: datetime | None = None,
    clock: Clock | None = None,
) -> InventoryReconstruction:
    """
    Replay approved sales for [start, end], one point per calendar day.

    start defaults to the creation day and is never earlier than created_at;
    end defaults to now. Sales are counted through the end of end's day.
    """
    now = (clock or datetime.now)()
    created_at = product.created_at

    start = start if start is not None else start_of_day(created_at)
    end = end if end is not None else now
    start = max(start, created_at)
    window_end = end_of_day(end)

    approved = history[history["approval_status"] == APPROVED]
    dates = approved["order_date"]
    quantities = approved["quantity"]

    sold_before_start = int(quantities[(dates >= created_at) & (dates < start)].sum())

    in_window = approved[(dates >= start) & (dates <= window_end)]
    daily_sold = in_window.groupby(in_window["order_date"].dt.date)["quantity"].sum()

    running_stock = product.stock_quantity - sold_before_start
    series = []
    day = start.date()
    while day <= end.date():
        sold_today = int(daily_sold.get(day, 0))
        series.append(
            InventoryPoint(
                date=day,
                stock=max(0, running_stock),
                sold=sold_today,
                running_stock=running_stock,
            )
        )
        # Subtracting 0 would change nothing, so the guard is equivalent
        # to always subtracting.
        if sold_today > 0:
            running_stock -= sold_today
        day += timedelta(days=1)

    total_sold = int(quantities[(dates >= created_at) & (dates <= now)].sum())
    current_stock = max(0, product.stock_quantity - total_sold)

    if running_stock < 0:
        logger.info(
            "Product %s oversold: running stock %d",
            product.product_id,
            running_stock,
            extra={"product_id": product.product_id},
        )

    return InventoryReconstruction(
        product=product,
        current_stock=current_stock,
        series=series,
        sold_before_start=sold_before_start,
        final_running_stock=running_stock,
    )
