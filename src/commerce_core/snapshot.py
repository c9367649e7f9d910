"""
In-memory snapshot of the marketplace tables the engine reads.

The data-access layer owns querying; the engine only ever sees these four
frames, already fetched and internally consistent.
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping

import pandas as pd

ORDER_COLUMNS = ["order_id", "order_date", "payment_completed", "buyer_id"]
ITEM_COLUMNS = [
    "order_id",
    "product_id",
    "unit_price",
    "quantity",
    "surcharge",
    "approval_status",
]
PRODUCT_COLUMNS = [
    "product_id",
    "title",
    "category",
    "seller_id",
    "stock_quantity",
    "created_at",
]
SELLER_COLUMNS = ["seller_id", "first_name", "last_name", "company_name"]


def _empty(columns: list[str]) -> pd.DataFrame:
    return pd.DataFrame(columns=columns)


def _frame(
    records: Iterable[Mapping], columns: list[str], date_columns: tuple[str, ...] = ()
) -> pd.DataFrame:
    df = pd.DataFrame(list(records), columns=columns)
    for col in date_columns:
        df[col] = pd.to_datetime(df[col])
    return df


@dataclass
class Snapshot:
    """The orders, line items, products and sellers behind one report request."""

    orders: pd.DataFrame
    items: pd.DataFrame
    products: pd.DataFrame
    sellers: pd.DataFrame = field(default_factory=lambda: _empty(SELLER_COLUMNS))

    @classmethod
    def from_records(
        cls,
        orders: Iterable[Mapping] = (),
        items: Iterable[Mapping] = (),
        products: Iterable[Mapping] = (),
        sellers: Iterable[Mapping] = (),
    ) -> "Snapshot":
        """Build a snapshot from plain dict records (missing keys become NaN)."""
        item_frame = _frame(items, ITEM_COLUMNS)
        item_frame["unit_price"] = pd.to_numeric(item_frame["unit_price"]).astype(float)
        item_frame["surcharge"] = pd.to_numeric(item_frame["surcharge"]).astype(float)
        item_frame["quantity"] = pd.to_numeric(item_frame["quantity"]).astype(int)

        order_frame = _frame(orders, ORDER_COLUMNS, date_columns=("order_date",))
        order_frame["payment_completed"] = (
            order_frame["payment_completed"].fillna(False).astype(bool)
        )

        return cls(
            orders=order_frame,
            items=item_frame,
            products=_frame(products, PRODUCT_COLUMNS, date_columns=("created_at",)),
            sellers=_frame(sellers, SELLER_COLUMNS),
        )

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls.from_records()
