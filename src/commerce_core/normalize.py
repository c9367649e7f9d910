"""
Reduce a raw snapshot to the orders and line items that count toward analytics.

A line item counts when:
- its approval status is "approved"
- its product reference resolves
- its parent order is marked paid

Orders left with no counting items are dropped entirely, not zero-valued.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import pandas as pd

from .snapshot import Snapshot

logger = logging.getLogger(__name__)

APPROVED = "approved"
UNCATEGORIZED = "Uncategorized"

NORMALIZED_ORDER_COLUMNS = [
    "order_id",
    "order_date",
    "buyer_id",
    "approved_total",
    "items_sold",
]
NORMALIZED_ITEM_COLUMNS = [
    "order_id",
    "order_date",
    "product_id",
    "title",
    "category",
    "seller_id",
    "seller_name",
    "company_name",
    "seller_resolved",
    "stock_quantity",
    "unit_price",
    "quantity",
    "surcharge",
    "line_total",
    "approval_status",
]


@dataclass
class NormalizedOrders:
    """Counting orders (one row each, with approved_total) and their counting items."""

    orders: pd.DataFrame
    items: pd.DataFrame
    dropped_unapproved: int = 0
    dropped_unresolved: int = 0
    dropped_unpaid: int = 0

    def __len__(self) -> int:
        return len(self.orders)

    @property
    def empty(self) -> bool:
        return self.orders.empty

    @classmethod
    def empty_result(cls, **drop_counts: int) -> "NormalizedOrders":
        orders = pd.DataFrame(
            {
                "order_id": pd.Series(dtype=object),
                "order_date": pd.Series(dtype="datetime64[ns]"),
                "buyer_id": pd.Series(dtype=object),
                "approved_total": pd.Series(dtype=float),
                "items_sold": pd.Series(dtype=int),
            }
        )
        items = pd.DataFrame(
            {col: pd.Series(dtype=object) for col in NORMALIZED_ITEM_COLUMNS}
        )
        items["order_date"] = pd.Series(dtype="datetime64[ns]")
        for col in ("unit_price", "surcharge", "line_total"):
            items[col] = pd.Series(dtype=float)
        items["quantity"] = pd.Series(dtype=int)
        items["seller_resolved"] = pd.Series(dtype=bool)
        return cls(orders=orders, items=items, **drop_counts)


def seller_display_names(sellers: pd.DataFrame) -> pd.Series:
    """'First Last' per seller_id; sellers with neither name map to NaN."""
    first = sellers["first_name"].fillna("").astype(str)
    last = sellers["last_name"].fillna("").astype(str)
    names = (first + " " + last).str.strip().replace("", pd.NA)
    return pd.Series(names.values, index=sellers["seller_id"].values)


def _lookup(keys: pd.Series, table: pd.DataFrame, key: str, column: str) -> pd.Series:
    mapping = table.drop_duplicates(key).set_index(key)[column]
    return keys.map(mapping)


class Normalizer:
    """
    Filters a snapshot to analytics-eligible rows and computes line totals.

    line_total = unit_price * quantity + surcharge (surcharge defaults to 0)
    approved_total = sum of line_total over an order's surviving items
    """

    def normalize(self, snapshot: Snapshot) -> NormalizedOrders:
        items = snapshot.items
        orders = snapshot.orders

        approved_mask = items["approval_status"] == APPROVED
        approved = items[approved_mask]

        resolved_mask = approved["product_id"].isin(snapshot.products["product_id"])
        resolved = approved[resolved_mask]

        paid_orders = orders[orders["payment_completed"].fillna(False).astype(bool)]
        paid_mask = resolved["order_id"].isin(paid_orders["order_id"])
        kept = resolved[paid_mask].copy()

        drops = {
            "dropped_unapproved": int((~approved_mask).sum()),
            "dropped_unresolved": int((~resolved_mask).sum()),
            "dropped_unpaid": int((~paid_mask).sum()),
        }
        logger.debug("Normalized %d of %d line items (%s)", len(kept), len(items), drops)

        if kept.empty:
            return NormalizedOrders.empty_result(**drops)

        products = snapshot.products
        for column in ("title", "category", "seller_id", "stock_quantity"):
            kept[column] = _lookup(kept["product_id"], products, "product_id", column)
        kept["category"] = kept["category"].fillna(UNCATEGORIZED)

        sellers = snapshot.sellers.drop_duplicates("seller_id")
        kept["seller_name"] = kept["seller_id"].map(seller_display_names(sellers))
        kept["company_name"] = _lookup(kept["seller_id"], sellers, "seller_id", "company_name")
        kept["seller_resolved"] = kept["seller_id"].isin(sellers["seller_id"])

        kept["order_date"] = _lookup(
            kept["order_id"], paid_orders, "order_id", "order_date"
        ).dt.floor("ms")

        kept["unit_price"] = kept["unit_price"].astype(float)
        kept["quantity"] = kept["quantity"].astype(int)
        kept["surcharge"] = pd.to_numeric(kept["surcharge"], errors="coerce").fillna(0.0)
        kept["line_total"] = kept["unit_price"] * kept["quantity"] + kept["surcharge"]

        normalized_items = (
            kept[NORMALIZED_ITEM_COLUMNS]
            .sort_values(["order_date", "order_id"], kind="mergesort")
            .reset_index(drop=True)
        )

        normalized_orders = (
            normalized_items.groupby("order_id", sort=False)
            .agg(
                order_date=("order_date", "first"),
                approved_total=("line_total", "sum"),
                items_sold=("quantity", "sum"),
            )
            .reset_index()
        )
        normalized_orders["buyer_id"] = _lookup(
            normalized_orders["order_id"], paid_orders, "order_id", "buyer_id"
        )
        normalized_orders = (
            normalized_orders[NORMALIZED_ORDER_COLUMNS]
            .sort_values(["order_date", "order_id"], kind="mergesort")
            .reset_index(drop=True)
        )

        return NormalizedOrders(orders=normalized_orders, items=normalized_items, **drops)


def scope_snapshot(
    snapshot: Snapshot, seller_id: Any | None = None, product_id: Any | None = None
) -> Snapshot:
    """
    Restrict a snapshot to one seller's products and/or a single product.

    Admin reports pass neither and get the snapshot back unscoped. Orders are
    kept only if they still contain an in-scope line item.
    """
    if seller_id is None and product_id is None:
        return snapshot

    products = snapshot.products
    if seller_id is not None:
        products = products[products["seller_id"] == seller_id]
    if product_id is not None:
        products = products[products["product_id"] == product_id]

    items = snapshot.items[snapshot.items["product_id"].isin(products["product_id"])]
    orders = snapshot.orders[snapshot.orders["order_id"].isin(items["order_id"])]
    return Snapshot(orders=orders, items=items, products=products, sellers=snapshot.sellers)


def select_between(snapshot: Snapshot, start: datetime, end: datetime) -> Snapshot:
    """Keep orders dated within [start, end] and the line items belonging to them."""
    dates = snapshot.orders["order_date"]
    orders = snapshot.orders[(dates >= start) & (dates <= end)]
    items = snapshot.items[snapshot.items["order_id"].isin(orders["order_id"])]
    return Snapshot(
        orders=orders, items=items, products=snapshot.products, sellers=snapshot.sellers
    )
