"""
Top-N rankings over normalized line items.

One grouped-sum implementation (rank_by) backs every ranking; the wrappers
only choose the grouping key, the display name and the fixed list size.
"""

from dataclasses import dataclass, field, replace
from typing import Any

import numpy as np
import pandas as pd

from .money import round_money
from .normalize import NormalizedOrders

TOP_PRODUCTS_LIMIT = 10
TOP_SELLERS_LIMIT = 10
SELLER_TOP_PRODUCTS_LIMIT = 5
COMPANY_PERFORMANCE_LIMIT = 10

UNKNOWN_SELLER = "Unknown Seller"


@dataclass
class RankedEntity:
    """A grouped total. order_count counts distinct orders, not line items."""

    id: Any
    name: str
    total_quantity: int
    total_revenue: float
    order_count: int
    average_order_value: float
    attributes: dict[str, Any] = field(default_factory=dict)


def _plain(value: Any) -> Any:
    if isinstance(value, np.generic):
        value = value.item()
    if value is pd.NA or (isinstance(value, float) and np.isnan(value)):
        return None
    return value


def rank_by(
    normalized: NormalizedOrders,
    key: str,
    name_column: str,
    limit: int | None = None,
    sort_by: str = "total_revenue",
    extra_columns: tuple[str, ...] = (),
) -> list[RankedEntity]:
    """
    Group line items by `key`, sum quantity and revenue, count distinct orders.

    Sorted descending by `sort_by` ("total_revenue" or "total_quantity")
    rounded to cents, ties broken by ascending key so repeated runs give
    the same order.
    Rows with a missing key are excluded. `limit=None` keeps every group.
    """
    items = normalized.items
    if items.empty:
        return []

    aggregations = {
        "total_quantity": ("quantity", "sum"),
        "total_revenue": ("line_total", "sum"),
        "order_count": ("order_id", "nunique"),
    }
    # The grouping key itself cannot be aggregated, it comes back from reset_index
    for column in (name_column, *extra_columns):
        if column != key:
            aggregations[column] = (column, "first")

    grouped = items.groupby(key, sort=False).agg(**aggregations).reset_index()
    # Rank on the value as reported, so totals that display equal tie on key
    grouped["_rank_value"] = grouped[sort_by].map(round_money)
    grouped = grouped.sort_values(
        ["_rank_value", key], ascending=[False, True], kind="mergesort"
    )
    if limit is not None:
        grouped = grouped.head(limit)

    ranked = []
    for row in grouped.to_dict("records"):
        revenue = float(row["total_revenue"])
        orders = int(row["order_count"])
        ranked.append(
            RankedEntity(
                id=_plain(row[key]),
                name=_plain(row[name_column]),
                total_quantity=int(row["total_quantity"]),
                total_revenue=round_money(revenue),
                order_count=orders,
                average_order_value=round_money(revenue / orders if orders > 0 else 0.0),
                attributes={col: _plain(row[col]) for col in extra_columns},
            )
        )
    return ranked


def top_products(normalized: NormalizedOrders, limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    """Best products by revenue across all sellers."""
    ranked = rank_by(
        normalized,
        key="product_id",
        name_column="title",
        limit=limit,
        extra_columns=("category", "seller_id", "seller_name", "company_name", "seller_resolved"),
    )
    result = []
    for entity in ranked:
        attrs = entity.attributes
        seller = None
        if attrs["seller_resolved"]:
            seller = {
                "id": attrs["seller_id"],
                "name": attrs["seller_name"],
                "companyName": attrs["company_name"],
            }
        result.append(
            {
                "id": entity.id,
                "title": entity.name,
                "category": attrs["category"],
                "seller": seller,
                "totalQuantity": entity.total_quantity,
                "totalRevenue": entity.total_revenue,
                "orderCount": entity.order_count,
            }
        )
    return result


def top_sellers(normalized: NormalizedOrders, limit: int = TOP_SELLERS_LIMIT) -> list[dict]:
    """Best sellers by revenue; an order with several of a seller's items counts once."""
    ranked = rank_by(
        normalized,
        key="seller_id",
        name_column="seller_name",
        limit=limit,
        extra_columns=("company_name",),
    )
    return [
        {
            "id": entity.id,
            "name": entity.name or UNKNOWN_SELLER,
            "companyName": entity.attributes["company_name"],
            "totalQuantity": entity.total_quantity,
            "totalRevenue": entity.total_revenue,
            "orderCount": entity.order_count,
            "averageOrderValue": entity.average_order_value,
        }
        for entity in ranked
    ]


def category_breakdown(normalized: NormalizedOrders) -> list[dict]:
    """Every category, by revenue."""
    return [
        {
            "category": entity.id,
            "totalQuantity": entity.total_quantity,
            "totalRevenue": entity.total_revenue,
            "orderCount": entity.order_count,
        }
        for entity in rank_by(normalized, key="category", name_column="category")
    ]


def top_selling_products(
    normalized: NormalizedOrders, limit: int = SELLER_TOP_PRODUCTS_LIMIT
) -> list[dict]:
    """A seller's best products by units sold, with stock left from the initial quantity."""
    ranked = rank_by(
        normalized,
        key="product_id",
        name_column="title",
        limit=limit,
        sort_by="total_quantity",
        extra_columns=("stock_quantity",),
    )
    result = []
    for entity in ranked:
        initial = entity.attributes["stock_quantity"]
        result.append(
            {
                "id": entity.id,
                "title": entity.name,
                "totalSold": entity.total_quantity,
                "stockRemaining": int(initial) - entity.total_quantity
                if initial is not None
                else None,
                "revenue": entity.total_revenue,
            }
        )
    return result


def company_performance(
    normalized: NormalizedOrders, limit: int = COMPANY_PERFORMANCE_LIMIT
) -> dict:
    """
    Revenue per selling company, one entry per seller account.

    Only items whose seller row resolves count. A seller without a company
    name is listed under their own name. totalCompanies counts every seller
    with sales, before the limit is applied.
    """
    items = normalized.items
    with_seller = replace(normalized, items=items[items["seller_resolved"].astype(bool)])
    ranked = rank_by(
        with_seller,
        key="seller_id",
        name_column="seller_name",
        extra_columns=("company_name",),
    )
    companies = [
        {
            "sellerId": entity.id,
            "companyName": entity.attributes["company_name"] or entity.name,
            "sellerName": entity.name,
            "totalOrders": entity.order_count,
            "totalRevenue": entity.total_revenue,
            "totalItems": entity.total_quantity,
            "averageOrderValue": entity.average_order_value,
        }
        for entity in ranked
    ]
    return {"companies": companies[:limit], "totalCompanies": len(companies)}
