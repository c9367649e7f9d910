"""
Report assembly: the three JSON shapes handed back to the HTTP layer.

Each builder takes an already-fetched Snapshot and an optional clock, runs
the engine, and returns a pydantic model. Dump with `to_payload()` for the
camelCase JSON the frontend expects.
"""

import logging
import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .aggregate import (
    activity_summary,
    aggregate_periods,
    compute_overview,
    recent_orders,
    series_payload,
    weekday_sales,
)
from .errors import ProductNotFoundError
from .growth import compare_halves
from .inventory import InventoryProduct, product_sales_history, reconstruct_inventory
from .normalize import Normalizer, scope_snapshot, select_between
from .periods import (
    Clock,
    Granularity,
    generate_periods,
    resolve_dashboard_range,
    resolve_date_range,
)
from .ranking import (
    category_breakdown,
    company_performance,
    top_products,
    top_sellers,
    top_selling_products,
)
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 10


class ReportModel(BaseModel):
    """Base for report shapes: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class DateRange(ReportModel):
    start_date: dt.datetime
    end_date: dt.datetime
    filter: str | None = None


class SeriesPoint(ReportModel):
    period: str = Field(description="Bucket key, e.g. 2024-01-05 or 2024-01")
    label: str = Field(description="Display label, e.g. 'Jan 5' or 'Jan 2024'")
    value: int | float
    date: dt.datetime = Field(description="Bucket start")


class AnalyticsSeries(ReportModel):
    order_data: list[SeriesPoint]
    revenue_data: list[SeriesPoint]
    avg_order_value_data: list[SeriesPoint]


class Overview(ReportModel):
    total_orders: int
    total_revenue: float
    average_order_value: float
    total_items_sold: int
    unique_products: int
    unique_buyers: int
    unique_sellers: int


class HalfMetrics(ReportModel):
    orders: int
    revenue: float
    avg_order_value: float


class GrowthMetrics(ReportModel):
    orders: float
    revenue: float
    avg_order_value: float


class PeriodMetrics(ReportModel):
    previous_period: HalfMetrics
    current_period: HalfMetrics
    growth: GrowthMetrics


class Activity(ReportModel):
    """Payment status and participant counts over all orders in the range."""

    completed_payments: int
    processing_payments: int
    active_buyers: int
    active_sellers: int


class CompanyPerformance(ReportModel):
    companies: list[dict[str, Any]]
    total_companies: int


class AdminOrderAnalytics(ReportModel):
    """Admin order analytics across all sellers."""

    period: Granularity
    date_range: DateRange
    overview: Overview
    analytics_data: AnalyticsSeries
    period_metrics: PeriodMetrics
    activity: Activity
    top_products: list[dict[str, Any]]
    top_sellers: list[dict[str, Any]]
    category_breakdown: list[dict[str, Any]]
    company_performance: CompanyPerformance


class SellerDashboard(ReportModel):
    """A single seller's dashboard."""

    average_order_value: float
    total_orders: int
    total_revenue: float
    recent_orders: list[dict[str, Any]]
    top_selling_products: list[dict[str, Any]]
    sales_data: list[dict[str, Any]] = Field(description="One entry per weekday, Sun..Sat")
    date_range: DateRange


class InventoryProductSummary(ReportModel):
    id: Any
    title: str
    initial_stock: int
    current_stock: int
    created_at: dt.datetime


class InventoryDataPoint(ReportModel):
    date: dt.date
    stock: int
    sold: int


class InventoryDetail(ReportModel):
    """Day-by-day stock for one product."""

    product: InventoryProductSummary
    inventory_data: list[InventoryDataPoint]


def build_admin_order_analytics(
    snapshot: Snapshot,
    granularity: "str | Granularity" = Granularity.WEEKLY,
    start: dt.datetime | None = None,
    end: dt.datetime | None = None,
    clock: Clock | None = None,
) -> AdminOrderAnalytics:
    """Bucketed series, overview, half-over-half growth and rankings for every seller."""
    granularity = Granularity.parse(granularity)
    start, end = resolve_date_range(granularity, start, end, clock)

    selected = select_between(snapshot, start, end)
    normalized = Normalizer().normalize(selected)
    buckets = generate_periods(start, end, granularity, clock)
    periods = aggregate_periods(normalized, buckets)

    logger.info(
        "Admin analytics: %d orders over %d buckets",
        len(normalized),
        len(buckets),
        extra={"report": "admin_order_analytics", "granularity": granularity.value},
    )

    return AdminOrderAnalytics(
        period=granularity,
        date_range=DateRange(start_date=start, end_date=end),
        overview=Overview.model_validate(compute_overview(normalized)),
        analytics_data=AnalyticsSeries.model_validate(series_payload(periods)),
        period_metrics=PeriodMetrics.model_validate(compare_halves(normalized)),
        activity=Activity.model_validate(activity_summary(selected)),
        top_products=top_products(normalized),
        top_sellers=top_sellers(normalized),
        category_breakdown=category_breakdown(normalized),
        company_performance=CompanyPerformance.model_validate(company_performance(normalized)),
    )


def build_seller_dashboard(
    snapshot: Snapshot,
    seller_id: Any,
    start: dt.datetime | None = None,
    end: dt.datetime | None = None,
    date_filter: str | None = None,
    clock: Clock | None = None,
) -> SellerDashboard:
    """Totals, recent orders, top products and weekday sales for one seller's products."""
    scoped = scope_snapshot(snapshot, seller_id=seller_id)

    earliest = None
    if not scoped.products.empty:
        earliest = scoped.products["created_at"].min().to_pydatetime()
    start, end, filter_label = resolve_dashboard_range(date_filter, start, end, clock, earliest)

    normalized = Normalizer().normalize(select_between(scoped, start, end))
    overview = compute_overview(normalized)

    logger.info(
        "Seller dashboard: %d orders",
        len(normalized),
        extra={"report": "seller_dashboard", "seller_id": seller_id},
    )

    return SellerDashboard(
        average_order_value=overview["averageOrderValue"],
        total_orders=overview["totalOrders"],
        total_revenue=overview["totalRevenue"],
        recent_orders=recent_orders(normalized, limit=RECENT_ORDERS_LIMIT),
        top_selling_products=top_selling_products(normalized),
        sales_data=weekday_sales(normalized),
        date_range=DateRange(start_date=start, end_date=end, filter=filter_label),
    )


def build_inventory_detail(
    snapshot: Snapshot,
    product_id: Any,
    seller_id: Any | None = None,
    start: dt.datetime | None = None,
    end: dt.datetime | None = None,
    clock: Clock | None = None,
) -> InventoryDetail:
    """
    Reconstructed stock series for one product.

    With a seller_id the product must belong to that seller; otherwise
    ProductNotFoundError is raised, as it is for an unknown product.
    """
    products = snapshot.products
    match = products[products["product_id"] == product_id]
    if seller_id is not None:
        match = match[match["seller_id"] == seller_id]
    if match.empty:
        raise ProductNotFoundError(product_id, seller_id)

    product = InventoryProduct.from_row(match.iloc[0])
    history = product_sales_history(snapshot, product_id)
    result = reconstruct_inventory(product, history, start, end, clock)

    return InventoryDetail(
        product=InventoryProductSummary(
            id=product.product_id,
            title=product.title,
            initial_stock=product.stock_quantity,
            current_stock=result.current_stock,
            created_at=product.created_at,
        ),
        inventory_data=[InventoryDataPoint(**point.to_payload()) for point in result.series],
    )
