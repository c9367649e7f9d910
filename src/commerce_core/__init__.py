# Analytics engine: pure functions over an in-memory marketplace snapshot
# Reusable across data sources; loaders live in commerce_sources

from .snapshot import Snapshot
from .periods import Granularity, TimeBucket, generate_periods, resolve_date_range
from .normalize import Normalizer, NormalizedOrders, scope_snapshot, select_between
from .aggregate import (
    PeriodReport,
    activity_summary,
    aggregate_periods,
    compute_overview,
    weekday_sales,
)
from .ranking import (
    RankedEntity,
    rank_by,
    top_products,
    top_sellers,
    category_breakdown,
    company_performance,
    top_selling_products,
)
from .growth import compare_halves, growth_rate
from .inventory import InventoryPoint, InventoryProduct, reconstruct_inventory
from .quality import DataQualityChecker, DataQualityReport
from .errors import AnalyticsError, ProductNotFoundError, SnapshotError
from .reports import (
    build_admin_order_analytics,
    build_inventory_detail,
    build_seller_dashboard,
)

__all__ = [
    "Snapshot",
    "Granularity",
    "TimeBucket",
    "generate_periods",
    "resolve_date_range",
    "Normalizer",
    "NormalizedOrders",
    "scope_snapshot",
    "select_between",
    "PeriodReport",
    "activity_summary",
    "aggregate_periods",
    "compute_overview",
    "weekday_sales",
    "RankedEntity",
    "rank_by",
    "top_products",
    "top_sellers",
    "category_breakdown",
    "company_performance",
    "top_selling_products",
    "compare_halves",
    "growth_rate",
    "InventoryPoint",
    "InventoryProduct",
    "reconstruct_inventory",
    "DataQualityChecker",
    "DataQualityReport",
    "AnalyticsError",
    "ProductNotFoundError",
    "SnapshotError",
    "build_admin_order_analytics",
    "build_inventory_detail",
    "build_seller_dashboard",
]
