"""
Marketplace Analytics Dashboard

A Streamlit dashboard over a marketplace export: admin order analytics,
a seller dashboard and per-product inventory history.
Run with: streamlit run app.py
"""

import sys
from datetime import datetime, time
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from commerce_core import (
    Granularity,
    ProductNotFoundError,
    build_admin_order_analytics,
    build_inventory_detail,
    build_seller_dashboard,
)
from commerce_core.config import get_settings
from commerce_core.logging_setup import setup_logging
from commerce_sources import MarketplaceExportLoader

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)

st.set_page_config(
    page_title="Marketplace Analytics",
    page_icon="📈",
    layout="wide",
)

st.title("📈 Marketplace Analytics")


@st.cache_data
def load_data(data_dir: str):
    """Load the export once per data directory (cached)."""
    return MarketplaceExportLoader(Path(data_dir)).load_all()


def bar_chart(labels, values, title, color, height=300, yaxis_title=None):
    fig = go.Figure(data=[go.Bar(x=labels, y=values, marker_color=color)])
    fig.update_layout(
        title=title,
        height=height,
        margin=dict(t=40, b=20, l=20, r=20),
        yaxis_title=yaxis_title,
    )
    return fig


with st.spinner("Loading data..."):
    loaded = load_data(str(settings.data_dir))
snapshot = loaded.snapshot

# --- Sidebar filters ---
st.sidebar.header("Range")
granularity = st.sidebar.selectbox(
    "Granularity", [g.value for g in Granularity], index=0
)
use_custom_range = st.sidebar.checkbox("Custom dates")
start = end = None
if use_custom_range:
    start_day = st.sidebar.date_input("Start")
    end_day = st.sidebar.date_input("End")
    start = datetime.combine(start_day, time.min)
    end = datetime.combine(end_day, time.max)

admin_tab, seller_tab, inventory_tab, quality_tab = st.tabs(
    ["Admin analytics", "Seller dashboard", "Inventory", "Data quality"]
)

# --- Admin analytics ---
with admin_tab:
    report = build_admin_order_analytics(snapshot, granularity, start, end).to_payload()
    overview = report["overview"]

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Orders", f"{overview['totalOrders']:,}")
    col2.metric("Revenue", f"${overview['totalRevenue']:,.2f}")
    col3.metric("Avg Order Value", f"${overview['averageOrderValue']:,.2f}")
    col4.metric(
        "Items Sold",
        f"{overview['totalItemsSold']:,}",
        delta=f"{overview['uniqueProducts']} products",
    )

    growth = report["periodMetrics"]["growth"]
    st.caption(
        f"Second half vs first half of the range: orders {growth['orders']:+.2f}%, "
        f"revenue {growth['revenue']:+.2f}%, AOV {growth['avgOrderValue']:+.2f}%"
    )

    activity = report["activity"]
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Paid Orders", f"{activity['completedPayments']:,}")
    col2.metric("Awaiting Payment", f"{activity['processingPayments']:,}")
    col3.metric("Active Buyers", f"{activity['activeBuyers']:,}")
    col4.metric("Active Sellers", f"{activity['activeSellers']:,}")

    series = report["analyticsData"]
    labels = [p["label"] for p in series["revenueData"]]
    left_col, right_col = st.columns(2)
    with left_col:
        st.plotly_chart(
            bar_chart(labels, [p["value"] for p in series["revenueData"]], "Revenue", "#3498db", yaxis_title="$"),
            use_container_width=True,
        )
    with right_col:
        st.plotly_chart(
            bar_chart(labels, [p["value"] for p in series["orderData"]], "Orders", "#2ecc71"),
            use_container_width=True,
        )

    st.subheader("🏆 Top Products")
    if report["topProducts"]:
        top = pd.DataFrame(report["topProducts"])[
            ["title", "category", "totalQuantity", "totalRevenue", "orderCount"]
        ]
        top.columns = ["Product", "Category", "Units", "Revenue", "Orders"]
        st.dataframe(top, use_container_width=True, hide_index=True)
    else:
        st.info("No approved, paid orders in this range")

    sellers_col, categories_col = st.columns([2, 1])
    with sellers_col:
        st.subheader("Top Sellers")
        if report["topSellers"]:
            sellers = pd.DataFrame(report["topSellers"])[
                ["name", "companyName", "totalRevenue", "orderCount", "averageOrderValue"]
            ]
            sellers.columns = ["Seller", "Company", "Revenue", "Orders", "AOV"]
            st.dataframe(sellers, use_container_width=True, hide_index=True)
    with categories_col:
        st.subheader("Categories")
        if report["categoryBreakdown"]:
            categories = report["categoryBreakdown"]
            fig = go.Figure(
                data=[
                    go.Pie(
                        labels=[c["category"] for c in categories],
                        values=[c["totalRevenue"] for c in categories],
                        hole=0.4,
                    )
                ]
            )
            fig.update_layout(height=300, margin=dict(t=20, b=20, l=20, r=20))
            st.plotly_chart(fig, use_container_width=True)

    performance = report["companyPerformance"]
    st.subheader(f"Company Performance ({performance['totalCompanies']} companies)")
    if performance["companies"]:
        companies = pd.DataFrame(performance["companies"])[
            ["companyName", "sellerName", "totalRevenue", "totalOrders", "totalItems", "averageOrderValue"]
        ]
        companies.columns = ["Company", "Seller", "Revenue", "Orders", "Items", "AOV"]
        st.dataframe(companies, use_container_width=True, hide_index=True)

# --- Seller dashboard ---
with seller_tab:
    seller_ids = snapshot.products["seller_id"].dropna().unique().tolist()
    if not seller_ids:
        st.info("No sellers in this export")
    else:
        seller_id = st.selectbox("Seller", seller_ids)
        date_filter = st.selectbox("Preset", ["", "last30days", "last90days", "alltime"])
        dashboard = build_seller_dashboard(
            snapshot, seller_id, start, end, date_filter=date_filter or None
        ).to_payload()

        col1, col2, col3 = st.columns(3)
        col1.metric("Orders", dashboard["totalOrders"])
        col2.metric("Revenue", f"${dashboard['totalRevenue']:,.2f}")
        col3.metric("Avg Order Value", f"${dashboard['averageOrderValue']:,.2f}")

        sales = dashboard["salesData"]
        st.plotly_chart(
            bar_chart([d["day"] for d in sales], [d["revenue"] for d in sales], "Sales by Weekday", "#9b59b6", yaxis_title="$"),
            use_container_width=True,
        )

        st.subheader("Top Selling Products")
        if dashboard["topSellingProducts"]:
            st.dataframe(
                pd.DataFrame(dashboard["topSellingProducts"]),
                use_container_width=True,
                hide_index=True,
            )

        st.subheader("Recent Orders")
        for order in dashboard["recentOrders"]:
            st.markdown(
                f"**#{order['id']}** · {order['orderDate'][:10]} · "
                f"{len(order['items'])} items · ${order['totalAmount']:,.2f}"
            )

# --- Inventory ---
with inventory_tab:
    products = snapshot.products
    if products.empty:
        st.info("No products in this export")
    else:
        titles = dict(zip(products["product_id"], products["title"]))
        product_id = st.selectbox(
            "Product", list(titles), format_func=lambda pid: f"{titles[pid]} ({pid})"
        )
        try:
            detail = build_inventory_detail(snapshot, product_id, start=start, end=end).to_payload()
        except ProductNotFoundError as exc:
            st.error(exc.message)
        else:
            product = detail["product"]
            col1, col2 = st.columns(2)
            col1.metric("Initial Stock", product["initialStock"])
            col2.metric("Current Stock", product["currentStock"])

            points = detail["inventoryData"]
            fig = go.Figure()
            fig.add_trace(
                go.Scatter(
                    x=[p["date"] for p in points],
                    y=[p["stock"] for p in points],
                    name="Stock",
                    line=dict(color="#2ecc71"),
                )
            )
            fig.add_trace(
                go.Bar(
                    x=[p["date"] for p in points],
                    y=[p["sold"] for p in points],
                    name="Sold",
                    marker_color="#e74c3c",
                )
            )
            fig.update_layout(
                title="Stock by Day",
                height=350,
                margin=dict(t=40, b=20, l=20, r=20),
                legend=dict(orientation="h", yanchor="bottom", y=-0.3),
            )
            st.plotly_chart(fig, use_container_width=True)

# --- Data quality ---
with quality_tab:
    st.markdown(
        "Rows with these issues are excluded from the analytics above, not counted as zero."
    )
    columns = st.columns(len(loaded.quality_reports))
    for col, (name, quality_report) in zip(columns, loaded.quality_reports.items()):
        with col:
            st.markdown(f"**{quality_report.source_name}** ({quality_report.total_rows:,} rows)")
            if not quality_report.issues:
                st.markdown("✅ No issues found")
            for issue in quality_report.issues[:5]:
                icon = "🔴" if issue.severity == "critical" else "🟡" if issue.severity == "warning" else "🔵"
                st.markdown(f"{icon} {issue.column}: {issue.description}")

st.divider()
st.caption(
    "Built with Streamlit | "
    f"Orders: {len(snapshot.orders):,} | "
    f"Line items: {len(snapshot.items):,} | "
    f"Products: {len(snapshot.products):,}"
)
