from datetime import date, datetime

import pytest

from commerce_core.inventory import (
    InventoryProduct,
    product_sales_history,
    reconstruct_inventory,
)
from commerce_core.snapshot import Snapshot


def sales_snapshot(sales, created_at=datetime(2024, 1, 1), stock=100):
    """One product plus one paid order per (when, quantity, status) sale."""
    orders, items = [], []
    for order_id, (when, quantity, status) in enumerate(sales, start=1):
        orders.append(
            {"order_id": order_id, "order_date": when, "payment_completed": True, "buyer_id": 1}
        )
        items.append(
            {
                "order_id": order_id,
                "product_id": 7,
                "unit_price": 3.0,
                "quantity": quantity,
                "approval_status": status,
            }
        )
    return Snapshot.from_records(
        orders=orders,
        items=items,
        products=[
            {
                "product_id": 7,
                "title": "Lamp",
                "category": "Home",
                "seller_id": 1,
                "stock_quantity": stock,
                "created_at": created_at,
            }
        ],
    )


def replay(snapshot, start=None, end=None, now=datetime(2024, 2, 1)):
    product = InventoryProduct.from_row(snapshot.products.iloc[0])
    history = product_sales_history(snapshot, product.product_id)
    return reconstruct_inventory(product, history, start, end, clock=lambda: now)


@pytest.fixture
def lamp():
    return sales_snapshot(
        [
            (datetime(2024, 1, 2, 9, 0), 10, "approved"),
            (datetime(2024, 1, 3, 14, 0), 5, "approved"),
            (datetime(2024, 1, 4, 11, 0), 40, "pending"),
            (datetime(2024, 1, 10, 16, 0), 20, "approved"),
        ]
    )


def test_stock_is_emitted_before_the_days_sales(lamp):
    result = replay(lamp, datetime(2024, 1, 1), datetime(2024, 1, 5))

    assert [(p.date, p.stock, p.sold) for p in result.series] == [
        (date(2024, 1, 1), 100, 0),
        (date(2024, 1, 2), 100, 10),
        (date(2024, 1, 3), 90, 5),
        (date(2024, 1, 4), 85, 0),
        (date(2024, 1, 5), 85, 0),
    ]


def test_current_stock_covers_all_sales_until_now(lamp):
    result = replay(lamp, datetime(2024, 1, 1), datetime(2024, 1, 5))

    # independent of the window: 100 - (10 + 5 + 20)
    assert result.current_stock == 65
    assert result.series[-1].stock == 85


def test_sales_before_window_reduce_opening_stock(lamp):
    result = replay(lamp, datetime(2024, 1, 4), datetime(2024, 1, 10))

    assert result.sold_before_start == 15
    assert result.series[0].stock == 85
    assert result.series[-1].sold == 20
    assert len(result.series) == 7


def test_start_clamped_to_creation():
    snapshot = sales_snapshot([], created_at=datetime(2024, 1, 3, 8, 0))
    result = replay(snapshot, datetime(2023, 12, 1), datetime(2024, 1, 5))

    assert result.series[0].date == date(2024, 1, 3)
    assert len(result.series) == 3


def test_defaults_run_from_creation_to_now():
    snapshot = sales_snapshot([], created_at=datetime(2024, 1, 28, 15, 0))
    result = replay(snapshot, now=datetime(2024, 2, 1, 9, 0))

    assert [p.date for p in result.series] == [
        date(2024, 1, 28),
        date(2024, 1, 29),
        date(2024, 1, 30),
        date(2024, 1, 31),
        date(2024, 2, 1),
    ]
    assert all(p.stock == 100 for p in result.series)


def test_oversold_product_never_shows_negative_stock():
    snapshot = sales_snapshot(
        [
            (datetime(2024, 1, 1, 10, 0), 8, "approved"),
            (datetime(2024, 1, 2, 10, 0), 8, "approved"),
        ],
        stock=10,
    )
    result = replay(snapshot, datetime(2024, 1, 1), datetime(2024, 1, 3))

    assert [p.stock for p in result.series] == [10, 2, 0]
    assert result.series[-1].running_stock == -6
    assert result.oversold
    assert result.current_stock == 0


def test_point_payload():
    snapshot = sales_snapshot([(datetime(2024, 1, 1, 10, 0), 2, "approved")])
    point = replay(snapshot, datetime(2024, 1, 1), datetime(2024, 1, 1)).series[0]

    assert point.to_payload() == {"date": "2024-01-01", "stock": 100, "sold": 2}
