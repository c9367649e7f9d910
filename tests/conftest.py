"""Shared fixtures: a fixed clock and a small marketplace snapshot.

The marketplace covers the week of Mon 2024-01-01 plus one order the
following Tuesday. Per order:

    o1  Jan 1  paid    p1 10.00 x2 + p2 5.00 x1 (+1.50 surcharge)  -> 26.50
    o2  Jan 2  paid    p3 20.00 x1, p1 pending (excluded)          -> 20.00
    o3  Jan 3  unpaid  p1 10.00 x5                                 -> excluded
    o4  Jan 3  paid    p99 (unknown product)                       -> excluded
    o5  Jan 5  paid    p1 10.00 x3 + p4 7.25 x2                    -> 44.50
    o6  Jan 9  paid    p2 5.00 x4                                  -> 20.00
"""

from datetime import datetime

import pytest

from commerce_core.snapshot import Snapshot

# Wednesday of the first week of 2024
NOW = datetime(2024, 1, 3, 12, 0)


@pytest.fixture
def clock():
    return lambda: NOW


def order(order_id, when, paid=True, buyer="b1"):
    return {
        "order_id": order_id,
        "order_date": when,
        "payment_completed": paid,
        "buyer_id": buyer,
    }


def item(order_id, product_id, price, quantity, status="approved", surcharge=None):
    return {
        "order_id": order_id,
        "product_id": product_id,
        "unit_price": price,
        "quantity": quantity,
        "surcharge": surcharge,
        "approval_status": status,
    }


def product(product_id, title, category, seller_id, stock, created_at=datetime(2023, 12, 1)):
    return {
        "product_id": product_id,
        "title": title,
        "category": category,
        "seller_id": seller_id,
        "stock_quantity": stock,
        "created_at": created_at,
    }


@pytest.fixture
def marketplace():
    return Snapshot.from_records(
        orders=[
            order("o1", datetime(2024, 1, 1, 10, 0), buyer="b1"),
            order("o2", datetime(2024, 1, 2, 12, 0), buyer="b2"),
            order("o3", datetime(2024, 1, 3, 9, 0), paid=False, buyer="b1"),
            order("o4", datetime(2024, 1, 3, 15, 0), buyer="b3"),
            order("o5", datetime(2024, 1, 5, 18, 30), buyer="b1"),
            order("o6", datetime(2024, 1, 9, 8, 0), buyer="b2"),
        ],
        items=[
            item("o1", "p1", 10.0, 2),
            item("o1", "p2", 5.0, 1, surcharge=1.5),
            item("o2", "p3", 20.0, 1),
            item("o2", "p1", 10.0, 1, status="pending"),
            item("o3", "p1", 10.0, 5),
            item("o4", "p99", 100.0, 1),
            item("o5", "p1", 10.0, 3),
            item("o5", "p4", 7.25, 2),
            item("o6", "p2", 5.0, 4),
        ],
        products=[
            product("p1", "Widget", "Tools", 10, 100),
            product("p2", "Gadget", "Toys", 10, 50),
            product("p3", "Gizmo", None, 20, 30),
            product("p4", "Sprocket", "Tools", 30, 5),
        ],
        sellers=[
            {"seller_id": 10, "first_name": "Ada", "last_name": "Lovelace", "company_name": "Analytical Co"},
            {"seller_id": 20, "first_name": "Grace", "last_name": "Hopper", "company_name": "Cobol Inc"},
        ],
    )


@pytest.fixture
def half_cent_orders():
    """Three paid orders of 0.005 on Tue 2024-01-02: 0.015 in total, 0.03 if rounded per order."""
    return Snapshot.from_records(
        orders=[order(f"h{n}", datetime(2024, 1, 2, 9 + n, 0), buyer=f"b{n}") for n in range(3)],
        items=[item(f"h{n}", "p1", 0.005, 1) for n in range(3)],
        products=[product("p1", "Sticker", "Paper", 10, 1000)],
        sellers=[
            {"seller_id": 10, "first_name": "Ada", "last_name": "Lovelace", "company_name": "Analytical Co"},
        ],
    )
