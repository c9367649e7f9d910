import json
from datetime import datetime

import pytest

from commerce_core.errors import SnapshotError
from commerce_core.normalize import Normalizer
from commerce_sources.marketplace_export import MarketplaceExportLoader

ORDERS = {
    "orders": [
        {
            "id": 1,
            "order_date": "2024-01-05T10:30:00Z",
            "payment_completed": True,
            "buyer_id": 5,
            "items": [
                {"product_id": 100, "price": "12.50", "quantity": 2, "retip_price": None, "order_status": "Approved"},
                {"product_id": 101, "price": "4.00", "quantity": 1, "retip_price": "0.50", "order_status": " approved "},
            ],
        },
        {
            "id": 2,
            "order_date": "2024-01-06T08:00:00+01:00",
            "payment_completed": "false",
            "buyer_id": 6,
            "items": [
                {"product_id": 999, "price": "8.00", "quantity": 1, "order_status": "pending"},
            ],
        },
    ]
}

PRODUCTS_CSV = """id,title,category,user_id,quantity,created_at
100,Desk Lamp,Home,7,40,2023-11-01T09:00:00Z
101,Bulb,,7,200,2023-11-02
"""

USERS_CSV = """id,role,first_name,last_name,company_name
5,buyer,Bo,Buyer,
7,seller,Sam,Seller,Lamps Ltd
"""


@pytest.fixture
def export_dir(tmp_path):
    (tmp_path / "orders.json").write_text(json.dumps(ORDERS))
    (tmp_path / "products.csv").write_text(PRODUCTS_CSV)
    (tmp_path / "users.csv").write_text(USERS_CSV)
    return tmp_path


def test_loads_and_flattens(export_dir):
    loaded = MarketplaceExportLoader(export_dir).load_all()
    snapshot = loaded.snapshot

    assert list(snapshot.orders["order_id"]) == [1, 2]
    assert snapshot.orders["order_date"].iloc[0] == datetime(2024, 1, 5, 10, 30)
    assert snapshot.orders["order_date"].iloc[1] == datetime(2024, 1, 6, 7, 0)
    assert snapshot.orders["payment_completed"].tolist() == [True, False]

    items = snapshot.items
    assert len(items) == 3
    assert items["approval_status"].tolist() == ["approved", "approved", "pending"]
    assert items["unit_price"].tolist() == [12.5, 4.0, 8.0]
    assert items["surcharge"].tolist() == [0.0, 0.5, 0.0]


def test_products_and_sellers_renamed(export_dir):
    snapshot = MarketplaceExportLoader(export_dir).load_all().snapshot

    assert snapshot.products["seller_id"].tolist() == [7, 7]
    assert snapshot.products["stock_quantity"].tolist() == [40, 200]
    assert list(snapshot.sellers["seller_id"]) == [7]
    assert snapshot.sellers["company_name"].iloc[0] == "Lamps Ltd"


def test_loaded_snapshot_normalizes(export_dir):
    snapshot = MarketplaceExportLoader(export_dir).load_all().snapshot
    normalized = Normalizer().normalize(snapshot)

    assert normalized.orders["approved_total"].tolist() == [29.5]
    assert normalized.items["seller_name"].tolist() == ["Sam Seller", "Sam Seller"]


def test_quality_reports(export_dir):
    reports = MarketplaceExportLoader(export_dir).load_all().quality_reports

    assert set(reports) == {"orders", "items", "products"}
    orphan = next(i for i in reports["items"].issues if i.issue_type == "orphan")
    assert orphan.column == "product_id"
    assert orphan.sample_values == [999]


def test_missing_users_file_gives_no_sellers(export_dir):
    (export_dir / "users.csv").unlink()
    snapshot = MarketplaceExportLoader(export_dir).load_all().snapshot
    assert snapshot.sellers.empty


def test_missing_orders_file(tmp_path):
    with pytest.raises(SnapshotError) as exc_info:
        MarketplaceExportLoader(tmp_path).load_orders()
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)


def test_malformed_orders_file(export_dir):
    (export_dir / "orders.json").write_text(json.dumps([{"id": 1}]))
    with pytest.raises(SnapshotError, match="'orders' list"):
        MarketplaceExportLoader(export_dir).load_orders()


def test_invalid_json(export_dir):
    (export_dir / "orders.json").write_text("{not json")
    with pytest.raises(SnapshotError):
        MarketplaceExportLoader(export_dir).load_orders()
