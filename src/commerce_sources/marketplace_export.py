"""
Loader for marketplace database exports.

Reads the tables the analytics engine needs and maps the marketplace's
column names onto the snapshot schema:

- orders.json: {"orders": [{id, order_date, payment_completed, buyer_id,
  items: [{product_id, price, quantity, retip_price, order_status}, ...]}]}
- products.csv: id, title, category, user_id, quantity, created_at
- users.csv (optional): id, role, first_name, last_name, company_name

"price" is the unit price, "retip_price" the optional per-line surcharge,
"order_status" the line's approval status and products.quantity the stock
recorded when the listing was created.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from commerce_core.errors import SnapshotError
from commerce_core.normalize import APPROVED
from commerce_core.parsers import DateParser, MoneyParser
from commerce_core.quality import DataQualityChecker, DataQualityReport
from commerce_core.snapshot import (
    ITEM_COLUMNS,
    ORDER_COLUMNS,
    PRODUCT_COLUMNS,
    SELLER_COLUMNS,
    Snapshot,
)

logger = logging.getLogger(__name__)

APPROVAL_STATUSES = {"pending", APPROVED, "rejected"}


@dataclass
class LoadedSnapshot:
    """A snapshot plus the quality report for each of its tables."""

    snapshot: Snapshot
    quality_reports: dict[str, DataQualityReport]


class MarketplaceExportLoader:
    """
    Loads and cleans a marketplace export directory.

    Export quirks handled:
    - timestamps with Z suffixes or offsets (normalized to naive UTC)
    - DECIMAL money columns serialized as strings
    - approval statuses in mixed case ("Approved", " approved ")
    - users.csv holds buyers and admins too; only sellers are kept
    """

    ORDERS_FILE = "orders.json"
    PRODUCTS_FILE = "products.csv"
    USERS_FILE = "users.csv"

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)
        self.date_parser = DateParser()
        self.price_parser = MoneyParser(default=None)
        self.surcharge_parser = MoneyParser(default=0.0)

    def load_all(self) -> LoadedSnapshot:
        """Load every table and run the quality checks."""
        orders, items = self.load_orders()
        products = self.load_products()
        sellers = self.load_sellers()

        snapshot = Snapshot(orders=orders, items=items, products=products, sellers=sellers)
        quality_reports = {
            "orders": self._check_orders_quality(orders),
            "items": self._check_items_quality(items, orders, products),
            "products": self._check_products_quality(products, sellers),
        }

        logger.info(
            "Loaded export: %d orders, %d line items, %d products, %d sellers",
            len(orders),
            len(items),
            len(products),
            len(sellers),
            extra={"rows": len(items)},
        )
        return LoadedSnapshot(snapshot=snapshot, quality_reports=quality_reports)

    def _read_json(self, name: str) -> dict:
        path = self.data_dir / name
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as exc:
            raise SnapshotError(f"Export file missing: {path}", path=str(path)) from exc
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"Export file is not valid JSON: {path}", path=str(path)) from exc

    def _read_csv(self, name: str) -> pd.DataFrame:
        path = self.data_dir / name
        try:
            return pd.read_csv(path)
        except FileNotFoundError as exc:
            raise SnapshotError(f"Export file missing: {path}", path=str(path)) from exc
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            raise SnapshotError(f"Export file is not valid CSV: {path}", path=str(path)) from exc

    def load_orders(self) -> tuple[pd.DataFrame, pd.DataFrame]:
        """
        Load orders and flatten their nested line items.

        Each item inherits its parent's id as order_id, whatever the item
        record itself says.
        """
        data = self._read_json(self.ORDERS_FILE)
        if not isinstance(data, dict) or not isinstance(data.get("orders"), list):
            raise SnapshotError(
                f"{self.ORDERS_FILE} must contain an 'orders' list", path=self.ORDERS_FILE
            )
        records = data["orders"]

        orders = pd.DataFrame(
            [
                {
                    "order_id": record.get("id"),
                    "order_date": record.get("order_date"),
                    "payment_completed": record.get("payment_completed", False),
                    "buyer_id": record.get("buyer_id"),
                }
                for record in records
            ],
            columns=ORDER_COLUMNS,
        )
        orders["order_date"] = self.date_parser.parse_series(orders["order_date"])
        orders["payment_completed"] = orders["payment_completed"].apply(_as_bool)

        items = pd.DataFrame(
            [
                {
                    "order_id": record.get("id"),
                    "product_id": item.get("product_id"),
                    "unit_price": item.get("price"),
                    "quantity": item.get("quantity"),
                    "surcharge": item.get("retip_price"),
                    "approval_status": item.get("order_status"),
                }
                for record in records
                for item in record.get("items") or []
            ],
            columns=ITEM_COLUMNS,
        )
        items["unit_price"] = self.price_parser.parse_series(items["unit_price"])
        items["surcharge"] = self.surcharge_parser.parse_series(items["surcharge"])
        items["quantity"] = (
            pd.to_numeric(items["quantity"], errors="coerce").fillna(0).astype(int)
        )
        items["approval_status"] = (
            items["approval_status"].fillna("").astype(str).str.strip().str.lower()
        )

        return orders, items

    def load_products(self) -> pd.DataFrame:
        df = self._read_csv(self.PRODUCTS_FILE)
        df = df.rename(
            columns={"id": "product_id", "user_id": "seller_id", "quantity": "stock_quantity"}
        )
        for column in PRODUCT_COLUMNS:
            if column not in df.columns:
                df[column] = pd.NA
        df["created_at"] = self.date_parser.parse_series(df["created_at"])
        df["stock_quantity"] = (
            pd.to_numeric(df["stock_quantity"], errors="coerce").fillna(0).astype(int)
        )
        return df[PRODUCT_COLUMNS]

    def load_sellers(self) -> pd.DataFrame:
        """Sellers from users.csv; an export without users yields no sellers."""
        if not (self.data_dir / self.USERS_FILE).exists():
            logger.warning("No %s in %s, seller names unavailable", self.USERS_FILE, self.data_dir)
            return pd.DataFrame(columns=SELLER_COLUMNS)

        df = self._read_csv(self.USERS_FILE).rename(columns={"id": "seller_id"})
        if "role" in df.columns:
            df = df[df["role"].astype(str).str.lower() == "seller"]
        for column in SELLER_COLUMNS:
            if column not in df.columns:
                df[column] = pd.NA
        return df[SELLER_COLUMNS].reset_index(drop=True)

    def _check_orders_quality(self, orders: pd.DataFrame) -> DataQualityReport:
        checker = DataQualityChecker("Orders", required_columns=["order_id", "order_date"])
        checker.check_duplicates("order_id")
        return checker.run(orders)

    def _check_items_quality(
        self, items: pd.DataFrame, orders: pd.DataFrame, products: pd.DataFrame
    ) -> DataQualityReport:
        checker = DataQualityChecker(
            "Order items", required_columns=["product_id", "unit_price", "approval_status"]
        )
        checker.check_invalid_values("approval_status", APPROVAL_STATUSES)
        checker.check_range("quantity", min_val=1, severity="critical")
        checker.check_range("unit_price", min_val=0, severity="critical")
        checker.check_references(
            "product_id",
            products["product_id"],
            description="{count:,} items reference unknown products (excluded from analytics)",
        )
        checker.check_references(
            "order_id", orders["order_id"], severity="critical"
        )
        return checker.run(items)

    def _check_products_quality(
        self, products: pd.DataFrame, sellers: pd.DataFrame
    ) -> DataQualityReport:
        checker = DataQualityChecker(
            "Products", required_columns=["product_id", "seller_id", "created_at"]
        )
        checker.check_duplicates("product_id")
        checker.check_range("stock_quantity", min_val=0)
        checker.check_references(
            "seller_id",
            sellers["seller_id"],
            severity="info",
            description="{count:,} products whose seller is not in users.csv",
        )
        return checker.run(products)


def _as_bool(value) -> bool:
    """JSON booleans, 0/1 and 'true'/'false' strings."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    if value is None or pd.isna(value):
        return False
    return bool(value)
