"""
Error hierarchy for the analytics engine and its data sources.

Data-quality gaps (unresolved products, missing sellers) are never errors:
they are excluded silently and surfaced through the quality reports instead.
These exceptions cover the cases where a report cannot be produced at all.
"""

from typing import Any


class AnalyticsError(Exception):
    """Base exception for all commerce analytics failures."""

    code = "analytics_error"
    http_status = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict:
        """Convert to the error envelope the HTTP layer returns."""
        return {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            },
        }


class SnapshotError(AnalyticsError):
    """The data export could not be read or is malformed."""

    code = "snapshot_error"


class ProductNotFoundError(AnalyticsError):
    """Product does not exist or is not owned by the requesting seller."""

    code = "product_not_found"
    http_status = 404

    def __init__(self, product_id: Any, seller_id: Any | None = None):
        message = "Product not found or not owned by seller"
        super().__init__(message, product_id=product_id, seller_id=seller_id)
        self.product_id = product_id
        self.seller_id = seller_id
