# Data-source adapters: each turns one export format into a commerce_core Snapshot

from .marketplace_export import LoadedSnapshot, MarketplaceExportLoader

__all__ = ["LoadedSnapshot", "MarketplaceExportLoader"]
