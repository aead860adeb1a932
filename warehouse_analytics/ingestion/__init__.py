"""
Data Ingestion Module
"""
from .batch_loader import BatchFileConfig, BatchLoader, LoadResult, LoadStatus, config_for_table, create_batch_loader
from .warehouse import WarehouseLoadError, build_warehouse, create_warehouse, load_warehouse

__all__ = [
    "BatchFileConfig",
    "BatchLoader",
    "LoadResult",
    "LoadStatus",
    "config_for_table",
    "create_batch_loader",
    "WarehouseLoadError",
    "build_warehouse",
    "create_warehouse",
    "load_warehouse",
]
