"""
Database Exploration Module
"""
from .metadata import ColumnInfo, TableInfo, describe_columns, list_tables
from .dimensions import (
    customer_age_range,
    distinct_countries,
    order_date_range,
    product_hierarchy,
)

__all__ = [
    "ColumnInfo",
    "TableInfo",
    "describe_columns",
    "list_tables",
    "customer_age_range",
    "distinct_countries",
    "order_date_range",
    "product_hierarchy",
]
