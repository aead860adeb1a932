"""
Database Module
"""
from .connection import init_database, close_database, get_db, get_db_dependency, get_engine
from .models import Base, DimCustomer, DimProduct, FactSales, WAREHOUSE_TABLES

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_db_dependency",
    "get_engine",
    "Base",
    "DimCustomer",
    "DimProduct",
    "FactSales",
    "WAREHOUSE_TABLES",
]
