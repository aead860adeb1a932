"""
Data Generation Module
"""
from .generators import WarehouseDataGenerator

__all__ = [
    "WarehouseDataGenerator",
]
