"""
Shared helpers for analytics queries.
"""

from typing import List, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from warehouse_analytics.database.models import DimCustomer, DimProduct, FactSales

RowModel = TypeVar("RowModel", bound=BaseModel)

# Fact-to-dimension join conditions; facts always drive the join (LEFT JOIN)
SALES_TO_CUSTOMERS = FactSales.customer_key == DimCustomer.customer_key
SALES_TO_PRODUCTS = FactSales.product_key == DimProduct.product_key


async def fetch_all(db: AsyncSession, stmt: Select, model: Type[RowModel]) -> List[RowModel]:
    """Execute a select and map every row onto a response model."""
    result = await db.execute(stmt)
    return [model(**row._mapping) for row in result]


def check_top_n(n: int) -> int:
    """Validate a row-limit argument."""
    if n < 1:
        raise ValueError(f"n must be a positive integer, got {n}")
    return n
