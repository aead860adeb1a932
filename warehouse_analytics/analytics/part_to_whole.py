"""
Part-to-Whole Analysis

Contribution of each product category to overall sales.
"""

from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import Float, Numeric, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import SALES_TO_PRODUCTS, fetch_all
from warehouse_analytics.database.models import DimProduct, FactSales


class CategoryContribution(BaseModel):
    category: Optional[str]
    total_sales: Optional[int]
    overall_sales: Optional[int]
    percentage_of_total: Optional[float]


async def category_contribution(db: AsyncSession) -> List[CategoryContribution]:
    """
    Sales per category next to overall sales and the category's share in
    percent (two decimals). Sales for unknown products count under a NULL
    category, so the shares always add up to 100.
    """
    category_sales = (
        select(
            DimProduct.category,
            func.sum(FactSales.sales_amount).label("total_sales"),
        )
        .select_from(FactSales)
        .outerjoin(DimProduct, SALES_TO_PRODUCTS)
        .group_by(DimProduct.category)
        .cte("category_sales")
    )
    overall = func.sum(category_sales.c.total_sales).over()
    share = cast(category_sales.c.total_sales, Float) / overall * 100
    stmt = (
        select(
            category_sales.c.category,
            category_sales.c.total_sales,
            overall.label("overall_sales"),
            func.round(cast(share, Numeric), 2, type_=Float).label("percentage_of_total"),
        )
        .order_by(category_sales.c.total_sales.desc(), category_sales.c.category)
    )
    return await fetch_all(db, stmt, CategoryContribution)
