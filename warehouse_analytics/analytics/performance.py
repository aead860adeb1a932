"""
Performance Analysis

Year-over-year product performance: each product's yearly sales compared to
its own average across years and to the previous year.
"""

from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import SALES_TO_PRODUCTS, fetch_all
from warehouse_analytics.database.functions import year_of
from warehouse_analytics.database.models import DimProduct, FactSales


class ProductYearPerformance(BaseModel):
    order_year: int
    product_name: Optional[str]
    current_sales: Optional[int]
    avg_sales: Optional[float]
    diff_avg: Optional[float]
    avg_change: str
    py_sales: Optional[int]
    diff_py: Optional[int]
    py_change: str


def change_label(diff, above: str, below: str, same: str):
    """CASE labelling the sign of a difference; NULL falls to ``same``."""
    return case(
        (diff > 0, above),
        (diff < 0, below),
        else_=same,
    )


def yearly_product_performance_query():
    order_year = year_of(FactSales.order_date)
    yearly = (
        select(
            order_year.label("order_year"),
            DimProduct.product_name,
            func.sum(FactSales.sales_amount).label("current_sales"),
        )
        .select_from(FactSales)
        .outerjoin(DimProduct, SALES_TO_PRODUCTS)
        .where(FactSales.order_date.is_not(None))
        .group_by(order_year, DimProduct.product_name)
        .cte("yearly_product_sales")
    )

    avg_sales = func.avg(yearly.c.current_sales).over(partition_by=yearly.c.product_name)
    py_sales = func.lag(yearly.c.current_sales).over(
        partition_by=yearly.c.product_name,
        order_by=yearly.c.order_year,
    )
    diff_avg = yearly.c.current_sales - avg_sales
    diff_py = yearly.c.current_sales - py_sales

    return (
        select(
            yearly.c.order_year,
            yearly.c.product_name,
            yearly.c.current_sales,
            avg_sales.label("avg_sales"),
            diff_avg.label("diff_avg"),
            change_label(diff_avg, "Above Avg", "Below Avg", "Avg").label("avg_change"),
            py_sales.label("py_sales"),
            diff_py.label("diff_py"),
            change_label(diff_py, "Increase", "Decrease", "No Change").label("py_change"),
        )
        .order_by(yearly.c.product_name, yearly.c.order_year)
    )


async def yearly_product_performance(db: AsyncSession) -> List[ProductYearPerformance]:
    """
    Yearly sales of every product benchmarked against its average and the
    previous year. A product's first year has no previous value and is
    labelled ``No Change``.

    ``avg_sales`` is a fractional average on every dialect. SQL Server's
    ``AVG`` over integers truncates, so a year sitting just above a
    fractional average (sales 100 and 101 average 100.5) is ``Below Avg``
    here where an integer average would call it ``Avg``.
    """
    return await fetch_all(db, yearly_product_performance_query(), ProductYearPerformance)
