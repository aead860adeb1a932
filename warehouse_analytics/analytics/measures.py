"""
Measures Exploration

Headline figures of the business: totals, averages and counts over the
sales fact and the dimensions, individually and as one combined report.
"""

from typing import List, Optional

import structlog
from pydantic import BaseModel
from sqlalchemy import distinct, func, literal, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.database.models import DimCustomer, DimProduct, FactSales

logger = structlog.get_logger(__name__)


class Measure(BaseModel):
    """One named measure of the key metrics report"""
    measure_name: str
    measure_value: Optional[float]


async def _scalar(db: AsyncSession, expr) -> Optional[float]:
    result = await db.execute(select(expr))
    return result.scalar_one()


async def total_sales(db: AsyncSession) -> int:
    """Sum of sales amounts over all order lines."""
    return await _scalar(db, func.sum(FactSales.sales_amount)) or 0


async def total_quantity(db: AsyncSession) -> int:
    """Number of items sold."""
    return await _scalar(db, func.sum(FactSales.quantity)) or 0


async def average_price(db: AsyncSession) -> Optional[float]:
    """Average selling price per order line."""
    value = await _scalar(db, func.avg(FactSales.price))
    return float(value) if value is not None else None


async def total_order_lines(db: AsyncSession) -> int:
    """Order lines with an order number (COUNT(order_number))."""
    return await _scalar(db, func.count(FactSales.order_number))


async def total_orders(db: AsyncSession) -> int:
    """Distinct orders."""
    return await _scalar(db, func.count(distinct(FactSales.order_number)))


async def total_products(db: AsyncSession) -> int:
    """Products in the product dimension."""
    return await _scalar(db, func.count(DimProduct.product_name))


async def total_customers(db: AsyncSession) -> int:
    """Customers in the customer dimension."""
    return await _scalar(db, func.count(DimCustomer.customer_key))


async def ordering_customers(db: AsyncSession) -> int:
    """Customers who placed at least one order."""
    return await _scalar(db, func.count(distinct(FactSales.customer_key)))


def key_metrics_query():
    """All key metrics stacked into one (measure_name, measure_value) table."""
    parts = [
        ("Total Sales", func.sum(FactSales.sales_amount)),
        ("Total Quantity", func.sum(FactSales.quantity)),
        ("Average Price", func.avg(FactSales.price)),
        ("Total Orders", func.count(distinct(FactSales.order_number))),
        ("Total Products", func.count(distinct(DimProduct.product_name))),
        ("Total Customers", func.count(DimCustomer.customer_key)),
    ]
    stacked = union_all(*[
        select(
            literal(position).label("position"),
            literal(name).label("measure_name"),
            value.label("measure_value"),
        )
        for position, (name, value) in enumerate(parts)
    ]).subquery("key_metrics")

    return (
        select(stacked.c.measure_name, stacked.c.measure_value)
        .order_by(stacked.c.position)
    )


async def key_metrics_report(db: AsyncSession) -> List[Measure]:
    """Combined report of the headline measures, in a fixed order."""
    result = await db.execute(key_metrics_query())
    measures = [
        Measure(
            measure_name=row.measure_name,
            measure_value=float(row.measure_value) if row.measure_value is not None else None,
        )
        for row in result
    ]
    logger.info("Key metrics computed", measures=len(measures))
    return measures
