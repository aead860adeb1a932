"""
Change Over Time & Cumulative Analysis

Sales tracked by calendar period (year/month, month start, readable label)
and accumulated over time with running totals and moving averages.
Order lines without an order date are left out of every series.
"""

from datetime import date
from typing import List, Optional

import structlog
from pydantic import BaseModel
from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import fetch_all
from warehouse_analytics.database.functions import PERIODS, date_trunc, month_of, year_of
from warehouse_analytics.database.models import FactSales

logger = structlog.get_logger(__name__)

# Fixed English abbreviations, independent of the process locale
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class YearMonthSales(BaseModel):
    order_year: int
    order_month: int
    total_sales: Optional[int]
    total_customers: int
    total_quantity: Optional[int]


class PeriodSales(BaseModel):
    order_date: date
    total_sales: Optional[int]
    total_customers: int
    total_quantity: Optional[int]


class LabelledSales(BaseModel):
    order_date: str
    total_sales: Optional[int]
    total_customers: int
    total_quantity: Optional[int]


class CumulativeSales(BaseModel):
    order_date: date
    total_sales: Optional[int]
    running_total_sales: Optional[int]
    moving_average_price: Optional[float]


def _period_measures():
    return (
        func.sum(FactSales.sales_amount).label("total_sales"),
        func.count(distinct(FactSales.customer_key)).label("total_customers"),
        func.sum(FactSales.quantity).label("total_quantity"),
    )


async def sales_by_year_month(db: AsyncSession) -> List[YearMonthSales]:
    """Sales, customers and quantity per calendar year and month."""
    order_year = year_of(FactSales.order_date)
    order_month = month_of(FactSales.order_date)
    stmt = (
        select(
            order_year.label("order_year"),
            order_month.label("order_month"),
            *_period_measures(),
        )
        .where(FactSales.order_date.is_not(None))
        .group_by(order_year, order_month)
        .order_by(order_year, order_month)
    )
    return await fetch_all(db, stmt, YearMonthSales)


async def sales_by_period(db: AsyncSession, period: str = "month") -> List[PeriodSales]:
    """Sales per period, keyed by the first day of the period."""
    period_start = date_trunc(period, FactSales.order_date)
    stmt = (
        select(period_start.label("order_date"), *_period_measures())
        .where(FactSales.order_date.is_not(None))
        .group_by(period_start)
        .order_by(period_start)
    )
    return await fetch_all(db, stmt, PeriodSales)


def month_label(value: date) -> str:
    """Readable month label such as ``2013-Jan``."""
    return f"{value.year}-{MONTH_ABBREVIATIONS[value.month - 1]}"


async def sales_by_month_label(db: AsyncSession) -> List[LabelledSales]:
    """Monthly sales labelled ``yyyy-Mon``, in chronological order."""
    rows = await sales_by_period(db, "month")
    return [
        LabelledSales(
            order_date=month_label(row.order_date),
            total_sales=row.total_sales,
            total_customers=row.total_customers,
            total_quantity=row.total_quantity,
        )
        for row in rows
    ]


async def cumulative_sales(db: AsyncSession, period: str = "year") -> List[CumulativeSales]:
    """
    Running total of sales and moving average of price over time.

    The inner query aggregates sales and average price per period; the outer
    query accumulates them in chronological order, so the running total of
    the last period equals the total of all dated sales.

    Args:
        db: Database session
        period: ``year`` or ``month``
    """
    if period not in PERIODS:
        raise ValueError(f"Unsupported period: {period!r}, expected one of {PERIODS}")

    period_start = date_trunc(period, FactSales.order_date)
    per_period = (
        select(
            period_start.label("order_date"),
            func.sum(FactSales.sales_amount).label("total_sales"),
            func.avg(FactSales.price).label("avg_price"),
        )
        .where(FactSales.order_date.is_not(None))
        .group_by(period_start)
        .subquery("per_period")
    )
    stmt = (
        select(
            per_period.c.order_date,
            per_period.c.total_sales,
            func.sum(per_period.c.total_sales)
            .over(order_by=per_period.c.order_date)
            .label("running_total_sales"),
            func.avg(per_period.c.avg_price)
            .over(order_by=per_period.c.order_date)
            .label("moving_average_price"),
        )
        .order_by(per_period.c.order_date)
    )
    rows = await fetch_all(db, stmt, CumulativeSales)
    logger.info("Cumulative sales computed", period=period, periods=len(rows))
    return rows
