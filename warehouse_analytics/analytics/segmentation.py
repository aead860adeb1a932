"""
Data Segmentation

Groups products by cost range and customers by spending behaviour. The
segment expressions are shared with the customer and product reports.
"""

from typing import List

from pydantic import BaseModel
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import SALES_TO_CUSTOMERS, fetch_all
from warehouse_analytics.database.functions import months_between
from warehouse_analytics.database.models import DimCustomer, DimProduct, FactSales

# Customer segments
VIP_MIN_LIFESPAN_MONTHS = 12
VIP_MIN_SPENDING = 5000

# Product segments
HIGH_PERFORMER_MIN_SALES = 50000
MID_RANGE_MIN_SALES = 10000


class CostRangeCount(BaseModel):
    cost_range: str
    total_products: int


class CustomerSegmentCount(BaseModel):
    customer_segment: str
    total_customers: int


def cost_range_expr(cost):
    """Cost bands; a NULL cost falls into ``Above 1000``."""
    return case(
        (cost < 100, "Below 100"),
        (cost.between(100, 500), "100-500"),
        (cost.between(500, 1000), "500-1000"),
        else_="Above 1000",
    )


def customer_segment_expr(lifespan, spending):
    """VIP and Regular need a year of history; everyone else is New."""
    return case(
        ((lifespan >= VIP_MIN_LIFESPAN_MONTHS) & (spending > VIP_MIN_SPENDING), "VIP"),
        ((lifespan >= VIP_MIN_LIFESPAN_MONTHS) & (spending <= VIP_MIN_SPENDING), "Regular"),
        else_="New",
    )


def age_group_expr(age):
    return case(
        (age < 20, "Under 20"),
        (age.between(20, 29), "20-29"),
        (age.between(30, 39), "30-39"),
        (age.between(40, 49), "40-49"),
        else_="50 and above",
    )


def product_segment_expr(total_sales):
    return case(
        (total_sales > HIGH_PERFORMER_MIN_SALES, "High-Performer"),
        (total_sales >= MID_RANGE_MIN_SALES, "Mid-Range"),
        else_="Low-Performer",
    )


async def product_cost_segments(db: AsyncSession) -> List[CostRangeCount]:
    """Number of products per cost range."""
    segments = (
        select(
            DimProduct.product_key,
            cost_range_expr(DimProduct.cost).label("cost_range"),
        )
        .cte("product_segments")
    )
    total = func.count(segments.c.product_key).label("total_products")
    stmt = (
        select(segments.c.cost_range, total)
        .group_by(segments.c.cost_range)
        .order_by(total.desc(), segments.c.cost_range)
    )
    return await fetch_all(db, stmt, CostRangeCount)


async def customer_spending_segments(db: AsyncSession) -> List[CustomerSegmentCount]:
    """
    Number of customers per spending segment.

    Lifespan is the number of month boundaries between a customer's first and
    last order. Sales whose customer key has no match in the customer
    dimension group under a NULL key and are not counted.
    """
    spending = (
        select(
            DimCustomer.customer_key,
            func.sum(FactSales.sales_amount).label("total_spending"),
            months_between(
                func.min(FactSales.order_date),
                func.max(FactSales.order_date),
            ).label("lifespan"),
        )
        .select_from(FactSales)
        .outerjoin(DimCustomer, SALES_TO_CUSTOMERS)
        .group_by(DimCustomer.customer_key)
        .cte("customer_spending")
    )
    segmented = (
        select(
            spending.c.customer_key,
            customer_segment_expr(spending.c.lifespan, spending.c.total_spending)
            .label("customer_segment"),
        )
        .subquery("segmented_customers")
    )
    total = func.count(segmented.c.customer_key).label("total_customers")
    stmt = (
        select(segmented.c.customer_segment, total)
        .group_by(segmented.c.customer_segment)
        .order_by(total.desc(), segmented.c.customer_segment)
    )
    return await fetch_all(db, stmt, CustomerSegmentCount)
