"""
Customer Report

Consolidates customer metrics and behaviour into one row per customer:

1. Base rows: order lines joined to their customer, with the customer's
   full name and age.
2. Aggregation: orders, sales, quantity, products, last order and lifespan
   per customer.
3. Final projection: age group, spending segment, recency and averages.

The same pipeline backs the ``report_customers`` view (measured against the
engine's current date) and the ad-hoc ``customer_report`` query, which can
be pinned to a reference date.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import Column, Date, Integer, MetaData, String, Table, case, distinct, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import SALES_TO_CUSTOMERS, fetch_all
from warehouse_analytics.analytics.segmentation import age_group_expr, customer_segment_expr
from warehouse_analytics.database.functions import months_between, reference_date, years_between
from warehouse_analytics.database.models import DimCustomer, FactSales

VIEW_NAME = "report_customers"


class CustomerReportRow(BaseModel):
    customer_key: Optional[int]
    customer_number: Optional[str]
    customer_name: Optional[str]
    age: Optional[int]
    age_group: str
    customer_segment: str
    last_order_date: Optional[date]
    recency: Optional[int]
    total_orders: int
    total_sales: Optional[int]
    total_quantity: Optional[int]
    total_products: int
    lifespan: Optional[int]
    avg_order_value: Optional[int]
    avg_monthly_spend: Optional[int]


def customer_report_query(as_of: Optional[date] = None):
    """
    Build the customer report select.

    Args:
        as_of: Reference date for age and recency; the engine's current date
            when omitted
    """
    today = reference_date(as_of)

    customer_name = (
        func.coalesce(DimCustomer.first_name, literal(""))
        + literal(" ")
        + func.coalesce(DimCustomer.last_name, literal(""))
    )
    base = (
        select(
            FactSales.order_number,
            FactSales.product_key,
            FactSales.order_date,
            FactSales.sales_amount,
            FactSales.quantity,
            DimCustomer.customer_key,
            DimCustomer.customer_number,
            customer_name.label("customer_name"),
            years_between(DimCustomer.birthdate, today).label("age"),
        )
        .select_from(FactSales)
        .outerjoin(DimCustomer, SALES_TO_CUSTOMERS)
        .where(FactSales.order_date.is_not(None))
        .cte("base_query")
    )

    aggregated = (
        select(
            base.c.customer_key,
            base.c.customer_number,
            base.c.customer_name,
            base.c.age,
            func.count(distinct(base.c.order_number)).label("total_orders"),
            func.sum(base.c.sales_amount).label("total_sales"),
            func.sum(base.c.quantity).label("total_quantity"),
            func.count(distinct(base.c.product_key)).label("total_products"),
            func.max(base.c.order_date).label("last_order_date"),
            months_between(
                func.min(base.c.order_date),
                func.max(base.c.order_date),
            ).label("lifespan"),
        )
        .group_by(
            base.c.customer_key,
            base.c.customer_number,
            base.c.customer_name,
            base.c.age,
        )
        .cte("customer_aggregation")
    )

    c = aggregated.c
    return select(
        c.customer_key,
        c.customer_number,
        c.customer_name,
        c.age,
        age_group_expr(c.age).label("age_group"),
        customer_segment_expr(c.lifespan, c.total_sales).label("customer_segment"),
        c.last_order_date,
        months_between(c.last_order_date, today).label("recency"),
        c.total_orders,
        c.total_sales,
        c.total_quantity,
        c.total_products,
        c.lifespan,
        case(
            (c.total_orders == 0, 0),
            else_=c.total_sales // c.total_orders,
        ).label("avg_order_value"),
        case(
            (c.lifespan == 0, c.total_sales),
            else_=c.total_sales // c.lifespan,
        ).label("avg_monthly_spend"),
    )


# Read-side definition of the view; kept out of Base.metadata so create_all
# never turns it into a table.
view_metadata = MetaData()

report_customers = Table(
    VIEW_NAME,
    view_metadata,
    Column("customer_key", Integer),
    Column("customer_number", String(50)),
    Column("customer_name", String(101)),
    Column("age", Integer),
    Column("age_group", String(20)),
    Column("customer_segment", String(20)),
    Column("last_order_date", Date),
    Column("recency", Integer),
    Column("total_orders", Integer),
    Column("total_sales", Integer),
    Column("total_quantity", Integer),
    Column("total_products", Integer),
    Column("lifespan", Integer),
    Column("avg_order_value", Integer),
    Column("avg_monthly_spend", Integer),
)


async def customer_report(db: AsyncSession, as_of: Optional[date] = None) -> List[CustomerReportRow]:
    """Run the customer report directly, without going through the view."""
    report = customer_report_query(as_of).subquery("report_customers")
    stmt = select(report).order_by(report.c.customer_key)
    return await fetch_all(db, stmt, CustomerReportRow)


async def fetch_customer_report(
    db: AsyncSession,
    segment: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[CustomerReportRow]:
    """
    Read rows of the ``report_customers`` view.

    Args:
        db: Database session
        segment: Only customers of this segment (VIP, Regular, New)
        limit: Maximum rows to return
        offset: Rows to skip
    """
    stmt = select(report_customers)
    if segment:
        stmt = stmt.where(report_customers.c.customer_segment == segment)
    stmt = stmt.order_by(report_customers.c.customer_key).limit(limit).offset(offset)
    return await fetch_all(db, stmt, CustomerReportRow)
