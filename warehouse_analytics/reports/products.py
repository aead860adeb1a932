"""
Product Report

One row per sold product with its revenue performance: lifespan, recency,
orders, customers, quantities, average selling price and revenue averages,
segmented into High-Performer, Mid-Range and Low-Performer.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import (
    Column,
    Date,
    Float,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    case,
    cast,
    distinct,
    func,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import SALES_TO_PRODUCTS, fetch_all
from warehouse_analytics.analytics.segmentation import product_segment_expr
from warehouse_analytics.database.functions import months_between, reference_date
from warehouse_analytics.database.models import DimProduct, FactSales

VIEW_NAME = "report_products"


class ProductReportRow(BaseModel):
    product_key: Optional[int]
    product_name: Optional[str]
    category: Optional[str]
    subcategory: Optional[str]
    cost: Optional[int]
    last_sale_date: Optional[date]
    recency_in_months: Optional[int]
    product_segment: str
    lifespan: Optional[int]
    total_orders: int
    total_sales: Optional[int]
    total_quantity: Optional[int]
    total_customers: int
    avg_selling_price: Optional[float]
    avg_order_revenue: Optional[int]
    avg_monthly_revenue: Optional[int]


def product_report_query(as_of: Optional[date] = None):
    """
    Build the product report select.

    Average selling price is the mean of per-line unit prices; lines with a
    zero quantity are ignored.
    """
    today = reference_date(as_of)

    base = (
        select(
            FactSales.order_number,
            FactSales.order_date,
            FactSales.customer_key,
            FactSales.sales_amount,
            FactSales.quantity,
            DimProduct.product_key,
            DimProduct.product_name,
            DimProduct.category,
            DimProduct.subcategory,
            DimProduct.cost,
        )
        .select_from(FactSales)
        .outerjoin(DimProduct, SALES_TO_PRODUCTS)
        .where(FactSales.order_date.is_not(None))
        .cte("base_query")
    )

    unit_price = cast(base.c.sales_amount, Float) / func.nullif(base.c.quantity, 0)
    aggregated = (
        select(
            base.c.product_key,
            base.c.product_name,
            base.c.category,
            base.c.subcategory,
            base.c.cost,
            months_between(
                func.min(base.c.order_date),
                func.max(base.c.order_date),
            ).label("lifespan"),
            func.max(base.c.order_date).label("last_sale_date"),
            func.count(distinct(base.c.order_number)).label("total_orders"),
            func.count(distinct(base.c.customer_key)).label("total_customers"),
            func.sum(base.c.sales_amount).label("total_sales"),
            func.sum(base.c.quantity).label("total_quantity"),
            func.round(cast(func.avg(unit_price), Numeric), 1, type_=Float).label("avg_selling_price"),
        )
        .group_by(
            base.c.product_key,
            base.c.product_name,
            base.c.category,
            base.c.subcategory,
            base.c.cost,
        )
        .cte("product_aggregations")
    )

    p = aggregated.c
    return select(
        p.product_key,
        p.product_name,
        p.category,
        p.subcategory,
        p.cost,
        p.last_sale_date,
        months_between(p.last_sale_date, today).label("recency_in_months"),
        product_segment_expr(p.total_sales).label("product_segment"),
        p.lifespan,
        p.total_orders,
        p.total_sales,
        p.total_quantity,
        p.total_customers,
        p.avg_selling_price,
        case(
            (p.total_orders == 0, 0),
            else_=p.total_sales // p.total_orders,
        ).label("avg_order_revenue"),
        case(
            (p.lifespan == 0, p.total_sales),
            else_=p.total_sales // p.lifespan,
        ).label("avg_monthly_revenue"),
    )


view_metadata = MetaData()

report_products = Table(
    VIEW_NAME,
    view_metadata,
    Column("product_key", Integer),
    Column("product_name", String(50)),
    Column("category", String(50)),
    Column("subcategory", String(50)),
    Column("cost", Integer),
    Column("last_sale_date", Date),
    Column("recency_in_months", Integer),
    Column("product_segment", String(20)),
    Column("lifespan", Integer),
    Column("total_orders", Integer),
    Column("total_sales", Integer),
    Column("total_quantity", Integer),
    Column("total_customers", Integer),
    Column("avg_selling_price", Float),
    Column("avg_order_revenue", Integer),
    Column("avg_monthly_revenue", Integer),
)


async def product_report(db: AsyncSession, as_of: Optional[date] = None) -> List[ProductReportRow]:
    """Run the product report directly, without going through the view."""
    report = product_report_query(as_of).subquery("report_products")
    stmt = select(report).order_by(report.c.total_sales.desc(), report.c.product_key)
    return await fetch_all(db, stmt, ProductReportRow)


async def fetch_product_report(
    db: AsyncSession,
    segment: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[ProductReportRow]:
    """Read rows of the ``report_products`` view, best sellers first."""
    stmt = select(report_products)
    if segment:
        stmt = stmt.where(report_products.c.product_segment == segment)
    stmt = (
        stmt.order_by(report_products.c.total_sales.desc(), report_products.c.product_key)
        .limit(limit)
        .offset(offset)
    )
    return await fetch_all(db, stmt, ProductReportRow)
