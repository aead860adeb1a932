"""
Ranking Analysis

Top and bottom performers among products and customers, either with a
plain ORDER BY ... LIMIT or with a RANK() window so ties share a position.
"""

from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import (
    SALES_TO_CUSTOMERS,
    SALES_TO_PRODUCTS,
    check_top_n,
    fetch_all,
)
from warehouse_analytics.analytics.magnitude import CustomerRevenue
from warehouse_analytics.database.models import DimCustomer, DimProduct, FactSales


class ProductRevenue(BaseModel):
    product_name: Optional[str]
    total_revenue: Optional[int]


class RankedProduct(ProductRevenue):
    rank_products: int


class CustomerOrders(BaseModel):
    customer_key: Optional[int]
    first_name: Optional[str]
    last_name: Optional[str]
    total_orders: int


def _product_revenue():
    revenue = func.sum(FactSales.sales_amount).label("total_revenue")
    stmt = (
        select(DimProduct.product_name, revenue)
        .select_from(FactSales)
        .outerjoin(DimProduct, SALES_TO_PRODUCTS)
        .group_by(DimProduct.product_name)
    )
    return stmt, revenue


async def top_products(db: AsyncSession, n: int = 5) -> List[ProductRevenue]:
    """Products generating the highest revenue."""
    stmt, revenue = _product_revenue()
    stmt = stmt.order_by(revenue.desc(), DimProduct.product_name).limit(check_top_n(n))
    return await fetch_all(db, stmt, ProductRevenue)


async def bottom_products(db: AsyncSession, n: int = 5) -> List[ProductRevenue]:
    """Products generating the lowest revenue."""
    stmt, revenue = _product_revenue()
    stmt = stmt.order_by(revenue.asc(), DimProduct.product_name).limit(check_top_n(n))
    return await fetch_all(db, stmt, ProductRevenue)


async def ranked_products(db: AsyncSession, n: int = 5) -> List[RankedProduct]:
    """
    Products ranked by revenue with RANK().

    Unlike ``top_products`` this may return more than ``n`` rows: every
    product whose rank is within ``n`` is kept, ties included.
    """
    total = func.sum(FactSales.sales_amount)
    ranked = (
        select(
            DimProduct.product_name,
            total.label("total_revenue"),
            func.rank().over(order_by=total.desc()).label("rank_products"),
        )
        .select_from(FactSales)
        .outerjoin(DimProduct, SALES_TO_PRODUCTS)
        .group_by(DimProduct.product_name)
        .subquery("ranked_products")
    )
    stmt = (
        select(ranked)
        .where(ranked.c.rank_products <= check_top_n(n))
        .order_by(ranked.c.rank_products, ranked.c.product_name)
    )
    return await fetch_all(db, stmt, RankedProduct)


async def top_customers(db: AsyncSession, n: int = 10) -> List[CustomerRevenue]:
    """Customers generating the highest revenue."""
    revenue = func.sum(FactSales.sales_amount).label("total_revenue")
    stmt = (
        select(
            DimCustomer.customer_key,
            DimCustomer.first_name,
            DimCustomer.last_name,
            revenue,
        )
        .select_from(FactSales)
        .outerjoin(DimCustomer, SALES_TO_CUSTOMERS)
        .group_by(DimCustomer.customer_key, DimCustomer.first_name, DimCustomer.last_name)
        .order_by(revenue.desc(), DimCustomer.customer_key)
        .limit(check_top_n(n))
    )
    return await fetch_all(db, stmt, CustomerRevenue)


async def least_active_customers(db: AsyncSession, n: int = 3) -> List[CustomerOrders]:
    """Customers with the fewest distinct orders."""
    orders = func.count(distinct(FactSales.order_number)).label("total_orders")
    stmt = (
        select(
            DimCustomer.customer_key,
            DimCustomer.first_name,
            DimCustomer.last_name,
            orders,
        )
        .select_from(FactSales)
        .outerjoin(DimCustomer, SALES_TO_CUSTOMERS)
        .group_by(DimCustomer.customer_key, DimCustomer.first_name, DimCustomer.last_name)
        .order_by(orders.asc(), DimCustomer.customer_key)
        .limit(check_top_n(n))
    )
    return await fetch_all(db, stmt, CustomerOrders)
