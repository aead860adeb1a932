"""
Magnitude Analysis

Measures grouped by a dimension attribute to show how customers, products,
revenue and items are distributed. Every result is sorted by its measure,
largest first, with the dimension value as tie-breaker.
"""

from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import (
    SALES_TO_CUSTOMERS,
    SALES_TO_PRODUCTS,
    fetch_all,
)
from warehouse_analytics.database.models import DimCustomer, DimProduct, FactSales


class CountryCustomers(BaseModel):
    country: Optional[str]
    total_customers: int


class GenderCustomers(BaseModel):
    gender: Optional[str]
    total_customers: int


class CategoryProducts(BaseModel):
    category: Optional[str]
    total_products: int


class CategoryCost(BaseModel):
    category: Optional[str]
    avg_cost: Optional[float]


class CategoryRevenue(BaseModel):
    category: Optional[str]
    total_revenue: Optional[int]


class CustomerRevenue(BaseModel):
    customer_key: Optional[int]
    first_name: Optional[str]
    last_name: Optional[str]
    total_revenue: Optional[int]


class CountrySoldItems(BaseModel):
    country: Optional[str]
    total_sold_items: Optional[int]


async def customers_by_country(db: AsyncSession) -> List[CountryCustomers]:
    total = func.count(DimCustomer.customer_key).label("total_customers")
    stmt = (
        select(DimCustomer.country, total)
        .group_by(DimCustomer.country)
        .order_by(total.desc(), DimCustomer.country)
    )
    return await fetch_all(db, stmt, CountryCustomers)


async def customers_by_gender(db: AsyncSession) -> List[GenderCustomers]:
    total = func.count(DimCustomer.customer_key).label("total_customers")
    stmt = (
        select(DimCustomer.gender, total)
        .group_by(DimCustomer.gender)
        .order_by(total.desc(), DimCustomer.gender)
    )
    return await fetch_all(db, stmt, GenderCustomers)


async def products_by_category(db: AsyncSession) -> List[CategoryProducts]:
    total = func.count(DimProduct.product_key).label("total_products")
    stmt = (
        select(DimProduct.category, total)
        .group_by(DimProduct.category)
        .order_by(total.desc(), DimProduct.category)
    )
    return await fetch_all(db, stmt, CategoryProducts)


async def average_cost_by_category(db: AsyncSession) -> List[CategoryCost]:
    avg_cost = func.avg(DimProduct.cost).label("avg_cost")
    stmt = (
        select(DimProduct.category, avg_cost)
        .group_by(DimProduct.category)
        .order_by(avg_cost.desc(), DimProduct.category)
    )
    return await fetch_all(db, stmt, CategoryCost)


async def revenue_by_category(db: AsyncSession) -> List[CategoryRevenue]:
    """Revenue per product category; unmatched product keys fall under a null category."""
    revenue = func.sum(FactSales.sales_amount).label("total_revenue")
    stmt = (
        select(DimProduct.category, revenue)
        .select_from(FactSales)
        .outerjoin(DimProduct, SALES_TO_PRODUCTS)
        .group_by(DimProduct.category)
        .order_by(revenue.desc(), DimProduct.category)
    )
    return await fetch_all(db, stmt, CategoryRevenue)


async def revenue_by_customer(db: AsyncSession) -> List[CustomerRevenue]:
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
    )
    return await fetch_all(db, stmt, CustomerRevenue)


async def sold_items_by_country(db: AsyncSession) -> List[CountrySoldItems]:
    items = func.sum(FactSales.quantity).label("total_sold_items")
    stmt = (
        select(DimCustomer.country, items)
        .select_from(FactSales)
        .outerjoin(DimCustomer, SALES_TO_CUSTOMERS)
        .group_by(DimCustomer.country)
        .order_by(items.desc(), DimCustomer.country)
    )
    return await fetch_all(db, stmt, CountrySoldItems)
