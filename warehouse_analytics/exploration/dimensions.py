"""
Dimension & Date Exploration

Unique attribute values of the dimensions and the temporal boundaries of
orders and customer birthdates.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics.common import fetch_all
from warehouse_analytics.database.functions import months_between, reference_date, years_between
from warehouse_analytics.database.models import DimCustomer, DimProduct, FactSales


class ProductHierarchyRow(BaseModel):
    category: Optional[str]
    subcategory: Optional[str]
    product_name: Optional[str]


class OrderDateRange(BaseModel):
    first_order_date: Optional[date]
    last_order_date: Optional[date]
    order_range_months: Optional[int]


class CustomerAgeRange(BaseModel):
    oldest_birthdate: Optional[date]
    oldest_age: Optional[int]
    youngest_birthdate: Optional[date]
    youngest_age: Optional[int]


async def distinct_countries(db: AsyncSession) -> List[Optional[str]]:
    """Countries customers come from."""
    stmt = select(DimCustomer.country).distinct().order_by(DimCustomer.country)
    result = await db.execute(stmt)
    return list(result.scalars())


async def product_hierarchy(db: AsyncSession) -> List[ProductHierarchyRow]:
    """Category > subcategory > product combinations."""
    stmt = (
        select(DimProduct.category, DimProduct.subcategory, DimProduct.product_name)
        .distinct()
        .order_by(DimProduct.category, DimProduct.subcategory, DimProduct.product_name)
    )
    return await fetch_all(db, stmt, ProductHierarchyRow)


async def order_date_range(db: AsyncSession) -> OrderDateRange:
    """First and last order date and the months between them."""
    first_order = func.min(FactSales.order_date)
    last_order = func.max(FactSales.order_date)
    stmt = select(
        first_order.label("first_order_date"),
        last_order.label("last_order_date"),
        months_between(first_order, last_order).label("order_range_months"),
    )
    result = await db.execute(stmt)
    return OrderDateRange(**result.one()._mapping)


async def customer_age_range(db: AsyncSession, as_of: Optional[date] = None) -> CustomerAgeRange:
    """
    Birthdates of the oldest and youngest customers and their ages.

    Ages count year boundaries up to ``as_of`` (the engine's current date
    when omitted), not completed years.
    """
    today = reference_date(as_of)
    oldest = func.min(DimCustomer.birthdate)
    youngest = func.max(DimCustomer.birthdate)
    stmt = select(
        oldest.label("oldest_birthdate"),
        years_between(oldest, today).label("oldest_age"),
        youngest.label("youngest_birthdate"),
        years_between(youngest, today).label("youngest_age"),
    )
    result = await db.execute(stmt)
    return CustomerAgeRange(**result.one()._mapping)
