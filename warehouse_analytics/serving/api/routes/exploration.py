"""
Exploration API Endpoints

Warehouse catalog and dimension exploration.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.database.connection import get_db_dependency
from warehouse_analytics.exploration import (
    ColumnInfo,
    TableInfo,
    customer_age_range,
    describe_columns,
    distinct_countries,
    list_tables,
    order_date_range,
    product_hierarchy,
)
from warehouse_analytics.exploration.dimensions import (
    CustomerAgeRange,
    OrderDateRange,
    ProductHierarchyRow,
)

router = APIRouter()


@router.get("/tables", response_model=List[TableInfo])
async def get_tables(db: AsyncSession = Depends(get_db_dependency)):
    return await list_tables(db)


@router.get("/tables/{table_name}/columns", response_model=List[ColumnInfo])
async def get_columns(table_name: str, db: AsyncSession = Depends(get_db_dependency)):
    columns = await describe_columns(db, table_name)
    if not columns:
        raise HTTPException(status_code=404, detail=f"Table not found: {table_name}")
    return columns


@router.get("/countries", response_model=List[Optional[str]])
async def get_countries(db: AsyncSession = Depends(get_db_dependency)):
    return await distinct_countries(db)


@router.get("/product-hierarchy", response_model=List[ProductHierarchyRow])
async def get_product_hierarchy(db: AsyncSession = Depends(get_db_dependency)):
    return await product_hierarchy(db)


@router.get("/order-date-range", response_model=OrderDateRange)
async def get_order_date_range(db: AsyncSession = Depends(get_db_dependency)):
    return await order_date_range(db)


@router.get("/customer-age-range", response_model=CustomerAgeRange)
async def get_customer_age_range(
    as_of: Optional[date] = Query(None, description="Reference date, defaults to today"),
    db: AsyncSession = Depends(get_db_dependency),
):
    return await customer_age_range(db, as_of)
