"""
Report API Endpoints

Paged access to the ``report_customers`` and ``report_products`` views.
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.database.connection import get_db_dependency
from warehouse_analytics.database.views import view_exists
from warehouse_analytics.reports import (
    CustomerReportRow,
    ProductReportRow,
    fetch_customer_report,
    fetch_product_report,
)
from warehouse_analytics.reports import customers, products

router = APIRouter()
logger = structlog.get_logger(__name__)

VIEWS_MISSING = "Report views are not defined; build the warehouse first"
QUERY_FAILED = "Report query failed"


async def require_view(db: AsyncSession, name: str) -> None:
    """503 when the report view has not been created yet."""
    if not await view_exists(await db.connection(), name):
        logger.warning("Report view missing", view=name)
        raise HTTPException(status_code=503, detail=VIEWS_MISSING)


@router.get("/customers", response_model=List[CustomerReportRow])
async def get_customer_report(
    segment: Optional[str] = Query(None, pattern="^(VIP|Regular|New)$"),
    limit: int = Query(100, ge=1, le=10000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db_dependency),
):
    await require_view(db, customers.VIEW_NAME)
    try:
        return await fetch_customer_report(db, segment=segment, limit=limit, offset=offset)
    except DBAPIError as e:
        logger.error("Customer report query failed", error=str(e))
        raise HTTPException(status_code=503, detail=QUERY_FAILED)


@router.get("/products", response_model=List[ProductReportRow])
async def get_product_report(
    segment: Optional[str] = Query(None, pattern="^(High-Performer|Mid-Range|Low-Performer)$"),
    limit: int = Query(100, ge=1, le=10000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db_dependency),
):
    await require_view(db, products.VIEW_NAME)
    try:
        return await fetch_product_report(db, segment=segment, limit=limit, offset=offset)
    except DBAPIError as e:
        logger.error("Product report query failed", error=str(e))
        raise HTTPException(status_code=503, detail=QUERY_FAILED)
