"""
Report View Lifecycle

Drops and redefines the reporting views. Both views are measured against
the engine's current date, so their contents move with the calendar even
when the warehouse is not reloaded.
"""

from typing import Callable, Dict, List

import structlog
from sqlalchemy.ext.asyncio import AsyncConnection

from warehouse_analytics.database.views import create_view, drop_view
from warehouse_analytics.reports import customers, products

logger = structlog.get_logger(__name__)

# View name -> builder of the stored query
REPORT_VIEWS: Dict[str, Callable] = {
    customers.VIEW_NAME: customers.customer_report_query,
    products.VIEW_NAME: products.product_report_query,
}


async def create_report_views(conn: AsyncConnection) -> List[str]:
    """Drop each report view if present, then define it again."""
    for name, build_query in REPORT_VIEWS.items():
        await create_view(conn, name, build_query(), replace=True)
    logger.info("Report views refreshed", views=list(REPORT_VIEWS))
    return list(REPORT_VIEWS)


async def drop_report_views(conn: AsyncConnection) -> None:
    for name in REPORT_VIEWS:
        await drop_view(conn, name)
