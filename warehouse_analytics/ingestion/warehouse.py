"""
Warehouse Build

Creates the warehouse tables, bulk loads the CSV extracts in dependency
order and defines the reporting views.
"""

from pathlib import Path
from typing import List, Optional, Union

import structlog
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.schema import CreateSchema

from warehouse_analytics.config import get_settings
from warehouse_analytics.database.connection import supports_schemas
from warehouse_analytics.database.models import WAREHOUSE_TABLES, Base
from warehouse_analytics.ingestion.batch_loader import (
    BatchLoader,
    LoadResult,
    LoadStatus,
    config_for_table,
    create_batch_loader,
)
from warehouse_analytics.reports import create_report_views, drop_report_views

logger = structlog.get_logger(__name__)


class WarehouseLoadError(RuntimeError):
    """A table of the warehouse could not be loaded"""

    def __init__(self, result: LoadResult):
        self.result = result
        super().__init__(
            f"Loading {result.target_table} from {result.file_path} failed: {result.error_message}"
        )


async def create_warehouse(conn: AsyncConnection, reset: bool = True) -> None:
    """
    Create the warehouse schema and tables.

    With ``reset`` the report views and every warehouse table are dropped
    first, so the warehouse starts empty.
    """
    schema_name = get_settings().warehouse.schema_name

    if reset:
        await drop_report_views(conn)
        await conn.run_sync(Base.metadata.drop_all)
        logger.info("Warehouse tables dropped")

    if schema_name and supports_schemas(conn.engine):
        await conn.execute(CreateSchema(schema_name, if_not_exists=True))

    await conn.run_sync(Base.metadata.create_all)
    logger.info("Warehouse tables created", tables=list(WAREHOUSE_TABLES), schema=schema_name)


async def load_warehouse(
    db: AsyncSession,
    data_dir: Optional[Union[str, Path]] = None,
    loader: Optional[BatchLoader] = None,
) -> List[LoadResult]:
    """
    Truncate and reload every warehouse table from its CSV extract.

    Tables load in dependency order (customers, products, sales) and the
    load stops at the first table that fails.

    Raises:
        WarehouseLoadError: If a table load failed
    """
    loader = loader or create_batch_loader()
    results = []

    for table_name in WAREHOUSE_TABLES:
        result = await loader.load(db, config_for_table(table_name, data_dir))
        results.append(result)
        if result.status == LoadStatus.FAILED:
            raise WarehouseLoadError(result)

    logger.info(
        "Warehouse loaded",
        rows_loaded={r.target_table: r.rows_loaded for r in results},
        rows_failed=sum(r.rows_failed for r in results),
    )
    return results


async def build_warehouse(
    engine: AsyncEngine,
    data_dir: Optional[Union[str, Path]] = None,
    reset: bool = True,
    create_reports: bool = True,
    loader: Optional[BatchLoader] = None,
) -> List[LoadResult]:
    """
    Full build: create tables, load all extracts, define the report views.

    Args:
        engine: Target database engine
        data_dir: Directory holding the CSV extracts (settings when omitted)
        reset: Drop existing tables and views first
        create_reports: Define ``report_customers`` and ``report_products``
        loader: Batch loader to use (configured from settings when omitted)

    Returns:
        Load result per table
    """
    async with engine.begin() as conn:
        await create_warehouse(conn, reset=reset)

    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with session_factory() as db:
        results = await load_warehouse(db, data_dir, loader)
        await db.commit()

    if create_reports:
        async with engine.begin() as conn:
            await create_report_views(conn)

    return results
