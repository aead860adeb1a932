"""
Prefect Workflow Orchestration - Warehouse Build

Rebuilds the analytics warehouse from its CSV extracts:
- Table (re)creation
- Per-table bulk loads with retries
- Report view refresh
- Completion and failure alerts
"""

from typing import Optional

from prefect import flow, get_run_logger, task

from warehouse_analytics.config import get_settings
from warehouse_analytics.database.connection import close_database, get_db, get_engine, init_database
from warehouse_analytics.database.models import WAREHOUSE_TABLES
from warehouse_analytics.ingestion.batch_loader import LoadStatus, config_for_table, create_batch_loader
from warehouse_analytics.ingestion.warehouse import WarehouseLoadError, create_warehouse
from warehouse_analytics.reports import create_report_views


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="create_tables",
    description="Create the warehouse schema and tables",
)
async def create_tables(reset: bool = True) -> dict:
    """Create (or reset) the warehouse tables"""
    logger = get_run_logger()

    async with get_engine().begin() as conn:
        await create_warehouse(conn, reset=reset)

    logger.info(f"Warehouse tables ready (reset={reset})")
    return {"tables": list(WAREHOUSE_TABLES), "reset": reset}


@task(
    name="load_table",
    description="Truncate and bulk load one warehouse table",
    retries=3,
    retry_delay_seconds=30,
)
async def load_table(table_name: str, data_dir: Optional[str] = None) -> dict:
    """Load one table from its CSV extract"""
    logger = get_run_logger()

    loader = create_batch_loader()
    async with get_db() as db:
        result = await loader.load(db, config_for_table(table_name, data_dir))

    if result.status == LoadStatus.FAILED:
        raise WarehouseLoadError(result)

    logger.info(
        f"Loaded {table_name}: {result.rows_loaded} rows loaded, "
        f"{result.rows_failed} rejected ({result.status.value})"
    )
    return result.model_dump(mode="json")


@task(
    name="refresh_report_views",
    description="Drop and redefine the reporting views",
)
async def refresh_report_views() -> dict:
    """Redefine report_customers and report_products"""
    logger = get_run_logger()

    async with get_engine().begin() as conn:
        views = await create_report_views(conn)

    logger.info(f"Report views refreshed: {', '.join(views)}")
    return {"views": views}


@task(
    name="send_alert",
    description="Send alert notification",
)
async def send_alert(
    alert_type: str,
    message: str,
    severity: str = "info",
) -> None:
    """Send alert notification"""
    logger = get_run_logger()
    logger.warning(f"[{severity.upper()}] {alert_type}: {message}")


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="build_warehouse",
    description="Rebuild the analytics warehouse from CSV extracts",
)
async def build_warehouse_flow(
    data_dir: Optional[str] = None,
    reset: bool = True,
    create_reports: bool = True,
) -> dict:
    """
    Warehouse build pipeline.

    Steps:
    1. Create (or reset) the warehouse tables
    2. Load customers, products and sales in that order
    3. Refresh the report views
    4. Send completion notification
    """
    logger = get_run_logger()

    data_dir = data_dir or get_settings().warehouse.data_dir
    logger.info(f"Starting warehouse build from {data_dir}")

    results = {
        "data_dir": data_dir,
        "steps": {},
    }

    await init_database()
    try:
        results["steps"]["create_tables"] = await create_tables(reset)

        for table_name in WAREHOUSE_TABLES:
            results["steps"][f"load_{table_name}"] = await load_table(table_name, data_dir)

        if create_reports:
            results["steps"]["report_views"] = await refresh_report_views()

        await send_alert(
            alert_type="Warehouse Build Complete",
            message=f"Warehouse rebuilt from {data_dir}",
            severity="info",
        )
        results["status"] = "success"

    except Exception as e:
        logger.error(f"Warehouse build failed: {e}")

        await send_alert(
            alert_type="Warehouse Build Failed",
            message=f"Warehouse build failed: {str(e)}",
            severity="critical",
        )

        results["status"] = "failed"
        results["error"] = str(e)
        raise
    finally:
        await close_database()

    return results


if __name__ == "__main__":
    import asyncio

    asyncio.run(build_warehouse_flow())
