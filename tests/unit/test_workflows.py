"""
Unit Tests - Warehouse Build Flow
"""
import pytest
from prefect.testing.utilities import prefect_test_harness
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from warehouse_analytics.config import get_settings
from warehouse_analytics.data import WarehouseDataGenerator
from warehouse_analytics.database.models import DimCustomer, FactSales
from workflows.warehouse_build import build_warehouse_flow


@pytest.fixture(scope="module")
def prefect_harness():
    """Temporary Prefect API and result storage"""
    with prefect_test_harness():
        yield


@pytest.fixture
def warehouse_env(tmp_path, monkeypatch):
    """Generated extracts and a SQLite warehouse configured through the environment"""
    data_dir = tmp_path / "csv-files"
    WarehouseDataGenerator(seed=11).write_csv_files(
        data_dir, n_customers=10, n_products=5, n_orders=20,
    )
    url = f"sqlite+aiosqlite:///{tmp_path / 'warehouse.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("WAREHOUSE_DEAD_LETTER_PATH", str(tmp_path / "dead_letter"))
    get_settings.cache_clear()

    yield data_dir, url

    get_settings.cache_clear()


async def _count(url, model) -> int:
    engine = create_async_engine(url)
    try:
        async with engine.connect() as conn:
            result = await conn.execute(select(func.count()).select_from(model))
            return result.scalar_one()
    finally:
        await engine.dispose()


class TestWarehouseBuildFlow:
    """Tests for build_warehouse_flow"""

    async def test_flow_builds_warehouse(self, prefect_harness, warehouse_env):
        data_dir, url = warehouse_env

        result = await build_warehouse_flow(data_dir=str(data_dir))

        assert result["status"] == "success"
        assert result["steps"]["create_tables"]["reset"] is True
        assert result["steps"]["load_dim_customers"]["rows_loaded"] == 10
        assert result["steps"]["load_dim_products"]["rows_loaded"] == 5
        assert set(result["steps"]["report_views"]["views"]) == {"report_customers", "report_products"}

        assert await _count(url, DimCustomer) == 10
        assert await _count(url, FactSales) == result["steps"]["load_fact_sales"]["rows_loaded"]

    async def test_flow_without_reports(self, prefect_harness, warehouse_env):
        data_dir, _ = warehouse_env

        result = await build_warehouse_flow(data_dir=str(data_dir), create_reports=False)

        assert result["status"] == "success"
        assert "report_views" not in result["steps"]
