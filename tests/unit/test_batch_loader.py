"""
Unit Tests - Batch Loader and Warehouse Build
"""
from datetime import date

import polars as pl
import pytest
from sqlalchemy import func, select

from warehouse_analytics.data import WarehouseDataGenerator
from warehouse_analytics.database.models import DimCustomer, DimProduct, FactSales
from warehouse_analytics.database.views import view_exists
from warehouse_analytics.ingestion import (
    BatchFileConfig,
    BatchLoader,
    LoadStatus,
    WarehouseLoadError,
    build_warehouse,
    config_for_table,
)


async def _count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.fixture
def loader(tmp_path):
    return BatchLoader(enable_validation=True, dead_letter_path=str(tmp_path / "dead_letter"))


class TestBatchLoader:
    """Tests for BatchLoader"""

    async def test_load_maps_fields_by_position(self, test_db, loader, tmp_path):
        """Test header names are ignored and empty fields become NULL"""
        path = tmp_path / "products.csv"
        path.write_text(
            "a,b,c,d,e,f,g,h,i,j,k\n"
            "10,210,BK-R93R-62,Road-150,BI_RB,Bikes,Road Bikes,Yes,1200,Road,2011-07-01\n"
            "11,211,BK-M82S-38,Mountain-200,BI_MB,Bikes,Mountain Bikes,No,,Mountain,\n",
            encoding="utf-8",
        )
        config = BatchFileConfig(file_path=path, target_table="dim_products")

        result = await loader.load(test_db, config)

        assert result.status == LoadStatus.COMPLETED
        assert result.rows_read == 2
        assert result.rows_loaded == 2
        assert result.file_hash is not None

        product = await test_db.get(DimProduct, 10)
        assert product.product_name == "Road-150"
        assert product.cost == 1200
        assert product.start_date == date(2011, 7, 1)

        missing = await test_db.get(DimProduct, 11)
        assert missing.cost is None
        assert missing.start_date is None

    async def test_rejected_rows_go_to_dead_letter(self, test_db, loader, customers_csv):
        config = BatchFileConfig(file_path=customers_csv, target_table="dim_customers")

        result = await loader.load(test_db, config)

        assert result.status == LoadStatus.PARTIAL
        assert result.rows_read == 5
        assert result.rows_loaded == 3
        assert result.rows_failed == 2
        assert await _count(test_db, DimCustomer) == 3

        rejected = pl.read_parquet(result.dead_letter_file)
        assert rejected["customer_key"].to_list() == ["4", "5"]
        assert "customer_id" in rejected["_error_message"][0]
        assert "birthdate" in rejected["_error_message"][1]
        assert "_failed_at" in rejected.columns

    async def test_reload_replaces_contents(self, test_db, loader, customers_csv):
        """Test a second load truncates instead of appending"""
        config = BatchFileConfig(file_path=customers_csv, target_table="dim_customers")

        await loader.load(test_db, config)
        await loader.load(test_db, config)

        assert await _count(test_db, DimCustomer) == 3

    async def test_header_rows_skipped(self, test_db, loader, tmp_path):
        path = tmp_path / "customers.csv"
        path.write_text(
            "extract generated 2025-10-06\n"
            "customer_key,customer_id,customer_number,first_name,last_name,country,marital_status,gender,birthdate,create_date\n"
            "1,11000,AW00011000,Jon,Yang,Australia,Married,Male,1971-10-06,2025-10-06\n",
            encoding="utf-8",
        )
        config = BatchFileConfig(file_path=path, target_table="dim_customers", header_rows=2)

        result = await loader.load(test_db, config)

        assert result.rows_loaded == 1

    async def test_oversized_text_rejected(self, test_db, loader, tmp_path):
        path = tmp_path / "sales.csv"
        path.write_text(
            "order_number,product_key,customer_key,order_date,shipping_date,due_date,sales_amount,quantity,price\n"
            f"{'X' * 51},10,1,2012-01-15,2012-01-22,2012-01-27,3000,1,3000\n"
            "SO1,10,1,2012-01-15,2012-01-22,2012-01-27,3000,1,3000\n",
            encoding="utf-8",
        )
        config = BatchFileConfig(file_path=path, target_table="fact_sales")

        result = await loader.load(test_db, config)

        assert result.status == LoadStatus.PARTIAL
        assert result.rows_loaded == 1
        assert result.rows_failed == 1

    async def test_integer_overflow_rejected(self, test_db, loader, tmp_path):
        """Test values beyond the 32-bit int column range are rejected"""
        path = tmp_path / "customers.csv"
        path.write_text(
            "customer_key,customer_id,customer_number,first_name,last_name,country,marital_status,gender,birthdate,create_date\n"
            "1,3000000000,AW00011000,Jon,Yang,Australia,Married,Male,1971-10-06,2025-10-06\n"
            "2,11001,AW00011001,Eugene,Huang,Australia,Single,Male,1976-05-10,2025-10-07\n",
            encoding="utf-8",
        )
        config = BatchFileConfig(file_path=path, target_table="dim_customers")

        result = await loader.load(test_db, config)

        assert result.status == LoadStatus.PARTIAL
        assert result.rows_loaded == 1
        assert result.rows_failed == 1
        assert result.dead_letter_file is not None

    async def test_missing_file(self, test_db, loader, tmp_path):
        config = BatchFileConfig(file_path=tmp_path / "missing.csv", target_table="fact_sales")

        result = await loader.load(test_db, config)

        assert result.status == LoadStatus.FAILED
        assert "File not found" in result.error_message
        assert result.rows_loaded == 0

    async def test_unknown_table(self, test_db, loader, customers_csv):
        config = BatchFileConfig(file_path=customers_csv, target_table="dim_stores")

        result = await loader.load(test_db, config)

        assert result.status == LoadStatus.FAILED
        assert "Unknown warehouse table" in result.error_message

    async def test_field_count_mismatch(self, test_db, loader, tmp_path):
        path = tmp_path / "products.csv"
        path.write_text("product_key,product_name\n10,Road-150\n", encoding="utf-8")
        config = BatchFileConfig(file_path=path, target_table="dim_products")

        result = await loader.load(test_db, config)

        assert result.status == LoadStatus.FAILED
        assert "fields per row" in result.error_message

    async def test_validation_failure_leaves_table_untouched(self, seeded_db, loader, tmp_path):
        """Test duplicate keys fail the load before anything is written"""
        path = tmp_path / "customers.csv"
        path.write_text(
            "customer_key,customer_id,customer_number,first_name,last_name,country,marital_status,gender,birthdate,create_date\n"
            "1,11000,AW00011000,Jon,Yang,Australia,Married,Male,1971-10-06,2025-10-06\n"
            "1,11001,AW00011001,Eugene,Huang,Australia,Single,Male,1976-05-10,2025-10-07\n",
            encoding="utf-8",
        )
        config = BatchFileConfig(file_path=path, target_table="dim_customers")

        result = await loader.load(seeded_db, config)

        assert result.status == LoadStatus.FAILED
        assert "Data quality validation failed" in result.error_message
        assert result.dead_letter_file is not None
        assert await _count(seeded_db, DimCustomer) == 4

    async def test_header_only_file(self, test_db, loader, tmp_path):
        path = tmp_path / "sales.csv"
        path.write_text(
            "order_number,product_key,customer_key,order_date,shipping_date,due_date,sales_amount,quantity,price\n",
            encoding="utf-8",
        )
        config = BatchFileConfig(file_path=path, target_table="fact_sales")

        result = await loader.load(test_db, config)

        assert result.status == LoadStatus.COMPLETED
        assert result.rows_loaded == 0

    def test_config_for_table(self, tmp_path):
        config = config_for_table("fact_sales", tmp_path)

        assert config.file_path == tmp_path / "gold.fact_sales.csv"
        assert config.header_rows == 1

        with pytest.raises(ValueError):
            config_for_table("dim_stores")


class TestWarehouseBuild:
    """Tests for the full warehouse build"""

    async def test_build_from_generated_extracts(self, test_engine, test_db, loader, tmp_path):
        data_dir = tmp_path / "csv-files"
        WarehouseDataGenerator(seed=7).write_csv_files(
            data_dir, n_customers=20, n_products=10, n_orders=50,
        )
        sales = pl.read_csv(data_dir / "gold.fact_sales.csv")

        results = await build_warehouse(test_engine, data_dir, loader=loader)

        assert [r.target_table for r in results] == ["dim_customers", "dim_products", "fact_sales"]
        assert all(r.status == LoadStatus.COMPLETED for r in results)
        assert await _count(test_db, DimCustomer) == 20
        assert await _count(test_db, DimProduct) == 10
        assert await _count(test_db, FactSales) == len(sales)

        async with test_engine.connect() as conn:
            assert await view_exists(conn, "report_customers")
            assert await view_exists(conn, "report_products")

    async def test_build_stops_at_failed_table(self, test_engine, test_db, loader, tmp_path):
        """Test nothing is committed when a table fails"""
        data_dir = tmp_path / "csv-files"
        paths = WarehouseDataGenerator(seed=7).write_csv_files(
            data_dir, n_customers=5, n_products=5, n_orders=5,
        )
        paths["dim_products"].unlink()

        with pytest.raises(WarehouseLoadError) as exc_info:
            await build_warehouse(test_engine, data_dir, loader=loader, create_reports=False)

        assert exc_info.value.result.target_table == "dim_products"
        assert await _count(test_db, DimCustomer) == 0
