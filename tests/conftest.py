"""
Test Suite Configuration
"""
from datetime import date
from typing import AsyncGenerator

import polars as pl
import pytest
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from warehouse_analytics.config import Settings
from warehouse_analytics.database.models import Base, DimCustomer, DimProduct, FactSales


def _customer(key, first, last, country, gender, birthdate):
    return {
        "customer_key": key,
        "customer_id": 11000 + key,
        "customer_number": f"AW{11000 + key:08d}",
        "first_name": first,
        "last_name": last,
        "country": country,
        "marital_status": "Single",
        "gender": gender,
        "birthdate": birthdate,
        "create_date": date(2011, 1, 1),
    }


def _product(key, name, category, subcategory, cost):
    return {
        "product_key": key,
        "product_id": 200 + key,
        "product_number": f"PR-{key}",
        "product_name": name,
        "category_id": category[:2].upper(),
        "category": category,
        "subcategory": subcategory,
        "maintenance": "No",
        "cost": cost,
        "product_line": "Road",
        "start_date": date(2010, 1, 1),
    }


def _sale(order_number, product_key, customer_key, order_date, sales_amount, quantity, price):
    return {
        "order_number": order_number,
        "product_key": product_key,
        "customer_key": customer_key,
        "order_date": order_date,
        "shipping_date": None,
        "due_date": None,
        "sales_amount": sales_amount,
        "quantity": quantity,
        "price": price,
    }


CUSTOMERS = [
    _customer(1, "Alice", "Smith", "Germany", "Female", date(1980, 5, 10)),
    _customer(2, "Bob", "Jones", "United States", "Male", date(2000, 3, 1)),
    _customer(3, "Carla", "Diaz", "Germany", "Female", date(1960, 12, 31)),
    _customer(4, "Dan", "Brown", "Australia", "Male", date(1995, 7, 15)),
]

PRODUCTS = [
    _product(10, "Road-150", "Bikes", "Road Bikes", 1200),
    _product(11, "Mountain-200", "Bikes", "Mountain Bikes", 800),
    _product(12, "Helmet", "Accessories", "Helmets", 50),
    _product(13, "Jersey", "Clothing", "Jerseys", 100),
    _product(14, "Socks", "Clothing", "Socks", 10),
]

SALES = [
    _sale("SO1", 10, 1, date(2012, 1, 15), 3000, 1, 3000),
    _sale("SO1", 12, 1, date(2012, 1, 15), 100, 2, 50),
    _sale("SO7", 12, 1, date(2012, 8, 20), 50, 1, 50),
    _sale("SO2", 10, 1, date(2013, 3, 10), 3000, 1, 3000),
    _sale("SO3", 11, 2, date(2012, 6, 1), 2000, 1, 2000),
    _sale("SO4", 12, 2, date(2013, 6, 20), 50, 1, 50),
    _sale("SO5", 11, 3, date(2013, 11, 5), 2000, 1, 2000),
    _sale("SO5", 12, 3, date(2013, 11, 5), 150, 3, 50),
    # Undated line: counted by measures, ignored by time-based reports
    _sale("SO6", 12, 3, None, 50, 1, 50),
]


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
    )


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite warehouse, so views are shared across connections"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'warehouse.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def seeded_db(test_db) -> AsyncSession:
    """Session over a warehouse holding the small reference dataset"""
    await test_db.execute(insert(DimCustomer.__table__), CUSTOMERS)
    await test_db.execute(insert(DimProduct.__table__), PRODUCTS)
    await test_db.execute(insert(FactSales.__table__), SALES)
    await test_db.commit()
    return test_db


@pytest.fixture
async def tied_db(seeded_db) -> AsyncSession:
    """Reference dataset plus a product whose revenue ties Road-150"""
    await seeded_db.execute(
        insert(DimProduct.__table__),
        [_product(15, "Twin", "Bikes", "Road Bikes", 1200)],
    )
    await seeded_db.execute(
        insert(FactSales.__table__),
        [_sale("SO9", 15, 4, date(2013, 1, 1), 6000, 1, 6000)],
    )
    await seeded_db.commit()
    return seeded_db


@pytest.fixture
async def orphaned_db(seeded_db) -> AsyncSession:
    """Reference dataset plus a sale whose keys match no dimension row"""
    await seeded_db.execute(
        insert(FactSales.__table__),
        [_sale("SO8", 99, 99, date(2013, 5, 1), 70, 1, 70)],
    )
    await seeded_db.commit()
    return seeded_db


@pytest.fixture
def customers_csv(tmp_path):
    """Customer extract with two rows that cannot be converted"""
    path = tmp_path / "gold.dim_customers.csv"
    path.write_text(
        "customer_key,customer_id,customer_number,first_name,last_name,country,marital_status,gender,birthdate,create_date\n"
        "1,11000,AW00011000,Jon,Yang,Australia,Married,Male,1971-10-06,2025-10-06\n"
        "2,11001,AW00011001,Eugene,Huang,Australia,Single,Male,1976-05-10,2025-10-07\n"
        "3,11002,AW00011002,Ruben,Torres,,Married,Male,,2025-10-08\n"
        "4,abc,AW00011003,Bad,Number,Australia,Single,Female,1970-01-01,2025-10-09\n"
        "5,11004,AW00011004,Bad,Date,Australia,Single,Female,1970-13-45,2025-10-09\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def sample_sales_df() -> pl.DataFrame:
    """Typed sales rows as the loader hands them to validation"""
    return pl.DataFrame({
        "order_number": ["SO1", "SO2", None],
        "product_key": [10, 11, 12],
        "customer_key": [1, 2, 3],
        "order_date": [date(2012, 1, 15), None, date(2013, 11, 5)],
        "shipping_date": [None, None, None],
        "due_date": [None, None, None],
        "sales_amount": [3000, 2000, -5],
        "quantity": [1, 1, 1],
        "price": [3000, 2000, -5],
    }, schema_overrides={"shipping_date": pl.Date, "due_date": pl.Date})
