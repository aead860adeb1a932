"""
Database Models - Star Schema Design

Gold layer of the analytics warehouse: two dimension tables described by
business attributes and one fact table holding one row per order line.

Fact Tables:
- FactSales: Order lines with amounts, quantities and prices

Dimension Tables:
- DimCustomer: Customer attributes and demographics
- DimProduct: Product catalog, categories and cost

Tables carry no schema of their own; on PostgreSQL the configured warehouse
schema leads the connection's search path.
"""

from datetime import date
from typing import Dict, Optional

from sqlalchemy import (
    Date,
    Integer,
    SmallInteger,
    String,
    Table,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all warehouse tables"""
    pass


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class DimCustomer(Base):
    """
    Customer Dimension Table

    One row per customer with personal and demographic information.
    """
    __tablename__ = "dim_customers"

    customer_key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    customer_id: Mapped[Optional[int]] = mapped_column(Integer)
    customer_number: Mapped[Optional[str]] = mapped_column(String(50))
    first_name: Mapped[Optional[str]] = mapped_column(String(50))
    last_name: Mapped[Optional[str]] = mapped_column(String(50))
    country: Mapped[Optional[str]] = mapped_column(String(50))
    marital_status: Mapped[Optional[str]] = mapped_column(String(50))
    gender: Mapped[Optional[str]] = mapped_column(String(50))
    birthdate: Mapped[Optional[date]] = mapped_column(Date)
    create_date: Mapped[Optional[date]] = mapped_column(Date)


class DimProduct(Base):
    """
    Product Dimension Table

    One row per product with category hierarchy, cost and lifecycle dates.
    """
    __tablename__ = "dim_products"

    product_key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    product_id: Mapped[Optional[int]] = mapped_column(Integer)
    product_number: Mapped[Optional[str]] = mapped_column(String(50))
    product_name: Mapped[Optional[str]] = mapped_column(String(50))
    category_id: Mapped[Optional[str]] = mapped_column(String(50))
    category: Mapped[Optional[str]] = mapped_column(String(50))
    subcategory: Mapped[Optional[str]] = mapped_column(String(50))
    maintenance: Mapped[Optional[str]] = mapped_column(String(50))
    cost: Mapped[Optional[int]] = mapped_column(Integer)
    product_line: Mapped[Optional[str]] = mapped_column(String(50))
    start_date: Mapped[Optional[date]] = mapped_column(Date)


# =============================================================================
# FACT TABLES
# =============================================================================

class FactSales(Base):
    """
    Sales Fact Table

    One row per order line. References dimensions by key without enforced
    foreign keys: extracts may carry keys missing from the dimensions and
    reports join with LEFT JOIN.
    """
    __tablename__ = "fact_sales"

    order_number: Mapped[Optional[str]] = mapped_column(String(50))
    product_key: Mapped[Optional[int]] = mapped_column(Integer)
    customer_key: Mapped[Optional[int]] = mapped_column(Integer)
    order_date: Mapped[Optional[date]] = mapped_column(Date)
    shipping_date: Mapped[Optional[date]] = mapped_column(Date)
    due_date: Mapped[Optional[date]] = mapped_column(Date)
    sales_amount: Mapped[Optional[int]] = mapped_column(Integer)
    quantity: Mapped[Optional[int]] = mapped_column(SmallInteger)
    price: Mapped[Optional[int]] = mapped_column(Integer)

    # Identity for the ORM only; the table itself has no primary key
    __mapper_args__ = {"primary_key": [order_number, product_key]}


# Warehouse tables in load order
WAREHOUSE_TABLES: Dict[str, Table] = {
    "dim_customers": DimCustomer.__table__,
    "dim_products": DimProduct.__table__,
    "fact_sales": FactSales.__table__,
}
