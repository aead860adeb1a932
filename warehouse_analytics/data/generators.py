"""
Synthetic Data Generator

Generates gold-layer extracts shaped exactly like the warehouse tables, for
local development and demos:
- Customers with demographics
- Products with a category hierarchy and cost
- Sales order lines over a four-year window
"""

from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
import polars as pl
import structlog
from faker import Faker

from warehouse_analytics.config import get_settings
from warehouse_analytics.database.models import WAREHOUSE_TABLES

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

# category -> (category id prefix, subcategories, product line, cost range)
CATEGORIES = {
    "Bikes": ("BI", ["Road Bikes", "Mountain Bikes", "Touring Bikes"], "Road", (300, 2200)),
    "Components": ("CO", ["Handlebars", "Wheels", "Saddles", "Pedals"], "Mountain", (10, 600)),
    "Clothing": ("CL", ["Jerseys", "Shorts", "Gloves", "Socks", "Caps"], "Other Sales", (3, 60)),
    "Accessories": ("AC", ["Helmets", "Bottles and Cages", "Tires and Tubes", "Locks"], "Other Sales", (1, 40)),
}

COUNTRIES = ["United States", "Australia", "United Kingdom", "Germany", "France", "Canada", "n/a"]
COUNTRY_WEIGHTS = [0.33, 0.27, 0.1, 0.09, 0.1, 0.09, 0.02]

SALES_START = date(2010, 12, 29)
SALES_END = date(2014, 1, 28)


# =============================================================================
# GENERATOR
# =============================================================================

class WarehouseDataGenerator:
    """
    Reproducible generator for the three warehouse extracts.

    Example:
        generator = WarehouseDataGenerator(seed=7)
        paths = generator.write_csv_files("datasets/csv-files")
    """

    def __init__(self, seed: int = 42):
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def generate_customers(self, n: int = 1000) -> pl.DataFrame:
        """Customer dimension rows, keys 1..n"""
        keys = np.arange(1, n + 1)
        customer_ids = keys + 11000
        created = [
            SALES_START + timedelta(days=int(d))
            for d in self.rng.integers(0, (SALES_END - SALES_START).days, n)
        ]
        df = pl.DataFrame({
            "customer_key": keys,
            "customer_id": customer_ids,
            "customer_number": [f"AW{cid:08d}" for cid in customer_ids],
            "first_name": [self.fake.first_name() for _ in range(n)],
            "last_name": [self.fake.last_name() for _ in range(n)],
            "country": self.rng.choice(COUNTRIES, n, p=COUNTRY_WEIGHTS),
            "marital_status": self.rng.choice(["Married", "Single"], n),
            "gender": self.rng.choice(["Male", "Female", "n/a"], n, p=[0.49, 0.49, 0.02]),
            "birthdate": [
                self.fake.date_between(start_date=date(1916, 1, 1), end_date=date(1986, 12, 31))
                for _ in range(n)
            ],
            "create_date": created,
        })
        return df.select(self._columns("dim_customers"))

    def generate_products(self, n: int = 200) -> pl.DataFrame:
        """Product dimension rows, keys 1..n"""
        rows = []
        for key in range(1, n + 1):
            category = str(self.rng.choice(list(CATEGORIES)))
            prefix, subcategories, product_line, (low, high) = CATEGORIES[category]
            subcategory = str(self.rng.choice(subcategories))

            # Key suffix keeps names unique; reports group by product name
            name = f"{self.fake.word().title()} {subcategory[:-1]}-{key}"

            rows.append({
                "product_key": key,
                "product_id": 200 + key,
                "product_number": f"{prefix}-{self.fake.bothify('??##').upper()}-{key:02d}",
                "product_name": name,
                "category_id": f"{prefix}_{subcategory[:2].upper()}",
                "category": category,
                "subcategory": subcategory,
                "maintenance": str(self.rng.choice(["Yes", "No"])),
                "cost": int(self.rng.integers(low, high)),
                "product_line": product_line,
                "start_date": SALES_START - timedelta(days=int(self.rng.integers(0, 900))),
            })
        return pl.DataFrame(rows).select(self._columns("dim_products"))

    def generate_sales(
        self,
        customers: pl.DataFrame,
        products: pl.DataFrame,
        n_orders: int = 5000,
        missing_date_rate: float = 0.001,
    ) -> pl.DataFrame:
        """
        Sales order lines.

        Each order holds one to three distinct products. A small share of
        lines carries no order date, as real extracts do.
        """
        customer_keys = customers["customer_key"].to_numpy()
        product_keys = products["product_key"].to_numpy()
        prices = dict(zip(products["product_key"].to_list(), products["cost"].to_list()))
        window = (SALES_END - SALES_START).days

        rows = []
        for i in range(n_orders):
            order_number = f"SO{43697 + i}"
            customer_key = int(self.rng.choice(customer_keys))
            order_date = SALES_START + timedelta(days=int(self.rng.integers(0, window + 1)))
            lines = int(self.rng.integers(1, 4))
            for product_key in self.rng.choice(product_keys, size=min(lines, len(product_keys)), replace=False):
                product_key = int(product_key)
                quantity = int(self.rng.integers(1, 4))
                price = max(1, int(round(prices[product_key] * self.rng.uniform(1.1, 1.8))))
                rows.append({
                    "order_number": order_number,
                    "product_key": product_key,
                    "customer_key": customer_key,
                    "order_date": None if self.rng.random() < missing_date_rate else order_date,
                    "shipping_date": order_date + timedelta(days=7),
                    "due_date": order_date + timedelta(days=12),
                    "sales_amount": price * quantity,
                    "quantity": quantity,
                    "price": price,
                })

        schema = {"order_date": pl.Date, "shipping_date": pl.Date, "due_date": pl.Date}
        return pl.DataFrame(rows, schema_overrides=schema).select(self._columns("fact_sales"))

    @staticmethod
    def _columns(table_name: str):
        return [c.name for c in WAREHOUSE_TABLES[table_name].columns]

    def write_csv_files(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        n_customers: int = 1000,
        n_products: int = 200,
        n_orders: int = 5000,
    ) -> Dict[str, Path]:
        """
        Generate all three extracts and write them as CSV with a header row.

        Returns:
            Path of the written file per table
        """
        warehouse = get_settings().warehouse
        output_dir = Path(output_dir or warehouse.data_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        customers = self.generate_customers(n_customers)
        products = self.generate_products(n_products)
        sales = self.generate_sales(customers, products, n_orders)

        frames = {
            "dim_customers": (customers, warehouse.customers_file),
            "dim_products": (products, warehouse.products_file),
            "fact_sales": (sales, warehouse.sales_file),
        }
        paths = {}
        for table_name, (df, file_name) in frames.items():
            path = output_dir / file_name
            df.write_csv(path, date_format="%Y-%m-%d")
            paths[table_name] = path
            logger.info("Extract written", table=table_name, rows=len(df), file=str(path))
        return paths
