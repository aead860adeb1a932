"""
Warehouse Dataset Generator
Writes the three gold-layer CSV extracts (customers, products, sales)
"""

import argparse
from pathlib import Path

from warehouse_analytics.data import WarehouseDataGenerator


def main():
    parser = argparse.ArgumentParser(description="Generate synthetic warehouse extracts")
    parser.add_argument("--output-dir", default=None, help="Target directory (default: WAREHOUSE_DATA_DIR)")
    parser.add_argument("--customers", type=int, default=1000, help="Number of customers")
    parser.add_argument("--products", type=int, default=200, help="Number of products")
    parser.add_argument("--orders", type=int, default=5000, help="Number of orders")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    print("=" * 60)
    print("📦 Warehouse Dataset Generator")
    print("=" * 60 + "\n")

    generator = WarehouseDataGenerator(seed=args.seed)
    paths = generator.write_csv_files(
        output_dir=args.output_dir,
        n_customers=args.customers,
        n_products=args.products,
        n_orders=args.orders,
    )

    total = 0
    for table_name, path in paths.items():
        size = Path(path).stat().st_size / 1024 / 1024
        with open(path, "r", encoding="utf-8") as file:
            rows = sum(1 for _ in file) - 1
        total += rows
        print(f"   📄 {path.name} ({table_name}): {rows:,} rows ({size:.2f} MB)")

    print(f"\n📊 Total: {total:,} rows")


if __name__ == "__main__":
    main()
