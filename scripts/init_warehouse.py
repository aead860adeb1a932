"""
Warehouse Initialization
Creates the warehouse tables, bulk loads the CSV extracts and defines the
report views, without the workflow orchestrator.

Usage:
    python scripts/init_warehouse.py --data-dir datasets/csv-files
    python scripts/init_warehouse.py --no-reset --no-reports
"""

import argparse
import asyncio
import sys

from warehouse_analytics.config.logging import configure_logging
from warehouse_analytics.database.connection import close_database, init_database
from warehouse_analytics.ingestion import WarehouseLoadError, build_warehouse


async def run(args: argparse.Namespace) -> int:
    engine = await init_database(args.database_url)
    try:
        results = await build_warehouse(
            engine,
            data_dir=args.data_dir,
            reset=not args.no_reset,
            create_reports=not args.no_reports,
        )
    except WarehouseLoadError as e:
        print(f"❌ {e}")
        return 1
    finally:
        await close_database()

    for result in results:
        print(
            f"   ✅ {result.target_table}: {result.rows_loaded:,} rows loaded, "
            f"{result.rows_failed:,} rejected ({result.status.value})"
        )
    return 0


def main():
    parser = argparse.ArgumentParser(description="Build the analytics warehouse from CSV extracts")
    parser.add_argument("--data-dir", default=None, help="Directory holding the CSV extracts")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy async URL (default: settings)")
    parser.add_argument("--no-reset", action="store_true", help="Keep existing tables instead of recreating them")
    parser.add_argument("--no-reports", action="store_true", help="Skip defining the report views")
    parser.add_argument("--log-level", default=None, help="Log level override")
    args = parser.parse_args()

    configure_logging(args.log_level)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
