#!/usr/bin/env python
"""
Server Entry Point

Starts the Warehouse Analytics API with Uvicorn.
Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import uvicorn

from warehouse_analytics.config import get_settings

APP = "warehouse_analytics.main:app"


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    uvicorn.run(
        APP,
        host="127.0.0.1",
        port=port,
        reload=True,
        reload_dirs=["warehouse_analytics"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server(port: int):
    """Run production server with multiple Uvicorn workers."""
    settings = get_settings()

    uvicorn.run(
        APP,
        host=settings.api_host,
        port=port,
        workers=settings.api_workers,
        log_level=settings.monitoring.log_level.lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
        date_header=True,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Warehouse Analytics API Server")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Run in development mode with auto-reload"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to run on (default: API_PORT setting)"
    )

    args = parser.parse_args()
    port = args.port or get_settings().api_port

    if args.dev:
        print("🚀 Starting development server...")
        run_dev_server(port)
    else:
        print("🚀 Starting production server with Uvicorn...")
        run_prod_server(port)
