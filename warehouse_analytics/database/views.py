"""
View DDL

Defines and drops database views from SQLAlchemy selects. The select is
compiled for the connection's dialect with literal values inlined, so a view
is a plain stored query with no bound parameters.
"""

from typing import List

import structlog
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql import Select

logger = structlog.get_logger(__name__)


def compile_view_sql(conn: AsyncConnection, selectable: Select) -> str:
    """Render a select as standalone SQL for a view body."""
    compiled = selectable.compile(
        dialect=conn.dialect,
        compile_kwargs={"literal_binds": True},
    )
    return str(compiled)


async def list_views(conn: AsyncConnection) -> List[str]:
    """Names of the views in the default schema."""
    return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_view_names())


async def view_exists(conn: AsyncConnection, name: str) -> bool:
    """Check whether a view is defined."""
    return name in await list_views(conn)


async def drop_view(conn: AsyncConnection, name: str) -> None:
    """Drop a view if it exists."""
    quoted = conn.dialect.identifier_preparer.quote(name)
    await conn.exec_driver_sql(f"DROP VIEW IF EXISTS {quoted}")
    logger.info("View dropped", view=name)


async def create_view(
    conn: AsyncConnection,
    name: str,
    selectable: Select,
    replace: bool = True,
) -> None:
    """
    Define a view from a select.

    Args:
        conn: Open connection (inside a transaction)
        name: View name
        selectable: Query the view stores
        replace: Drop an existing view of the same name first
    """
    if replace:
        await drop_view(conn, name)

    quoted = conn.dialect.identifier_preparer.quote(name)
    body = compile_view_sql(conn, selectable)
    await conn.exec_driver_sql(f"CREATE VIEW {quoted} AS {body}")
    logger.info("View created", view=name)
