"""
Catalog Metadata

Tables, views and column definitions of the warehouse, read through the
SQLAlchemy inspector so the same calls work on every supported engine.
"""

from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession


class TableInfo(BaseModel):
    table_catalog: Optional[str]
    table_schema: Optional[str]
    table_name: str
    table_type: str


class ColumnInfo(BaseModel):
    column_name: str
    data_type: str
    is_nullable: str
    character_maximum_length: Optional[int] = None


async def list_tables(db: AsyncSession) -> List[TableInfo]:
    """
    Every table and view in the warehouse schema.

    ``table_type`` is ``BASE TABLE`` or ``VIEW``. The catalog is the database
    name of the connection URL.
    """
    conn = await db.connection()

    def _list(sync_conn) -> List[TableInfo]:
        inspector = inspect(sync_conn)
        catalog = sync_conn.engine.url.database
        schema = inspector.default_schema_name
        tables = [
            TableInfo(table_catalog=catalog, table_schema=schema, table_name=name, table_type="BASE TABLE")
            for name in inspector.get_table_names()
        ]
        views = [
            TableInfo(table_catalog=catalog, table_schema=schema, table_name=name, table_type="VIEW")
            for name in inspector.get_view_names()
        ]
        return sorted(tables + views, key=lambda t: (t.table_type, t.table_name))

    return await conn.run_sync(_list)


async def describe_columns(db: AsyncSession, table_name: str) -> List[ColumnInfo]:
    """
    Column metadata of a table or view, in column order.

    An unknown name yields an empty list.
    """
    conn = await db.connection()

    def _describe(sync_conn) -> List[ColumnInfo]:
        inspector = inspect(sync_conn)
        known = set(inspector.get_table_names()) | set(inspector.get_view_names())
        if table_name not in known:
            return []
        return [
            ColumnInfo(
                column_name=column["name"],
                data_type=column["type"].__visit_name__.lower(),
                is_nullable="YES" if column.get("nullable", True) else "NO",
                character_maximum_length=getattr(column["type"], "length", None),
            )
            for column in inspector.get_columns(table_name)
        ]

    return await conn.run_sync(_describe)
