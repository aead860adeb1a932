"""
Portable Date Functions

SQL date helpers compiled per dialect so the same report expressions run on
PostgreSQL (production), SQLite (local and tests) and SQL Server.

Month and year differences count calendar boundaries crossed, the way
``DATEDIFF(month, a, b)`` does: 2024-01-31 to 2024-02-01 is one month.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import Date, Integer, func, literal
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import ColumnElement, FunctionElement


class year_of(FunctionElement):
    """Calendar year of a date expression."""
    type = Integer()
    name = "year_of"
    inherit_cache = True


class month_of(FunctionElement):
    """Calendar month (1-12) of a date expression."""
    type = Integer()
    name = "month_of"
    inherit_cache = True


class year_start(FunctionElement):
    """First day of the year containing a date expression."""
    type = Date()
    name = "year_start"
    inherit_cache = True


class month_start(FunctionElement):
    """First day of the month containing a date expression."""
    type = Date()
    name = "month_start"
    inherit_cache = True


# -----------------------------------------------------------------------------
# SQL Server / generic
# -----------------------------------------------------------------------------

@compiles(year_of)
def _year_of_default(element, compiler, **kw):
    return "YEAR(%s)" % compiler.process(element.clauses, **kw)


@compiles(month_of)
def _month_of_default(element, compiler, **kw):
    return "MONTH(%s)" % compiler.process(element.clauses, **kw)


@compiles(year_start)
def _year_start_default(element, compiler, **kw):
    return "DATETRUNC(year, %s)" % compiler.process(element.clauses, **kw)


@compiles(month_start)
def _month_start_default(element, compiler, **kw):
    return "DATETRUNC(month, %s)" % compiler.process(element.clauses, **kw)


# -----------------------------------------------------------------------------
# PostgreSQL
# -----------------------------------------------------------------------------

@compiles(year_of, "postgresql")
def _year_of_pg(element, compiler, **kw):
    return "CAST(EXTRACT(YEAR FROM %s) AS INTEGER)" % compiler.process(element.clauses, **kw)


@compiles(month_of, "postgresql")
def _month_of_pg(element, compiler, **kw):
    return "CAST(EXTRACT(MONTH FROM %s) AS INTEGER)" % compiler.process(element.clauses, **kw)


@compiles(year_start, "postgresql")
def _year_start_pg(element, compiler, **kw):
    return "CAST(date_trunc('year', %s) AS DATE)" % compiler.process(element.clauses, **kw)


@compiles(month_start, "postgresql")
def _month_start_pg(element, compiler, **kw):
    return "CAST(date_trunc('month', %s) AS DATE)" % compiler.process(element.clauses, **kw)


# -----------------------------------------------------------------------------
# SQLite (dates stored as ISO-8601 text)
# -----------------------------------------------------------------------------

@compiles(year_of, "sqlite")
def _year_of_sqlite(element, compiler, **kw):
    return "CAST(strftime('%%Y', %s) AS INTEGER)" % compiler.process(element.clauses, **kw)


@compiles(month_of, "sqlite")
def _month_of_sqlite(element, compiler, **kw):
    return "CAST(strftime('%%m', %s) AS INTEGER)" % compiler.process(element.clauses, **kw)


@compiles(year_start, "sqlite")
def _year_start_sqlite(element, compiler, **kw):
    return "date(%s, 'start of year')" % compiler.process(element.clauses, **kw)


@compiles(month_start, "sqlite")
def _month_start_sqlite(element, compiler, **kw):
    return "date(%s, 'start of month')" % compiler.process(element.clauses, **kw)


# -----------------------------------------------------------------------------
# Composite helpers
# -----------------------------------------------------------------------------

PERIODS = ("year", "month")


def date_trunc(period: str, expr: Any) -> ColumnElement:
    """Truncate a date expression to the start of its year or month."""
    if period == "year":
        return year_start(expr)
    if period == "month":
        return month_start(expr)
    raise ValueError(f"Unsupported period: {period!r}, expected one of {PERIODS}")


def months_between(start: Any, end: Any) -> ColumnElement:
    """Month boundaries crossed from ``start`` to ``end``."""
    return (year_of(end) - year_of(start)) * 12 + (month_of(end) - month_of(start))


def years_between(start: Any, end: Any) -> ColumnElement:
    """Year boundaries crossed from ``start`` to ``end``."""
    return year_of(end) - year_of(start)


def reference_date(as_of: Optional[date] = None) -> ColumnElement:
    """Date that ages and recency are measured against (engine's today by default)."""
    if as_of is None:
        return func.current_date()
    return literal(as_of, Date)
