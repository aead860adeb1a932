"""
Batch Data Loader

Bulk CSV ingestion into the warehouse tables.
Supports:
- Positional field-to-column mapping with header rows skipped
- Type conversion (integers, small integers, ISO dates) with empty fields as NULL
- Truncate-and-reload of the target table in chunked inserts
- Rejected rows routed to a dead-letter Parquet file
- Optional data quality validation before anything is written
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import hashlib

import polars as pl
import structlog
from pydantic import BaseModel
from sqlalchemy import Date, Integer, SmallInteger, String, Table, delete, insert
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.config import get_settings
from warehouse_analytics.database.models import WAREHOUSE_TABLES
from warehouse_analytics.quality import ValidationStatus, create_validator

logger = structlog.get_logger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class LoadStatus(str, Enum):
    """Batch load status"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class BatchFileConfig:
    """Configuration for loading one CSV file into one table"""
    file_path: Union[str, Path]
    target_table: str
    delimiter: str = ","
    encoding: str = "utf8"
    header_rows: int = 1
    null_values: List[str] = field(default_factory=lambda: [""])
    chunk_size: int = 5000
    truncate: bool = True


class LoadResult(BaseModel):
    """Result of a batch load operation"""
    file_path: str
    target_table: str
    status: LoadStatus
    rows_read: int = 0
    rows_loaded: int = 0
    rows_failed: int = 0
    error_message: Optional[str] = None
    dead_letter_file: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None
    file_hash: Optional[str] = None


class BatchLoader:
    """
    Truncate-and-load of CSV extracts into warehouse tables.

    Fields are matched to table columns by position, so the file must have
    exactly as many fields as the table has columns. A row is rejected when
    a non-empty field cannot be converted to its column type or a text field
    is longer than the column allows; rejected rows go to the dead-letter
    directory and the load finishes as ``partial``.

    Example:
        loader = BatchLoader()
        config = BatchFileConfig(
            file_path="datasets/csv-files/gold.dim_customers.csv",
            target_table="dim_customers",
        )
        async with get_db() as db:
            result = await loader.load(db, config)
    """

    def __init__(
        self,
        enable_validation: bool = True,
        dead_letter_path: Optional[str] = None,
    ):
        self.enable_validation = enable_validation
        self.dead_letter_path = Path(dead_letter_path or get_settings().warehouse.dead_letter_path)

    def _ensure_directories(self) -> None:
        """Ensure required directories exist"""
        self.dead_letter_path.mkdir(parents=True, exist_ok=True)

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for auditing"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_csv(self, config: BatchFileConfig, table: Table) -> pl.DataFrame:
        """Read every field as text and name fields after the table columns"""
        columns = [c.name for c in table.columns]
        try:
            df = pl.read_csv(
                config.file_path,
                has_header=False,
                separator=config.delimiter,
                encoding=config.encoding,
                skip_rows=config.header_rows,
                null_values=config.null_values,
                infer_schema_length=0,
            )
        except pl.exceptions.NoDataError:
            df = pl.DataFrame()

        if df.height == 0:
            return pl.DataFrame(schema={name: pl.String for name in columns})
        if df.width != len(columns):
            raise ValueError(
                f"{Path(config.file_path).name} has {df.width} fields per row, "
                f"table {table.name} has {len(columns)} columns"
            )
        return df.rename(dict(zip(df.columns, columns)))

    @staticmethod
    def _conversion(name: str, column_type) -> Tuple[pl.Expr, Optional[pl.Expr]]:
        """Typed expression for a column and the condition marking a bad value"""
        raw = pl.col(name)
        if isinstance(column_type, SmallInteger):
            typed = raw.str.strip_chars().cast(pl.Int16, strict=False)
        elif isinstance(column_type, Integer):
            typed = raw.str.strip_chars().cast(pl.Int32, strict=False)
        elif isinstance(column_type, Date):
            typed = raw.str.strip_chars().str.to_date(DATE_FORMAT, strict=False)
        elif isinstance(column_type, String) and column_type.length:
            return raw, raw.str.len_chars() > column_type.length
        else:
            return raw, None
        return typed, raw.is_not_null() & typed.is_null()

    def _convert(self, df: pl.DataFrame, table: Table) -> Tuple[pl.DataFrame, pl.DataFrame]:
        """
        Split raw rows into typed valid rows and rejected raw rows.

        Rejected rows keep their raw text and gain an ``_error_message``
        naming every offending column.
        """
        typed_columns = []
        problems = []
        for column in table.columns:
            typed, bad = self._conversion(column.name, column.type)
            typed_columns.append(typed.alias(column.name))
            if bad is not None:
                problems.append(
                    pl.when(bad)
                    .then(pl.lit(f"invalid value for {column.name}"))
                    .otherwise(pl.lit(None, dtype=pl.String))
                )

        if problems:
            error = pl.concat_str(problems, separator="; ", ignore_nulls=True).fill_null("")
            marked = df.with_columns(error.alias("_error_message"))
        else:
            marked = df.with_columns(pl.lit("", dtype=pl.String).alias("_error_message"))

        is_rejected = pl.col("_error_message").str.len_chars() > 0
        rejected = marked.filter(is_rejected)
        valid = marked.filter(~is_rejected).select(typed_columns)
        return valid, rejected

    async def _write_to_dead_letter(
        self,
        df: pl.DataFrame,
        config: BatchFileConfig,
        error: Optional[str] = None,
    ) -> Path:
        """Write failed records to the dead-letter directory"""
        self._ensure_directories()
        timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S_%f")
        file_name = Path(config.file_path).stem
        dead_letter_file = self.dead_letter_path / f"{file_name}_{timestamp}.parquet"

        if error is not None:
            df = df.with_columns(pl.lit(error).alias("_error_message"))
        df = df.with_columns(pl.lit(datetime.utcnow()).alias("_failed_at"))

        df.write_parquet(dead_letter_file)
        logger.warning(
            "Written failed records to dead letter queue",
            file=str(dead_letter_file),
            records=len(df),
        )
        return dead_letter_file

    async def _insert_to_database(
        self,
        db: AsyncSession,
        df: pl.DataFrame,
        table: Table,
        config: BatchFileConfig,
    ) -> int:
        """Replace the table contents with the DataFrame rows"""
        if config.truncate:
            await db.execute(delete(table))

        total_inserted = 0
        for chunk in df.iter_slices(n_rows=config.chunk_size):
            rows = chunk.to_dicts()
            await db.execute(insert(table), rows)
            total_inserted += len(rows)
            logger.debug("Inserted chunk", table=table.name, rows=len(rows))

        await db.flush()
        return total_inserted

    async def load(self, db: AsyncSession, config: BatchFileConfig) -> LoadResult:
        """
        Load a CSV file into its warehouse table.

        The table is emptied and reloaded inside the session's transaction; a
        failure rolls the session back so the previous contents survive.

        Args:
            db: Database session
            config: Batch file configuration

        Returns:
            LoadResult: Result of the load operation
        """
        file_path = Path(config.file_path)
        started_at = datetime.utcnow()

        result = LoadResult(
            file_path=str(file_path),
            target_table=config.target_table,
            status=LoadStatus.RUNNING,
            started_at=started_at,
        )

        logger.info(
            "Starting batch load",
            file=str(file_path),
            target_table=config.target_table,
        )

        try:
            table = WAREHOUSE_TABLES.get(config.target_table)
            if table is None:
                raise ValueError(f"Unknown warehouse table: {config.target_table}")

            if not file_path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")

            result.file_hash = self._compute_file_hash(file_path)

            raw = self._read_csv(config, table)
            result.rows_read = len(raw)
            logger.info("Read rows from file", rows=result.rows_read, file=file_path.name)

            valid, rejected = self._convert(raw, table)

            if self.enable_validation:
                validator = create_validator(config.target_table)
                if validator is not None:
                    validation = validator.validate(valid)
                    if validation.status == ValidationStatus.FAILED:
                        message = f"Data quality validation failed: {validation.errors}"
                        dead_letter = await self._write_to_dead_letter(raw, config, message)
                        result.dead_letter_file = str(dead_letter)
                        raise ValueError(message)

            if len(rejected) > 0:
                dead_letter = await self._write_to_dead_letter(rejected, config)
                result.dead_letter_file = str(dead_letter)

            rows_inserted = await self._insert_to_database(db, valid, table, config)

            result.status = LoadStatus.PARTIAL if len(rejected) > 0 else LoadStatus.COMPLETED
            result.rows_loaded = rows_inserted
            result.rows_failed = len(rejected)
            result.completed_at = datetime.utcnow()
            result.load_duration_seconds = (
                result.completed_at - started_at
            ).total_seconds()

            logger.info(
                "Batch load completed",
                target_table=config.target_table,
                status=result.status.value,
                rows_loaded=rows_inserted,
                rows_failed=result.rows_failed,
                duration_seconds=result.load_duration_seconds,
            )

        except Exception as e:
            await db.rollback()
            result.status = LoadStatus.FAILED
            result.error_message = str(e)
            result.rows_loaded = 0
            result.completed_at = datetime.utcnow()
            result.load_duration_seconds = (
                result.completed_at - started_at
            ).total_seconds()

            logger.error(
                "Batch load failed",
                error=str(e),
                file=str(file_path),
                target_table=config.target_table,
            )

        return result


def config_for_table(table_name: str, data_dir: Optional[Union[str, Path]] = None) -> BatchFileConfig:
    """Load configuration for a warehouse table from settings"""
    warehouse = get_settings().warehouse
    files: Dict[str, str] = {
        "dim_customers": warehouse.customers_file,
        "dim_products": warehouse.products_file,
        "fact_sales": warehouse.sales_file,
    }
    if table_name not in files:
        raise ValueError(f"Unknown warehouse table: {table_name}")

    return BatchFileConfig(
        file_path=Path(data_dir or warehouse.data_dir) / files[table_name],
        target_table=table_name,
        delimiter=warehouse.delimiter,
        encoding=warehouse.encoding,
        header_rows=warehouse.header_rows,
        null_values=list(warehouse.null_values),
        chunk_size=warehouse.chunk_size,
    )


# Factory function for creating configured loader
def create_batch_loader() -> BatchLoader:
    """Create a configured BatchLoader instance"""
    settings = get_settings()
    return BatchLoader(
        enable_validation=settings.data_quality.enable_data_quality_checks,
        dead_letter_path=settings.warehouse.dead_letter_path,
    )
