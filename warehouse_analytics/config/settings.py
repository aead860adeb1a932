"""
Warehouse Analytics
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Warehouse Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="data_warehouse_analytics", description="Database name")
    user: str = Field(default="analytics", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    url: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL (overrides host/port), e.g. sqlite+aiosqlite:///warehouse.db",
    )

    @property
    def async_url(self) -> str:
        """Async database URL - uses DATABASE_URL if set, otherwise asyncpg from host/port"""
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class WarehouseSettings(BaseSettings):
    """Warehouse Layout and Bulk Load Configuration"""

    model_config = SettingsConfigDict(env_prefix="WAREHOUSE_")

    schema_name: Optional[str] = Field(
        default="gold",
        description="Schema holding warehouse tables (ignored on engines without schemas)",
    )
    data_dir: str = Field(default="./datasets/csv-files", description="Directory holding the CSV extracts")
    customers_file: str = Field(default="gold.dim_customers.csv", description="Customer dimension CSV")
    products_file: str = Field(default="gold.dim_products.csv", description="Product dimension CSV")
    sales_file: str = Field(default="gold.fact_sales.csv", description="Sales fact CSV")

    # Bulk load options
    delimiter: str = Field(default=",", description="CSV field terminator")
    header_rows: int = Field(default=1, description="Leading rows skipped before data (FIRSTROW - 1)")
    encoding: str = Field(default="utf8", description="CSV encoding")
    chunk_size: int = Field(default=5000, description="Rows per INSERT batch")
    dead_letter_path: str = Field(default="./data/dead_letter", description="Rejected rows output directory")
    null_values: List[str] = Field(default=[""], description="Field values loaded as NULL")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or console")


class DataQualitySettings(BaseSettings):
    """Data Quality Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    enable_data_quality_checks: bool = Field(
        default=True,
        alias="ENABLE_DATA_QUALITY_CHECKS",
        description="Validate CSV extracts before loading"
    )


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="warehouse-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    api_workers: int = Field(default=4, alias="API_WORKERS", description="API workers")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8088"],
        description="Allowed CORS origins"
    )

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    warehouse: WarehouseSettings = Field(default_factory=WarehouseSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    data_quality: DataQualitySettings = Field(default_factory=DataQualitySettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
