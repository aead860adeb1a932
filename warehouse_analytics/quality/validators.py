"""
Data Validation Module

Rule-based quality checks run on CSV extracts before they reach the
warehouse tables.

Every column rule is a polars expression marking the failing rows; the
validator counts them and reports one check per rule.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Blocks the load
    WARNING = "warning"  # Logged, load continues
    INFO = "info"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Outcome of running every check of a validator"""
    status: ValidationStatus
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def total_checks(self) -> int:
        return len(self.checks)

    @property
    def passed_checks(self) -> int:
        return sum(1 for c in self.checks if c.passed)

    @property
    def failed_checks(self) -> int:
        """Failed checks of error severity"""
        return len(self._failed(ValidationSeverity.ERROR))

    @property
    def warning_count(self) -> int:
        return len(self._failed(ValidationSeverity.WARNING))

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if not self.checks:
            return 100.0
        return self.passed_checks / self.total_checks * 100

    @property
    def errors(self) -> List[str]:
        """Messages of failed error-level checks"""
        return [c.message for c in self._failed(ValidationSeverity.ERROR)]

    def _failed(self, severity: ValidationSeverity) -> List[ValidationCheck]:
        return [c for c in self.checks if not c.passed and c.severity == severity]


RowRule = Callable[[pl.Expr], pl.Expr]


class DataValidator:
    """
    Chainable validator over polars DataFrames.

    Example:
        result = (
            DataValidator()
            .add_not_null_check("customer_key")
            .add_positive_check("cost", severity=ValidationSeverity.WARNING)
            .validate(df)
        )
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # warnings fail the suite too
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def reset(self) -> None:
        self._checks = []

    def _add_row_check(
        self,
        name: str,
        column: str,
        failing: RowRule,
        problem: str,
        severity: ValidationSeverity,
        details: Optional[Dict[str, Any]] = None,
    ) -> "DataValidator":
        """
        Register a check that fails when any row matches ``failing``.

        Args:
            name: Check name
            column: Column the rule applies to
            failing: Builds the expression marking offending rows from the column
            problem: Description of offending values, e.g. ``null values``
            severity: Severity when the check fails
            details: Extra context kept on the check result
        """
        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Column '{column}' not found",
                )

            failed = df.select(failing(pl.col(column)).fill_null(False).sum()).item()
            return ValidationCheck(
                name=name,
                passed=failed == 0,
                severity=severity,
                message=f"Column '{column}' has {failed} {problem}" if failed else f"Column '{column}' passed",
                details={**(details or {}), "failed_count": failed},
                failed_rows=failed,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        return self._add_row_check(
            f"not_null_{column}", column, lambda c: c.is_null(), "null values", severity,
        )

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Repeated non-null values; each repeat beyond the first counts once."""
        return self._add_row_check(
            f"unique_{column}",
            column,
            lambda c: c.is_not_null() & ~c.is_first_distinct(),
            "duplicate values",
            severity,
        )

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Values outside ``[min_value, max_value]``; nulls are ignored."""
        def outside(c: pl.Expr) -> pl.Expr:
            below = c < min_value if min_value is not None else pl.lit(False)
            above = c > max_value if max_value is not None else pl.lit(False)
            return below | above

        return self._add_row_check(
            f"range_{column}",
            column,
            outside,
            f"values outside range [{min_value}, {max_value}]",
            severity,
            details={"min": min_value, "max": max_value},
        )

    def add_positive_check(
        self,
        column: str,
        allow_zero: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        return self.add_range_check(column, min_value=0 if allow_zero else 1, severity=severity)

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        return self._add_row_check(
            f"enum_{column}",
            column,
            lambda c: c.is_not_null() & ~c.is_in(allowed_values),
            "invalid values",
            severity,
            details={"allowed_values": allowed_values},
        )

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Frame-level rule; an exception inside ``check_func`` fails the check."""
        def check(df: pl.DataFrame) -> ValidationCheck:
            try:
                passed = bool(check_func(df))
            except Exception as e:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Check failed with error: {e}",
                )
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else message_on_fail,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def _status(self, result: ValidationResult) -> ValidationStatus:
        if result.failed_checks:
            return ValidationStatus.FAILED
        if result.warning_count:
            return ValidationStatus.FAILED if self.strict_mode else ValidationStatus.PARTIAL
        return ValidationStatus.PASSED

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on a DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with one entry per check
        """
        result = ValidationResult(status=ValidationStatus.PASSED)

        for check in self._checks:
            outcome = check(df)
            result.checks.append(outcome)
            if not outcome.passed:
                logger.warning(
                    "Validation check failed",
                    check=outcome.name,
                    message=outcome.message,
                    severity=outcome.severity.value,
                )

        result.status = self._status(result)
        result.completed_at = datetime.utcnow()

        logger.info(
            "Validation complete",
            status=result.status.value,
            rows=df.height,
            passed=result.passed_checks,
            failed=result.failed_checks,
            warnings=result.warning_count,
        )
        return result


# Pre-built validators for the warehouse extracts
def create_customers_validator() -> DataValidator:
    return (
        DataValidator()
        .add_not_null_check("customer_key")
        .add_unique_check("customer_key")
        .add_unique_check("customer_number", severity=ValidationSeverity.WARNING)
        .add_enum_check("gender", ["Male", "Female", "n/a"], severity=ValidationSeverity.WARNING)
        .add_custom_check(
            "birthdate_not_in_future",
            lambda df: df.filter(pl.col("birthdate") > datetime.utcnow().date()).height == 0,
            "Customers with a birthdate in the future",
            severity=ValidationSeverity.WARNING,
        )
    )


def create_products_validator() -> DataValidator:
    return (
        DataValidator()
        .add_not_null_check("product_key")
        .add_unique_check("product_key")
        .add_not_null_check("product_name", severity=ValidationSeverity.WARNING)
        .add_positive_check("cost", severity=ValidationSeverity.WARNING)
    )


def create_sales_validator() -> DataValidator:
    """Sales lines: missing dates and negative amounts are suspicious, not fatal"""
    return (
        DataValidator()
        .add_not_null_check("order_number", severity=ValidationSeverity.WARNING)
        .add_not_null_check("order_date", severity=ValidationSeverity.WARNING)
        .add_positive_check("sales_amount", severity=ValidationSeverity.WARNING)
        .add_positive_check("quantity", severity=ValidationSeverity.WARNING)
        .add_positive_check("price", severity=ValidationSeverity.WARNING)
    )


VALIDATORS: Dict[str, Callable[[], DataValidator]] = {
    "dim_customers": create_customers_validator,
    "dim_products": create_products_validator,
    "fact_sales": create_sales_validator,
}


def create_validator(table_name: str) -> Optional[DataValidator]:
    """Pre-built validator for a warehouse table, if one exists"""
    factory = VALIDATORS.get(table_name)
    return factory() if factory else None
