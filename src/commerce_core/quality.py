"""
Data quality diagnostics for marketplace snapshots.

The engine excludes bad rows silently (unresolved products, missing sellers,
unpaid orders). These checks make that exclusion visible: each loaded table
gets a report listing what was found and how much of it there was.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

import pandas as pd

Check = Callable[[pd.DataFrame], list["DataQualityIssue"]]


@dataclass
class DataQualityIssue:
    """One finding in one column."""

    column: str
    issue_type: str  # "missing", "invalid_value", "out_of_range", "duplicate", "orphan"
    severity: str  # "critical", "warning", "info"
    count: int
    percentage: float
    sample_values: list[Any] = field(default_factory=list)
    description: str = ""


@dataclass
class DataQualityReport:
    """All findings for one table."""

    source_name: str
    total_rows: int
    issues: list[DataQualityIssue] = field(default_factory=list)

    @property
    def critical_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "critical"]

    @property
    def warning_issues(self) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def has_critical_issues(self) -> bool:
        return len(self.critical_issues) > 0

    def summary(self) -> dict:
        return {
            "source": self.source_name,
            "total_rows": self.total_rows,
            "critical": len(self.critical_issues),
            "warnings": len(self.warning_issues),
            "info": len([i for i in self.issues if i.severity == "info"]),
        }


def _issue(
    df: pd.DataFrame,
    column: str,
    mask: pd.Series,
    issue_type: str,
    severity: str,
    description: str,
) -> list[DataQualityIssue]:
    count = int(mask.sum())
    if count == 0:
        return []
    return [
        DataQualityIssue(
            column=column,
            issue_type=issue_type,
            severity=severity,
            count=count,
            percentage=(count / len(df)) * 100,
            sample_values=df.loc[mask, column].head(5).tolist(),
            description=description.format(count=count),
        )
    ]


class DataQualityChecker:
    """
    Collects checks for one table and runs them together.

    Missing values are always checked; the rest are opted into per table:

        checker = DataQualityChecker("Order items")
        checker.check_invalid_values("approval_status", {"pending", "approved", "rejected"})
        checker.check_range("quantity", min_val=1)
        report = checker.run(items)
    """

    def __init__(self, source_name: str, required_columns: Iterable[str] | None = None):
        self.source_name = source_name
        self.required_columns = list(required_columns) if required_columns else None
        self._checks: list[Check] = [self._check_missing_values]

    def add_check(self, check_fn: Check) -> "DataQualityChecker":
        """Add a custom check. Returns self for chaining."""
        self._checks.append(check_fn)
        return self

    def _check_missing_values(self, df: pd.DataFrame) -> list[DataQualityIssue]:
        issues = []
        columns = self.required_columns or list(df.columns)
        for col in columns:
            if col not in df.columns:
                continue
            missing = df[col].isna()
            pct = (missing.sum() / len(df)) * 100 if len(df) else 0
            severity = "critical" if pct > 20 else "warning" if pct > 5 else "info"
            issues += _issue(
                df, col, missing, "missing", severity, "{count:,} missing values"
            )
        return issues

    def check_duplicates(self, column: str, severity: str = "critical") -> "DataQualityChecker":
        """Flag repeated identifiers."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            dupes = df[column].notna() & df.duplicated(subset=[column], keep=False)
            return _issue(df, column, dupes, "duplicate", severity, "{count:,} rows share an id")

        return self.add_check(check)

    def check_invalid_values(
        self, column: str, valid_values: set, severity: str = "warning"
    ) -> "DataQualityChecker":
        """Flag values outside an allowed set (nulls are left to the missing check)."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []
            invalid = df[column].notna() & ~df[column].isin(valid_values)
            return _issue(
                df, column, invalid, "invalid_value", severity, "{count:,} unexpected values"
            )

        return self.add_check(check)

    def check_range(
        self,
        column: str,
        min_val: float | None = None,
        max_val: float | None = None,
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Flag numeric values outside [min_val, max_val]."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []
            values = pd.to_numeric(df[column], errors="coerce")
            mask = pd.Series(False, index=df.index)
            if min_val is not None:
                mask |= values < min_val
            if max_val is not None:
                mask |= values > max_val
            return _issue(
                df, column, mask, "out_of_range", severity, "{count:,} values outside expected range"
            )

        return self.add_check(check)

    def check_references(
        self,
        column: str,
        valid_keys: pd.Series,
        severity: str = "warning",
        description: str = "{count:,} references that do not resolve",
    ) -> "DataQualityChecker":
        """Flag foreign keys with no matching row in the referenced table."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            orphans = df[column].notna() & ~df[column].isin(valid_keys)
            return _issue(df, column, orphans, "orphan", severity, description)

        return self.add_check(check)

    def run(self, df: pd.DataFrame) -> DataQualityReport:
        issues = []
        for check_fn in self._checks:
            issues.extend(check_fn(df))
        return DataQualityReport(source_name=self.source_name, total_rows=len(df), issues=issues)
