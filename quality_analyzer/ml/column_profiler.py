# Data Quality Analyzer - Column Profiler
# Per-column completeness, uniqueness, samples and issue detection

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from quality_analyzer.core.exceptions import EmptyDatasetException
from quality_analyzer.ml.type_inference import (
    ColumnType,
    infer_type,
    is_missing,
    is_numeric_type,
    to_number,
)

DEFAULT_SAMPLE_SIZE = 5


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    return round_half_up(100 * part / whole)


# ============================================================================
# Column statistics model
# ============================================================================

@dataclass(frozen=True)
class ColumnStats:
    """Statistics and detected issues for a single column."""

    name: str
    type: ColumnType
    total_rows: int
    null_count: int = 0
    null_percentage: int = 0
    unique_count: int = 0
    unique_percentage: int = 0
    sample_values: list[Any] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)

    @property
    def present_count(self) -> int:
        return self.total_rows - self.null_count

    @property
    def duplicate_count(self) -> int:
        return self.total_rows - self.null_count - self.unique_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "totalRows": self.total_rows,
            "nullCount": self.null_count,
            "nullPercentage": self.null_percentage,
            "uniqueCount": self.unique_count,
            "uniquePercentage": self.unique_percentage,
            "sampleValues": list(self.sample_values),
            "issues": list(self.issues)
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ColumnStats":
        return cls(
            name=data["name"],
            type=ColumnType(data["type"]),
            total_rows=int(data["totalRows"]),
            null_count=int(data.get("nullCount", 0)),
            null_percentage=int(data.get("nullPercentage", 0)),
            unique_count=int(data.get("uniqueCount", 0)),
            unique_percentage=int(data.get("uniquePercentage", 0)),
            sample_values=list(data.get("sampleValues", [])),
            issues=list(data.get("issues", []))
        )


# ============================================================================
# Profiling
# ============================================================================

def _distinct_key(value: Any) -> Any:
    """Equality key for uniqueness: True is not 1, containers compare by content."""
    if isinstance(value, bool):
        return (bool, value)
    if isinstance(value, (dict, list)):
        return (type(value), json.dumps(value, sort_keys=True, default=str))
    try:
        hash(value)
    except TypeError:
        return (type(value), repr(value))
    return value


def distinct_values(values: Sequence[Any]) -> list[Any]:
    """Distinct non-missing values in first-seen order."""
    seen: dict[Any, Any] = {}
    for value in values:
        if is_missing(value):
            continue
        key = _distinct_key(value)
        if key not in seen:
            seen[key] = value
    return list(seen.values())


def detect_issues(
    values: Sequence[Any],
    column_type: ColumnType,
    null_count: int,
    unique_count: int
) -> list[str]:
    """Missing values, non-numeric values in numeric columns, duplicates."""
    issues: list[str] = []
    total = len(values)

    if null_count > 0:
        issues.append(f"{null_count} missing values ({percentage(null_count, total)}%)")

    # Only reachable when the column type is forced rather than inferred
    if is_numeric_type(column_type):
        mismatches = sum(
            1 for v in values if not is_missing(v) and to_number(v) is None
        )
        if mismatches > 0:
            issues.append(f"{mismatches} non-numeric values found")

    duplicate_count = total - null_count - unique_count
    if duplicate_count > 0:
        issues.append(f"{duplicate_count} duplicate values")

    return issues


def profile_column(
    name: str,
    values: Sequence[Any],
    column_type: Optional[ColumnType] = None,
    sample_size: int = DEFAULT_SAMPLE_SIZE
) -> ColumnStats:
    """
    Build the statistics for one column.

    Args:
        name: Column name
        values: Every raw value of the column, missing ones included
        column_type: Type to profile against (inferred when None)
        sample_size: Number of distinct sample values to keep

    Returns:
        ColumnStats for the column
    """
    total = len(values)
    if total == 0:
        raise EmptyDatasetException(f"Column '{name}' has no values")

    if column_type is None:
        column_type = infer_type(values)

    null_count = sum(1 for v in values if is_missing(v))
    distinct = distinct_values(values)
    unique_count = len(distinct)

    return ColumnStats(
        name=name,
        type=column_type,
        total_rows=total,
        null_count=null_count,
        null_percentage=percentage(null_count, total),
        unique_count=unique_count,
        unique_percentage=percentage(unique_count, total),
        sample_values=distinct[:sample_size],
        issues=detect_issues(values, column_type, null_count, unique_count)
    )
