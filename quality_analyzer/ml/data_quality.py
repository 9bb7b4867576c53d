# Data Quality Analyzer - Dataset Quality Engine
# Column profiling orchestration and the four aggregate quality scores

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from quality_analyzer.core.config import AnalysisConfig
from quality_analyzer.core.exceptions import EmptyDatasetException
from quality_analyzer.core.logging import LogContext, get_logger, log_execution_time
from quality_analyzer.ml.column_profiler import ColumnStats, profile_column, round_half_up
from quality_analyzer.ml.type_inference import ColumnType

logger = get_logger(__name__)


# Score penalties
TEXT_COLUMN_PENALTY = 5
ISSUE_COLUMN_PENALTY = 5
NON_NUMERIC_ISSUE_PENALTY = 10
LOW_UNIQUENESS_TEXT_PENALTY = 10
LOW_UNIQUENESS_THRESHOLD = 80

NON_NUMERIC_MARKER = "non-numeric"


# ============================================================================
# Analysis result model
# ============================================================================

@dataclass(frozen=True)
class AnalysisResult:
    """Complete quality assessment of one dataset."""

    file_name: str
    total_rows: int
    total_columns: int
    columns: list[ColumnStats] = field(default_factory=list)
    data_preview: list[dict[str, Any]] = field(default_factory=list)
    completeness: int = 100
    consistency: int = 100
    accuracy: int = 100
    validity: int = 100
    overall_score: int = 100
    summary: str = ""

    @property
    def total_issues(self) -> int:
        return sum(len(c.issues) for c in self.columns)

    @property
    def scores(self) -> dict[str, int]:
        return {
            "completeness": self.completeness,
            "consistency": self.consistency,
            "accuracy": self.accuracy,
            "validity": self.validity
        }

    def get_column(self, name: str) -> Optional[ColumnStats]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileName": self.file_name,
            "totalRows": self.total_rows,
            "totalColumns": self.total_columns,
            "columns": [c.to_dict() for c in self.columns],
            "dataPreview": [dict(row) for row in self.data_preview],
            "completeness": self.completeness,
            "consistency": self.consistency,
            "accuracy": self.accuracy,
            "validity": self.validity,
            "overallScore": self.overall_score,
            "summary": self.summary
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        return cls(
            file_name=data.get("fileName", ""),
            total_rows=int(data["totalRows"]),
            total_columns=int(data["totalColumns"]),
            columns=[ColumnStats.from_dict(c) for c in data.get("columns", [])],
            data_preview=[dict(row) for row in data.get("dataPreview", [])],
            completeness=int(data["completeness"]),
            consistency=int(data["consistency"]),
            accuracy=int(data["accuracy"]),
            validity=int(data["validity"]),
            overall_score=int(data["overallScore"]),
            summary=data.get("summary", "")
        )


# ============================================================================
# Quality scores
# ============================================================================

def _clamp(score: float) -> int:
    return int(max(0, min(100, score)))


def calculate_completeness(columns: Sequence[ColumnStats]) -> int:
    """100 minus the rounded mean null percentage."""
    if not columns:
        return 100
    mean_null = sum(c.null_percentage for c in columns) / len(columns)
    return _clamp(100 - round_half_up(mean_null))


def calculate_consistency(columns: Sequence[ColumnStats]) -> int:
    """Penalize text columns (format variations) and columns with any issue."""
    penalty = sum(
        (TEXT_COLUMN_PENALTY if c.type == ColumnType.TEXT else 0)
        + (ISSUE_COLUMN_PENALTY if c.issues else 0)
        for c in columns
    )
    return _clamp(100 - penalty)


def calculate_accuracy(columns: Sequence[ColumnStats]) -> int:
    """
    Penalize every non-numeric-value issue.

    Numeric outliers (a rating of 999 among 4.x values) do not lower
    accuracy; only values that fail numeric conversion in a numeric
    column do.
    """
    penalty = sum(
        NON_NUMERIC_ISSUE_PENALTY
        for c in columns
        for issue in c.issues
        if NON_NUMERIC_MARKER in issue
    )
    return _clamp(100 - penalty)


def calculate_validity(columns: Sequence[ColumnStats]) -> int:
    """Penalize text columns whose values repeat a lot."""
    penalty = sum(
        LOW_UNIQUENESS_TEXT_PENALTY
        for c in columns
        if c.type == ColumnType.TEXT and c.unique_percentage < LOW_UNIQUENESS_THRESHOLD
    )
    return _clamp(100 - penalty)


def calculate_overall(completeness: int, consistency: int, accuracy: int, validity: int) -> int:
    return round_half_up((completeness + consistency + accuracy + validity) / 4)


def generate_summary(rows: int, columns: int, stats: Sequence[ColumnStats]) -> str:
    issue_count = sum(len(c.issues) for c in stats)
    return f"Dataset with {rows} rows and {columns} columns. Found {issue_count} data quality issues."


# ============================================================================
# Dataset analyzer
# ============================================================================

class DataQualityAnalyzer:
    """
    Dataset-level quality analyzer.

    Profiles every column of a list of flat records and turns the column
    facts into completeness, consistency, accuracy and validity scores.

    Examples:
        >>> analyzer = DataQualityAnalyzer()
        >>> result = analyzer.analyze(rows, "customers.csv")
        >>> result.overall_score
        88
    """

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self.config = config or AnalysisConfig()

    @log_execution_time(operation_name="analyze_dataset")
    def analyze(
        self,
        rows: Sequence[Mapping[str, Any]],
        file_name: str,
        type_overrides: Optional[Mapping[str, ColumnType]] = None
    ) -> AnalysisResult:
        """
        Analyze a dataset.

        Args:
            rows: Records sharing one key set; the first record fixes column order
            file_name: Name reported in the result
            type_overrides: Optional forced type per column name

        Returns:
            AnalysisResult for the dataset

        Raises:
            EmptyDatasetException: if there are no records
        """
        if not rows:
            raise EmptyDatasetException()

        context = LogContext(component="DataQualityAnalyzer", operation="analyze")
        overrides = type_overrides or {}

        column_names = list(rows[0].keys())
        logger.info(
            f"Analyzing {file_name}",
            context=context,
            rows=len(rows),
            columns=len(column_names)
        )

        columns = [
            profile_column(
                name,
                [row.get(name) for row in rows],
                column_type=overrides.get(name),
                sample_size=self.config.sample_values
            )
            for name in column_names
        ]

        completeness = calculate_completeness(columns)
        consistency = calculate_consistency(columns)
        accuracy = calculate_accuracy(columns)
        validity = calculate_validity(columns)
        overall_score = calculate_overall(completeness, consistency, accuracy, validity)

        result = AnalysisResult(
            file_name=file_name,
            total_rows=len(rows),
            total_columns=len(column_names),
            columns=columns,
            data_preview=[dict(row) for row in rows[:self.config.preview_rows]],
            completeness=completeness,
            consistency=consistency,
            accuracy=accuracy,
            validity=validity,
            overall_score=overall_score,
            summary=generate_summary(len(rows), len(column_names), columns)
        )

        logger.info(
            f"Analysis complete for {file_name}",
            context=context,
            overall_score=overall_score,
            issues=result.total_issues
        )
        return result


def analyze_dataset(
    rows: Sequence[Mapping[str, Any]],
    file_name: str,
    config: Optional[AnalysisConfig] = None
) -> AnalysisResult:
    """Quick dataset analysis with default configuration."""
    return DataQualityAnalyzer(config).analyze(rows, file_name)
