# Data Quality Analyzer - Report Generator
# Downloadable CSV/JSON reports for a finished analysis and its recommendations

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from quality_analyzer.core.exceptions import UnsupportedFormatException
from quality_analyzer.core.logging import get_logger
from quality_analyzer.ml.data_quality import AnalysisResult
from quality_analyzer.ml.recommendations import Recommendation

logger = get_logger(__name__)

Insight = Union[Recommendation, Mapping[str, Any]]

REPORT_TITLE = "Data Quality Analysis Report"
FILENAME_PREFIX = "data-quality-report"


# ============================================================================
# Report Types
# ============================================================================

class ReportFormat(str, Enum):
    """Report output formats."""
    CSV = "csv"
    JSON = "json"

    @property
    def media_type(self) -> str:
        return {
            ReportFormat.CSV: "text/csv;charset=utf-8",
            ReportFormat.JSON: "application/json;charset=utf-8"
        }[self]


@dataclass(frozen=True)
class QualityReportFile:
    """Rendered report ready to be sent as a download."""

    filename: str
    media_type: str
    content: str

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def _insight_dict(insight: Insight) -> dict[str, Any]:
    if isinstance(insight, Recommendation):
        return insight.to_dict()
    return dict(insight)


def _iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ============================================================================
# Report Formatters
# ============================================================================

class CSVReportFormatter:
    """Format report as sectioned CSV."""

    def format(
        self,
        analysis: AnalysisResult,
        insights: Sequence[dict[str, Any]],
        generated_at: datetime
    ) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")

        writer.writerow([REPORT_TITLE])
        writer.writerow([f"File: {analysis.file_name}"])
        writer.writerow([f"Date: {_iso_timestamp(generated_at)}"])
        writer.writerow([])

        writer.writerow(["OVERALL METRICS"])
        writer.writerows([
            ["Total Rows", analysis.total_rows],
            ["Total Columns", analysis.total_columns],
            ["Overall Quality Score", f"{analysis.overall_score}/100"],
            ["Completeness", f"{analysis.completeness}%"],
            ["Consistency", f"{analysis.consistency}%"],
            ["Accuracy", f"{analysis.accuracy}%"],
            ["Validity", f"{analysis.validity}%"],
        ])
        writer.writerow([])

        writer.writerow(["COLUMN DETAILS"])
        writer.writerow([
            "Column Name", "Data Type", "Null Count", "Null %",
            "Unique Count", "Unique %", "Issues"
        ])
        for column in analysis.columns:
            writer.writerow([
                column.name,
                column.type.value,
                column.null_count,
                f"{column.null_percentage}%",
                column.unique_count,
                f"{column.unique_percentage}%",
                "; ".join(column.issues)
            ])
        writer.writerow([])

        if insights:
            writer.writerow(["AI INSIGHTS & RECOMMENDATIONS"])
            writer.writerow(["Priority", "Issue", "Suggestion", "SQL Fix"])
            for insight in insights:
                sql_fix = str(insight.get("sqlFix") or "")
                writer.writerow([
                    insight.get("priority", ""),
                    insight.get("issue", ""),
                    insight.get("suggestion", ""),
                    sql_fix.replace("\n", " ")
                ])

        return buffer.getvalue()


class JSONReportFormatter:
    """Format report as JSON."""

    def format(
        self,
        analysis: AnalysisResult,
        insights: Sequence[dict[str, Any]],
        generated_at: datetime
    ) -> str:
        report = {
            "metadata": {
                "fileName": analysis.file_name,
                "generatedAt": _iso_timestamp(generated_at),
                "totalRows": analysis.total_rows,
                "totalColumns": analysis.total_columns
            },
            "metrics": {
                "overall": analysis.overall_score,
                "completeness": analysis.completeness,
                "consistency": analysis.consistency,
                "accuracy": analysis.accuracy,
                "validity": analysis.validity
            },
            "columns": [c.to_dict() for c in analysis.columns],
            "insights": list(insights)
        }
        return json.dumps(report, indent=2, default=str)


# ============================================================================
# Report Engine
# ============================================================================

class QualityReportGenerator:
    """
    Quality report export.

    Renders an AnalysisResult plus its recommendations as a CSV or JSON
    document named `data-quality-report-<epoch ms>.<ext>`.
    """

    def __init__(self) -> None:
        self.formatters = {
            ReportFormat.CSV: CSVReportFormatter(),
            ReportFormat.JSON: JSONReportFormatter()
        }

    def generate(
        self,
        analysis: AnalysisResult,
        insights: Optional[Sequence[Insight]] = None,
        format: Union[str, ReportFormat] = ReportFormat.JSON,
        generated_at: Optional[datetime] = None
    ) -> QualityReportFile:
        """Render a report for the analysis in the requested format."""
        try:
            report_format = ReportFormat(format)
        except ValueError:
            raise UnsupportedFormatException(
                actual_format=str(format),
                supported_formats=[f.value for f in ReportFormat]
            )

        generated_at = generated_at or datetime.now(timezone.utc)
        items = [_insight_dict(i) for i in insights or []]

        content = self.formatters[report_format].format(analysis, items, generated_at)
        filename = f"{FILENAME_PREFIX}-{int(generated_at.timestamp() * 1000)}.{report_format.value}"

        logger.info(
            f"Report generated: {filename}",
            file_name=analysis.file_name,
            insights=len(items)
        )
        return QualityReportFile(
            filename=filename,
            media_type=report_format.media_type,
            content=content
        )


def get_report_generator() -> QualityReportGenerator:
    """Get report generator instance."""
    return QualityReportGenerator()
