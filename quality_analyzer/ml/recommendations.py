# Data Quality Analyzer - Recommendation Engine
# Record-level findings plus LLM-written dataset recommendations with a rule-based fallback

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from quality_analyzer.core.config import OpenAIConfig
from quality_analyzer.core.exceptions import RecommendationServiceException
from quality_analyzer.core.logging import LogContext, get_logger
from quality_analyzer.ml.data_quality import AnalysisResult
from quality_analyzer.ml.type_inference import as_text, is_missing
from quality_analyzer.services.llm_service import LLMResponse, Message, get_llm_service

logger = get_logger(__name__)


# Thresholds for the rule-based recommendations
COMPLETENESS_THRESHOLD = 95
CONSISTENCY_THRESHOLD = 85
ACCURACY_THRESHOLD = 80
VALIDITY_THRESHOLD = 90

RECORD_MISSING_MARKERS = ("", "-")

JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


# ============================================================================
# Recommendation Types
# ============================================================================

class Priority(str, Enum):
    """Recommendation priority."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class Recommendation:
    """Single prioritized recommendation, dataset-wide or scoped to one record."""

    priority: Priority
    issue: str
    suggestion: str
    sql_fix: Optional[str] = None
    user_id: Optional[Any] = None
    affected_columns: Optional[list[str]] = None

    @property
    def is_record_scoped(self) -> bool:
        return self.affected_columns is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "priority": self.priority.value,
            "issue": self.issue,
            "suggestion": self.suggestion
        }
        if self.sql_fix is not None:
            data["sqlFix"] = self.sql_fix
        if self.user_id is not None:
            data["userId"] = self.user_id
        if self.affected_columns is not None:
            data["affectedColumns"] = list(self.affected_columns)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recommendation":
        payload = RecommendationPayload.model_validate(data)
        return payload.to_recommendation()


class RecommendationPayload(BaseModel):
    """Shape of one recommendation as returned by the text-generation service."""

    priority: Priority
    issue: str = Field(min_length=1)
    suggestion: str = Field(min_length=1)
    sql_fix: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("sqlFix", "fixScript", "sql_fix")
    )
    user_id: Optional[Any] = Field(default=None, validation_alias=AliasChoices("userId", "user_id"))
    affected_columns: Optional[list[str]] = Field(
        default=None,
        validation_alias=AliasChoices("affectedColumns", "affected_columns")
    )

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    def to_recommendation(self) -> Recommendation:
        return Recommendation(
            priority=self.priority,
            issue=self.issue,
            suggestion=self.suggestion,
            sql_fix=self.sql_fix,
            user_id=self.user_id,
            affected_columns=self.affected_columns
        )


class CompletionService(Protocol):
    """Anything that can answer a chat prompt; LLMService in production."""

    async def complete(self, messages: list[Message], **kwargs: Any) -> LLMResponse: ...


# ============================================================================
# Record-level findings
# ============================================================================

def find_id_column(analysis: AnalysisResult) -> Optional[str]:
    """First column named `id` or ending in `_id`, case-insensitive."""
    for column in analysis.columns:
        lowered = column.name.lower()
        if lowered == "id" or lowered.endswith("_id"):
            return column.name
    return None


def _is_record_value_missing(value: Any) -> bool:
    return is_missing(value) or (isinstance(value, str) and value in RECORD_MISSING_MARKERS)


def extract_record_issues(analysis: AnalysisResult) -> list[Recommendation]:
    """
    Recommendations for preview rows with missing fields.

    Only produced when the dataset has an identifier column; each affected
    row yields one recommendation naming its missing columns. Rows without
    an identifier value are skipped.
    """
    id_column = find_id_column(analysis)
    if id_column is None or not analysis.data_preview:
        return []

    recommendations: list[Recommendation] = []

    for row in analysis.data_preview:
        record_id = row.get(id_column)
        if _is_record_value_missing(record_id):
            continue
        affected = [
            name for name, value in row.items()
            if name != id_column and _is_record_value_missing(value)
        ]
        if not affected:
            continue

        label = as_text(record_id)
        recommendations.append(Recommendation(
            priority=Priority.HIGH if len(affected) > 1 else Priority.MEDIUM,
            issue=f"ID {label}: " + ", ".join(f"Missing {name}" for name in affected),
            suggestion=f"Add/update the missing fields ({', '.join(affected)}) for user ID {label}",
            user_id=record_id,
            affected_columns=affected
        ))

    return recommendations


# ============================================================================
# Rule-based recommendations
# ============================================================================

def default_recommendations(analysis: AnalysisResult) -> list[Recommendation]:
    """Threshold-driven recommendations computed from the four scores alone."""
    recommendations: list[Recommendation] = []

    if analysis.completeness < COMPLETENESS_THRESHOLD:
        recommendations.append(Recommendation(
            priority=Priority.HIGH,
            issue=f"Data completeness is {analysis.completeness}% with missing values detected",
            suggestion=(
                "Remove rows with missing values or impute using mean/median/mode "
                "depending on the column type"
            ),
            sql_fix=(
                "-- Remove rows with NULL values\n"
                "DELETE FROM table_name WHERE column_name IS NULL;\n"
                "\n"
                "-- Or impute with a default value\n"
                "UPDATE table_name SET column_name = 'Unknown' WHERE column_name IS NULL;"
            )
        ))

    if analysis.consistency < CONSISTENCY_THRESHOLD:
        recommendations.append(Recommendation(
            priority=Priority.MEDIUM,
            issue="Data consistency issues detected - format variations found",
            suggestion="Standardize data formats across columns. Use TRIM, LOWER/UPPER functions",
            sql_fix=(
                "-- Standardize text formatting\n"
                "UPDATE table_name SET column_name = LOWER(TRIM(column_name));"
            )
        ))

    if analysis.accuracy < ACCURACY_THRESHOLD:
        recommendations.append(Recommendation(
            priority=Priority.HIGH,
            issue="Accuracy score is low - potential outliers or data entry errors detected",
            suggestion="Review and correct data type mismatches and outliers",
            sql_fix=(
                "-- Find potential outliers in numeric columns\n"
                "SELECT column_name, COUNT(*) FROM table_name\n"
                "WHERE column_name > (SELECT AVG(column_name) + 2*STDDEV(column_name))\n"
                "GROUP BY column_name;"
            )
        ))

    if analysis.validity < VALIDITY_THRESHOLD:
        recommendations.append(Recommendation(
            priority=Priority.MEDIUM,
            issue="Some data values do not match expected types or formats",
            suggestion="Validate data against expected schemas and data types",
            sql_fix=(
                "-- Check for invalid data types\n"
                "SELECT * FROM table_name WHERE column_name NOT LIKE '%valid_pattern%';"
            )
        ))

    return recommendations


# ============================================================================
# Prompt and response handling
# ============================================================================

def build_quality_prompt(
    analysis: AnalysisResult,
    record_issues: Optional[list[Recommendation]] = None
) -> str:
    """Deterministic quality summary sent to the text-generation service."""
    column_lines = []
    for column in analysis.columns:
        issues_text = ", ".join(column.issues) if column.issues else "No issues"
        column_lines.append(f"- Column: {column.name} ({column.type.value}): {issues_text}")

    record_lines = [f"- {r.issue}" for r in record_issues or []] or ["None"]

    return (
        "You are a data quality expert. Analyze this dataset quality assessment "
        "and provide 3-5 actionable recommendations.\n"
        "\n"
        f"Dataset: {analysis.file_name}\n"
        f"Rows: {analysis.total_rows}\n"
        f"Columns: {analysis.total_columns}\n"
        f"Overall Quality Score: {analysis.overall_score}/100\n"
        "\n"
        "Quality Metrics:\n"
        f"- Completeness: {analysis.completeness}%\n"
        f"- Consistency: {analysis.consistency}%\n"
        f"- Accuracy: {analysis.accuracy}%\n"
        f"- Validity: {analysis.validity}%\n"
        "\n"
        "Column Details:\n"
        + "\n".join(column_lines) + "\n"
        "\n"
        "User-Specific Issues Found:\n"
        + "\n".join(record_lines) + "\n"
        "\n"
        "Please provide recommendations in JSON format as an array of objects with: "
        "priority (High/Medium/Low), issue (string describing what needs to be fixed), "
        "suggestion (string), and optionally sqlFix (string for SQL cleanup commands).\n"
        "\n"
        "Return ONLY valid JSON array, no other text."
    )


def parse_recommendations(response_text: str) -> list[Recommendation]:
    """
    Extract the JSON array of recommendations from a model response.

    Raises:
        RecommendationServiceException: if no valid, non-empty array can be read
    """
    match = JSON_ARRAY_PATTERN.search(response_text)
    if match is None:
        raise RecommendationServiceException("Response did not contain a JSON array")

    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise RecommendationServiceException(f"Response JSON is malformed: {e.msg}", cause=e)

    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise RecommendationServiceException("Response JSON is not a list of objects")
    if not items:
        raise RecommendationServiceException("Response contained no recommendations")

    try:
        return [RecommendationPayload.model_validate(item).to_recommendation() for item in items]
    except ValidationError as e:
        raise RecommendationServiceException(
            f"Response contained {e.error_count()} invalid recommendation field(s)",
            cause=e
        )


# ============================================================================
# Recommendation Engine
# ============================================================================

class RecommendationEngine:
    """
    Turns a finished analysis into prioritized recommendations.

    Record-level recommendations always come first. Dataset-level ones are
    requested from the text-generation service when one is configured;
    any failure of that call falls back to the rule-based generator, so
    `recommend` always returns a list.
    """

    def __init__(self, llm_service: Optional[CompletionService] = None) -> None:
        self.llm_service = llm_service

    async def recommend(self, analysis: AnalysisResult) -> list[Recommendation]:
        record_issues = extract_record_issues(analysis)
        context = LogContext(component="RecommendationEngine", operation="recommend")

        try:
            dataset_level = await self._request_dataset_recommendations(analysis, record_issues)
        except RecommendationServiceException as e:
            logger.warning(
                f"Falling back to rule-based recommendations: {e.message}",
                context=context,
                file_name=analysis.file_name
            )
            dataset_level = default_recommendations(analysis)

        logger.info(
            "Recommendations generated",
            context=context,
            record_level=len(record_issues),
            dataset_level=len(dataset_level)
        )
        return record_issues + dataset_level

    def default_recommendations(self, analysis: AnalysisResult) -> list[Recommendation]:
        return default_recommendations(analysis)

    def extract_record_issues(self, analysis: AnalysisResult) -> list[Recommendation]:
        return extract_record_issues(analysis)

    async def _request_dataset_recommendations(
        self,
        analysis: AnalysisResult,
        record_issues: list[Recommendation]
    ) -> list[Recommendation]:
        if self.llm_service is None:
            raise RecommendationServiceException("No text-generation service configured")

        prompt = build_quality_prompt(analysis, record_issues)
        try:
            response = await self.llm_service.complete([Message(role="user", content=prompt)])
        except RecommendationServiceException:
            raise
        except Exception as e:
            raise RecommendationServiceException(str(e), cause=e) from e

        return parse_recommendations(response.content)


def get_recommendation_engine(openai_config: Optional[OpenAIConfig] = None) -> RecommendationEngine:
    """
    Build a recommendation engine.

    Without a config (or without an API key in it) the engine runs on the
    rule-based recommendations only.
    """
    if openai_config is None:
        return RecommendationEngine()
    try:
        service = get_llm_service(openai_config)
    except RecommendationServiceException as e:
        logger.warning(f"LLM service unavailable: {e.message}")
        service = None
    return RecommendationEngine(service)
