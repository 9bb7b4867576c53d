# Data Quality Analyzer - Quality API Routes
# Upload analysis, recommendations and report download endpoints

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field

from quality_analyzer.core.config import get_settings
from quality_analyzer.core.exceptions import ValidationException
from quality_analyzer.core.logging import LogContext, get_logger
from quality_analyzer.ml.data_quality import AnalysisResult
from quality_analyzer.ml.recommendations import RecommendationEngine, get_recommendation_engine
from quality_analyzer.services.data_ingestion import DataIngestionService, get_ingestion_service
from quality_analyzer.services.report_generator import QualityReportGenerator, get_report_generator

logger = get_logger(__name__)

router = APIRouter()


# ============================================================================
# Request Schemas
# ============================================================================

class InsightsRequest(BaseModel):
    analysis: dict[str, Any]


class ReportRequest(BaseModel):
    analysis: dict[str, Any]
    insights: list[dict[str, Any]] = Field(default_factory=list)
    format: str = "json"


def _load_analysis(data: dict[str, Any]) -> AnalysisResult:
    try:
        return AnalysisResult.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationException(
            f"Invalid analysis payload: {e}",
            field_errors={"analysis": [str(e)]},
            cause=e
        )


def get_engine() -> RecommendationEngine:
    """Recommendation engine wired to the configured OpenAI account."""
    return get_recommendation_engine(get_settings().openai)


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/analyze", response_model=dict[str, Any])
async def analyze_file(
    file: UploadFile = File(..., description="CSV or JSON data file"),
    format: Optional[str] = Form(None, description="Explicit format (csv or json)"),
    service: DataIngestionService = Depends(get_ingestion_service),
):
    """Analyze the quality of an uploaded dataset."""
    filename = file.filename or ""
    raw = await file.read()

    logger.info(
        f"Upload received: {filename}",
        context=LogContext(component="quality_api", operation="analyze"),
        size=len(raw)
    )
    result = service.analyze_upload(raw, filename, format)
    return result.to_dict()


@router.post("/insights", response_model=dict[str, Any])
async def generate_insights(
    request: InsightsRequest,
    engine: RecommendationEngine = Depends(get_engine),
):
    """Generate prioritized recommendations for a finished analysis."""
    analysis = _load_analysis(request.analysis)
    recommendations = await engine.recommend(analysis)
    return {"insights": [r.to_dict() for r in recommendations]}


@router.post("/report")
async def download_report(
    request: ReportRequest,
    generator: QualityReportGenerator = Depends(get_report_generator),
):
    """Download the analysis and its recommendations as CSV or JSON."""
    analysis = _load_analysis(request.analysis)
    report = generator.generate(analysis, request.insights, request.format)

    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": report.content_disposition}
    )
