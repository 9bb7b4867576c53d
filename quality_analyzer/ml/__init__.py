# Data Quality Analyzer - Analysis Package
"""Type inference, column profiling, quality scoring and recommendations."""

from quality_analyzer.ml.type_inference import (
    ColumnType,
    infer_type,
    is_missing,
)
from quality_analyzer.ml.column_profiler import (
    ColumnStats,
    profile_column,
)
from quality_analyzer.ml.data_quality import (
    AnalysisResult,
    DataQualityAnalyzer,
    analyze_dataset,
)
from quality_analyzer.ml.recommendations import (
    Priority,
    Recommendation,
    RecommendationEngine,
    get_recommendation_engine,
)

__all__ = [
    # Type inference
    "ColumnType",
    "infer_type",
    "is_missing",
    # Profiling
    "ColumnStats",
    "profile_column",
    # Scoring
    "AnalysisResult",
    "DataQualityAnalyzer",
    "analyze_dataset",
    # Recommendations
    "Priority",
    "Recommendation",
    "RecommendationEngine",
    "get_recommendation_engine",
]
