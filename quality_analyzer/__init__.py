# Data Quality Analyzer - Application Package
"""
Data Quality Analyzer - quality scoring for tabular datasets.

This package provides:
- CSV/JSON ingestion into flat records
- Column type inference and per-column profiling
- Completeness, consistency, accuracy and validity scores
- LLM-assisted cleanup recommendations with a rule-based fallback
- CSV/JSON report export
"""

__version__ = "1.0.0"

# Lazy import to keep the analysis modules usable without the HTTP layer
def get_app():
    from quality_analyzer.main import app
    return app

__all__ = ["get_app", "__version__"]
