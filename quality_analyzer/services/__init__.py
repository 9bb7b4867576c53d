# Data Quality Analyzer - Services Package
"""
Ingestion, LLM and report services.

Modules are imported directly (quality_analyzer.services.data_ingestion, ...);
the analysis package depends on llm_service, so nothing is re-exported here.
"""
