# Data Quality Analyzer - Core Package
"""
Core package containing fundamental application components:
- Configuration management
- Exception hierarchy
- Logging infrastructure
"""

from quality_analyzer.core.config import settings, get_settings, OpenAIConfig, AnalysisConfig
from quality_analyzer.core.exceptions import (
    BaseApplicationException,
    ValidationException,
    EmptyDatasetException,
    DecodeException,
    UnsupportedFormatException,
    FileTooLargeException,
    RecommendationServiceException,
)
from quality_analyzer.core.logging import (
    get_logger,
    set_request_context,
    clear_request_context,
    log_execution_time,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    "OpenAIConfig",
    "AnalysisConfig",
    # Exceptions
    "BaseApplicationException",
    "ValidationException",
    "EmptyDatasetException",
    "DecodeException",
    "UnsupportedFormatException",
    "FileTooLargeException",
    "RecommendationServiceException",
    # Logging
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "log_execution_time",
]
