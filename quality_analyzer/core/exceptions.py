# Data Quality Analyzer - Custom Exceptions
# Exception hierarchy with error codes, context, and recovery hints

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4


class ErrorCode(str, Enum):
    """Standardized error codes for API responses and logging."""

    # General errors (1xxx)
    UNKNOWN_ERROR = "E1000"
    VALIDATION_ERROR = "E1001"
    CONFIGURATION_ERROR = "E1002"

    # Data errors (3xxx)
    DATA_EMPTY = "E3000"

    # File errors (4xxx)
    FILE_FORMAT_UNSUPPORTED = "E4002"
    FILE_SIZE_EXCEEDED = "E4003"
    FILE_PARSE_ERROR = "E4004"

    # External service errors (6xxx)
    EXTERNAL_SERVICE_ERROR = "E6000"
    RECOMMENDATION_SERVICE_ERROR = "E6001"
    RECOMMENDATION_SERVICE_TIMEOUT = "E6002"


@dataclass(frozen=True)
class ErrorContext:
    """Immutable context information for error tracking and debugging."""

    error_id: UUID = field(default_factory=uuid4)
    timestamp: datetime = field(default_factory=datetime.utcnow)
    component: str = ""
    operation: str = ""
    request_id: Optional[str] = None
    additional_data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_id": str(self.error_id),
            "timestamp": self.timestamp.isoformat(),
            "component": self.component,
            "operation": self.operation,
            "request_id": self.request_id,
            "additional_data": self.additional_data
        }


class BaseApplicationException(Exception):
    """
    Base exception class for all application exceptions.

    Carries an error code, an HTTP status for the API layer and an
    optional recovery hint shown to the user.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        recovery_hint: Optional[str] = None,
        is_retryable: bool = False,
        http_status_code: int = 500
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recovery_hint = recovery_hint
        self.is_retryable = is_retryable
        self.http_status_code = http_status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": True,
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recovery_hint": self.recovery_hint,
            "is_retryable": self.is_retryable,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code={self.error_code}, "
            f"error_id={self.context.error_id})"
        )


# ============================================================================
# Validation Exceptions
# ============================================================================

class ValidationException(BaseApplicationException):
    """Exception for request validation failures."""

    def __init__(
        self,
        message: str,
        field_errors: Optional[dict[str, list[str]]] = None,
        **kwargs: Any
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            http_status_code=400,
            **kwargs
        )
        self.field_errors = field_errors or {}

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field_errors"] = self.field_errors
        return result


# ============================================================================
# Data Exceptions
# ============================================================================

class DataException(BaseApplicationException):
    """Base exception for dataset errors."""
    pass


class EmptyDatasetException(DataException):
    """Raised when an analysis is requested for a dataset without records."""

    def __init__(self, message: str = "No data found in file", **kwargs: Any) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.DATA_EMPTY,
            http_status_code=422,
            recovery_hint="Upload a file containing at least one data row",
            **kwargs
        )


# ============================================================================
# File Exceptions
# ============================================================================

class FileException(BaseApplicationException):
    """Base exception for file-related errors."""
    pass


class UnsupportedFormatException(FileException):
    """Exception for formats the decoding layer cannot handle."""

    def __init__(
        self,
        actual_format: str,
        supported_formats: list[str],
        filename: str = "",
        **kwargs: Any
    ) -> None:
        target = f" for file '{filename}'" if filename else ""
        super().__init__(
            message=f"Unsupported file format '{actual_format}'{target}",
            error_code=ErrorCode.FILE_FORMAT_UNSUPPORTED,
            http_status_code=415,
            recovery_hint=f"Supported formats: {', '.join(supported_formats)}",
            **kwargs
        )
        self.filename = filename
        self.actual_format = actual_format
        self.supported_formats = supported_formats


class DecodeException(FileException):
    """Exception for CSV/JSON text that cannot be decoded into records."""

    def __init__(
        self,
        data_format: str,
        reason: str,
        filename: str = "",
        **kwargs: Any
    ) -> None:
        super().__init__(
            message=f"{data_format.upper()} parsing error: {reason}",
            error_code=ErrorCode.FILE_PARSE_ERROR,
            http_status_code=422,
            **kwargs
        )
        self.data_format = data_format
        self.reason = reason
        self.filename = filename


class FileTooLargeException(FileException):
    """Exception for uploads above the configured size limit."""

    def __init__(self, filename: str, size_bytes: int, limit_bytes: int, **kwargs: Any) -> None:
        super().__init__(
            message=f"File '{filename}' is {size_bytes} bytes, limit is {limit_bytes} bytes",
            error_code=ErrorCode.FILE_SIZE_EXCEEDED,
            http_status_code=413,
            **kwargs
        )
        self.filename = filename
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


# ============================================================================
# External Service Exceptions
# ============================================================================

class ExternalServiceException(BaseApplicationException):
    """Base exception for external service errors."""

    def __init__(self, service_name: str, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", ErrorCode.EXTERNAL_SERVICE_ERROR)
        super().__init__(
            message=f"{service_name} error: {message}",
            http_status_code=502,
            is_retryable=True,
            **kwargs
        )
        self.service_name = service_name


class RecommendationServiceException(ExternalServiceException):
    """
    Failure of the text-generation service behind recommendations.

    Covers network, auth, timeout and malformed-response failures. The
    recommendation engine recovers from it locally.
    """

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", ErrorCode.RECOMMENDATION_SERVICE_ERROR)
        super().__init__(
            service_name="Recommendation service",
            message=message,
            **kwargs
        )
