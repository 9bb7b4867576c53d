# Data Quality Analyzer - Data Ingestion Service
# Decodes CSV/JSON text into flat records and hands them to the analyzer

from __future__ import annotations

import io
import json
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Type

import pandas as pd

from quality_analyzer.core.config import Settings, get_settings
from quality_analyzer.core.exceptions import (
    DecodeException,
    FileTooLargeException,
    UnsupportedFormatException,
)
from quality_analyzer.core.logging import LogContext, get_logger, log_execution_time
from quality_analyzer.ml.data_quality import AnalysisResult, DataQualityAnalyzer
from quality_analyzer.ml.type_inference import ColumnType

logger = get_logger(__name__)

Record = dict[str, Any]


class DataFormat(str, Enum):
    """Supported input formats."""
    CSV = "csv"
    JSON = "json"


# ============================================================================
# Parser Interface and Implementations
# ============================================================================

class BaseParser(ABC):
    """Abstract base class for text parsers (Strategy Pattern)."""

    supported_formats: list[DataFormat] = []

    @abstractmethod
    def parse(self, content: str, filename: str = "") -> list[Record]:
        """Parse text into a list of flat records."""
        pass

    @classmethod
    def supports(cls, data_format: DataFormat) -> bool:
        """Check if parser supports the format."""
        return data_format in cls.supported_formats


class CSVParser(BaseParser):
    """
    CSV parser.

    The header row provides the keys, fields are comma separated and
    blank lines are skipped. Cells stay raw text, so an empty cell is ""
    rather than NaN and "007" keeps its zeros. A row with more fields
    than the header is a decoding error.
    """

    supported_formats = [DataFormat.CSV]

    def parse(self, content: str, filename: str = "") -> list[Record]:
        # Header read as a plain row so the tokenizer enforces its width
        try:
            df = pd.read_csv(
                io.StringIO(content),
                sep=",",
                header=None,
                index_col=False,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True
            )
        except pd.errors.EmptyDataError:
            return []
        except (pd.errors.ParserError, ValueError) as e:
            raise DecodeException(DataFormat.CSV.value, str(e), filename=filename, cause=e)

        # Rows with too few fields come back as NaN
        rows = df.astype(object).where(pd.notna(df), None).values.tolist()
        if not rows:
            return []

        columns = _unique_headers(rows[0])
        return [dict(zip(columns, row)) for row in rows[1:]]


def _unique_headers(header: list[Any]) -> list[str]:
    """Header names with repeats suffixed `.1`, `.2`, ... as pandas does."""
    seen: dict[str, int] = {}
    names: list[str] = []
    for raw in header:
        name = "" if raw is None else str(raw)
        candidate = name
        while candidate in seen:
            seen[name] += 1
            candidate = f"{name}.{seen[name]}"
        seen.setdefault(candidate, 0)
        names.append(candidate)
    return names


class JSONParser(BaseParser):
    """JSON parser for an array of objects or a single object."""

    supported_formats = [DataFormat.JSON]

    def parse(self, content: str, filename: str = "") -> list[Record]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DecodeException(DataFormat.JSON.value, str(e), filename=filename, cause=e)

        records = data if isinstance(data, list) else [data]
        if not all(isinstance(record, dict) for record in records):
            raise DecodeException(
                DataFormat.JSON.value,
                "expected an object or an array of objects",
                filename=filename
            )
        return records


# ============================================================================
# Ingestion Service
# ============================================================================

class DataIngestionService:
    """
    Decoding layer in front of the dataset analyzer.

    Handles:
    - Format detection from the file name
    - Byte decoding and upload size limits
    - CSV/JSON parsing into records
    - Running the quality analysis on the records
    """

    # Parser registry (Factory Pattern)
    PARSERS: list[Type[BaseParser]] = [
        CSVParser,
        JSONParser,
    ]

    ENCODINGS = ["utf-8-sig", "latin-1"]

    def __init__(
        self,
        analyzer: Optional[DataQualityAnalyzer] = None,
        settings: Optional[Settings] = None
    ) -> None:
        self.settings = settings or get_settings()
        self.analyzer = analyzer or DataQualityAnalyzer(self.settings.analysis)
        self._parser_instances: dict[DataFormat, BaseParser] = {}

    def get_parser(self, data_format: DataFormat) -> BaseParser:
        """Get parser for data format."""
        if data_format in self._parser_instances:
            return self._parser_instances[data_format]

        for parser_class in self.PARSERS:
            if parser_class.supports(data_format):
                parser = parser_class()
                self._parser_instances[data_format] = parser
                return parser

        raise UnsupportedFormatException(
            actual_format=data_format.value,
            supported_formats=[f.value for f in DataFormat]
        )

    def resolve_format(self, data_format: Optional[str | DataFormat], filename: str = "") -> DataFormat:
        """Explicit format hint first, file extension otherwise."""
        if data_format is None or data_format == "":
            resolved = self.detect_format(filename)
        elif isinstance(data_format, DataFormat):
            resolved = data_format
        else:
            try:
                resolved = DataFormat(data_format.lower())
            except ValueError:
                raise UnsupportedFormatException(
                    actual_format=data_format,
                    supported_formats=[f.value for f in DataFormat],
                    filename=filename
                )

        if resolved.value not in self.settings.allowed_formats:
            raise UnsupportedFormatException(
                actual_format=resolved.value,
                supported_formats=self.settings.allowed_formats,
                filename=filename
            )
        return resolved

    def detect_format(self, filename: str) -> DataFormat:
        """Detect data format from the file extension."""
        ext = Path(filename).suffix.lower().lstrip('.')
        try:
            return DataFormat(ext)
        except ValueError:
            raise UnsupportedFormatException(
                actual_format=ext or "unknown",
                supported_formats=[f.value for f in DataFormat],
                filename=filename
            )

    def decode_bytes(self, raw: bytes, filename: str = "") -> str:
        """Decode uploaded bytes, enforcing the upload size limit."""
        limit = self.settings.max_upload_size_bytes
        if len(raw) > limit:
            raise FileTooLargeException(filename, len(raw), limit)

        for encoding in self.ENCODINGS:
            try:
                return raw.decode(encoding)
            except UnicodeDecodeError:
                continue
        raise DecodeException("text", "could not decode file bytes", filename=filename)

    def decode(
        self,
        content: str,
        data_format: str | DataFormat,
        filename: str = ""
    ) -> list[Record]:
        """Parse text content into records."""
        resolved = self.resolve_format(data_format, filename)
        return self.get_parser(resolved).parse(content, filename)

    @log_execution_time(operation_name="analyze_content")
    def analyze_content(
        self,
        content: str,
        filename: str,
        data_format: Optional[str | DataFormat] = None,
        type_overrides: Optional[Mapping[str, ColumnType]] = None
    ) -> AnalysisResult:
        """
        Decode and analyze a dataset.

        Args:
            content: Raw CSV or JSON text
            filename: Original file name, used in the result and for format detection
            data_format: Explicit format hint (detected from filename if None)
            type_overrides: Optional forced column types

        Returns:
            AnalysisResult for the dataset
        """
        context = LogContext(component="DataIngestionService", operation="analyze_content")
        resolved = self.resolve_format(data_format, filename)

        logger.info(f"Decoding {filename}", context=context, format=resolved.value, size=len(content))
        records = self.get_parser(resolved).parse(content, filename)

        return self.analyzer.analyze(records, filename, type_overrides=type_overrides)

    def analyze_upload(
        self,
        raw: bytes,
        filename: str,
        data_format: Optional[str | DataFormat] = None
    ) -> AnalysisResult:
        """Decode uploaded bytes and analyze them."""
        content = self.decode_bytes(raw, filename)
        return self.analyze_content(content, filename, data_format)


def get_ingestion_service() -> DataIngestionService:
    """Get ingestion service instance."""
    return DataIngestionService()
