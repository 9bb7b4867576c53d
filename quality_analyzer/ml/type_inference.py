# Data Quality Analyzer - Column Type Inference
# Semantic type detection for raw column values (boolean, date, integer, float, text)

from __future__ import annotations

import math
import re
import warnings
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Iterable, Optional

import pandas as pd


# ============================================================================
# Enums
# ============================================================================

class ColumnType(str, Enum):
    """Semantic column types, listed in inference priority order."""
    BOOLEAN = "boolean"
    DATE = "date"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"


BOOLEAN_TOKENS = frozenset({"true", "false", "yes", "no", "1", "0"})

# Calendar shapes: 2024-01-05, 05/01/2024, 2024, Jan 5, 5 Jan
DATE_SHAPE = re.compile(
    r"\d{1,4}[-/.]\d{1,2}|\d{4}|[A-Za-z]{3,}\.?\s+\d{1,2}\b|\b\d{1,2}\s+[A-Za-z]{3,}"
)
RELATIVE_DATE_WORDS = re.compile(r"\b(now|today|tomorrow|yesterday)\b", re.IGNORECASE)


# ============================================================================
# Value helpers
# ============================================================================

def is_missing(value: Any) -> bool:
    """Missing means None, empty string or a float NaN. 0 and "0" are values."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def as_text(value: Any) -> str:
    """
    Render a raw value the way it appears in the source text.

    Booleans become "true"/"false" and integral floats drop the ".0", so
    that JSON `true` and `1.0` match the boolean tokens.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> Optional[float]:
    """Numeric conversion of a raw value; None when it is not a number."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int):
        try:
            number = float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number):
        return None
    return number


def _is_boolean(value: Any) -> bool:
    return as_text(value).lower() in BOOLEAN_TOKENS


def _is_date(value: Any) -> bool:
    if isinstance(value, (datetime, date, pd.Timestamp)):
        return True
    # Bare numbers are counts or measurements, never calendar dates
    if not isinstance(value, str) or to_number(value) is not None:
        return False
    # Relative words, bare month names, ordinals and clock times are not dates
    if RELATIVE_DATE_WORDS.search(value) or not DATE_SHAPE.search(value):
        return False

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(value)
        except (ValueError, TypeError, OverflowError):
            return False
    return not pd.isna(parsed)


def _is_integer(value: Any) -> bool:
    number = to_number(value)
    return number is not None and math.isfinite(number) and number.is_integer()


def _is_float(value: Any) -> bool:
    return to_number(value) is not None


TYPE_PREDICATES: list[tuple[ColumnType, Callable[[Any], bool]]] = [
    (ColumnType.BOOLEAN, _is_boolean),
    (ColumnType.DATE, _is_date),
    (ColumnType.INTEGER, _is_integer),
    (ColumnType.FLOAT, _is_float),
]


# ============================================================================
# Inference
# ============================================================================

def infer_type(values: Iterable[Any]) -> ColumnType:
    """
    Infer the semantic type of a column.

    Missing values are ignored. The first type, in the order boolean,
    date, integer, float, whose predicate holds for every remaining value
    is returned; otherwise the column is text. An all-missing column is
    text as well.

    Note that a column holding only 0/1 values is boolean even when it is
    semantically a count.
    """
    present = [v for v in values if not is_missing(v)]
    if not present:
        return ColumnType.TEXT

    for column_type, predicate in TYPE_PREDICATES:
        if all(predicate(v) for v in present):
            return column_type

    return ColumnType.TEXT


def is_numeric_type(column_type: ColumnType) -> bool:
    return column_type in (ColumnType.INTEGER, ColumnType.FLOAT)
