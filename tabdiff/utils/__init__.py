"""Utility functions and helpers."""

from .logger import get_logger, StructuredLogger
from .normalizers import (
    normalize_column_name,
    normalize_value,
    normalize_row,
    is_placeholder_column
)

__all__ = [
    "get_logger",
    "StructuredLogger",
    "normalize_column_name",
    "normalize_value",
    "normalize_row",
    "is_placeholder_column",
]
