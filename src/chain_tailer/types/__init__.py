"""Reusable type definitions shared across the reader."""

from .base import StrictBaseModel
from .exceptions import (
    HistoryExhaustedError,
    InvalidSeekTargetError,
    ReaderError,
    ReaderExhaustedError,
    ReaderInvariantError,
)

__all__ = [
    # Models
    "StrictBaseModel",
    # Exceptions
    "ReaderError",
    "ReaderInvariantError",
    "InvalidSeekTargetError",
    "HistoryExhaustedError",
    "ReaderExhaustedError",
]
