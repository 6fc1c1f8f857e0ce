# customer_insights/errors.py
from __future__ import annotations

from pathlib import Path
from typing import Optional


class DatasetLoadError(RuntimeError):
    """Raised when the dataset document is missing, unreadable or malformed.

    The original exception is kept as ``__cause__`` (``raise ... from exc``).
    """

    def __init__(self, message: str, *, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class DatasetUnavailable(RuntimeError):
    """A query needed the dataset but loading it failed (cause: DatasetLoadError)."""


class InvalidArgument(ValueError):
    """A ranking query got a non-positive count."""
