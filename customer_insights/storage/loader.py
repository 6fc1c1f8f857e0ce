from __future__ import annotations

import itertools
import json
import threading
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from customer_insights.core.settings import settings
from customer_insights.domain.dataset import DatasetSnapshot
from customer_insights.domain.models import Customer
from customer_insights.errors import DatasetLoadError
from customer_insights.observability.metrics import dataset_load_counter

logger = structlog.get_logger(__name__)


class DatasetLoader:
    """
    Read-through cache for the customers document (thread-safe).

    - read(): returns the cached snapshot; loads it on first access
    - reload(): always loads from disk and swaps the cache
    - a failed load never touches the cache (old snapshot, or nothing, stays)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._snapshot: Optional[DatasetSnapshot] = None
        self._versions = itertools.count(1)

    @property
    def cached(self) -> Optional[DatasetSnapshot]:
        return self._snapshot

    def read(self) -> DatasetSnapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        with self._lock:
            # double-check after acquiring lock
            if self._snapshot is None:
                self._snapshot = self._load_or_raise()
            return self._snapshot

    def reload(self) -> DatasetSnapshot:
        with self._lock:
            snapshot = self._load_or_raise()
            self._snapshot = snapshot
            return snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None
        logger.info("dataset_cache_invalidated", path=str(self.path))

    def read_customers(self) -> tuple[Customer, ...]:
        return self.read().customers

    def reload_customers(self) -> tuple[Customer, ...]:
        return self.reload().customers

    # -----------------
    # internals
    # -----------------

    def _load_or_raise(self) -> DatasetSnapshot:
        """
        Open, parse JSON and build the entity graph.
        Raises DatasetLoadError on any error; caller holds the lock.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                doc = json.load(f)
            snapshot = DatasetSnapshot.from_document(
                doc,
                source=str(self.path),
                loaded_at=datetime.now(timezone.utc),
            )
        except FileNotFoundError as e:
            self._record_failure(e)
            raise DatasetLoadError(
                f"Dataset file not found: {self.path}", path=self.path
            ) from e
        except json.JSONDecodeError as e:
            self._record_failure(e)
            raise DatasetLoadError(
                f"Failed to parse dataset {self.path}: {e}", path=self.path
            ) from e
        except (OSError, ValueError, OverflowError, RecursionError) as e:
            self._record_failure(e)
            raise DatasetLoadError(
                f"Failed to read customers from {self.path}: {e}", path=self.path
            ) from e

        # numbered only once the document is known good
        snapshot = replace(snapshot, version=next(self._versions))

        dataset_load_counter.labels(result="success").inc()
        logger.info(
            "dataset_loaded",
            path=str(self.path),
            customers=len(snapshot.customers),
            version=snapshot.version,
        )
        return snapshot

    def _record_failure(self, exc: Exception) -> None:
        dataset_load_counter.labels(result="error").inc()
        logger.error("dataset_load_failed", path=str(self.path), error=repr(exc))


# =============================================================================
# Process-wide default loader (built from settings)
# =============================================================================

_DEFAULT: Optional[DatasetLoader] = None
_DEFAULT_LOCK = threading.Lock()


def get_default_loader() -> DatasetLoader:
    global _DEFAULT
    if _DEFAULT is None:
        with _DEFAULT_LOCK:
            if _DEFAULT is None:
                _DEFAULT = DatasetLoader(settings.DATASET_PATH)
    return _DEFAULT


def read_customers() -> tuple[Customer, ...]:
    return get_default_loader().read_customers()


def reload_customers() -> tuple[Customer, ...]:
    return get_default_loader().reload_customers()
