from __future__ import annotations

from fastapi import Depends

from customer_insights.core.settings import Settings, get_settings
from customer_insights.engine import CustomerQueryEngine, PartitionedStrategy
from customer_insights.storage.loader import DatasetLoader, get_default_loader


def get_loader() -> DatasetLoader:
    """Process-wide loader; tests override this dependency."""
    return get_default_loader()


def get_query_engine(
    loader: DatasetLoader = Depends(get_loader),
    settings: Settings = Depends(get_settings),
) -> CustomerQueryEngine:
    return CustomerQueryEngine(
        loader,
        parallel=PartitionedStrategy(
            max_workers=settings.QUERY_MAX_WORKERS,
            partition_size=settings.QUERY_PARTITION_SIZE,
        ),
    )
