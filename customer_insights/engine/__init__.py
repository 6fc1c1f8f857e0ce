# customer_insights/engine/__init__.py
from __future__ import annotations

from .query_engine import CustomerQueryEngine, ProductFrequency
from .strategy import ExecutionStrategy, PartitionedStrategy, SequentialStrategy

__all__ = [
    "CustomerQueryEngine",
    "ProductFrequency",
    "ExecutionStrategy",
    "PartitionedStrategy",
    "SequentialStrategy",
]
