from __future__ import annotations

import itertools
import json

import pytest

from customer_insights.engine import CustomerQueryEngine, PartitionedStrategy
from customer_insights.storage.loader import DatasetLoader


ALICE_BOB = {
    "customers": [
        {
            "id": 1,
            "name": "Alice",
            "email": "alice@example.com",
            "orders": [
                {
                    "orderId": 101,
                    "date": "2024-01-15",
                    "products": [
                        {"id": 1, "name": "Laptop", "price": 1000.0, "quantity": 2},
                        {"id": 2, "name": "Phone", "price": 500.0, "quantity": 3},
                    ],
                }
            ],
        },
        {
            "id": 2,
            "name": "Bob",
            "email": "bob@example.com",
            "orders": [
                {
                    "orderId": 201,
                    "date": "2024-02-01",
                    "products": [
                        {"id": 2, "name": "Phone", "price": 500.0, "quantity": 1},
                    ],
                }
            ],
        },
    ]
}


@pytest.fixture
def write_dataset(tmp_path):
    """Write a document (dict or raw text) to a temp file and return its path."""

    def _write(doc, name: str = "customers.json"):
        path = tmp_path / name
        text = doc if isinstance(doc, str) else json.dumps(doc)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def alice_bob_path(write_dataset):
    return write_dataset(ALICE_BOB)


@pytest.fixture
def loader(alice_bob_path):
    return DatasetLoader(alice_bob_path)


@pytest.fixture
def engine(loader):
    return CustomerQueryEngine(loader, parallel=PartitionedStrategy(max_workers=2))


@pytest.fixture
def engine_for(write_dataset):
    """Engine over an ad-hoc document."""
    names = itertools.count()

    def _make(doc, *, max_workers: int = 3, partition_size=None):
        path = write_dataset(doc, name=f"doc_{next(names)}.json")
        return CustomerQueryEngine(
            DatasetLoader(path),
            parallel=PartitionedStrategy(max_workers=max_workers, partition_size=partition_size),
        )

    return _make
