from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator

from .models import Customer, Order, Product


@dataclass(frozen=True)
class DatasetSnapshot:
    customers: tuple[Customer, ...]  # document order

    # bookkeeping only; two loads of the same document compare equal
    source: str = field(default="", compare=False)
    loaded_at: datetime | None = field(default=None, compare=False)
    version: int = field(default=0, compare=False)

    @staticmethod
    def from_document(doc: Any, **meta: Any) -> "DatasetSnapshot":
        if not isinstance(doc, dict):
            raise ValueError(f"Dataset root must be an object, got {type(doc).__name__}")
        raw = doc.get("customers")
        if not isinstance(raw, list):
            raise ValueError("Dataset is missing the 'customers' array")
        customers = []
        for c in raw:
            if not isinstance(c, dict):
                raise ValueError("Every entry of 'customers' must be an object")
            customers.append(Customer.from_dict(c))
        return DatasetSnapshot(customers=tuple(customers), **meta)

    def iter_orders(self) -> Iterator[Order]:
        for c in self.customers:
            yield from c.orders

    def iter_products(self) -> Iterator[Product]:
        for o in self.iter_orders():
            yield from o.products

