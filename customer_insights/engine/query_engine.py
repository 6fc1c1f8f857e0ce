from __future__ import annotations

import operator
from collections import Counter
from typing import Dict, List, Optional, Tuple

import structlog

from customer_insights.core.settings import settings
from customer_insights.domain.dataset import DatasetSnapshot
from customer_insights.domain.models import Customer, Order, Product
from customer_insights.errors import DatasetLoadError, DatasetUnavailable, InvalidArgument
from customer_insights.observability.metrics import query_counter
from customer_insights.storage.loader import DatasetLoader

from .strategy import ExecutionStrategy, PartitionedStrategy, SequentialStrategy

logger = structlog.get_logger(__name__)

ProductFrequency = Tuple[str, int]


def _require_positive(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgument(f"{name} must be greater than 0, got {value!r}")
    return value


def _order_revenue(order: Order) -> float:
    return order.revenue


class CustomerQueryEngine:
    """
    Read-only aggregate queries over the current dataset snapshot.

    Every query reads the snapshot once through `loader.read()`; nothing is
    pinned between calls. The serial and parallel variants run the same
    map/reduce with a different ExecutionStrategy.
    """

    def __init__(
        self,
        loader: DatasetLoader,
        parallel: Optional[ExecutionStrategy] = None,
    ):
        self.loader = loader
        self.sequential: ExecutionStrategy = SequentialStrategy()
        self.parallel: ExecutionStrategy = parallel or PartitionedStrategy(
            max_workers=settings.QUERY_MAX_WORKERS,
            partition_size=settings.QUERY_PARTITION_SIZE,
        )

    def _snapshot(self, query: str) -> DatasetSnapshot:
        query_counter.labels(query=query).inc()
        try:
            return self.loader.read()
        except DatasetLoadError as e:
            logger.warning("dataset_unavailable", query=query, error=str(e))
            raise DatasetUnavailable(f"Dataset unavailable for {query}: {e}") from e

    # --------------------------- Customer Info ---------------------------

    def get_all_customer_names(self) -> List[str]:
        snap = self._snapshot("get_all_customer_names")
        return [c.name for c in snap.customers]

    def concatenate_customer_names(self) -> str:
        snap = self._snapshot("concatenate_customer_names")
        return ", ".join(c.name for c in snap.customers)

    # --------------------------- Orders ---------------------------

    def get_orders_for_customer(self, customer_id: int) -> List[Order]:
        snap = self._snapshot("get_orders_for_customer")
        return [o for c in snap.customers if c.id == customer_id for o in c.orders]

    def get_latest_order_per_customer(self) -> Dict[str, Optional[Order]]:
        snap = self._snapshot("get_latest_order_per_customer")
        latest: Dict[str, Optional[Order]] = {}
        for c in snap.customers:
            candidate = c.latest_order()
            current = latest.get(c.name)
            # same name seen before: keep the later date, earlier customer wins ties
            if current is None or (candidate is not None and candidate.date > current.date):
                latest[c.name] = candidate
        return latest

    # --------------------------- Products ---------------------------

    def get_top_expensive_products(self, top_n: int) -> List[Product]:
        _require_positive("top_n", top_n)
        snap = self._snapshot("get_top_expensive_products")
        # sorted() is stable, equal prices keep encounter order
        ranked = sorted(snap.iter_products(), key=lambda p: p.price, reverse=True)
        return ranked[:top_n]

    def most_expensive_product(self) -> Optional[Product]:
        snap = self._snapshot("most_expensive_product")
        best: Optional[Product] = None
        for p in snap.iter_products():
            if best is None or p.price > best.price:
                best = p
        return best

    def fetch_frequently_purchased_products(self, count: int) -> List[ProductFrequency]:
        _require_positive("count", count)
        snap = self._snapshot("fetch_frequently_purchased_products")
        # one hit per line item; most_common breaks ties by first-seen name
        frequency = Counter(p.name for p in snap.iter_products())
        return frequency.most_common(count)

    # --------------------------- Spending ---------------------------

    def fetch_spending_per_customer(self) -> Dict[str, float]:
        snap = self._snapshot("fetch_spending_per_customer")
        spending: Dict[str, float] = {}
        for c in snap.customers:
            spending[c.name] = spending.get(c.name, 0.0) + c.total_spending
        return spending

    def fetch_customers_spending_greater_than(self, amount: float) -> List[Customer]:
        snap = self._snapshot("fetch_customers_spending_greater_than")
        return list(self._spenders_above(snap, amount, self.sequential))

    def find_big_spenders(self, threshold: float) -> List[Customer]:
        snap = self._snapshot("find_big_spenders")
        return list(self._spenders_above(snap, threshold, self.parallel))

    @staticmethod
    def _spenders_above(
        snap: DatasetSnapshot, amount: float, strategy: ExecutionStrategy
    ) -> Tuple[Customer, ...]:
        return strategy.map_reduce(
            snap.customers,
            lambda c: (c,) if c.total_spending > amount else (),
            operator.add,
            (),
        )

    # --------------------------- Validation Checks ---------------------------

    def all_customers_have_orders(self) -> bool:
        snap = self._snapshot("all_customers_have_orders")
        return all(c.orders for c in snap.customers)

    def any_customer_spent_over(self, amount: float) -> bool:
        snap = self._snapshot("any_customer_spent_over")
        return any(c.total_spending > amount for c in snap.customers)

    def no_customer_has_empty_email(self) -> bool:
        snap = self._snapshot("no_customer_has_empty_email")
        return all(c.email and c.email.strip() for c in snap.customers)

    # --------------------------- Revenue ---------------------------

    def total_revenue(self) -> float:
        snap = self._snapshot("total_revenue")
        return self._revenue(snap, self.sequential)

    def total_revenue_sequential(self) -> float:
        return self.total_revenue()

    def total_revenue_parallel(self) -> float:
        snap = self._snapshot("total_revenue_parallel")
        return self._revenue(snap, self.parallel)

    @staticmethod
    def _revenue(snap: DatasetSnapshot, strategy: ExecutionStrategy) -> float:
        # partition by order: all orders of all customers, in document order
        orders = tuple(snap.iter_orders())
        return strategy.map_reduce(orders, _order_revenue, operator.add, 0.0)
