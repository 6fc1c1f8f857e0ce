from __future__ import annotations

import random

import pytest

from customer_insights.engine import CustomerQueryEngine, PartitionedStrategy
from customer_insights.errors import DatasetLoadError, DatasetUnavailable, InvalidArgument
from customer_insights.storage.loader import DatasetLoader


def _customer(cid, name, orders=(), email=None):
    return {"id": cid, "name": name, "email": email or f"{name.lower()}@example.com", "orders": list(orders)}


def _order(oid, date, *products):
    return {"orderId": oid, "date": date, "products": list(products)}


def _product(pid, name, price, qty=1):
    return {"id": pid, "name": name, "price": price, "quantity": qty}


EMPTY = {"customers": []}


# --------------------------- Alice / Bob scenario ---------------------------


def test_alice_bob_names(engine):
    assert engine.get_all_customer_names() == ["Alice", "Bob"]
    assert engine.concatenate_customer_names() == "Alice, Bob"


def test_alice_bob_spending_and_revenue(engine):
    assert engine.fetch_spending_per_customer() == {"Alice": 3500.0, "Bob": 500.0}
    assert engine.total_revenue() == 4000.0
    assert engine.total_revenue_sequential() == 4000.0
    assert engine.total_revenue_parallel() == pytest.approx(4000.0, rel=1e-9)


def test_alice_bob_products(engine):
    assert engine.most_expensive_product().name == "Laptop"
    assert engine.fetch_frequently_purchased_products(1) == [("Phone", 2)]
    assert engine.fetch_frequently_purchased_products(5) == [("Phone", 2), ("Laptop", 1)]


def test_alice_bob_orders_by_id(engine):
    assert [o.order_id for o in engine.get_orders_for_customer(1)] == [101]
    assert engine.get_orders_for_customer(999) == []


def test_alice_bob_thresholds(engine):
    assert [c.name for c in engine.fetch_customers_spending_greater_than(1000)] == ["Alice"]
    assert [c.name for c in engine.find_big_spenders(1000)] == ["Alice"]
    assert engine.fetch_customers_spending_greater_than(3500.0) == []
    assert engine.any_customer_spent_over(3499.99) is True
    assert engine.any_customer_spent_over(3500.0) is False


def test_alice_bob_validations(engine):
    assert engine.all_customers_have_orders() is True
    assert engine.no_customer_has_empty_email() is True


# --------------------------- Empty dataset ---------------------------


def test_empty_dataset_edges(engine_for):
    engine = engine_for(EMPTY)

    assert engine.get_all_customer_names() == []
    assert engine.concatenate_customer_names() == ""
    assert engine.get_latest_order_per_customer() == {}
    assert engine.get_top_expensive_products(3) == []
    assert engine.most_expensive_product() is None
    assert engine.fetch_frequently_purchased_products(3) == []
    assert engine.fetch_spending_per_customer() == {}
    assert engine.find_big_spenders(0) == []
    assert engine.all_customers_have_orders() is True
    assert engine.any_customer_spent_over(0) is False
    assert engine.no_customer_has_empty_email() is True
    assert engine.total_revenue() == 0.0
    assert engine.total_revenue_parallel() == 0.0


# --------------------------- Orders ---------------------------


def test_latest_order_per_customer_keeps_customers_without_orders(engine_for):
    engine = engine_for(
        {
            "customers": [
                _customer(1, "Ann", [_order(1, "2024-01-05"), _order(2, "2024-03-01"), _order(3, "2024-02-10")]),
                _customer(2, "Ben"),
            ]
        }
    )
    latest = engine.get_latest_order_per_customer()

    assert latest["Ann"].order_id == 2
    assert "Ben" in latest and latest["Ben"] is None


def test_latest_order_first_wins_on_equal_dates(engine_for):
    engine = engine_for({"customers": [_customer(1, "Ann", [_order(1, "2024-01-05"), _order(2, "2024-01-05")])]})
    assert engine.get_latest_order_per_customer()["Ann"].order_id == 1


def test_duplicate_names_are_merged(engine_for):
    engine = engine_for(
        {
            "customers": [
                _customer(1, "Sam", [_order(1, "2024-01-01", _product(1, "A", 10.0, 2))]),
                _customer(2, "Sam", [_order(2, "2024-06-01", _product(2, "B", 5.0, 1))]),
                _customer(3, "Sam"),
            ]
        }
    )

    assert engine.fetch_spending_per_customer() == {"Sam": 25.0}
    assert engine.get_latest_order_per_customer()["Sam"].order_id == 2


def test_orders_for_id_collects_every_matching_customer(engine_for):
    engine = engine_for(
        {"customers": [_customer(7, "A", [_order(1, "2024-01-01")]), _customer(7, "B", [_order(2, "2024-01-02")])]}
    )
    assert [o.order_id for o in engine.get_orders_for_customer(7)] == [1, 2]


# --------------------------- Products ---------------------------


def test_top_expensive_products_sorted_stable_and_truncated(engine_for):
    engine = engine_for(
        {
            "customers": [
                _customer(1, "A", [_order(1, "2024-01-01", _product(1, "p1", 50.0), _product(2, "p2", 80.0))]),
                _customer(2, "B", [_order(2, "2024-01-02", _product(3, "p3", 50.0), _product(4, "p4", 10.0))]),
            ]
        }
    )

    assert [p.id for p in engine.get_top_expensive_products(3)] == [2, 1, 3]
    assert [p.id for p in engine.get_top_expensive_products(100)] == [2, 1, 3, 4]


@pytest.mark.parametrize("bad", [0, -1, -100])
def test_ranking_queries_reject_non_positive_counts(engine, bad):
    with pytest.raises(InvalidArgument):
        engine.get_top_expensive_products(bad)
    with pytest.raises(InvalidArgument):
        engine.fetch_frequently_purchased_products(bad)


def test_invalid_argument_raised_before_reading_dataset(tmp_path):
    engine = CustomerQueryEngine(DatasetLoader(tmp_path / "missing.json"))
    with pytest.raises(InvalidArgument):
        engine.get_top_expensive_products(0)


def test_most_expensive_earlier_line_item_wins_ties(engine_for):
    engine = engine_for(
        {"customers": [_customer(1, "A", [_order(1, "2024-01-01", _product(1, "first", 99.0), _product(2, "second", 99.0))])]}
    )
    assert engine.most_expensive_product().name == "first"


def test_frequency_counts_line_items_not_quantity(engine_for):
    engine = engine_for(
        {
            "customers": [
                _customer(1, "A", [_order(1, "2024-01-01", _product(1, "Bulk", 1.0, 100), _product(2, "Pen", 1.0, 1))]),
                _customer(2, "B", [_order(2, "2024-01-01", _product(2, "Pen", 1.0, 1))]),
            ]
        }
    )
    assert engine.fetch_frequently_purchased_products(2) == [("Pen", 2), ("Bulk", 1)]


def test_frequency_ties_follow_first_seen_name(engine_for):
    engine = engine_for(
        {"customers": [_customer(1, "A", [_order(1, "2024-01-01", _product(1, "Zeta", 1.0), _product(2, "Alpha", 1.0))])]}
    )
    assert engine.fetch_frequently_purchased_products(2) == [("Zeta", 1), ("Alpha", 1)]


# --------------------------- Validation ---------------------------


def test_all_customers_have_orders_false_when_one_is_empty(engine_for):
    engine = engine_for({"customers": [_customer(1, "A", [_order(1, "2024-01-01")]), _customer(2, "B")]})
    assert engine.all_customers_have_orders() is False


def test_blank_email_detected(engine_for):
    engine = engine_for({"customers": [_customer(1, "A"), {"id": 2, "name": "B", "email": "   ", "orders": []}]})
    assert engine.no_customer_has_empty_email() is False


def test_customer_without_orders_spends_zero(engine_for):
    engine = engine_for({"customers": [_customer(1, "Idle")]})
    assert engine.fetch_spending_per_customer() == {"Idle": 0.0}


# --------------------------- Serial vs parallel ---------------------------


def _random_document(seed: int, customers: int = 40):
    rnd = random.Random(seed)
    doc = {"customers": []}
    pid = 0
    for cid in range(customers):
        orders = []
        for oid in range(rnd.randint(0, 4)):
            products = []
            for _ in range(rnd.randint(0, 5)):
                pid += 1
                products.append(_product(pid, f"p{rnd.randint(0, 9)}", round(rnd.uniform(0, 500), 2), rnd.randint(1, 5)))
            orders.append(_order(cid * 10 + oid, f"2024-{rnd.randint(1, 12):02d}-{rnd.randint(1, 28):02d}", *products))
        doc["customers"].append(_customer(cid, f"c{cid}", orders))
    return doc


@pytest.mark.parametrize("seed", [1, 2, 3])
@pytest.mark.parametrize("workers,partition_size", [(1, None), (2, None), (4, 3), (16, 1)])
def test_parallel_variants_match_serial(engine_for, seed, workers, partition_size):
    engine = engine_for(_random_document(seed), max_workers=workers, partition_size=partition_size)

    assert engine.total_revenue_parallel() == pytest.approx(engine.total_revenue(), rel=1e-9)
    for threshold in (0, 250.0, 1000.0, 5000.0):
        serial = engine.fetch_customers_spending_greater_than(threshold)
        parallel = engine.find_big_spenders(threshold)
        assert {c.id for c in parallel} == {c.id for c in serial}
        assert parallel == serial


def test_spending_matches_line_item_sum(engine_for):
    doc = _random_document(9, customers=10)
    engine = engine_for(doc)
    spending = engine.fetch_spending_per_customer()

    for c in doc["customers"]:
        expected = sum(p["price"] * p["quantity"] for o in c["orders"] for p in o["products"])
        assert spending[c["name"]] == pytest.approx(expected)


# --------------------------- Failures ---------------------------


def test_loader_failure_surfaces_as_dataset_unavailable(tmp_path):
    engine = CustomerQueryEngine(DatasetLoader(tmp_path / "missing.json"))

    with pytest.raises(DatasetUnavailable) as exc_info:
        engine.total_revenue()
    assert isinstance(exc_info.value.__cause__, DatasetLoadError)

    with pytest.raises(DatasetUnavailable):
        engine.get_all_customer_names()


def test_queries_see_reloaded_snapshot(engine, loader, alice_bob_path):
    assert engine.get_all_customer_names() == ["Alice", "Bob"]
    alice_bob_path.write_text('{"customers": [{"id": 9, "name": "Zed", "orders": []}]}')

    assert engine.get_all_customer_names() == ["Alice", "Bob"]
    loader.reload()
    assert engine.get_all_customer_names() == ["Zed"]


def test_default_parallel_strategy_comes_from_settings(loader):
    engine = CustomerQueryEngine(loader)
    assert isinstance(engine.parallel, PartitionedStrategy)
    assert engine.parallel.max_workers >= 1
