from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from customer_insights.engine import CustomerQueryEngine
from customer_insights.storage.loader import DatasetLoader

from .dependencies import get_loader, get_query_engine
from .schemas import CustomerOut, OrderOut, ProductFrequencyOut, ProductOut, ReloadResponse

router = APIRouter(prefix="/api/customers", tags=["customers"])


# --------------------------- Customer Info ---------------------------


@router.get("/customer-name", response_model=List[str])
def get_customer_names(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return engine.get_all_customer_names()


@router.get("/customer-names", response_model=str)
def concatenate_customer_names(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return engine.concatenate_customer_names()


# --------------------------- Orders ---------------------------


@router.get("/{customer_id}/orders", response_model=List[OrderOut])
def get_orders_by_customer_id(
    customer_id: int,
    engine: CustomerQueryEngine = Depends(get_query_engine),
):
    return [OrderOut.from_domain(o) for o in engine.get_orders_for_customer(customer_id)]


@router.get("/latest-order-per-customer", response_model=Dict[str, Optional[OrderOut]])
def get_latest_order_per_customer(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return {
        name: OrderOut.from_domain(o) if o is not None else None
        for name, o in engine.get_latest_order_per_customer().items()
    }


# --------------------------- Spending ---------------------------


@router.get("/spending-per-customer", response_model=Dict[str, float])
def get_spending_per_customer(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return engine.fetch_spending_per_customer()


@router.get("/spent/greaterThan/{amount}", response_model=List[CustomerOut])
def get_customer_spending_greater_than(
    amount: float,
    engine: CustomerQueryEngine = Depends(get_query_engine),
):
    return [
        CustomerOut.from_domain(c)
        for c in engine.fetch_customers_spending_greater_than(amount)
    ]


@router.get("/big-spenders/{threshold}", response_model=List[CustomerOut])
def find_big_spenders(
    threshold: float,
    engine: CustomerQueryEngine = Depends(get_query_engine),
):
    return [CustomerOut.from_domain(c) for c in engine.find_big_spenders(threshold)]


# --------------------------- Product Info ---------------------------


@router.get("/{top}/expensive/products", response_model=List[ProductOut])
def get_top_expensive_products(
    top: int,
    engine: CustomerQueryEngine = Depends(get_query_engine),
):
    return [ProductOut.from_domain(p) for p in engine.get_top_expensive_products(top)]


@router.get("/top-products", response_model=List[ProductOut])
def get_top_products(
    top_n: int = Query(10, alias="topN"),
    engine: CustomerQueryEngine = Depends(get_query_engine),
):
    return [ProductOut.from_domain(p) for p in engine.get_top_expensive_products(top_n)]


@router.get("/most-expensive-product", response_model=Optional[ProductOut])
def most_expensive_product(engine: CustomerQueryEngine = Depends(get_query_engine)):
    p = engine.most_expensive_product()
    return ProductOut.from_domain(p) if p is not None else None


@router.get("/{top}/frequently-purchase-product", response_model=List[ProductFrequencyOut])
def get_top_frequently_purchased_products(
    top: int,
    engine: CustomerQueryEngine = Depends(get_query_engine),
):
    return [
        ProductFrequencyOut(name=name, count=count)
        for name, count in engine.fetch_frequently_purchased_products(top)
    ]


# --------------------------- Validation Checks ---------------------------


@router.get("/all-have-orders", response_model=bool)
def all_customers_have_orders(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return engine.all_customers_have_orders()


@router.get("/any-spent-over/{amount}", response_model=bool)
def any_customer_spent_over(
    amount: float,
    engine: CustomerQueryEngine = Depends(get_query_engine),
):
    return engine.any_customer_spent_over(amount)


@router.get("/no-empty-email", response_model=bool)
def no_customer_has_empty_email(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return engine.no_customer_has_empty_email()


# --------------------------- Revenue ---------------------------


@router.get("/total-revenue", response_model=float)
def total_revenue(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return engine.total_revenue()


@router.get("/total-revenue-sequential", response_model=float)
def total_revenue_sequential(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return engine.total_revenue_sequential()


@router.get("/total-revenue-parallel", response_model=float)
def total_revenue_parallel(engine: CustomerQueryEngine = Depends(get_query_engine)):
    return engine.total_revenue_parallel()


# --------------------------- Dataset ---------------------------


@router.post("/reload", response_model=ReloadResponse)
def reload_dataset(loader: DatasetLoader = Depends(get_loader)):
    snap = loader.reload()
    return ReloadResponse(version=snap.version, customers=len(snap.customers), source=snap.source)
