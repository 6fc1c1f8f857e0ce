# customer_insights/api/schemas.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from customer_insights.domain.models import Customer, Order, Product


class ProductOut(BaseModel):
    id: int
    name: str
    price: float
    quantity: int

    @classmethod
    def from_domain(cls, p: Product) -> "ProductOut":
        return cls(id=p.id, name=p.name, price=p.price, quantity=p.quantity)


class OrderOut(BaseModel):
    order_id: int = Field(..., serialization_alias="orderId")
    date: str
    products: List[ProductOut]

    @classmethod
    def from_domain(cls, o: Order) -> "OrderOut":
        return cls(
            order_id=o.order_id,
            date=o.date,
            products=[ProductOut.from_domain(p) for p in o.products],
        )


class CustomerOut(BaseModel):
    id: int
    name: str
    email: str
    orders: List[OrderOut]

    @classmethod
    def from_domain(cls, c: Customer) -> "CustomerOut":
        return cls(
            id=c.id,
            name=c.name,
            email=c.email,
            orders=[OrderOut.from_domain(o) for o in c.orders],
        )


class ProductFrequencyOut(BaseModel):
    name: str = Field(..., description="Product name")
    count: int = Field(..., description="Number of order lines with this product")


class ReloadResponse(BaseModel):
    ok: bool = True
    version: int
    customers: int
    source: Optional[str] = None
