from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _req(d: Dict[str, Any], key: str, kind: type, *, where: str) -> Any:
    if key not in d or d[key] is None:
        raise ValueError(f"{where}: missing required field '{key}'")
    v = d[key]
    # bool is an int subclass; a JSON true is never a valid id/quantity
    if isinstance(v, bool) or not isinstance(v, kind):
        raise ValueError(f"{where}: field '{key}' must be {kind.__name__}, got {type(v).__name__}")
    return v


def _req_number(d: Dict[str, Any], key: str, *, where: str) -> float:
    v = d.get(key)
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"{where}: field '{key}' must be a number, got {v!r}")
    try:
        return float(v)
    except OverflowError as e:
        raise ValueError(f"{where}: field '{key}' is out of float range") from e


def _list_of_dicts(d: Dict[str, Any], key: str, *, where: str) -> list:
    raw = d.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"{where}: field '{key}' must be a list")
    for item in raw:
        if not isinstance(item, dict):
            raise ValueError(f"{where}: every entry of '{key}' must be an object")
    return raw


@dataclass(frozen=True)
class Product:
    """One line item of an order (not a catalog entry)."""

    id: int
    name: str
    price: float
    quantity: int

    @property
    def revenue(self) -> float:
        return self.price * self.quantity

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Product":
        where = f"product {d.get('id')!r}"
        return Product(
            id=_req(d, "id", int, where=where),
            name=_req(d, "name", str, where=where),
            price=_req_number(d, "price", where=where),
            quantity=_req(d, "quantity", int, where=where),
        )


@dataclass(frozen=True)
class Order:
    order_id: int
    date: str  # YYYY-MM-DD, compared lexically
    products: tuple[Product, ...] = ()

    @property
    def revenue(self) -> float:
        return sum(p.revenue for p in self.products)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Order":
        key = "orderId" if "orderId" in d else "id"
        where = f"order {d.get(key)!r}"
        return Order(
            order_id=_req(d, key, int, where=where),
            date=_req(d, "date", str, where=where),
            products=tuple(
                Product.from_dict(p) for p in _list_of_dicts(d, "products", where=where)
            ),
        )


@dataclass(frozen=True)
class Customer:
    id: int
    name: str
    email: str = ""
    orders: tuple[Order, ...] = ()

    @property
    def total_spending(self) -> float:
        return sum(o.revenue for o in self.orders)

    def latest_order(self) -> Optional[Order]:
        if not self.orders:
            return None
        return max(self.orders, key=lambda o: o.date)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Customer":
        where = f"customer {d.get('id')!r}"
        email = d.get("email")
        if email is not None and not isinstance(email, str):
            raise ValueError(f"{where}: field 'email' must be str")
        return Customer(
            id=_req(d, "id", int, where=where),
            name=_req(d, "name", str, where=where),
            email=email or "",
            orders=tuple(
                Order.from_dict(o) for o in _list_of_dicts(d, "orders", where=where)
            ),
        )
