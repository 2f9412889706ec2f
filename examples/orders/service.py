"""Orders service: plain methods taking (ctx[, request]) and returning (response, error)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from postwire import Err, Ok, RequestContext, Result, ServiceError, endpoint


@dataclass
class CreateOrder:
    order_id: str
    customer_id: str
    total_cents: int


@dataclass
class GetOrder:
    order_id: str


@dataclass
class Order:
    id: str
    customer_id: str
    total_cents: int


@dataclass
class OrderList:
    orders: list[Order] = field(default_factory=list)


class OrdersService:
    """In-memory orders. Every public @endpoint method is exposed under /api/orders/."""

    def __init__(self) -> None:
        self._store: dict[str, Order] = {}

    def endpoint_prefix(self) -> str:
        return "/api/orders"

    @endpoint()
    def create(self, ctx: RequestContext, cmd: CreateOrder) -> Result[Order]:
        if cmd.order_id in self._store:
            return Err(ServiceError(f"order {cmd.order_id} exists", code="CONFLICT"))
        order = Order(id=cmd.order_id, customer_id=cmd.customer_id, total_cents=cmd.total_cents)
        self._store[order.id] = order
        return Ok(order)

    @endpoint()
    async def get(self, ctx: RequestContext, query: GetOrder) -> tuple[Optional[Order], Optional[ServiceError]]:
        order = self._store.get(query.order_id)
        if order is None:
            return None, ServiceError(f"order {query.order_id} not found", code="NOT_FOUND")
        return order, None

    @endpoint()
    def list_orders(self, ctx: RequestContext) -> tuple[OrderList, None]:
        return OrderList(orders=list(self._store.values())), None

    @endpoint()
    def clear(self, ctx: RequestContext) -> Optional[ServiceError]:
        self._store.clear()
        return None
