"""Request/response types and a service exercising every calling convention."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from postwire import Err, Ok, RequestContext, Result, ServiceError, endpoint

logger = logging.getLogger(__name__)


@dataclass
class Req:
    Name: str


@dataclass
class Resp:
    OK: bool


@dataclass
class Item:
    sku: str
    quantity: int = 1


@dataclass
class Order:
    order_id: str
    items: list[Item] = field(default_factory=list)
    note: Optional[str] = None


@dataclass
class Receipt:
    order_id: str = ""
    total_items: int = 0


class SubmitService:
    """Methods covering every supported calling convention."""

    def __init__(self) -> None:
        self.seen_bodies: list[bytes] = []
        self.pinged = 0

    def Submit(self, ctx: RequestContext, req: Req) -> tuple[Optional[Resp], Optional[ServiceError]]:
        return Resp(OK=req.Name == "x"), None

    def Fail(self, ctx: RequestContext, req: Req) -> tuple[Optional[Resp], Optional[ServiceError]]:
        return None, ServiceError(f"cannot submit {req.Name}", code="REJECTED")

    def Ping(self, ctx: RequestContext) -> Optional[ServiceError]:
        self.pinged += 1
        return None

    def Status(self, ctx: RequestContext) -> tuple[Resp, Optional[ServiceError]]:
        return Resp(OK=True), None

    async def Place(self, ctx: RequestContext, order: Order) -> Result[Receipt]:
        if not order.items:
            return Err(ServiceError("order has no items", code="EMPTY_ORDER"))
        body = await ctx.request.body()
        self.seen_bodies.append(body)
        return Ok(Receipt(order_id=order.order_id, total_items=sum(i.quantity for i in order.items)))

    def Fill(self, ctx: RequestContext, order: Order, out: Receipt) -> Optional[ServiceError]:
        out.order_id = order.order_id
        out.total_items = len(order.items)
        return None

    def Explode(self, ctx: RequestContext, req: Req) -> tuple[Resp, Optional[ServiceError]]:
        raise RuntimeError("boom")

    def Unencodable(self, ctx: RequestContext) -> tuple[object, Optional[ServiceError]]:
        return object(), None

    def Logged(self, ctx: RequestContext, req: Req) -> Optional[ServiceError]:
        logger.info("logged %s", req.Name)
        self.seen_bodies.append(ctx.body)
        return None

    def Both(self, ctx: RequestContext, req: Req) -> tuple[object, Optional[ServiceError]]:
        return object(), ServiceError("both returned", code="BOTH")


class Catalog:
    """Service whose endpoints are marked with @endpoint."""

    def endpoint_prefix(self) -> str:
        return "/catalog"

    @endpoint()
    def lookup(self, ctx: RequestContext, item: Item) -> tuple[Item, Optional[ServiceError]]:
        return item, None

    @endpoint()
    def reset(self, ctx: RequestContext) -> Optional[ServiceError]:
        return None


catalog = Catalog()
