from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal

from msgspec import msgpack, Struct

from common.db.store import KeyValueStore, StoreTransaction
from common.models import PaymentMethod

ORDER_SEQUENCE = "seq:order"
ORDER_LINE_SEQUENCE = "seq:order-line"


class OrderLine(Struct, kw_only=True):
    id: int | None = None
    order_id: int
    product_id: int
    quantity: float


class Order(Struct, kw_only=True):
    id: int | None = None
    reference: str
    created_at: datetime
    customer_id: str
    total_amount: Decimal
    payment_method: PaymentMethod
    lines: list[OrderLine] = []


def order_key(order_id) -> str:
    return f"order:{order_id}"


def order_line_key(order_id, line_id) -> str:
    return f"order-line:{order_id}:{line_id}"


class OrderTransaction:
    """Order and line writes that land together on commit or not at all.

    Identifiers are drawn from the sequences straight away, so a rolled back
    transaction leaves a gap in the numbering.
    """

    def __init__(self, store: KeyValueStore, tx: StoreTransaction):
        self.store = store
        self.tx = tx

    async def save_order(self, order: Order) -> Order:
        order.id = await self.store.incr(ORDER_SEQUENCE)
        stored = Order(
            id=order.id,
            reference=order.reference,
            created_at=order.created_at,
            customer_id=order.customer_id,
            total_amount=order.total_amount,
            payment_method=order.payment_method,
        )
        self.tx.set(order_key(order.id), msgpack.encode(stored))
        return order

    async def save_order_line(self, line: OrderLine) -> OrderLine:
        line.id = await self.store.incr(ORDER_LINE_SEQUENCE)
        self.tx.set(order_line_key(line.order_id, line.id), msgpack.encode(line))
        return line


class OrderRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    @asynccontextmanager
    async def transaction(self):
        async with self.store.transaction() as tx:
            yield OrderTransaction(self.store, tx)

    async def find_by_id(self, order_id: int) -> Order | None:
        entry = await self.store.get(order_key(order_id))
        if not entry:
            return None
        order = msgpack.decode(entry, type=Order)
        order.lines = await self.find_lines_by_order_id(order_id)
        return order

    async def find_all(self) -> list[Order]:
        keys = await self.store.keys(order_key("*"))
        entries = await self.store.get_many(keys)
        orders = [msgpack.decode(entry, type=Order) for entry in entries if entry]
        return sorted(orders, key=lambda order: order.id)

    async def find_lines_by_order_id(self, order_id: int) -> list[OrderLine]:
        keys = await self.store.keys(order_line_key(order_id, "*"))
        entries = await self.store.get_many(keys)
        lines = [msgpack.decode(entry, type=OrderLine) for entry in entries if entry]
        return sorted(lines, key=lambda line: line.id)
