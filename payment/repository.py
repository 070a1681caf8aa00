from datetime import datetime
from decimal import Decimal

from msgspec import msgpack, Struct

from common.db.store import KeyValueStore
from common.models import PaymentMethod

PAYMENT_SEQUENCE = "seq:payment"


class Payment(Struct, kw_only=True):
    id: int | None = None
    amount: Decimal
    payment_method: PaymentMethod
    order_id: int
    order_reference: str
    customer_id: str
    created_at: datetime


def payment_key(payment_id) -> str:
    return f"payment:{payment_id}"


class PaymentRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def save(self, payment: Payment) -> Payment:
        if payment.id is None:
            payment.id = await self.store.incr(PAYMENT_SEQUENCE)
        await self.store.set(payment_key(payment.id), msgpack.encode(payment))
        return payment

    async def find_by_id(self, payment_id: int) -> Payment | None:
        entry = await self.store.get(payment_key(payment_id))
        return msgpack.decode(entry, type=Payment) if entry else None
