from msgspec import msgpack, Struct

from common.db.store import KeyValueStore
from common.models import Address


class Customer(Struct, kw_only=True):
    id: str
    firstname: str
    lastname: str
    email: str
    address: Address | None = None


def customer_key(customer_id: str) -> str:
    return f"customer:{customer_id}"


class CustomerRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def save(self, customer: Customer) -> Customer:
        await self.store.set(customer_key(customer.id), msgpack.encode(customer))
        return customer

    async def find_by_id(self, customer_id: str) -> Customer | None:
        entry = await self.store.get(customer_key(customer_id))
        return msgpack.decode(entry, type=Customer) if entry else None

    async def find_all(self) -> list[Customer]:
        keys = await self.store.keys(customer_key("*"))
        entries = await self.store.get_many(keys)
        return [msgpack.decode(entry, type=Customer) for entry in entries if entry]

    async def delete(self, customer_id: str):
        await self.store.delete(customer_key(customer_id))
