from contextlib import asynccontextmanager
from decimal import Decimal

from msgspec import msgpack, Struct

from common.db.store import KeyValueStore, StoreTransaction

PRODUCT_SEQUENCE = "seq:product"


class Product(Struct, kw_only=True):
    id: int | None = None
    name: str
    description: str | None = None
    available_quantity: float
    price: Decimal
    category_id: int | None = None


def product_key(product_id: int) -> str:
    return f"product:{product_id}"


class ProductTransaction:
    def __init__(self, tx: StoreTransaction):
        self.tx = tx

    async def find_all_by_ids_ordered(self, product_ids) -> list[Product]:
        """Products matching ``product_ids`` in id order; unknown ids are skipped."""
        products = []
        for product_id in sorted(set(product_ids)):
            entry = await self.tx.get(product_key(product_id))
            if entry:
                products.append(msgpack.decode(entry, type=Product))
        return products

    def save(self, product: Product):
        self.tx.set(product_key(product.id), msgpack.encode(product))


class ProductRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def save(self, product: Product) -> Product:
        if product.id is None:
            product.id = await self.store.incr(PRODUCT_SEQUENCE)
        await self.store.set(product_key(product.id), msgpack.encode(product))
        return product

    async def find_by_id(self, product_id: int) -> Product | None:
        entry = await self.store.get(product_key(product_id))
        return msgpack.decode(entry, type=Product) if entry else None

    async def find_all(self) -> list[Product]:
        keys = await self.store.keys(product_key("*"))
        entries = await self.store.get_many(keys)
        products = [msgpack.decode(entry, type=Product) for entry in entries if entry]
        return sorted(products, key=lambda product: product.id)

    @asynccontextmanager
    async def transaction(self, product_ids):
        keys = [product_key(product_id) for product_id in sorted(set(product_ids))]
        async with self.store.transaction(*keys) as tx:
            yield ProductTransaction(tx)
