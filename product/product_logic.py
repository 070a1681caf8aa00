from decimal import Decimal

from msgspec import Struct

from common.errors import (
    ConcurrentUpdateError,
    InsufficientStockError,
    InvalidRequestError,
    ProductNotFoundError,
    ProductsNotFoundError,
)
from common.models import PurchaseRequest, PurchaseResult
from product.repository import Product, ProductRepository

# quantities are floats, sums are rounded to this many decimals before any comparison
QUANTITY_DECIMALS = 6


class ProductRequest(Struct, kw_only=True):
    name: str
    description: str | None = None
    available_quantity: float
    price: Decimal
    category_id: int | None = None


def aggregate_quantities(requests: list[PurchaseRequest]) -> dict[int, float]:
    """Sum requested quantities per product id, ordered by product id.

    A product listed twice in one batch is reserved once, for the total.
    """
    quantities: dict[int, float] = {}
    for purchase in requests:
        quantities[purchase.product_id] = quantities.get(purchase.product_id, 0) + purchase.quantity
    return {product_id: round(quantity, QUANTITY_DECIMALS) for product_id, quantity in sorted(quantities.items())}


class ProductLogic:
    def __init__(self, logger, repository: ProductRepository, max_retries: int = 5):
        self.logger = logger
        self.repository = repository
        self.max_retries = max_retries

    async def create_product(self, request: ProductRequest) -> int:
        if request.available_quantity < 0:
            raise InvalidRequestError("Available quantity cannot be negative")
        product = await self.repository.save(Product(
            name=request.name,
            description=request.description,
            available_quantity=request.available_quantity,
            price=request.price,
            category_id=request.category_id,
        ))
        self.logger.info(f"Product: {product.id} created")
        return product.id

    async def find_by_id(self, product_id: int) -> Product:
        product = await self.repository.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def find_all(self) -> list[Product]:
        return await self.repository.find_all()

    async def purchase_products(self, requests: list[PurchaseRequest]) -> list[PurchaseResult]:
        """Reserve stock for the whole batch or for nothing at all."""
        if not requests:
            raise InvalidRequestError("No products requested")
        quantities = aggregate_quantities(requests)
        return await self._retry_on_conflict(self._purchase, quantities)

    async def release_products(self, requests: list[PurchaseRequest]) -> list[PurchaseResult]:
        """Give back stock taken by an earlier purchase of the same batch."""
        if not requests:
            raise InvalidRequestError("No products requested")
        quantities = aggregate_quantities(requests)
        return await self._retry_on_conflict(self._release, quantities)

    async def _retry_on_conflict(self, operation, quantities: dict[int, float]):
        for attempt in range(self.max_retries):
            try:
                return await operation(quantities)
            except ConcurrentUpdateError:
                self.logger.warning(
                    f"Concurrency conflict on products {list(quantities)}, "
                    f"attempt {attempt + 1}/{self.max_retries}"
                )
        raise ConcurrentUpdateError(
            f"Could not update products {list(quantities)} after {self.max_retries} attempts"
        )

    async def _purchase(self, quantities: dict[int, float]) -> list[PurchaseResult]:
        async with self.repository.transaction(quantities) as tx:
            stored_products = await tx.find_all_by_ids_ordered(quantities)
            if len(stored_products) != len(quantities):
                raise ProductsNotFoundError()

            purchased_products = []
            for product in stored_products:
                quantity = quantities[product.id]
                if round(product.available_quantity, QUANTITY_DECIMALS) < quantity:
                    raise InsufficientStockError(product.id)
                product.available_quantity = round(product.available_quantity - quantity, QUANTITY_DECIMALS)
                tx.save(product)
                purchased_products.append(to_purchase_result(product, quantity))

        self.logger.info(f"Purchased products {list(quantities)}")
        return purchased_products

    async def _release(self, quantities: dict[int, float]) -> list[PurchaseResult]:
        async with self.repository.transaction(quantities) as tx:
            stored_products = await tx.find_all_by_ids_ordered(quantities)
            if len(stored_products) != len(quantities):
                raise ProductsNotFoundError()

            released_products = []
            for product in stored_products:
                quantity = quantities[product.id]
                product.available_quantity = round(product.available_quantity + quantity, QUANTITY_DECIMALS)
                tx.save(product)
                released_products.append(to_purchase_result(product, quantity))

        self.logger.info(f"Released products {list(quantities)}")
        return released_products


def to_purchase_result(product: Product, quantity: float) -> PurchaseResult:
    return PurchaseResult(
        product_id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        quantity=quantity,
    )
