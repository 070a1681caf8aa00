import asyncio
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated

from msgspec import Meta, Struct
from opentelemetry import metrics, trace

from common.errors import CustomerNotFoundError, InvalidRequestError, OrderNotFoundError
from common.models import OrderConfirmation, PaymentMethod, PaymentRequest, PurchaseRequest
from order.interfaces import ConfirmationPublisher, CustomerLookup, InventoryReservation, PaymentInitiator
from order.repository import Order, OrderLine, OrderRepository

tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)
orders_created = meter.create_counter("orders.created", description="Orders persisted")


class OrderRequest(Struct, kw_only=True):
    customer_id: str
    products: Annotated[list[PurchaseRequest], Meta(min_length=1)]
    amount: Decimal
    payment_method: PaymentMethod
    reference: str | None = None


class OrderResponse(Struct, kw_only=True):
    """Listing form of an order, lines are fetched per order."""
    id: int
    reference: str
    created_at: datetime
    customer_id: str
    total_amount: Decimal
    payment_method: PaymentMethod


def to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        reference=order.reference,
        created_at=order.created_at,
        customer_id=order.customer_id,
        total_amount=order.total_amount,
        payment_method=order.payment_method,
    )


class OrderLogic:
    """Creates orders across the customer, product and payment services.

    The order and its lines are written in one local transaction that also
    spans the payment call, so a rejected payment leaves no order behind.
    Stock is reserved by the product service in its own transaction before
    that; when a later step fails the reservation is released again, unless
    ``compensate_reservation`` is off.
    """

    def __init__(self,
                 logger,
                 repository: OrderRepository,
                 customers: CustomerLookup,
                 inventory: InventoryReservation,
                 payments: PaymentInitiator,
                 publisher: ConfirmationPublisher,
                 compensate_reservation: bool = True,
                 publish_timeout: float = 5.0):
        self.logger = logger
        self.repository = repository
        self.customers = customers
        self.inventory = inventory
        self.payments = payments
        self.publisher = publisher
        self.compensate_reservation = compensate_reservation
        self.publish_timeout = publish_timeout

    async def create_order(self, request: OrderRequest) -> int:
        if request.amount <= 0:
            raise InvalidRequestError("Order amount should be positive")
        reference = request.reference or str(uuid.uuid4())

        with tracer.start_as_current_span("create_order") as span:
            span.set_attribute("order.reference", reference)

            customer = await self.customers.find_customer_by_id(request.customer_id)
            if customer is None:
                raise CustomerNotFoundError(
                    "Cannot create order:: No customer exists with the provided ID",
                    customer_id=request.customer_id,
                )

            purchased_products = await self.inventory.purchase_products(request.products)

            try:
                async with self.repository.transaction() as tx:
                    order = await tx.save_order(Order(
                        reference=reference,
                        created_at=datetime.now(timezone.utc),
                        customer_id=request.customer_id,
                        total_amount=request.amount,
                        payment_method=request.payment_method,
                    ))
                    for purchase in request.products:
                        await tx.save_order_line(OrderLine(
                            order_id=order.id,
                            product_id=purchase.product_id,
                            quantity=purchase.quantity,
                        ))

                    payment_id = await self.payments.request_order_payment(PaymentRequest(
                        amount=request.amount,
                        payment_method=request.payment_method,
                        order_id=order.id,
                        order_reference=order.reference,
                        customer=customer,
                    ))
            except BaseException:
                # CancelledError included
                self.logger.warning(f"Order {reference} aborted after products were reserved")
                await asyncio.shield(self._release_reservation(reference, request.products))
                raise

            span.set_attribute("order.id", order.id)
            orders_created.add(1)
            self.logger.info(f"Order: {order.id} created, payment: {payment_id}")

            await self._send_confirmation(OrderConfirmation(
                order_reference=reference,
                total_amount=request.amount,
                payment_method=request.payment_method,
                customer=customer,
                products=purchased_products,
            ))
            return order.id

    async def _release_reservation(self, reference: str, products: list[PurchaseRequest]):
        if not self.compensate_reservation:
            self.logger.warning(f"Products reserved for order {reference} are not released")
            return
        try:
            await self.inventory.release_products(products)
            self.logger.info(f"Products reserved for order {reference} released")
        except Exception:
            self.logger.exception(f"Could not release products reserved for order {reference}")

    async def _send_confirmation(self, confirmation: OrderConfirmation):
        # the order is committed at this point, delivery problems are only logged
        try:
            await asyncio.wait_for(
                self.publisher.send_order_confirmation(confirmation), self.publish_timeout
            )
        except Exception:
            self.logger.exception(f"Could not send confirmation for order {confirmation.order_reference}")

    async def find_all_orders(self) -> list[OrderResponse]:
        return [to_response(order) for order in await self.repository.find_all()]

    async def find_by_id(self, order_id: int) -> Order:
        order = await self.repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"No order found with the provided ID: {order_id}", order_id=order_id)
        return order

    async def find_order_lines(self, order_id: int) -> list[OrderLine]:
        await self.find_by_id(order_id)
        return await self.repository.find_lines_by_order_id(order_id)
