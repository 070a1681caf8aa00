import asyncio
import logging
import unittest
from decimal import Decimal
from unittest.mock import AsyncMock

from common.db.memory_store import MemoryStore
from common.errors import (
    CustomerNotFoundError,
    InsufficientStockError,
    InvalidRequestError,
    OrderNotFoundError,
    PaymentFailedError,
    RemoteServiceError,
)
from common.models import CustomerResponse, PaymentMethod, PurchaseRequest
from order.interfaces import InventoryReservation
from order.order_logic import OrderLogic, OrderRequest
from order.repository import OrderRepository
from product.product_logic import ProductLogic
from product.repository import Product, ProductRepository

CUSTOMER = CustomerResponse(id="c-1", firstname="Ada", lastname="Lovelace", email="ada@example.com")


class InProcessInventory(InventoryReservation):
    def __init__(self, logic: ProductLogic):
        self.logic = logic

    async def purchase_products(self, requests):
        return await self.logic.purchase_products(requests)

    async def release_products(self, requests):
        return await self.logic.release_products(requests)


class TestOrderLogic(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        logger = logging.getLogger("order-test")
        self.product_repository = ProductRepository(MemoryStore())
        self.inventory = InProcessInventory(ProductLogic(logger, self.product_repository))
        self.order_store = MemoryStore()
        self.repository = OrderRepository(self.order_store)
        self.customers = AsyncMock()
        self.customers.find_customer_by_id.return_value = CUSTOMER
        self.payments = AsyncMock()
        self.payments.request_order_payment.return_value = 99
        self.publisher = AsyncMock()
        self.logic = OrderLogic(
            logger, self.repository, self.customers, self.inventory, self.payments, self.publisher,
            publish_timeout=0.5,
        )
        self.keyboard = (await self.product_repository.save(
            Product(name="Keyboard", available_quantity=10, price=Decimal("49.90")))).id
        self.mouse = (await self.product_repository.save(
            Product(name="Mouse", available_quantity=3, price=Decimal("19.90")))).id

    def order_request(self, *products, reference="ref-1", amount="119.60"):
        return OrderRequest(
            customer_id=CUSTOMER.id,
            products=[PurchaseRequest(product_id=product_id, quantity=quantity) for product_id, quantity in products],
            amount=Decimal(amount),
            payment_method=PaymentMethod.VISA,
            reference=reference,
        )

    async def stock_of(self, product_id):
        return (await self.product_repository.find_by_id(product_id)).available_quantity

    async def test_unknown_customer_creates_nothing(self):
        self.customers.find_customer_by_id.return_value = None

        with self.assertRaises(CustomerNotFoundError):
            await self.logic.create_order(self.order_request((self.keyboard, 2)))

        self.assertEqual(await self.logic.find_all_orders(), [])
        self.assertEqual(self.order_store.data, {})
        self.assertEqual(await self.stock_of(self.keyboard), 10)
        self.payments.request_order_payment.assert_not_awaited()

    async def test_created_order_has_the_requested_lines(self):
        request = self.order_request((self.keyboard, 2), (self.mouse, 1), (self.keyboard, 1))

        order_id = await self.logic.create_order(request)
        order = await self.logic.find_by_id(order_id)

        self.assertEqual(order.reference, "ref-1")
        self.assertEqual(order.customer_id, CUSTOMER.id)
        self.assertEqual(order.total_amount, Decimal("119.60"))
        self.assertEqual(order.payment_method, PaymentMethod.VISA)
        self.assertEqual(
            sorted((line.product_id, line.quantity) for line in order.lines),
            sorted([(self.keyboard, 2), (self.mouse, 1), (self.keyboard, 1)]),
        )
        self.assertTrue(all(line.order_id == order_id for line in order.lines))
        self.assertEqual(await self.stock_of(self.keyboard), 7)
        self.assertEqual(await self.stock_of(self.mouse), 2)

    async def test_payment_request_refers_to_persisted_order(self):
        order_id = await self.logic.create_order(self.order_request((self.keyboard, 2)))

        payment_request = self.payments.request_order_payment.await_args.args[0]
        self.assertEqual(payment_request.order_id, order_id)
        self.assertEqual(payment_request.order_reference, "ref-1")
        self.assertEqual(payment_request.amount, Decimal("119.60"))
        self.assertEqual(payment_request.customer, CUSTOMER)

    async def test_confirmation_carries_purchase_results(self):
        await self.logic.create_order(self.order_request((self.keyboard, 2)))

        confirmation = self.publisher.send_order_confirmation.await_args.args[0]
        self.assertEqual(confirmation.order_reference, "ref-1")
        self.assertEqual(confirmation.customer, CUSTOMER)
        self.assertEqual([(p.product_id, p.name, p.quantity) for p in confirmation.products],
                         [(self.keyboard, "Keyboard", 2)])

    async def test_reference_is_generated_when_missing(self):
        order_id = await self.logic.create_order(self.order_request((self.keyboard, 1), reference=None))

        order = await self.logic.find_by_id(order_id)
        self.assertTrue(order.reference)

    async def test_non_positive_amount_is_rejected(self):
        with self.assertRaises(InvalidRequestError):
            await self.logic.create_order(self.order_request((self.keyboard, 1), amount="0"))

        self.customers.find_customer_by_id.assert_not_awaited()

    async def test_insufficient_stock_creates_nothing(self):
        with self.assertRaises(InsufficientStockError):
            await self.logic.create_order(self.order_request((self.keyboard, 2), (self.mouse, 5)))

        self.assertEqual(await self.logic.find_all_orders(), [])
        self.assertEqual(await self.stock_of(self.keyboard), 10)
        self.payments.request_order_payment.assert_not_awaited()
        self.publisher.send_order_confirmation.assert_not_awaited()

    async def test_payment_failure_rolls_back_order_and_releases_stock(self):
        self.payments.request_order_payment.side_effect = PaymentFailedError("rejected")

        with self.assertRaises(PaymentFailedError):
            await self.logic.create_order(self.order_request((self.keyboard, 2), (self.mouse, 1)))

        self.assertEqual(await self.logic.find_all_orders(), [])
        self.assertEqual(await self.order_store.keys("order-line:*"), [])
        self.assertEqual(await self.stock_of(self.keyboard), 10)
        self.assertEqual(await self.stock_of(self.mouse), 3)
        self.publisher.send_order_confirmation.assert_not_awaited()

    async def test_payment_failure_keeps_reservation_without_compensation(self):
        self.logic.compensate_reservation = False
        self.payments.request_order_payment.side_effect = PaymentFailedError("rejected")

        with self.assertRaises(PaymentFailedError):
            await self.logic.create_order(self.order_request((self.keyboard, 2)))

        self.assertEqual(await self.logic.find_all_orders(), [])
        self.assertEqual(await self.stock_of(self.keyboard), 8)

    async def test_cancelled_order_releases_stock(self):
        payment_started = asyncio.Event()

        async def slow_payment(payment_request):
            payment_started.set()
            await asyncio.sleep(10)
        self.payments.request_order_payment.side_effect = slow_payment

        task = asyncio.create_task(self.logic.create_order(self.order_request((self.keyboard, 4))))
        await payment_started.wait()
        self.assertEqual(await self.stock_of(self.keyboard), 6)
        task.cancel()

        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertEqual(await self.logic.find_all_orders(), [])
        self.assertEqual(await self.stock_of(self.keyboard), 10)
        self.publisher.send_order_confirmation.assert_not_awaited()

    async def test_failed_release_does_not_hide_payment_error(self):
        self.payments.request_order_payment.side_effect = PaymentFailedError("rejected")
        self.inventory.release_products = AsyncMock(side_effect=RemoteServiceError("product service down"))

        with self.assertRaises(PaymentFailedError):
            await self.logic.create_order(self.order_request((self.keyboard, 2)))

        self.inventory.release_products.assert_awaited_once()

    async def test_publish_failure_does_not_fail_the_order(self):
        self.publisher.send_order_confirmation.side_effect = ConnectionError("kafka down")

        order_id = await self.logic.create_order(self.order_request((self.keyboard, 2)))

        self.assertEqual((await self.logic.find_by_id(order_id)).id, order_id)
        self.assertEqual(await self.stock_of(self.keyboard), 8)

    async def test_slow_publish_is_abandoned_after_timeout(self):
        self.logic.publish_timeout = 0.01

        async def never_acknowledged(confirmation):
            await asyncio.sleep(10)
        self.publisher.send_order_confirmation.side_effect = never_acknowledged

        order_id = await self.logic.create_order(self.order_request((self.keyboard, 2)))

        self.assertIsNotNone(await self.logic.find_by_id(order_id))

    async def test_find_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            await self.logic.find_by_id(1)

    async def test_list_orders_on_empty_store(self):
        self.assertEqual(await self.logic.find_all_orders(), [])

    async def test_list_orders(self):
        first = await self.logic.create_order(self.order_request((self.keyboard, 1), reference="ref-1"))
        second = await self.logic.create_order(self.order_request((self.mouse, 1), reference="ref-2"))

        orders = await self.logic.find_all_orders()

        self.assertEqual([(o.id, o.reference) for o in orders], [(first, "ref-1"), (second, "ref-2")])
        self.assertFalse(any(hasattr(order, "lines") for order in orders))

    async def test_find_order_lines(self):
        order_id = await self.logic.create_order(self.order_request((self.keyboard, 1), (self.mouse, 2)))

        lines = await self.logic.find_order_lines(order_id)

        self.assertEqual([(line.product_id, line.quantity) for line in lines], [(self.keyboard, 1), (self.mouse, 2)])

    async def test_order_lines_of_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            await self.logic.find_order_lines(42)


if __name__ == '__main__':
    unittest.main()
