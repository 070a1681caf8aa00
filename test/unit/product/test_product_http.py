import unittest
from decimal import Decimal
from unittest.mock import AsyncMock

from common.config import Settings
from common.errors import DBError, InsufficientStockError, ProductNotFoundError, ProductsNotFoundError
from common.models import PurchaseRequest, PurchaseResult
from product.app import create_app
from product.repository import Product


class TestProductHttp(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.logic = AsyncMock()
        app = create_app(Settings(service_name="product-service"), logic=self.logic)
        self.test_client = app.test_client()

    async def test_create_product(self):
        self.logic.create_product.return_value = 7

        response = await self.test_client.post("/api/v1/products", json={
            "name": "Keyboard", "available_quantity": 10, "price": "49.90"
        })

        self.assertEqual(response.status_code, 201)
        self.assertEqual(await response.get_json(), {"product_id": 7})
        product_request = self.logic.create_product.await_args.args[0]
        self.assertEqual(product_request.price, Decimal("49.90"))

    async def test_create_product_with_missing_field(self):
        response = await self.test_client.post("/api/v1/products", json={"name": "Keyboard"})

        self.assertEqual(response.status_code, 400)
        self.logic.create_product.assert_not_awaited()

    async def test_find_product(self):
        self.logic.find_by_id.return_value = Product(
            id=3, name="Mouse", available_quantity=4, price=Decimal("19.90")
        )

        response = await self.test_client.get("/api/v1/products/3")
        data = await response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["name"], "Mouse")
        self.assertEqual(data["price"], "19.90")
        self.logic.find_by_id.assert_awaited_once_with(3)

    async def test_find_unknown_product(self):
        self.logic.find_by_id.side_effect = ProductNotFoundError(3)

        response = await self.test_client.get("/api/v1/products/3")
        data = await response.get_json()

        self.assertEqual(response.status_code, 404)
        self.assertEqual(data["error"], "ProductNotFoundError")

    async def test_find_all_products(self):
        self.logic.find_all.return_value = []

        response = await self.test_client.get("/api/v1/products")

        self.assertEqual(await response.get_json(), [])

    async def test_purchase_products(self):
        self.logic.purchase_products.return_value = [
            PurchaseResult(product_id=1, name="Keyboard", price=Decimal("49.90"), quantity=2)
        ]

        response = await self.test_client.post("/api/v1/products/purchase", json=[
            {"product_id": 1, "quantity": 2}
        ])
        data = await response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data[0]["product_id"], 1)
        self.assertEqual(data[0]["quantity"], 2)
        self.logic.purchase_products.assert_awaited_once_with([PurchaseRequest(product_id=1, quantity=2)])

    async def test_purchase_rejects_non_positive_quantity(self):
        response = await self.test_client.post("/api/v1/products/purchase", json=[
            {"product_id": 1, "quantity": 0}
        ])

        self.assertEqual(response.status_code, 400)
        self.logic.purchase_products.assert_not_awaited()

    async def test_purchase_unknown_products(self):
        self.logic.purchase_products.side_effect = ProductsNotFoundError()

        response = await self.test_client.post("/api/v1/products/purchase", json=[
            {"product_id": 1, "quantity": 2}
        ])

        self.assertEqual(response.status_code, 404)
        self.assertEqual((await response.get_json())["error"], "ProductsNotFoundError")

    async def test_purchase_insufficient_stock(self):
        self.logic.purchase_products.side_effect = InsufficientStockError(1)

        response = await self.test_client.post("/api/v1/products/purchase", json=[
            {"product_id": 1, "quantity": 20}
        ])
        data = await response.get_json()

        self.assertEqual(response.status_code, 400)
        self.assertEqual(data["error"], "InsufficientStockError")
        self.assertEqual(data["product_id"], 1)

    async def test_purchase_db_error(self):
        self.logic.purchase_products.side_effect = DBError()

        response = await self.test_client.post("/api/v1/products/purchase", json=[
            {"product_id": 1, "quantity": 2}
        ])

        self.assertEqual(response.status_code, 400)
        self.assertEqual((await response.get_json())["message"], "DB error")

    async def test_release_products(self):
        self.logic.release_products.return_value = []

        response = await self.test_client.post("/api/v1/products/release", json=[
            {"product_id": 1, "quantity": 2}
        ])

        self.assertEqual(response.status_code, 200)
        self.logic.release_products.assert_awaited_once_with([PurchaseRequest(product_id=1, quantity=2)])


if __name__ == '__main__':
    unittest.main()
