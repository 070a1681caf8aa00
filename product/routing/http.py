import msgspec
from quart import Blueprint, jsonify, request

from common.models import PurchaseRequest
from product.product_logic import ProductLogic, ProductRequest


def build_blueprint(logic: ProductLogic) -> Blueprint:
    blueprint = Blueprint("products", __name__)

    @blueprint.post('/api/v1/products')
    async def create_product():
        product_request = msgspec.json.decode(await request.get_data(), type=ProductRequest)
        product_id = await logic.create_product(product_request)
        return jsonify({'product_id': product_id}), 201

    @blueprint.get('/api/v1/products')
    async def find_all():
        products = await logic.find_all()
        return jsonify(msgspec.to_builtins(products))

    @blueprint.get('/api/v1/products/<int:product_id>')
    async def find_by_id(product_id: int):
        product = await logic.find_by_id(product_id)
        return jsonify(msgspec.to_builtins(product))

    @blueprint.post('/api/v1/products/purchase')
    async def purchase_products():
        purchases = msgspec.json.decode(await request.get_data(), type=list[PurchaseRequest])
        purchased_products = await logic.purchase_products(purchases)
        return jsonify(msgspec.to_builtins(purchased_products))

    @blueprint.post('/api/v1/products/release')
    async def release_products():
        releases = msgspec.json.decode(await request.get_data(), type=list[PurchaseRequest])
        released_products = await logic.release_products(releases)
        return jsonify(msgspec.to_builtins(released_products))

    return blueprint
