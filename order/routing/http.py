import msgspec
from quart import Blueprint, jsonify, request

from order.order_logic import OrderLogic, OrderRequest


def build_blueprint(logic: OrderLogic) -> Blueprint:
    blueprint = Blueprint("orders", __name__)

    @blueprint.post('/api/v1/orders')
    async def create_order():
        order_request = msgspec.json.decode(await request.get_data(), type=OrderRequest)
        order_id = await logic.create_order(order_request)
        return jsonify({'order_id': order_id}), 201

    @blueprint.get('/api/v1/orders')
    async def find_all():
        orders = await logic.find_all_orders()
        return jsonify(msgspec.to_builtins(orders))

    @blueprint.get('/api/v1/orders/<int:order_id>')
    async def find_by_id(order_id: int):
        order = await logic.find_by_id(order_id)
        return jsonify(msgspec.to_builtins(order))

    @blueprint.get('/api/v1/order-lines/order/<int:order_id>')
    async def find_order_lines(order_id: int):
        lines = await logic.find_order_lines(order_id)
        return jsonify(msgspec.to_builtins(lines))

    return blueprint
