import msgspec
from quart import Blueprint, Response, jsonify, request

from customer.customer_logic import CustomerLogic, CustomerRequest


def build_blueprint(logic: CustomerLogic) -> Blueprint:
    blueprint = Blueprint("customers", __name__)

    @blueprint.post('/api/v1/customers')
    async def create_customer():
        customer_request = msgspec.json.decode(await request.get_data(), type=CustomerRequest)
        customer_id = await logic.create_customer(customer_request)
        return jsonify({'customer_id': customer_id}), 201

    @blueprint.put('/api/v1/customers')
    async def update_customer():
        customer_request = msgspec.json.decode(await request.get_data(), type=CustomerRequest)
        await logic.update_customer(customer_request)
        return Response(status=202)

    @blueprint.get('/api/v1/customers')
    async def find_all():
        customers = await logic.find_all_customers()
        return jsonify(msgspec.to_builtins(customers))

    @blueprint.get('/api/v1/customers/exists/<customer_id>')
    async def exists_by_id(customer_id: str):
        return jsonify(await logic.exists_by_id(customer_id))

    @blueprint.get('/api/v1/customers/<customer_id>')
    async def find_by_id(customer_id: str):
        customer = await logic.find_by_id(customer_id)
        return jsonify(msgspec.to_builtins(customer))

    @blueprint.delete('/api/v1/customers/<customer_id>')
    async def delete_customer(customer_id: str):
        await logic.delete_customer(customer_id)
        return Response(status=202)

    return blueprint
