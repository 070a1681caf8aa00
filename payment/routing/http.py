import msgspec
from quart import Blueprint, jsonify, request

from common.models import PaymentRequest
from payment.payment_logic import PaymentLogic


def build_blueprint(logic: PaymentLogic) -> Blueprint:
    blueprint = Blueprint("payments", __name__)

    @blueprint.post('/api/v1/payments')
    async def create_payment():
        payment_request = msgspec.json.decode(await request.get_data(), type=PaymentRequest)
        payment_id = await logic.create_payment(payment_request)
        return jsonify({'payment_id': payment_id}), 201

    @blueprint.get('/api/v1/payments/<int:payment_id>')
    async def find_payment(payment_id: int):
        payment = await logic.find_by_id(payment_id)
        return jsonify(msgspec.to_builtins(payment))

    return blueprint
