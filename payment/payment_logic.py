import asyncio
from datetime import datetime, timezone

from common.errors import InvalidRequestError, PaymentNotFoundError
from common.models import PaymentConfirmation, PaymentRequest
from payment.repository import Payment, PaymentRepository


class PaymentLogic:
    def __init__(self, logger, repository: PaymentRepository, producer, publish_timeout: float = 5.0):
        self.logger = logger
        self.repository = repository
        self.producer = producer
        self.publish_timeout = publish_timeout

    async def create_payment(self, request: PaymentRequest) -> int:
        if request.amount <= 0:
            raise InvalidRequestError(f"Payment amount should be positive, got {request.amount}")
        payment = await self.repository.save(Payment(
            amount=request.amount,
            payment_method=request.payment_method,
            order_id=request.order_id,
            order_reference=request.order_reference,
            customer_id=request.customer.id,
            created_at=datetime.now(timezone.utc),
        ))
        self.logger.info(f"Payment: {payment.id} created for order {request.order_reference}")

        confirmation = PaymentConfirmation(
            order_reference=request.order_reference,
            amount=request.amount,
            payment_method=request.payment_method,
            customer_firstname=request.customer.firstname,
            customer_lastname=request.customer.lastname,
            customer_email=request.customer.email,
            created_at=payment.created_at,
        )
        try:
            await asyncio.wait_for(self.producer.send_payment_confirmation(confirmation), self.publish_timeout)
        except Exception:
            self.logger.exception(f"Could not send payment confirmation for order {request.order_reference}")
        return payment.id

    async def find_by_id(self, payment_id: int) -> Payment:
        payment = await self.repository.find_by_id(payment_id)
        if payment is None:
            raise PaymentNotFoundError(f"No payment found with the provided ID: {payment_id}")
        return payment
