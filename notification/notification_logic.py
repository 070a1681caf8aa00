import uuid
from datetime import datetime, timezone

import msgspec

from common.kafka.events_config import EVENT_ORDER_CONFIRMATION, EVENT_PAYMENT_CONFIRMATION
from common.models import OrderConfirmation, PaymentConfirmation
from notification.repository import Notification, NotificationRepository, NotificationType


class NotificationLogic:
    def __init__(self, logger, repository: NotificationRepository):
        self.logger = logger
        self.repository = repository

    async def handle_event(self, event: dict):
        event_type = event.get("type")
        if event_type == EVENT_ORDER_CONFIRMATION:
            await self.handle_order_confirmation(event)
        elif event_type == EVENT_PAYMENT_CONFIRMATION:
            await self.handle_payment_confirmation(event)
        else:
            self.logger.info(f"Event type not implemented: {event_type}")

    async def handle_order_confirmation(self, event: dict) -> Notification:
        confirmation = msgspec.convert(event, type=OrderConfirmation, strict=False)
        notification = await self.repository.save(Notification(
            id=str(uuid.uuid4()),
            type=NotificationType.ORDER_CONFIRMATION,
            sent_at=datetime.now(timezone.utc),
            order_reference=confirmation.order_reference,
            recipient=confirmation.customer.email,
            payload=event,
        ))
        self.logger.info(
            f"Order confirmation for {confirmation.order_reference} "
            f"({len(confirmation.products)} products, {confirmation.total_amount}) "
            f"sent to {confirmation.customer.email}"
        )
        return notification

    async def handle_payment_confirmation(self, event: dict) -> Notification:
        confirmation = msgspec.convert(event, type=PaymentConfirmation, strict=False)
        notification = await self.repository.save(Notification(
            id=str(uuid.uuid4()),
            type=NotificationType.PAYMENT_CONFIRMATION,
            sent_at=datetime.now(timezone.utc),
            order_reference=confirmation.order_reference,
            recipient=confirmation.customer_email,
            payload=event,
        ))
        self.logger.info(
            f"Payment confirmation for {confirmation.order_reference} "
            f"({confirmation.amount}) sent to {confirmation.customer_email}"
        )
        return notification

    async def find_all(self) -> list[Notification]:
        return await self.repository.find_all()
