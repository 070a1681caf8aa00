import msgspec

from common.kafka.events_config import EVENT_ORDER_CONFIRMATION
from common.kafka.kafkaProducer import KafkaProducer
from common.kafka.topics_config import ORDER_TOPIC
from common.models import OrderConfirmation
from order.interfaces import ConfirmationPublisher


class OrderProducer(ConfirmationPublisher):
    def __init__(self, logger, producer: KafkaProducer):
        self.logger = logger
        self.producer = producer

    async def send_order_confirmation(self, confirmation: OrderConfirmation):
        self.logger.info(f"Sending order confirmation for order {confirmation.order_reference}")
        event = msgspec.to_builtins(confirmation)
        event["type"] = EVENT_ORDER_CONFIRMATION
        await self.producer.send_event(ORDER_TOPIC, confirmation.order_reference, event)
