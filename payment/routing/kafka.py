import msgspec

from common.kafka.events_config import EVENT_PAYMENT_CONFIRMATION
from common.kafka.kafkaProducer import KafkaProducer
from common.kafka.topics_config import PAYMENT_TOPIC
from common.models import PaymentConfirmation


class PaymentProducer:
    def __init__(self, logger, producer: KafkaProducer):
        self.logger = logger
        self.producer = producer

    async def send_payment_confirmation(self, confirmation: PaymentConfirmation):
        self.logger.info(f"Sending payment confirmation for order {confirmation.order_reference}")
        event = msgspec.to_builtins(confirmation)
        event["type"] = EVENT_PAYMENT_CONFIRMATION
        await self.producer.send_event(PAYMENT_TOPIC, confirmation.order_reference, event)
