import logging

import msgspec
from aiokafka import AIOKafkaProducer


class KafkaProducer:
    def __init__(self, bootstrap_servers: str):
        self.bootstrap_servers = bootstrap_servers
        self._producer: AIOKafkaProducer | None = None

    async def start(self):
        if self._producer is None:
            self._producer = AIOKafkaProducer(
                bootstrap_servers=self.bootstrap_servers
            )
            await self._producer.start()
            logging.info("Kafka Producer started")

    async def send_event(self, topic: str, event_key: str, event_value):
        await self.start()
        message = msgspec.json.encode(event_value)
        await self._producer.send_and_wait(topic, key=event_key.encode('utf-8'), value=message)

    async def close(self):
        if self._producer:
            await self._producer.stop()
            logging.info("Kafka Producer stopped")
            self._producer = None
