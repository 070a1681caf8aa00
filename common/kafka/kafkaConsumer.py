import asyncio
import json
import logging
from typing import Awaitable, Callable

from aiokafka import AIOKafkaConsumer, ConsumerRebalanceListener


class KafkaConsumer:

    class SafeRebalanceListener(ConsumerRebalanceListener):
        def __init__(self, lock: asyncio.Lock):
            self.lock = lock

        async def on_partitions_revoked(self, revoked):
            logging.info(f"[REBALANCE] Revoking partitions: {revoked}")
            # wait for the event being handled to be committed
            async with self.lock:
                pass

        async def on_partitions_assigned(self, assigned):
            logging.info(f"[REBALANCE] Assigned new partitions: {assigned}")

    def __init__(self, topics: list[str], bootstrap_servers: str, group_id: str,
                 callback: Callable[[dict], Awaitable[None]]):
        self.topics = topics
        self.bootstrap_servers = bootstrap_servers
        self.group_id = group_id
        self.callback = callback
        self._consumer: AIOKafkaConsumer | None = None
        self._task: asyncio.Task | None = None
        self._rebalance_lock = asyncio.Lock()

    async def start(self):
        if self._consumer is not None:
            return
        self._consumer = AIOKafkaConsumer(
            bootstrap_servers=self.bootstrap_servers,
            group_id=self.group_id,
            enable_auto_commit=False,
            auto_offset_reset="earliest",
        )
        self._consumer.subscribe(self.topics, listener=self.SafeRebalanceListener(self._rebalance_lock))
        await self._consumer.start()
        logging.info(f"Kafka Consumer Started on topics: {self.topics}")
        self._task = asyncio.create_task(self._consume_events())

    async def _consume_events(self):
        while True:
            try:
                async for message in self._consumer:
                    await self.handle_message(message.value)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logging.error(f"Error during event consuming: {e}")
                await asyncio.sleep(1)

    async def handle_message(self, value: bytes):
        event = json.loads(value.decode('utf-8'))
        async with self._rebalance_lock:
            await self.callback(event)
            await self._consumer.commit()

    async def close(self):
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logging.info("Consumer task cancelled")
            self._task = None
        if self._consumer:
            await self._consumer.stop()
            logging.info("Kafka Consumer stopped")
            self._consumer = None
