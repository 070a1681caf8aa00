import enum
from datetime import datetime

from msgspec import msgpack, Struct

from common.db.store import KeyValueStore


class NotificationType(str, enum.Enum):
    ORDER_CONFIRMATION = "ORDER_CONFIRMATION"
    PAYMENT_CONFIRMATION = "PAYMENT_CONFIRMATION"


class Notification(Struct, kw_only=True):
    id: str
    type: NotificationType
    sent_at: datetime
    order_reference: str
    recipient: str
    payload: dict


def notification_key(notification_id: str) -> str:
    return f"notification:{notification_id}"


class NotificationRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def save(self, notification: Notification) -> Notification:
        await self.store.set(notification_key(notification.id), msgpack.encode(notification))
        return notification

    async def find_all(self) -> list[Notification]:
        keys = await self.store.keys(notification_key("*"))
        entries = await self.store.get_many(keys)
        notifications = [msgpack.decode(entry, type=Notification) for entry in entries if entry]
        return sorted(notifications, key=lambda notification: notification.sent_at)
