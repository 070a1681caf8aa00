import msgspec
from quart import Blueprint, jsonify

from notification.notification_logic import NotificationLogic


def build_blueprint(logic: NotificationLogic) -> Blueprint:
    blueprint = Blueprint("notifications", __name__)

    @blueprint.get('/api/v1/notifications')
    async def find_all():
        notifications = await logic.find_all()
        return jsonify(msgspec.to_builtins(notifications))

    return blueprint
