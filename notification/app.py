from quart import Quart

from common.config import Settings
from common.db.util import create_store
from common.errors import register_error_handlers
from common.kafka.kafkaConsumer import KafkaConsumer
from common.kafka.topics_config import ORDER_TOPIC, PAYMENT_TOPIC
from common.log import configure_logging
from common.telemetry import configure_telemetry
from notification.notification_logic import NotificationLogic
from notification.repository import NotificationRepository
from notification.routing.http import build_blueprint


def create_app(settings: Settings | None = None, logic: NotificationLogic | None = None) -> Quart:
    settings = settings or Settings.from_env("notification-service")
    app = Quart(settings.service_name)
    configure_logging(app, settings.log_level)
    if settings.otel_enabled:
        telemetry = configure_telemetry(settings.service_name, settings.otel_endpoint)
        app.after_serving(telemetry.shutdown)

    if logic is None:
        store = create_store(settings)
        logic = NotificationLogic(app.logger, NotificationRepository(store))
        consumer = KafkaConsumer(
            [ORDER_TOPIC, PAYMENT_TOPIC],
            settings.kafka_bootstrap_servers,
            "notification-group",
            logic.handle_event,
        )

        @app.before_serving
        async def startup():
            app.logger.info("Starting Notification Service")
            await consumer.start()

        @app.after_serving
        async def shutdown():
            app.logger.info("Stopping Notification Service")
            await consumer.close()
            await store.close()

    app.register_blueprint(build_blueprint(logic))
    register_error_handlers(app)
    return app


if __name__ == '__main__':
    create_app().run(host="0.0.0.0", port=8000, debug=True)
