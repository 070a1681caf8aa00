from quart import Quart

from common.config import Settings
from common.db.util import create_store
from common.errors import register_error_handlers
from common.kafka.kafkaProducer import KafkaProducer
from common.log import configure_logging
from common.telemetry import configure_telemetry
from payment.payment_logic import PaymentLogic
from payment.repository import PaymentRepository
from payment.routing.http import build_blueprint
from payment.routing.kafka import PaymentProducer


def create_app(settings: Settings | None = None, logic: PaymentLogic | None = None) -> Quart:
    settings = settings or Settings.from_env("payment-service")
    app = Quart(settings.service_name)
    configure_logging(app, settings.log_level)
    if settings.otel_enabled:
        telemetry = configure_telemetry(settings.service_name, settings.otel_endpoint)
        app.after_serving(telemetry.shutdown)

    if logic is None:
        store = create_store(settings)
        producer = KafkaProducer(settings.kafka_bootstrap_servers)
        logic = PaymentLogic(
            app.logger,
            PaymentRepository(store),
            PaymentProducer(app.logger, producer),
            publish_timeout=settings.publish_timeout,
        )

        @app.before_serving
        async def startup():
            app.logger.info("Starting Payment Service")
            await producer.start()

        @app.after_serving
        async def shutdown():
            app.logger.info("Stopping Payment Service")
            await producer.close()
            await store.close()

    app.register_blueprint(build_blueprint(logic))
    register_error_handlers(app)
    return app


if __name__ == '__main__':
    create_app().run(host="0.0.0.0", port=8000, debug=True)
