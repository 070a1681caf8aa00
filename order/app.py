from quart import Quart

from common.config import Settings
from common.db.util import create_store
from common.errors import register_error_handlers
from common.kafka.kafkaProducer import KafkaProducer
from common.log import configure_logging
from common.telemetry import configure_telemetry
from order.clients import CustomerClient, PaymentClient, ProductClient
from order.kafka import OrderProducer
from order.order_logic import OrderLogic
from order.repository import OrderRepository
from order.routing.http import build_blueprint


def create_app(settings: Settings | None = None, logic: OrderLogic | None = None) -> Quart:
    settings = settings or Settings.from_env("order-service")
    app = Quart(settings.service_name)
    configure_logging(app, settings.log_level)
    if settings.otel_enabled:
        telemetry = configure_telemetry(settings.service_name, settings.otel_endpoint)
        app.after_serving(telemetry.shutdown)

    if logic is None:
        store = create_store(settings)
        customers = CustomerClient(settings.customer_url, settings.http_timeout)
        products = ProductClient(settings.product_url, settings.http_timeout)
        payments = PaymentClient(settings.payment_url, settings.http_timeout)
        producer = KafkaProducer(settings.kafka_bootstrap_servers)
        logic = OrderLogic(
            app.logger,
            OrderRepository(store),
            customers,
            products,
            payments,
            OrderProducer(app.logger, producer),
            compensate_reservation=settings.compensate_reservation,
            publish_timeout=settings.publish_timeout,
        )

        @app.before_serving
        async def startup():
            app.logger.info("Starting Order Service")
            for client in (customers, products, payments):
                await client.start()
            await producer.start()

        @app.after_serving
        async def shutdown():
            app.logger.info("Stopping Order Service")
            await producer.close()
            for client in (customers, products, payments):
                await client.close()
            await store.close()

    app.register_blueprint(build_blueprint(logic))
    register_error_handlers(app)
    return app


if __name__ == '__main__':
    create_app().run(host="0.0.0.0", port=8000, debug=True)
