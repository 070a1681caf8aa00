from quart import Quart

from common.config import Settings
from common.db.util import create_store
from common.errors import register_error_handlers
from common.log import configure_logging
from common.telemetry import configure_telemetry
from product.product_logic import ProductLogic
from product.repository import ProductRepository
from product.routing.http import build_blueprint


def create_app(settings: Settings | None = None, logic: ProductLogic | None = None) -> Quart:
    settings = settings or Settings.from_env("product-service")
    app = Quart(settings.service_name)
    configure_logging(app, settings.log_level)
    if settings.otel_enabled:
        telemetry = configure_telemetry(settings.service_name, settings.otel_endpoint)
        app.after_serving(telemetry.shutdown)

    if logic is None:
        store = create_store(settings)
        logic = ProductLogic(app.logger, ProductRepository(store), settings.purchase_max_retries)

        @app.after_serving
        async def shutdown():
            app.logger.info("Stopping Product Service")
            await store.close()

    app.register_blueprint(build_blueprint(logic))
    register_error_handlers(app)
    return app


if __name__ == '__main__':
    create_app().run(host="0.0.0.0", port=8000, debug=True)
