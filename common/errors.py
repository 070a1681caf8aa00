from quart import Quart, jsonify
from msgspec import DecodeError

REQ_ERROR_STR = "Requests error"


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ServiceError):
    status_code = 404


class BusinessError(ServiceError):
    status_code = 400


class DBError(ServiceError):
    status_code = 400

    def __init__(self, message: str = "DB error", **details):
        super().__init__(message, **details)


class ConcurrentUpdateError(DBError):
    status_code = 409

    def __init__(self, message: str = "Concurrency conflict detected", **details):
        super().__init__(message, **details)


class CustomerNotFoundError(NotFoundError):
    pass


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Product not found with ID:: {product_id}", product_id=product_id)


class ProductsNotFoundError(NotFoundError):
    def __init__(self, message: str = "One or more products does not exist"):
        super().__init__(message)


class OrderNotFoundError(NotFoundError):
    pass


class PaymentNotFoundError(NotFoundError):
    pass


class InvalidRequestError(BusinessError):
    pass


class InsufficientStockError(BusinessError):
    def __init__(self, product_id: int):
        super().__init__(f"Insufficient stock quantity for product with ID:: {product_id}", product_id=product_id)
        self.product_id = product_id


class PaymentFailedError(BusinessError):
    pass


class RemoteServiceError(BusinessError):
    pass


def register_error_handlers(app: Quart):
    @app.errorhandler(ServiceError)
    async def handle_service_error(error: ServiceError):
        app.logger.info(f"{type(error).__name__}: {error.message}")
        body = {"error": type(error).__name__, "message": error.message}
        body.update(error.details)
        return jsonify(body), error.status_code

    @app.errorhandler(DecodeError)
    async def handle_decode_error(error: DecodeError):
        return jsonify({"error": "InvalidRequestError", "message": f"{REQ_ERROR_STR}: {error}"}), 400
