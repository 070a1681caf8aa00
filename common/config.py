import os
from typing import Mapping

import msgspec


class Settings(msgspec.Struct, frozen=True, kw_only=True):
    """Process configuration, read from upper-cased environment variables."""

    service_name: str
    log_level: str = "INFO"

    # "redis" or "memory"
    storage_backend: str = "redis"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0
    # comma separated host:port pairs, switches the connection to Sentinel
    redis_sentinel_hosts: str | None = None
    redis_service_name: str = "mymaster"

    kafka_bootstrap_servers: str = "localhost:9092"

    customer_url: str = "http://localhost:8090/api/v1/customers"
    product_url: str = "http://localhost:8050/api/v1/products"
    payment_url: str = "http://localhost:8060/api/v1/payments"
    http_timeout: float = 5.0
    publish_timeout: float = 5.0

    purchase_max_retries: int = 5
    compensate_reservation: bool = True

    otel_enabled: bool = False
    otel_endpoint: str = "http://localhost:4317"

    @classmethod
    def from_env(cls, service_name: str, environ: Mapping[str, str] | None = None) -> "Settings":
        environ = os.environ if environ is None else environ
        values = {"service_name": service_name}
        for field in msgspec.structs.fields(cls):
            key = field.name.upper()
            if field.name != "service_name" and key in environ:
                values[field.name] = environ[key]
        return msgspec.convert(values, type=cls, strict=False)
