import logging

from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


class Telemetry:
    """OTLP providers installed for one service process."""

    def __init__(self, trace_provider: TracerProvider, meter_provider: MeterProvider,
                 logger_provider: LoggerProvider, handler: LoggingHandler):
        self.trace_provider = trace_provider
        self.meter_provider = meter_provider
        self.logger_provider = logger_provider
        self.handler = handler

    def shutdown(self):
        # flushes pending spans, metrics and log records
        logging.getLogger().removeHandler(self.handler)
        self.trace_provider.shutdown()
        self.meter_provider.shutdown()
        self.logger_provider.shutdown()


def configure_telemetry(service_name: str, endpoint: str, insecure: bool = True) -> Telemetry:
    resource = Resource(attributes={SERVICE_NAME: service_name})

    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=insecure))
    )
    trace.set_tracer_provider(trace_provider)

    reader = PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=endpoint, insecure=insecure))
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)

    # Logging (Experimental)
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint, insecure=insecure))
    )
    set_logger_provider(logger_provider)
    handler = LoggingHandler(level=logging.NOTSET, logger_provider=logger_provider)
    logging.getLogger().addHandler(handler)

    logging.info(f"Exporting telemetry for {service_name} to {endpoint}")
    return Telemetry(trace_provider, meter_provider, logger_provider, handler)
