"""
OpenTelemetry Tracing Configuration
"""
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from shared import __version__
from shared.config import OTEL_EXPORTER_OTLP_ENDPOINT


def setup_tracing(service_name: str, endpoint: Optional[str] = OTEL_EXPORTER_OTLP_ENDPOINT) -> TracerProvider:
    """
    Install a tracer provider for one process and instrument its Redis client.

    Spans are exported over OTLP only when ``endpoint`` is set.
    """
    provider = TracerProvider(resource=Resource.create({
        SERVICE_NAME: service_name,
        SERVICE_VERSION: __version__,
    }))

    if endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))

    trace.set_tracer_provider(provider)
    RedisInstrumentor().instrument()

    return provider
