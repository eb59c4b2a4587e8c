# ==== OPENTELEMETRY TRACING CONFIGURATION ==== #

"""
OpenTelemetry tracing configuration for Boxship.

This module provides distributed tracing setup with OTLP export and
automatic SQLAlchemy instrumentation. Export is only enabled when an
OTLP endpoint is configured, so local runs need no APM provider.
"""

from typing import Dict, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

from boxship.settings import settings


# ==== TRACING INITIALIZATION ==== #

def init_tracing(service_name: str) -> bool:
    """
    Initialize OpenTelemetry tracing with an OTLP exporter.

    Args:
        service_name (str): Name of the service for tracing identification

    Returns:
        bool: True when an exporter was configured
    """
    endpoint = settings.OTEL_EXPORTER_OTLP_ENDPOINT

    # ⚠️ Allow local runs without SaaS APM
    if not endpoint:
        return False

    # --► RESOURCE ATTRIBUTES CONFIGURATION
    resource_attrs = _parse_key_values(settings.OTEL_RESOURCE_ATTRIBUTES)
    resource_attrs["service.name"] = settings.OTEL_SERVICE_NAME or service_name

    # --► TRACER PROVIDER SETUP
    provider = TracerProvider(resource=Resource.create(resource_attrs))

    exporter = OTLPSpanExporter(
        endpoint=endpoint,
        headers=_parse_key_values(settings.OTEL_EXPORTER_OTLP_HEADERS)
    )

    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    # FastAPI instrumentation is done in main.py
    SQLAlchemyInstrumentor().instrument()
    return True


def _parse_key_values(raw: str | None) -> Dict[str, Any]:
    """Parse comma-separated key=value pairs from an environment variable.

    Args:
        raw: Comma-separated key=value pairs

    Returns:
        Dictionary of parsed pairs
    """
    pairs: Dict[str, Any] = {}
    if not raw:
        return pairs

    for part in filter(None, map(str.strip, raw.split(","))):
        if "=" in part:
            key, value = part.split("=", 1)
            pairs[key.strip()] = value.strip()

    return pairs


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance for the given module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Tracer instance
    """
    return trace.get_tracer(name)
