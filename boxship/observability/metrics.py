# ==== PROMETHEUS METRICS ==== #

"""
Prometheus metrics for monitoring Boxship.

This module provides request latency, box persistence, validation and
storage error metrics with a router exposing them for scraping.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    REGISTRY
)

from boxship.settings import settings


# ==== REQUEST METRICS ==== #

http_request_latency_seconds = Histogram(
    "boxship_http_request_latency_seconds",
    "HTTP request latency in seconds",
    ["method", "path", "status_code"]
)


# ==== BOX METRICS ==== #

boxes_saved_total = Counter(
    "boxship_boxes_saved_total",
    "Total boxes persisted by destination country",
    ["destination_country"]
)

shipping_cost_amount = Histogram(
    "boxship_shipping_cost_amount",
    "Computed shipping cost per box in the display currency",
    ["destination_country"],
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000]
)

validation_failures_total = Counter(
    "boxship_validation_failures_total",
    "Total rejected box submissions by failing field",
    ["field"]
)


# ==== STORAGE METRICS ==== #

storage_errors_total = Counter(
    "boxship_storage_errors_total",
    "Total storage collaborator failures by operation",
    ["operation"]
)

db_connections_active = Gauge(
    "boxship_db_connections_active",
    "Number of active database sessions"
)

# System metrics
app_info = Gauge(
    "boxship_app_info",
    "Application information",
    ["version", "environment", "service_name"]
)


def init_metrics(version: str, environment: str, service_name: str) -> None:
    """Initialize metrics collection.

    Args:
        version: Service version
        environment: Deployment environment
        service_name: Service name
    """
    app_info.labels(
        version=version,
        environment=environment,
        service_name=service_name
    ).set(1)


# Metrics router for Prometheus scraping
metrics_router = APIRouter()


@metrics_router.get(settings.PROMETHEUS_SCRAPE_PATH)
def get_metrics() -> PlainTextResponse:
    """Expose Prometheus metrics for scraping.

    Returns:
        Prometheus metrics in text format
    """
    return PlainTextResponse(
        generate_latest(REGISTRY).decode("utf-8"),
        media_type="text/plain"
    )
