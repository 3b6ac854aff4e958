"""Prometheus metric definitions for the gateway."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_requests_total = Counter("payment_requests_total", "Total payment requests", ["service"])
payment_decisions_total = Counter(
    "payment_decisions_total",
    "Terminal payment decisions by status",
    ["service", "status"],
)
payment_latency_seconds = Histogram("payment_latency_seconds", "Payment latency seconds", ["service"])
bank_responses_total = Counter(
    "bank_responses_total",
    "Acquiring bank call outcomes",
    ["service", "outcome", "failure_kind"],
)
bank_latency_seconds = Histogram("bank_latency_seconds", "Acquiring bank call latency seconds", ["service"])
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
