"""HTTP surface for card payment creation and masked retrieval.

`POST /payments` always answers 200 with the decided status, including
Rejected; a failed validation is a business outcome, not a transport error.
"""

from time import perf_counter
from uuid import UUID, uuid4

from fastapi import FastAPI, Header, HTTPException, Request

from cardgate.common.config import settings
from cardgate.common.logging import configure_logging, logger, payment_id_ctx, trace_id_ctx
from cardgate.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
    payment_latency_seconds,
    payment_requests_total,
)
from cardgate.common.startup import log_startup_config
from cardgate.common.tracing import instrument_app, setup_tracing
from cardgate.services.bank_adapter.client import BankClient
from cardgate.services.gateway.schemas import GetPaymentResponse, PaymentRequest, PaymentResponse
from cardgate.services.gateway.service import PaymentService
from cardgate.services.gateway.store import PaymentStore

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(settings.service_name)
service = PaymentService(PaymentStore(), BankClient())

app = FastAPI(title="Card Payment Gateway")
instrument_app(app)

RETRIEVAL_FAILED_DETAIL = "An unexpected error occurred while retrieving the payment detail."


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Record request count and latency for every HTTP call."""

    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


def _bind_trace_id(x_correlation_id: str | None) -> None:
    trace_id_ctx.set(x_correlation_id or str(uuid4()))
    payment_id_ctx.set("")


@app.post("/payments", response_model=PaymentResponse)
async def create_payment(req: PaymentRequest, x_correlation_id: str | None = Header(default=None)):
    """Validate, authorize with the bank, and record a card payment."""

    _bind_trace_id(x_correlation_id)
    payment_requests_total.labels(service=settings.service_name).inc()
    with payment_latency_seconds.labels(service=settings.service_name).time():
        return await service.process_payment(req)


@app.get("/payments/{payment_id}", response_model=GetPaymentResponse)
def get_payment(payment_id: str, x_correlation_id: str | None = Header(default=None)):
    """Fetch the masked view of one stored payment."""

    _bind_trace_id(x_correlation_id)
    try:
        parsed_id = UUID(payment_id)
    except ValueError:
        logger.info("payment lookup with malformed id=%s", payment_id)
        raise HTTPException(status_code=404, detail="payment not found")

    logger.info("get payment request id=%s", parsed_id)
    try:
        payment = service.get_payment(parsed_id)
    except Exception as exc:
        logger.exception("unexpected error retrieving payment id=%s", parsed_id)
        raise HTTPException(status_code=500, detail=RETRIEVAL_FAILED_DETAIL) from exc

    if payment is None:
        logger.info("payment not found id=%s", parsed_id)
        raise HTTPException(status_code=404, detail="payment not found")
    return payment


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
