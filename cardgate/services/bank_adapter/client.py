"""Acquiring bank integration.

Sends one authorization request per payment and classifies the reply. Every
failure mode (non-200, malformed body, timeout, connection error) is absorbed
here and reported as a FAILED result; callers never see an exception for a
bank problem. Cancellation is not absorbed and propagates to the caller.
"""

import logging
from time import perf_counter

import httpx
from pydantic import ValidationError

from cardgate.common.config import settings
from cardgate.common.logging import logger
from cardgate.common.masking import mask_card_number
from cardgate.common.metrics import bank_latency_seconds, bank_responses_total
from cardgate.common.tracing import tracer
from cardgate.services.bank_adapter.models import (
    AuthorizationOutcome,
    AuthorizationResult,
    BankFailureKind,
    BankPaymentRequest,
    BankPaymentResponse,
)
from cardgate.services.gateway.schemas import PaymentRequest

PAYMENTS_PATH = "/payments"

_STATUS_KINDS: dict[int, BankFailureKind] = {
    400: BankFailureKind.CLIENT_ERROR,
    401: BankFailureKind.AUTH_FAILURE,
    403: BankFailureKind.AUTH_FAILURE,
    404: BankFailureKind.NOT_FOUND,
    500: BankFailureKind.SERVER_ERROR,
    503: BankFailureKind.UNAVAILABLE,
}

# failure kind -> (log level, message)
_FAILURE_LOGGING: dict[BankFailureKind, tuple[int, str]] = {
    BankFailureKind.CLIENT_ERROR: (logging.WARNING, "client error from bank"),
    BankFailureKind.AUTH_FAILURE: (logging.ERROR, "authorization error from bank"),
    BankFailureKind.NOT_FOUND: (logging.WARNING, "bank payment endpoint not found"),
    BankFailureKind.SERVER_ERROR: (logging.ERROR, "server error from bank"),
    BankFailureKind.UNAVAILABLE: (logging.ERROR, "bank unavailable"),
    BankFailureKind.UNEXPECTED_STATUS: (logging.ERROR, "unexpected status code from bank"),
}


def classify_status(status_code: int) -> BankFailureKind:
    """Map a non-200 bank status code to a failure kind."""

    known = _STATUS_KINDS.get(status_code)
    if known is not None:
        return known
    if 400 <= status_code < 500:
        return BankFailureKind.CLIENT_ERROR
    if 500 <= status_code < 600:
        return BankFailureKind.SERVER_ERROR
    return BankFailureKind.UNEXPECTED_STATUS


def _log_unsuccessful_response(status_code: int, kind: BankFailureKind) -> None:
    level, message = _FAILURE_LOGGING[kind]
    logger.log(level, "%s status_code=%s", message, status_code)


def prepare_request(req: PaymentRequest) -> BankPaymentRequest:
    """Normalize a validated payment request into the bank's wire format."""

    return BankPaymentRequest(
        card_number=req.card_number,
        expiry_date=f"{req.expiry_month:02d}/{req.expiry_year}",
        currency=req.currency,
        amount=req.amount,
        cvv=req.cvv,
    )


class BankClient:
    """Single-attempt HTTP client for the acquiring bank."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.bank_base_url).rstrip("/")
        self.timeout = settings.bank_timeout_seconds if timeout is None else timeout
        self.transport = transport

    async def authorize(self, req: PaymentRequest) -> AuthorizationResult:
        """Ask the bank to authorize `req`; never raises for bank or transport failures."""

        masked = mask_card_number(req.card_number)
        started = perf_counter()
        with tracer.start_as_current_span("bank.authorize"):
            try:
                result = await self._post(prepare_request(req), masked)
            except httpx.HTTPError as exc:
                logger.error("bank call failed card=%s error_type=%s error=%s", masked, type(exc).__name__, exc)
                result = AuthorizationResult.failed(BankFailureKind.TRANSPORT_ERROR)
            except Exception:
                logger.exception("unexpected error calling bank card=%s", masked)
                result = AuthorizationResult.failed(BankFailureKind.UNEXPECTED_ERROR)
            finally:
                bank_latency_seconds.labels(service=settings.service_name).observe(
                    max(0.0, perf_counter() - started)
                )

        bank_responses_total.labels(
            service=settings.service_name,
            outcome=result.outcome.value,
            failure_kind=result.failure_kind.value if result.failure_kind is not None else "",
        ).inc()
        return result

    async def _post(self, body: BankPaymentRequest, masked: str) -> AuthorizationResult:
        logger.info(
            "bank payment request card=%s expiry_date=%s currency=%s amount=%s",
            masked,
            body.expiry_date,
            body.currency,
            body.amount,
        )
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            resp = await client.post(PAYMENTS_PATH, json=body.model_dump())

        logger.info("bank payment response status_code=%s", resp.status_code)
        if resp.status_code != 200:
            kind = classify_status(resp.status_code)
            _log_unsuccessful_response(resp.status_code, kind)
            return AuthorizationResult.failed(kind, status_code=resp.status_code)

        try:
            parsed = BankPaymentResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            logger.error("malformed bank response card=%s error=%s", masked, exc)
            return AuthorizationResult.failed(BankFailureKind.MALFORMED_RESPONSE, status_code=resp.status_code)

        outcome = AuthorizationOutcome.AUTHORIZED if parsed.authorized else AuthorizationOutcome.DECLINED
        return AuthorizationResult(
            outcome=outcome,
            status_code=resp.status_code,
            authorization_code=parsed.authorization_code,
        )
