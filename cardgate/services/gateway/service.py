"""Payment decision pipeline.

Validates a request, asks the bank for authorization when the request is
valid, assigns exactly one terminal status, and stores bank-decided payments
for later masked retrieval.
"""

from uuid import UUID, uuid4

from cardgate.common.config import settings
from cardgate.common.logging import logger, payment_id_ctx
from cardgate.common.masking import mask_card_number
from cardgate.common.metrics import payment_decisions_total
from cardgate.common.state_machine import PaymentStatus, is_stored_status, validate_transition
from cardgate.services.bank_adapter.client import BankClient
from cardgate.services.bank_adapter.models import AuthorizationOutcome, AuthorizationResult
from cardgate.services.gateway.schemas import (
    GetPaymentResponse,
    PaymentRecord,
    PaymentRequest,
    PaymentResponse,
)
from cardgate.services.gateway.store import PaymentStore
from cardgate.services.gateway.validator import validate_payment_request


def decide_status(result: AuthorizationResult) -> PaymentStatus:
    """Translate a bank result into a payment status, failing closed."""

    if result.outcome is AuthorizationOutcome.AUTHORIZED:
        return PaymentStatus.AUTHORIZED
    if result.outcome is AuthorizationOutcome.DECLINED:
        return PaymentStatus.DECLINED
    # Any bank failure is a decline; an ambiguous answer is never an authorization.
    logger.warning(
        "bank failure treated as decline failure_kind=%s status_code=%s",
        result.failure_kind.value if result.failure_kind is not None else None,
        result.status_code,
    )
    return PaymentStatus.DECLINED


class PaymentService:
    """Owns the Rejected / Authorized / Declined decision for each request."""

    def __init__(
        self,
        store: PaymentStore,
        bank_client: BankClient,
        service_name: str = settings.service_name,
    ) -> None:
        self.store = store
        self.bank_client = bank_client
        self.service_name = service_name

    def _assign(self, current: PaymentStatus, new: PaymentStatus) -> PaymentStatus:
        validate_transition(current, new)
        payment_decisions_total.labels(service=self.service_name, status=new.value).inc()
        return new

    async def process_payment(self, req: PaymentRequest) -> PaymentResponse:
        """Run the full pipeline for one request and return the creation response."""

        masked = mask_card_number(req.card_number)
        logger.info(
            "card payment request card=%s expiry=%s/%s currency=%s amount=%s",
            masked,
            req.expiry_month,
            req.expiry_year,
            req.currency,
            req.amount,
        )

        status = PaymentStatus.PENDING
        violations = validate_payment_request(req)
        if violations:
            logger.info(
                "card payment request is not valid card=%s violations=%s",
                masked,
                [f"{v.field}:{v.kind.value}" for v in violations],
            )
            status = self._assign(status, PaymentStatus.REJECTED)
        else:
            result = await self.bank_client.authorize(req)
            status = self._assign(status, decide_status(result))

        payment_id = uuid4()
        payment_id_ctx.set(str(payment_id))

        if is_stored_status(status):
            self.store.add(
                PaymentRecord(
                    id=payment_id,
                    status=status,
                    card_number=req.card_number,
                    expiry_month=req.expiry_month,
                    expiry_year=req.expiry_year,
                    currency=req.currency,
                    amount=req.amount,
                )
            )

        logger.info("card payment decided status=%s card=%s", status.value, masked)
        return PaymentResponse(
            id=payment_id,
            status=status,
            card_number=req.card_number,
            expiry_month=req.expiry_month,
            expiry_year=req.expiry_year,
            currency=req.currency,
            amount=req.amount,
            errors=violations,
        )

    def get_payment(self, payment_id: UUID) -> GetPaymentResponse | None:
        """Masked view of a stored payment, or None when the id is unknown."""

        record = self.store.get(payment_id)
        if record is None:
            return None
        return GetPaymentResponse.from_record(record)
