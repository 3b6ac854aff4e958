"""API request/response schemas for gateway endpoints."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from cardgate.common.masking import last_four
from cardgate.common.state_machine import PaymentStatus


class PaymentRequest(BaseModel):
    """Card payment payload accepted by `POST /payments`.

    Only the JSON shape is checked here; business rules live in the validator
    so every violation can be reported at once. Integers are strict: JSON
    booleans, numeric strings and floats are refused rather than coerced.
    """

    card_number: str | None = None
    expiry_month: StrictInt = 0
    expiry_year: StrictInt = 0
    currency: str | None = None
    amount: StrictInt = 0
    cvv: str | None = None


class ViolationKind(str, Enum):
    REQUIRED = "required"
    INVALID_LENGTH = "invalid_length"
    NOT_NUMERIC = "not_numeric"
    OUT_OF_RANGE = "out_of_range"
    INVALID_FORMAT = "invalid_format"
    NOT_POSITIVE = "not_positive"
    EXPIRED = "expired"


class Violation(BaseModel):
    """One failed rule for one request field."""

    model_config = ConfigDict(frozen=True)

    field: str
    kind: ViolationKind
    message: str


class PaymentResponse(BaseModel):
    """Creation response; echoes the request as submitted."""

    id: UUID
    status: PaymentStatus
    card_number: str | None
    expiry_month: int
    expiry_year: int
    currency: str | None
    amount: int
    errors: list[Violation] = Field(default_factory=list)


class PaymentRecord(BaseModel):
    """Stored outcome of a bank-decided payment. Never mutated after insert."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    status: PaymentStatus
    card_number: str
    expiry_month: int
    expiry_year: int
    currency: str
    amount: int


class GetPaymentResponse(BaseModel):
    """Masked view of a stored payment."""

    id: UUID
    status: PaymentStatus
    card_number_last_four: str
    expiry_month: int
    expiry_year: int
    currency: str
    amount: int

    @classmethod
    def from_record(cls, record: PaymentRecord) -> "GetPaymentResponse":
        return cls(
            id=record.id,
            status=record.status,
            card_number_last_four=last_four(record.card_number),
            expiry_month=record.expiry_month,
            expiry_year=record.expiry_year,
            currency=record.currency,
            amount=record.amount,
        )
