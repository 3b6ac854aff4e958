"""Wire and result models for the acquiring bank integration."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, StrictBool


class BankPaymentRequest(BaseModel):
    """Body sent to `POST {bank_base_url}/payments`."""

    card_number: str
    expiry_date: str
    currency: str
    amount: int
    cvv: str


class BankPaymentResponse(BaseModel):
    """Body expected from the bank on HTTP 200.

    `authorized` must be a real JSON boolean; anything looser counts as a
    malformed response.
    """

    authorized: StrictBool = False
    authorization_code: str | None = None


class AuthorizationOutcome(str, Enum):
    AUTHORIZED = "authorized"
    DECLINED = "declined"
    FAILED = "failed"


class BankFailureKind(str, Enum):
    CLIENT_ERROR = "client_error"
    AUTH_FAILURE = "auth_failure"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    UNEXPECTED_STATUS = "unexpected_status"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED_RESPONSE = "malformed_response"
    UNEXPECTED_ERROR = "unexpected_error"


class AuthorizationResult(BaseModel):
    """Outcome of one bank call. Only AUTHORIZED means the payment may proceed."""

    model_config = ConfigDict(frozen=True)

    outcome: AuthorizationOutcome
    failure_kind: BankFailureKind | None = None
    status_code: int | None = None
    authorization_code: str | None = None

    @property
    def authorized(self) -> bool:
        return self.outcome is AuthorizationOutcome.AUTHORIZED

    @classmethod
    def failed(cls, kind: BankFailureKind, status_code: int | None = None) -> "AuthorizationResult":
        return cls(outcome=AuthorizationOutcome.FAILED, failure_kind=kind, status_code=status_code)
