"""Pytest bootstrap configuration.

Environment defaults must be in place before application settings are
imported, and the bank/store collaborators are built per test.
"""

import os

os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("BANK_BASE_URL", "http://bank.test")

from datetime import datetime, timezone  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from cardgate.services.bank_adapter.client import BankClient  # noqa: E402
from cardgate.services.bank_adapter.models import AuthorizationOutcome, AuthorizationResult  # noqa: E402
from cardgate.services.gateway.schemas import PaymentRequest  # noqa: E402
from cardgate.services.gateway.service import PaymentService  # noqa: E402
from cardgate.services.gateway.store import PaymentStore  # noqa: E402


class StubBankClient:
    """Records calls and answers with a fixed authorization result."""

    def __init__(self, result: AuthorizationResult) -> None:
        self.result = result
        self.calls: list[PaymentRequest] = []

    async def authorize(self, req: PaymentRequest) -> AuthorizationResult:
        self.calls.append(req)
        return self.result


def _bank_transport(status_code: int = 200, json=None, content: bytes | None = None, captured=None):
    """MockTransport answering every bank call with one canned response."""

    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, json=json)

    return httpx.MockTransport(handler)


@pytest.fixture
def current_year() -> int:
    return datetime.now(timezone.utc).year


@pytest.fixture
def valid_request(current_year) -> PaymentRequest:
    return PaymentRequest(
        card_number="12345678901234",
        expiry_month=12,
        expiry_year=current_year + 1,
        currency="GBP",
        amount=100,
        cvv="123",
    )


@pytest.fixture
def store() -> PaymentStore:
    return PaymentStore()


@pytest.fixture
def authorizing_bank() -> StubBankClient:
    return StubBankClient(AuthorizationResult(outcome=AuthorizationOutcome.AUTHORIZED, status_code=200))


@pytest.fixture
def declining_bank() -> StubBankClient:
    return StubBankClient(AuthorizationResult(outcome=AuthorizationOutcome.DECLINED, status_code=200))


@pytest.fixture
def bank_transport():
    """Factory for a MockTransport answering every bank call with one canned response."""

    return _bank_transport


@pytest.fixture
def http_service(store):
    """Factory for a payment service whose bank client talks to a mock transport."""

    def make(transport: httpx.MockTransport) -> PaymentService:
        return PaymentService(store, BankClient(base_url="http://bank.test", transport=transport))

    return make
