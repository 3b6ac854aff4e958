"""Unit tests for the payment decision pipeline."""

import asyncio
from uuid import uuid4

import httpx
import pytest

from cardgate.common.state_machine import PaymentStatus
from cardgate.services.bank_adapter.models import AuthorizationResult, BankFailureKind
from cardgate.services.gateway.schemas import ViolationKind
from cardgate.services.gateway.service import PaymentService, decide_status


@pytest.mark.asyncio
async def test_authorized_payment_is_stored_and_masked(store, authorizing_bank, valid_request):
    service = PaymentService(store, authorizing_bank)

    response = await service.process_payment(valid_request)

    assert response.status is PaymentStatus.AUTHORIZED
    assert response.errors == []
    assert authorizing_bank.calls == [valid_request]
    view = service.get_payment(response.id)
    assert view is not None
    assert view.status is PaymentStatus.AUTHORIZED
    assert view.card_number_last_four == "1234"
    assert (view.expiry_month, view.expiry_year, view.currency, view.amount) == (
        valid_request.expiry_month,
        valid_request.expiry_year,
        valid_request.currency,
        valid_request.amount,
    )


@pytest.mark.asyncio
async def test_creation_response_echoes_full_card_number(store, authorizing_bank, valid_request):
    response = await PaymentService(store, authorizing_bank).process_payment(valid_request)
    assert response.card_number == valid_request.card_number


@pytest.mark.asyncio
async def test_declined_payment_is_stored(store, declining_bank, valid_request):
    service = PaymentService(store, declining_bank)

    response = await service.process_payment(valid_request)

    assert response.status is PaymentStatus.DECLINED
    assert service.get_payment(response.id).status is PaymentStatus.DECLINED


@pytest.mark.asyncio
async def test_invalid_request_is_rejected_without_bank_call(store, authorizing_bank, valid_request):
    service = PaymentService(store, authorizing_bank)
    req = valid_request.model_copy(update={"amount": 0})

    response = await service.process_payment(req)

    assert response.status is PaymentStatus.REJECTED
    assert [(e.field, e.kind) for e in response.errors] == [("amount", ViolationKind.NOT_POSITIVE)]
    assert authorizing_bank.calls == []
    assert service.get_payment(response.id) is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_each_payment_gets_a_fresh_id(store, declining_bank, valid_request):
    service = PaymentService(store, declining_bank)
    first = await service.process_payment(valid_request)
    second = await service.process_payment(valid_request)
    assert first.id != second.id
    assert len(store) == 2


@pytest.mark.asyncio
async def test_bank_non_200_is_declined_not_an_error(store, http_service, bank_transport, valid_request):
    service = http_service(bank_transport(status_code=500))

    response = await service.process_payment(valid_request)

    assert response.status is PaymentStatus.DECLINED
    assert service.get_payment(response.id).status is PaymentStatus.DECLINED


@pytest.mark.asyncio
async def test_bank_authorization_over_http(http_service, bank_transport, valid_request):
    service = http_service(bank_transport(json={"authorized": True, "authorization_code": "xyz"}))
    response = await service.process_payment(valid_request)
    assert response.status is PaymentStatus.AUTHORIZED


@pytest.mark.asyncio
async def test_cancelled_bank_call_stores_nothing(store, http_service, valid_request):
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(30)
        return httpx.Response(200, json={"authorized": True})

    service = http_service(httpx.MockTransport(handler))
    task = asyncio.create_task(service.process_payment(valid_request))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(store) == 0


def test_get_unknown_payment_returns_none(store, authorizing_bank):
    assert PaymentService(store, authorizing_bank).get_payment(uuid4()) is None


@pytest.mark.parametrize("kind", list(BankFailureKind))
def test_every_bank_failure_decides_declined(kind):
    assert decide_status(AuthorizationResult.failed(kind)) is PaymentStatus.DECLINED


@pytest.mark.asyncio
async def test_logs_mask_card_number(store, declining_bank, valid_request, caplog):
    caplog.set_level("INFO")
    await PaymentService(store, declining_bank).process_payment(valid_request)
    assert "****1234" in caplog.text
    assert valid_request.card_number not in caplog.text
