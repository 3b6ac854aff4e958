"""Unit tests for the in-memory payment store."""

import threading
from uuid import uuid4

from cardgate.common.state_machine import PaymentStatus
from cardgate.services.gateway.schemas import GetPaymentResponse, PaymentRecord
from cardgate.services.gateway.store import PaymentStore


def make_record(card_number: str = "4111111111111111", status: PaymentStatus = PaymentStatus.AUTHORIZED) -> PaymentRecord:
    return PaymentRecord(
        id=uuid4(),
        status=status,
        card_number=card_number,
        expiry_month=4,
        expiry_year=2030,
        currency="USD",
        amount=2500,
    )


def test_add_then_get_returns_record():
    store = PaymentStore()
    record = make_record()
    store.add(record)
    assert store.get(record.id) == record


def test_get_unknown_id_returns_none():
    assert PaymentStore().get(uuid4()) is None


def test_masked_round_trip_keeps_fields_and_last_four():
    store = PaymentStore()
    record = make_record(card_number="5555555555554444", status=PaymentStatus.DECLINED)
    store.add(record)

    view = GetPaymentResponse.from_record(store.get(record.id))

    assert view.id == record.id
    assert view.status == PaymentStatus.DECLINED
    assert (view.expiry_month, view.expiry_year, view.currency, view.amount) == (4, 2030, "USD", 2500)
    assert view.card_number_last_four == "4444"
    assert "card_number" not in view.model_dump()


def test_short_stored_card_number_masks_to_empty():
    view = GetPaymentResponse.from_record(make_record(card_number="12"))
    assert view.card_number_last_four == ""


def test_concurrent_adds_are_all_retrievable():
    store = PaymentStore()
    records = [make_record() for _ in range(400)]
    chunks = [records[i::8] for i in range(8)]

    mismatches = []

    def worker(chunk):
        for record in chunk:
            store.add(record)
            if store.get(record.id) != record:
                mismatches.append(record.id)

    threads = [threading.Thread(target=worker, args=(chunk,)) for chunk in chunks]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert mismatches == []
    assert len(store) == len(records)
    assert all(store.get(record.id) == record for record in records)
