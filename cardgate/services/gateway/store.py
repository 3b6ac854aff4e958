"""In-memory payment record store.

Records are append-only: inserted once by the payment service and never
mutated or deleted. A single lock guards both inserts and lookups.
"""

import threading
from uuid import UUID

from cardgate.services.gateway.schemas import PaymentRecord


class PaymentStore:
    """Keyed collection of completed payment records."""

    def __init__(self) -> None:
        self._records: dict[UUID, PaymentRecord] = {}
        self._lock = threading.Lock()

    def add(self, record: PaymentRecord) -> None:
        """Insert unconditionally; callers supply fresh identifiers."""

        with self._lock:
            self._records[record.id] = record

    def get(self, payment_id: UUID) -> PaymentRecord | None:
        with self._lock:
            return self._records.get(payment_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
