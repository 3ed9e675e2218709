"""In-memory bill store, used for tests and the "memory" storage backend."""

import logging
import threading
from datetime import datetime
from uuid import UUID

from billtracker.errors import BillNotFound
from billtracker.models import Bill, BillCreate, UtilityType, utc_now

logger = logging.getLogger(__name__)


class InMemoryBillStore:
    """Process-local bill store. Bills are kept in insertion order."""

    def __init__(self, bills: list[Bill] | None = None):
        self._bills: list[Bill] = list(bills or [])
        self._lock = threading.Lock()

    def list_all(self, utility_type: UtilityType | None = None) -> list[Bill]:
        with self._lock:
            if utility_type is None:
                return list(self._bills)
            return [b for b in self._bills if b.utility_type == utility_type]

    def find_latest_created(self, utility_type: UtilityType | None = None) -> Bill | None:
        bills = self.list_all(utility_type)
        if not bills:
            return None
        # max() keeps the first of equal keys, so reverse to prefer the later insert
        return max(reversed(bills), key=lambda b: b.created_at)

    def create(self, fields: BillCreate) -> Bill:
        bill = Bill(**fields.model_dump())
        with self._lock:
            self._bills.append(bill)
        logger.info(f"Created {bill.utility_type.value} bill {bill.id} for {bill.period}")
        return bill

    def update(self, bill_id: UUID, fields: BillCreate) -> Bill:
        with self._lock:
            index = self._index_of(bill_id)
            current = self._bills[index]
            updated = Bill(
                **fields.model_dump(),
                id=current.id,
                is_paid=current.is_paid,
                payment_date=current.payment_date,
                created_at=current.created_at,
                updated_at=utc_now(),
            )
            self._bills[index] = updated
        logger.info(f"Updated bill {bill_id}")
        return updated

    def delete(self, bill_id: UUID) -> None:
        with self._lock:
            del self._bills[self._index_of(bill_id)]
        logger.info(f"Deleted bill {bill_id}")

    def mark_paid(self, bill_id: UUID, payment_date: datetime | None = None) -> Bill:
        with self._lock:
            index = self._index_of(bill_id)
            now = utc_now()
            paid = self._bills[index].model_copy(
                update={"is_paid": True, "payment_date": payment_date or now, "updated_at": now}
            )
            self._bills[index] = paid
        logger.info(f"Marked bill {bill_id} as paid")
        return paid

    def count(self) -> int:
        with self._lock:
            return len(self._bills)

    def _index_of(self, bill_id: UUID) -> int:
        for i, bill in enumerate(self._bills):
            if bill.id == bill_id:
                return i
        raise BillNotFound(bill_id)
