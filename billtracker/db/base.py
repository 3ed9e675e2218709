"""Bill store interface shared by the SQLite and in-memory stores."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from billtracker.models import Bill, BillCreate, UtilityType


class BillStore(Protocol):
    """Read/write access to recorded bills.

    update, delete and mark_paid raise BillNotFound for unknown ids.
    """

    def list_all(self, utility_type: UtilityType | None = None) -> list[Bill]: ...

    def find_latest_created(self, utility_type: UtilityType | None = None) -> Bill | None: ...

    def create(self, fields: BillCreate) -> Bill: ...

    def update(self, bill_id: UUID, fields: BillCreate) -> Bill: ...

    def delete(self, bill_id: UUID) -> None: ...

    def mark_paid(self, bill_id: UUID, payment_date: datetime | None = None) -> Bill: ...

    def count(self) -> int: ...
