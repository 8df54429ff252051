from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import BillStatus, BillType
from .model import Bill, BillStatusStats


class BillRepository(Protocol):
    def create(self, *, employee_id: int, amount: Decimal, bill_type: BillType, submitted_by: str) -> int:
        """Insert a pending bill and return its id."""

        raise NotImplementedError

    def get_by_id(self, bill_id: int) -> Optional[Bill]:
        raise NotImplementedError

    def list_recent(self, *, employee_id: Optional[int] = None, limit: Optional[int] = None) -> Sequence[Bill]:
        """Newest first (created_at DESC, bill_id DESC)."""

        raise NotImplementedError

    def update_status(self, *, bill_id: int, expected: BillStatus, new: BillStatus) -> bool:
        """Compare-and-swap: change status only if it still equals ``expected``."""

        raise NotImplementedError

    def stats_by_status(self, *, employee_id: Optional[int] = None) -> Mapping[BillStatus, BillStatusStats]:
        raise NotImplementedError
