from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional

from ..common.validators import FieldErrors, parse_amount
from ..core.enums import BillStatus, BillType

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Bill:
    bill_id: int
    employee_id: int
    amount: Decimal
    bill_type: BillType
    status: BillStatus
    submitted_by: str
    created_at: datetime

    @property
    def is_pending(self) -> bool:
        return self.status == BillStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == BillStatus.APPROVED

    @property
    def is_rejected(self) -> bool:
        return self.status == BillStatus.REJECTED


@dataclass(frozen=True)
class BillSubmission:
    """Validated user input for a new bill.

    Only ``amount`` and ``bill_type`` are taken from the caller; status,
    owner and submitted-by are decided by the service.
    """

    amount: Decimal
    bill_type: BillType

    @classmethod
    def from_form(cls, form: Mapping) -> "BillSubmission":
        errors = FieldErrors()
        amount = errors.check(parse_amount, form.get("amount"), "amount")

        bill_type = None
        raw_type = form.get("bill_type")
        if raw_type is None or not str(raw_type).strip():
            errors.add("bill_type", "can't be blank")
        else:
            try:
                bill_type = BillType(str(raw_type).strip().lower())
            except ValueError:
                errors.add("bill_type", "is not included in the list")

        errors.raise_if_any()
        return cls(amount=amount, bill_type=bill_type)


@dataclass(frozen=True)
class BillStatusStats:
    count: int = 0
    amount: Decimal = ZERO


@dataclass(frozen=True)
class BillTotals:
    """Bill count and amount per status, plus the derived totals."""

    by_status: Mapping[BillStatus, BillStatusStats] = field(default_factory=dict)

    def stats(self, status: BillStatus) -> BillStatusStats:
        return self.by_status.get(status) or BillStatusStats()

    @property
    def count(self) -> int:
        return sum(s.count for s in self.by_status.values())

    @property
    def submitted(self) -> Decimal:
        return sum((s.amount for s in self.by_status.values()), ZERO)

    @property
    def approved(self) -> Decimal:
        return self.stats(BillStatus.APPROVED).amount

    @property
    def pending(self) -> Decimal:
        return self.stats(BillStatus.PENDING).amount


@dataclass(frozen=True)
class BillListing:
    bills: list[Bill]
    totals: BillTotals
    employee_id: Optional[int] = None

    @property
    def total_submitted(self) -> Decimal:
        return self.totals.submitted

    @property
    def total_approved(self) -> Decimal:
        return self.totals.approved
