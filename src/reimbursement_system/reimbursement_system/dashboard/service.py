from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..bills.model import Bill, BillTotals
from ..bills.repository import BillRepository
from ..core.constants import DEFAULT_RECENT_BILLS
from ..core.enums import BillStatus
from ..departments.repository import DepartmentRepository
from ..employees.repository import EmployeeRepository
from ..users.access import require_admin
from ..users.model import Principal


@dataclass(frozen=True)
class DashboardData:
    total_employees: int
    total_departments: int
    totals: BillTotals
    recent_bills: list[Bill]

    def as_dict(self) -> dict:
        return {
            "total_employees": self.total_employees,
            "departments_count": self.total_departments,
            "total_bills": self.totals.count,
            "pending_bills": self.totals.stats(BillStatus.PENDING).count,
            "approved_bills": self.totals.stats(BillStatus.APPROVED).count,
            "rejected_bills": self.totals.stats(BillStatus.REJECTED).count,
            "total_amount_pending": self.totals.pending,
            "total_amount_approved": self.totals.approved,
        }


class DashboardService:
    """Admin landing page summary."""

    def __init__(
        self,
        bills: BillRepository,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        *,
        recent_limit: int = DEFAULT_RECENT_BILLS,
    ):
        self._bills = bills
        self._employees = employees
        self._departments = departments
        self._recent_limit = int(recent_limit)

    def build(self, principal: Optional[Principal]) -> DashboardData:
        require_admin(principal)
        return DashboardData(
            total_employees=self._employees.count(),
            total_departments=self._departments.count(),
            totals=BillTotals(self._bills.stats_by_status()),
            recent_bills=list(self._bills.list_recent(limit=self._recent_limit)),
        )
