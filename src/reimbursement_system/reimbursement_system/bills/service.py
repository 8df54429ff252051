from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from ..core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError
from ..employees.repository import EmployeeRepository
from ..users.access import is_admin, is_employee, require_admin, require_bill_owner, require_employee
from ..users.model import Principal
from .lifecycle import BillAction, plan_transition
from .model import Bill, BillListing, BillSubmission, BillTotals
from .repository import BillRepository

logger = logging.getLogger(__name__)

NO_EMPLOYEE_RECORD = "You need to be associated with an employee record to submit bills."


class BillService:
    """Use cases around bills: submission, review and listing."""

    def __init__(self, bills: BillRepository, employees: EmployeeRepository):
        self._bills = bills
        self._employees = employees

    def _get_or_raise(self, bill_id: int) -> Bill:
        bill = self._bills.get_by_id(int(bill_id))
        if not bill:
            raise NotFoundError("bill", bill_id)
        return bill

    def create_bill(self, principal: Optional[Principal], form: Mapping) -> Bill:
        """Submit a bill for the principal's own employee record.

        Status is always pending and submitted-by is a snapshot of the
        employee's current full name; anything else in ``form`` is ignored.
        """

        require_employee(principal)
        if principal.employee_id is None:
            raise AuthorizationError(NO_EMPLOYEE_RECORD)
        employee = self._employees.get_by_id(principal.employee_id)
        if not employee:
            raise AuthorizationError(NO_EMPLOYEE_RECORD)

        submission = BillSubmission.from_form(form or {})
        bill_id = self._bills.create(
            employee_id=employee.employee_id,
            amount=submission.amount,
            bill_type=submission.bill_type,
            submitted_by=employee.full_name,
        )
        logger.info("bill %s submitted by employee %s", bill_id, employee.employee_id)
        return self._get_or_raise(bill_id)

    def get_bill(self, principal: Optional[Principal], bill_id: int) -> Bill:
        if principal is None:
            raise AuthorizationError("login required")
        bill = self._get_or_raise(bill_id)
        require_bill_owner(principal, bill)
        return bill

    def list_bills(self, principal: Optional[Principal]) -> BillListing:
        if is_admin(principal):
            return BillListing(
                bills=list(self._bills.list_recent()),
                totals=BillTotals(self._bills.stats_by_status()),
            )
        if not is_employee(principal):
            raise AuthorizationError("login required")
        if principal.employee_id is None:
            return BillListing(bills=[], totals=BillTotals())

        employee_id = principal.employee_id
        return BillListing(
            bills=list(self._bills.list_recent(employee_id=employee_id)),
            totals=self.employee_totals(employee_id),
            employee_id=employee_id,
        )

    # Transitions (admin only)
    def _apply(self, principal: Optional[Principal], bill_id: int, action: BillAction) -> Bill:
        require_admin(principal)
        bill = self._get_or_raise(bill_id)

        result = plan_transition(bill.status, action)
        if not result.ok:
            raise result.error

        t = result.transition
        if not self._bills.update_status(bill_id=bill.bill_id, expected=t.source, new=t.target):
            # Someone changed the bill between our read and the update.
            latest = self._bills.get_by_id(bill.bill_id)
            if not latest:
                raise NotFoundError("bill", bill_id)
            logger.warning(
                "bill %s %s lost a race: expected %s, found %s",
                bill.bill_id,
                action.value,
                t.source.value,
                latest.status.value,
            )
            raise InvalidTransitionError(action.value, latest.status)

        logger.info(
            "bill %s %s by user %s (%s -> %s)",
            bill.bill_id,
            action.value,
            principal.user_id,
            t.source.value,
            t.target.value,
        )
        return replace(bill, status=t.target)

    def approve(self, principal: Optional[Principal], bill_id: int) -> Bill:
        return self._apply(principal, bill_id, BillAction.APPROVE)

    def reject(self, principal: Optional[Principal], bill_id: int) -> Bill:
        return self._apply(principal, bill_id, BillAction.REJECT)

    def revoke_approval(self, principal: Optional[Principal], bill_id: int) -> Bill:
        return self._apply(principal, bill_id, BillAction.REVOKE_APPROVAL)

    def revoke_rejection(self, principal: Optional[Principal], bill_id: int) -> Bill:
        return self._apply(principal, bill_id, BillAction.REVOKE_REJECTION)

    # Aggregates
    def totals(self) -> BillTotals:
        return BillTotals(self._bills.stats_by_status())

    def total_submitted(self) -> Decimal:
        return self.totals().submitted

    def total_approved(self) -> Decimal:
        return self.totals().approved

    def employee_totals(self, employee_id: int) -> BillTotals:
        return BillTotals(self._bills.stats_by_status(employee_id=int(employee_id)))

    def recent(self, *, limit: int) -> Sequence[Bill]:
        return self._bills.list_recent(limit=int(limit))
