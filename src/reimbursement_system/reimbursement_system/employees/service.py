from __future__ import annotations

import logging
import secrets
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..bills.model import BillTotals
from ..bills.repository import BillRepository
from ..common.validators import FieldErrors, normalize_email, parse_id, require_text
from ..core.constants import NAME_MAX_LENGTH, TEMP_PASSWORD_BYTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..departments.repository import DepartmentRepository
from ..users.access import is_admin, require_admin
from ..users.model import NewUser, Principal
from ..users.repository import UserRepository
from .model import Employee, EmployeeCreated, EmployeeDetails, ProvisioningResult
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

EMAIL_LINKED_ELSEWHERE = "email already linked to another employee"


def generate_temporary_password() -> str:
    return secrets.token_hex(TEMP_PASSWORD_BYTES)


def validate_employee_details(
    form: Mapping,
    *,
    employees: EmployeeRepository,
    departments: DepartmentRepository,
    exclude_employee_id: Optional[int] = None,
) -> EmployeeDetails:
    """Check every employee field and report all problems at once."""

    errors = FieldErrors()
    first_name = errors.check(require_text, form.get("first_name"), "first_name", NAME_MAX_LENGTH)
    last_name = errors.check(require_text, form.get("last_name"), "last_name", NAME_MAX_LENGTH)
    designation = errors.check(require_text, form.get("designation"), "designation", NAME_MAX_LENGTH)
    email = errors.check(normalize_email, form.get("email"), "email")
    dept_id = errors.check(parse_id, form.get("department_id"), "department_id")

    if email:
        other = employees.get_by_email(email)
        if other and other.employee_id != exclude_employee_id:
            errors.add("email", "has already been taken")
    if dept_id and not departments.get_by_id(dept_id):
        errors.add("department_id", "must exist")

    errors.raise_if_any()
    return EmployeeDetails(
        first_name=first_name,
        last_name=last_name,
        email=email,
        designation=designation,
        dept_id=dept_id,
    )


class EmployeeService:
    """Use case: manage employees and their user accounts (admin)."""

    def __init__(
        self,
        employees: EmployeeRepository,
        users: UserRepository,
        departments: DepartmentRepository,
        bills: BillRepository,
    ):
        self._employees = employees
        self._users = users
        self._departments = departments
        self._bills = bills

    def _get_or_raise(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("employee", employee_id)
        return employee

    def _validate(self, form: Mapping, *, exclude_employee_id: Optional[int] = None) -> EmployeeDetails:
        return validate_employee_details(
            form or {},
            employees=self._employees,
            departments=self._departments,
            exclude_employee_id=exclude_employee_id,
        )

    @staticmethod
    def _new_account(name: str, email: str) -> tuple[NewUser, str]:
        temporary_password = generate_temporary_password()
        user = NewUser(
            name=name,
            email=email,
            password_hash=generate_password_hash(temporary_password),
            role=Role.EMPLOYEE,
        )
        return user, temporary_password

    def list_employees(self, principal: Optional[Principal]) -> Sequence[Employee]:
        require_admin(principal)
        return self._employees.list_all()

    def get_employee(self, principal: Optional[Principal], employee_id: int) -> Employee:
        require_admin(principal)
        return self._get_or_raise(employee_id)

    def create_employee(self, principal: Optional[Principal], form: Mapping) -> EmployeeCreated:
        """Create an employee and give it a user account.

        An existing unlinked user with the same email is linked; otherwise a
        new account with a one-time password is created. Both writes happen
        in one transaction, and a conflict leaves nothing behind.
        """

        require_admin(principal)
        details = self._validate(form)

        existing = self._users.get_by_email(details.email)
        if existing:
            if existing.employee_id is not None:
                raise ConflictError(EMAIL_LINKED_ELSEWHERE)
            employee_id = self._employees.create(details=details, user_id=existing.user_id)
            provisioning = ProvisioningResult(user_id=existing.user_id, is_new=False)
        else:
            user, temporary_password = self._new_account(details.full_name, details.email)
            employee_id, user_id = self._employees.create_with_user(details=details, user=user)
            provisioning = ProvisioningResult(user_id=user_id, temporary_password=temporary_password, is_new=True)
            logger.info("user %s provisioned for employee %s", user_id, employee_id)

        logger.info("employee %s created by user %s", employee_id, principal.user_id)
        return EmployeeCreated(employee=self._get_or_raise(employee_id), provisioning=provisioning)

    def provision_user(self, principal: Optional[Principal], employee_id: int) -> ProvisioningResult:
        require_admin(principal)
        employee = self._get_or_raise(employee_id)
        if employee.user_id is not None:
            return ProvisioningResult(user_id=employee.user_id, is_new=False)

        existing = self._users.get_by_email(employee.email)
        if existing:
            if existing.employee_id is not None and existing.employee_id != employee.employee_id:
                raise ConflictError(EMAIL_LINKED_ELSEWHERE)
            if not self._employees.link_user(employee_id=employee.employee_id, user_id=existing.user_id):
                return self._current_link(employee.employee_id)
            logger.info("employee %s linked to existing user %s", employee.employee_id, existing.user_id)
            return ProvisioningResult(user_id=existing.user_id, is_new=False)

        user, temporary_password = self._new_account(employee.full_name, employee.email)
        user_id = self._employees.link_new_user(employee_id=employee.employee_id, user=user)
        logger.info("user %s provisioned for employee %s", user_id, employee.employee_id)
        return ProvisioningResult(user_id=user_id, temporary_password=temporary_password, is_new=True)

    def _current_link(self, employee_id: int) -> ProvisioningResult:
        # The employee was linked concurrently; report that link.
        employee = self._get_or_raise(employee_id)
        if employee.user_id is None:
            raise ConflictError(EMAIL_LINKED_ELSEWHERE)
        return ProvisioningResult(user_id=employee.user_id, is_new=False)

    def update_employee(self, principal: Optional[Principal], employee_id: int, form: Mapping) -> Employee:
        """Update employee attributes. Existing bills keep their submitted-by snapshot."""

        require_admin(principal)
        employee = self._get_or_raise(employee_id)
        details = self._validate(form, exclude_employee_id=employee.employee_id)
        self._employees.update(employee_id=employee.employee_id, details=details)
        return self._get_or_raise(employee.employee_id)

    def delete_employee(self, principal: Optional[Principal], employee_id: int) -> None:
        require_admin(principal)
        employee = self._get_or_raise(employee_id)
        if not self._employees.delete_with_bills(employee.employee_id):
            raise NotFoundError("employee", employee_id)
        logger.info("employee %s and its bills deleted by user %s", employee.employee_id, principal.user_id)

    # Totals
    def _require_admin_or_self(self, principal: Optional[Principal], employee_id: int) -> None:
        if is_admin(principal):
            return
        if principal is None or principal.employee_id != int(employee_id):
            raise AuthorizationError("not owner")

    def bill_totals(self, principal: Optional[Principal], employee_id: int) -> BillTotals:
        self._require_admin_or_self(principal, employee_id)
        employee = self._get_or_raise(employee_id)
        return BillTotals(self._bills.stats_by_status(employee_id=employee.employee_id))

    def total_bills_amount(self, principal: Optional[Principal], employee_id: int) -> Decimal:
        return self.bill_totals(principal, employee_id).submitted

    def total_approved_amount(self, principal: Optional[Principal], employee_id: int) -> Decimal:
        return self.bill_totals(principal, employee_id).approved
