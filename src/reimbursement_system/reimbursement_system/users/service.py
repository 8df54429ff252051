from __future__ import annotations

import logging
from typing import Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import FieldErrors, normalize_email, require_min_length, require_text
from ..core.constants import MIN_PASSWORD_LENGTH, NAME_MAX_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..departments.repository import DepartmentRepository
from ..employees.repository import EmployeeRepository
from ..employees.service import validate_employee_details
from .model import NewUser, Principal
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate user (login) and resolve the request principal."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> Principal:
        try:
            email = normalize_email(email)
        except ValidationError:
            raise AuthenticationError("Invalid email or password.")

        user = self._users.get_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password.")

        if not isinstance(password, str):
            raise AuthenticationError("Invalid email or password.")
        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password.")

        logger.info("user %s signed in", user.user_id)
        return Principal.from_user(user)

    def load_principal(self, user_id: Optional[int]) -> Optional[Principal]:
        if user_id is None:
            return None
        user = self._users.get_by_id(int(user_id))
        return Principal.from_user(user) if user else None


class RegistrationService:
    """Use case: self-registration of an employee together with its user account.

    Employee details are required; the employee email is the account email.
    """

    def __init__(self, users: UserRepository, employees: EmployeeRepository, departments: DepartmentRepository):
        self._users = users
        self._employees = employees
        self._departments = departments

    def register(self, form: Mapping) -> Principal:
        form = form or {}
        errors = FieldErrors()
        name = errors.check(require_text, form.get("name"), "name", NAME_MAX_LENGTH)
        email = errors.check(normalize_email, form.get("email"), "email")
        password = errors.check(require_min_length, form.get("password"), "password", MIN_PASSWORD_LENGTH)
        if email and self._users.get_by_email(email):
            errors.add("email", "has already been taken")

        employee_form = dict(form.get("employee") or {})
        if not employee_form:
            errors.add("employee", "details are required")
        else:
            employee_form["email"] = email or form.get("email")
            details = errors.check(
                validate_employee_details,
                employee_form,
                employees=self._employees,
                departments=self._departments,
            )
        errors.raise_if_any()

        user = NewUser(name=name, email=email, password_hash=generate_password_hash(password), role=Role.EMPLOYEE)
        employee_id, user_id = self._employees.create_with_user(details=details, user=user)
        logger.info("user %s registered with employee %s", user_id, employee_id)

        return Principal(user_id=user_id, name=name, role=Role.EMPLOYEE, employee_id=employee_id)
