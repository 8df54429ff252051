from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


def join_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}"


@dataclass(frozen=True)
class Employee:
    employee_id: int
    first_name: str
    last_name: str
    email: str
    designation: str
    dept_id: int
    user_id: Optional[int] = None
    dept_name: Optional[str] = None

    @property
    def full_name(self) -> str:
        return join_name(self.first_name, self.last_name)


@dataclass(frozen=True)
class EmployeeDetails:
    """Validated, writable employee attributes."""

    first_name: str
    last_name: str
    email: str
    designation: str
    dept_id: int

    @property
    def full_name(self) -> str:
        return join_name(self.first_name, self.last_name)


@dataclass(frozen=True)
class ProvisioningResult:
    """Outcome of linking a user account to an employee.

    ``temporary_password`` is only set when a new account was created; it is
    meant to be shown once to the admin and is never stored in plaintext.
    """

    user_id: int
    temporary_password: Optional[str] = None
    is_new: bool = False


@dataclass(frozen=True)
class EmployeeCreated:
    employee: Employee
    provisioning: ProvisioningResult
