from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..users.model import NewUser
from .model import Employee, EmployeeDetails


class EmployeeRepository(Protocol):
    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def create(self, *, details: EmployeeDetails, user_id: Optional[int] = None) -> int:
        raise NotImplementedError

    def create_with_user(self, *, details: EmployeeDetails, user: NewUser) -> tuple[int, int]:
        """Insert the user and the employee linked to it in one transaction.

        Returns ``(employee_id, user_id)``.
        """

        raise NotImplementedError

    def update(self, *, employee_id: int, details: EmployeeDetails) -> None:
        raise NotImplementedError

    def link_user(self, *, employee_id: int, user_id: int) -> bool:
        """Set the user link only if the employee has none; False otherwise."""

        raise NotImplementedError

    def link_new_user(self, *, employee_id: int, user: NewUser) -> int:
        """Insert a user and link it in one transaction.

        Raises ConflictError (and writes nothing) if the employee already got a link.
        """

        raise NotImplementedError

    def delete_with_bills(self, employee_id: int) -> bool:
        """Delete the employee's bills, then the employee, in one transaction."""

        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError
