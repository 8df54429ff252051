"""Role checks over an explicit principal.

These are pure predicates over already-authenticated state; authentication
itself lives in ``AuthService``.
"""

from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import Principal


def is_admin(principal: Optional[Principal]) -> bool:
    return principal is not None and principal.role == Role.ADMIN


def is_employee(principal: Optional[Principal]) -> bool:
    return principal is not None and principal.role == Role.EMPLOYEE


def require_admin(principal: Optional[Principal]) -> None:
    if not is_admin(principal):
        raise AuthorizationError("admin only")


def require_employee(principal: Optional[Principal]) -> None:
    if not is_employee(principal):
        raise AuthorizationError("employee only")


def require_bill_owner(principal: Optional[Principal], bill) -> None:
    if is_admin(principal):
        return
    if principal is None or principal.employee_id is None or principal.employee_id != bill.employee_id:
        raise AuthorizationError("not owner")
