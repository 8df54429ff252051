from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an authentication identity.

    Note: This is a plain data object (no DB access code).
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    employee_id: Optional[int] = None


@dataclass(frozen=True)
class Principal:
    """The authenticated identity a request acts as.

    Passed explicitly into every service call; services never read the session.
    """

    user_id: int
    name: str
    role: Role
    employee_id: Optional[int] = None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(user_id=user.user_id, name=user.name, role=user.role, employee_id=user.employee_id)


@dataclass(frozen=True)
class NewUser:
    name: str
    email: str
    password_hash: str
    role: Role = Role.EMPLOYEE
