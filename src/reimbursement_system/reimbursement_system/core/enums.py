from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for access control."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class BillStatus(str, Enum):
    """Lifecycle status of a bill as stored in the database."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BillType(str, Enum):
    FOOD = "food"
    TRAVEL = "travel"
    OTHERS = "others"
