from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import ConflictError, ValidationError
from .connection import DatabaseConnection

# MySQL error codes: duplicate value on a UNIQUE key, missing FOREIGN KEY parent.
ER_DUP_ENTRY = 1062
ER_NO_REFERENCED_ROW = 1452

# Unique key name -> (field, problem). Keys are declared in database/schema.sql.
_UNIQUE_KEYS = {
    "uq_users_email": ("email", "has already been taken"),
    "uq_employees_email": ("email", "has already been taken"),
    "uq_departments_name": ("name", "has already been taken"),
}

_FOREIGN_KEYS = {
    "fk_employees_department": ("department_id", "must exist"),
    "fk_bills_employee": ("employee_id", "must exist"),
}


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cur)``; everything executed in the block is one transaction."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_decimal(value: Any) -> Decimal:
    """SUM() over an empty set comes back as NULL; DECIMAL columns as Decimal."""

    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def translate_integrity_error(exc: mysql.connector.IntegrityError) -> Exception:
    """Map a driver integrity error onto the matching domain error."""

    message = str(getattr(exc, "msg", "") or exc)
    if getattr(exc, "errno", None) == ER_DUP_ENTRY:
        if "uq_employees_user" in message:
            return ConflictError("email already linked to another employee")
        for key, (field, problem) in _UNIQUE_KEYS.items():
            if key in message:
                return ValidationError(f"{field} {problem}", {field: problem})
    if getattr(exc, "errno", None) == ER_NO_REFERENCED_ROW:
        for key, (field, problem) in _FOREIGN_KEYS.items():
            if key in message:
                return ValidationError(f"{field} {problem}", {field: problem})
    return ValidationError("record violates a database constraint", {"record": "is invalid"})
