from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_integrity_error
from ..users.model import NewUser
from .model import Employee, EmployeeDetails
from .repository import EmployeeRepository

_SELECT_EMPLOYEE = """
    SELECT e.employee_id, e.first_name, e.last_name, e.email, e.designation,
           e.dept_id, e.user_id, d.dept_name
    FROM employees e
    JOIN departments d ON d.dept_id = e.dept_id
"""


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        designation=row["designation"],
        dept_id=int(row["dept_id"]),
        user_id=int(row["user_id"]) if row.get("user_id") is not None else None,
        dept_name=row.get("dept_name"),
    )


def _insert_user(cur, user: NewUser) -> int:
    cur.execute(
        "INSERT INTO users(name, email, password_hash, role) VALUES(%s,%s,%s,%s)",
        (user.name, user.email, user.password_hash, user.role.value),
    )
    return int(cur.lastrowid)


def _insert_employee(cur, details: EmployeeDetails, user_id: Optional[int]) -> int:
    cur.execute(
        """
        INSERT INTO employees(first_name, last_name, email, designation, dept_id, user_id)
        VALUES(%s,%s,%s,%s,%s,%s)
        """,
        (details.first_name, details.last_name, details.email, details.designation, int(details.dept_id), user_id),
    )
    return int(cur.lastrowid)


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_EMPLOYEE + " ORDER BY e.last_name, e.first_name, e.employee_id")
            return [_row_to_employee(r) for r in fetchall(cur)]

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_EMPLOYEE + " WHERE e.employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_EMPLOYEE + " WHERE e.email=%s", (email,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def create(self, *, details: EmployeeDetails, user_id: Optional[int] = None) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                return _insert_employee(cur, details, user_id)
        except mysql.connector.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def create_with_user(self, *, details: EmployeeDetails, user: NewUser) -> tuple[int, int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                user_id = _insert_user(cur, user)
                employee_id = _insert_employee(cur, details, user_id)
                return employee_id, user_id
        except mysql.connector.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def update(self, *, employee_id: int, details: EmployeeDetails) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE employees
                    SET first_name=%s, last_name=%s, email=%s, designation=%s, dept_id=%s
                    WHERE employee_id=%s
                    """,
                    (
                        details.first_name,
                        details.last_name,
                        details.email,
                        details.designation,
                        int(details.dept_id),
                        int(employee_id),
                    ),
                )
        except mysql.connector.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def link_user(self, *, employee_id: int, user_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE employees SET user_id=%s WHERE employee_id=%s AND user_id IS NULL",
                    (int(user_id), int(employee_id)),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def link_new_user(self, *, employee_id: int, user: NewUser) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                user_id = _insert_user(cur, user)
                cur.execute(
                    "UPDATE employees SET user_id=%s WHERE employee_id=%s AND user_id IS NULL",
                    (user_id, int(employee_id)),
                )
                if cur.rowcount == 0:
                    # Raising inside the block rolls back the user insert.
                    raise ConflictError("employee is already linked to a user account")
                return user_id
        except mysql.connector.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def delete_with_bills(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM bills WHERE employee_id=%s", (int(employee_id),))
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM employees")
            return int(fetchone(cur)["n"])
