from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_integrity_error
from .model import Department
from .repository import DepartmentRepository

_SELECT_DEPARTMENT = """
    SELECT d.dept_id, d.dept_name,
           (SELECT COUNT(*) FROM employees e WHERE e.dept_id = d.dept_id) AS employee_count
    FROM departments d
"""


def _row_to_department(row: dict) -> Department:
    return Department(
        dept_id=int(row["dept_id"]),
        dept_name=row["dept_name"],
        employee_count=int(row.get("employee_count") or 0),
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_DEPARTMENT + " ORDER BY d.dept_name")
            return [_row_to_department(r) for r in fetchall(cur)]

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_DEPARTMENT + " WHERE d.dept_id=%s", (int(dept_id),))
            row = fetchone(cur)
            return _row_to_department(row) if row else None

    def get_by_name(self, dept_name: str) -> Optional[Department]:
        # Column collation is case-insensitive.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_DEPARTMENT + " WHERE d.dept_name=%s", (dept_name,))
            row = fetchone(cur)
            return _row_to_department(row) if row else None

    def create(self, *, dept_name: str) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("INSERT INTO departments(dept_name) VALUES(%s)", (dept_name,))
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def rename(self, *, dept_id: int, dept_name: str) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("UPDATE departments SET dept_name=%s WHERE dept_id=%s", (dept_name, int(dept_id)))
        except mysql.connector.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM departments")
            return int(fetchone(cur)["n"])

    def delete_if_empty(self, dept_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM departments
                WHERE dept_id=%s
                  AND NOT EXISTS (SELECT 1 FROM employees e WHERE e.dept_id=%s)
                """,
                (int(dept_id), int(dept_id)),
            )
            return cur.rowcount > 0
