from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional, Sequence

import mysql.connector

from ..core.enums import BillStatus, BillType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal, translate_integrity_error
from .model import Bill, BillStatusStats
from .repository import BillRepository

_SELECT_BILL = """
    SELECT bill_id, employee_id, amount, bill_type, status, submitted_by, created_at
    FROM bills
"""


def _row_to_bill(row: dict) -> Bill:
    return Bill(
        bill_id=int(row["bill_id"]),
        employee_id=int(row["employee_id"]),
        amount=to_decimal(row["amount"]),
        bill_type=BillType(row["bill_type"]),
        status=BillStatus(row["status"]),
        submitted_by=row["submitted_by"],
        created_at=row["created_at"],
    )


class MySQLBillRepository(BillRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, employee_id: int, amount: Decimal, bill_type: BillType, submitted_by: str) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO bills(employee_id, amount, bill_type, status, submitted_by)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(employee_id), amount, bill_type.value, BillStatus.PENDING.value, submitted_by),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def get_by_id(self, bill_id: int) -> Optional[Bill]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_BILL + " WHERE bill_id=%s", (int(bill_id),))
            row = fetchone(cur)
            return _row_to_bill(row) if row else None

    def list_recent(self, *, employee_id: Optional[int] = None, limit: Optional[int] = None) -> Sequence[Bill]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        sql = _SELECT_BILL + f" WHERE {' AND '.join(clauses)} ORDER BY created_at DESC, bill_id DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_bill(r) for r in fetchall(cur)]

    def update_status(self, *, bill_id: int, expected: BillStatus, new: BillStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE bills SET status=%s WHERE bill_id=%s AND status=%s",
                (new.value, int(bill_id), expected.value),
            )
            return cur.rowcount > 0

    def stats_by_status(self, *, employee_id: Optional[int] = None) -> Mapping[BillStatus, BillStatusStats]:
        where = ""
        params: tuple = ()
        if employee_id is not None:
            where = "WHERE employee_id=%s"
            params = (int(employee_id),)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT status, COUNT(*) AS n, COALESCE(SUM(amount), 0) AS total
                FROM bills
                {where}
                GROUP BY status
                """,
                params,
            )
            return {
                BillStatus(r["status"]): BillStatusStats(count=int(r["n"]), amount=to_decimal(r["total"]))
                for r in fetchall(cur)
            }
