"""In-memory repositories sharing one store, mirroring the MySQL constraints the services rely on."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from werkzeug.security import generate_password_hash

from src.reimbursement_system.reimbursement_system.bills.model import Bill, BillStatusStats, ZERO
from src.reimbursement_system.reimbursement_system.container import Container
from src.reimbursement_system.reimbursement_system.core.enums import BillStatus, BillType, Role
from src.reimbursement_system.reimbursement_system.core.exceptions import ConflictError, ValidationError
from src.reimbursement_system.reimbursement_system.departments.model import Department
from src.reimbursement_system.reimbursement_system.employees.model import Employee, EmployeeDetails
from src.reimbursement_system.reimbursement_system.users.model import NewUser, Principal, User


@dataclass
class _UserRow:
    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role


class Store:
    def __init__(self):
        self.lock = threading.RLock()
        self.users: dict[int, _UserRow] = {}
        self.departments: dict[int, str] = {}
        self.employees: dict[int, Employee] = {}
        self.bills: dict[int, Bill] = {}
        self._ids = {"users": 0, "departments": 0, "employees": 0, "bills": 0}
        self._clock = datetime(2026, 3, 1, 9, 0, 0)

    def next_id(self, table: str) -> int:
        self._ids[table] += 1
        return self._ids[table]

    def now(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    # users
    def insert_user(self, user: NewUser) -> int:
        if any(u.email == user.email for u in self.users.values()):
            raise ValidationError("email has already been taken", {"email": "has already been taken"})
        user_id = self.next_id("users")
        self.users[user_id] = _UserRow(user_id, user.name, user.email, user.password_hash, Role(user.role))
        return user_id

    def add_user(self, *, name: str, email: str, password: str = "secret1", role: Role = Role.EMPLOYEE) -> int:
        with self.lock:
            return self.insert_user(
                NewUser(name=name, email=email, password_hash=generate_password_hash(password), role=role)
            )

    def employee_for_user(self, user_id: int) -> Optional[Employee]:
        for e in self.employees.values():
            if e.user_id == user_id:
                return e
        return None

    # employees
    def check_employee(self, details: EmployeeDetails, *, employee_id: Optional[int] = None, user_id=None) -> None:
        if details.dept_id not in self.departments:
            raise ValidationError("department_id must exist", {"department_id": "must exist"})
        for e in self.employees.values():
            if e.employee_id == employee_id:
                continue
            if e.email == details.email:
                raise ValidationError("email has already been taken", {"email": "has already been taken"})
            if user_id is not None and e.user_id == user_id:
                raise ConflictError("email already linked to another employee")

    def insert_employee(self, details: EmployeeDetails, user_id: Optional[int]) -> int:
        self.check_employee(details, user_id=user_id)
        employee_id = self.next_id("employees")
        self.employees[employee_id] = Employee(
            employee_id=employee_id,
            first_name=details.first_name,
            last_name=details.last_name,
            email=details.email,
            designation=details.designation,
            dept_id=details.dept_id,
            user_id=user_id,
        )
        return employee_id


class FakeUserRepo:
    def __init__(self, store: Store):
        self._s = store

    def _to_user(self, row: _UserRow) -> User:
        employee = self._s.employee_for_user(row.user_id)
        return User(
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            role=row.role,
            employee_id=employee.employee_id if employee else None,
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        with self._s.lock:
            row = self._s.users.get(int(user_id))
            return self._to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with self._s.lock:
            for row in self._s.users.values():
                if row.email == email:
                    return self._to_user(row)
            return None


class FakeDepartmentRepo:
    def __init__(self, store: Store):
        self._s = store

    def _to_dept(self, dept_id: int) -> Department:
        count = sum(1 for e in self._s.employees.values() if e.dept_id == dept_id)
        return Department(dept_id=dept_id, dept_name=self._s.departments[dept_id], employee_count=count)

    def list_all(self):
        with self._s.lock:
            ids = sorted(self._s.departments, key=lambda i: self._s.departments[i].lower())
            return [self._to_dept(i) for i in ids]

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        with self._s.lock:
            return self._to_dept(int(dept_id)) if int(dept_id) in self._s.departments else None

    def get_by_name(self, dept_name: str) -> Optional[Department]:
        with self._s.lock:
            for dept_id, name in self._s.departments.items():
                if name.lower() == dept_name.lower():
                    return self._to_dept(dept_id)
            return None

    def create(self, *, dept_name: str) -> int:
        with self._s.lock:
            if self.get_by_name(dept_name):
                raise ValidationError("name has already been taken", {"name": "has already been taken"})
            dept_id = self._s.next_id("departments")
            self._s.departments[dept_id] = dept_name
            return dept_id

    def rename(self, *, dept_id: int, dept_name: str) -> None:
        with self._s.lock:
            self._s.departments[int(dept_id)] = dept_name

    def count(self) -> int:
        return len(self._s.departments)

    def delete_if_empty(self, dept_id: int) -> bool:
        with self._s.lock:
            dept_id = int(dept_id)
            if dept_id not in self._s.departments:
                return False
            if any(e.dept_id == dept_id for e in self._s.employees.values()):
                return False
            del self._s.departments[dept_id]
            return True


class FakeEmployeeRepo:
    def __init__(self, store: Store):
        self._s = store

    def _with_dept(self, e: Employee) -> Employee:
        return replace(e, dept_name=self._s.departments.get(e.dept_id))

    def list_all(self):
        with self._s.lock:
            return [self._with_dept(e) for _, e in sorted(self._s.employees.items())]

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with self._s.lock:
            e = self._s.employees.get(int(employee_id))
            return self._with_dept(e) if e else None

    def get_by_email(self, email: str) -> Optional[Employee]:
        with self._s.lock:
            for e in self._s.employees.values():
                if e.email == email:
                    return self._with_dept(e)
            return None

    def create(self, *, details: EmployeeDetails, user_id: Optional[int] = None) -> int:
        with self._s.lock:
            return self._s.insert_employee(details, user_id)

    def create_with_user(self, *, details: EmployeeDetails, user: NewUser) -> tuple[int, int]:
        with self._s.lock:
            self._s.check_employee(details)
            user_id = self._s.insert_user(user)
            return self._s.insert_employee(details, user_id), user_id

    def update(self, *, employee_id: int, details: EmployeeDetails) -> None:
        with self._s.lock:
            current = self._s.employees[int(employee_id)]
            self._s.check_employee(details, employee_id=current.employee_id)
            self._s.employees[current.employee_id] = replace(
                current,
                first_name=details.first_name,
                last_name=details.last_name,
                email=details.email,
                designation=details.designation,
                dept_id=details.dept_id,
            )

    def link_user(self, *, employee_id: int, user_id: int) -> bool:
        with self._s.lock:
            current = self._s.employees.get(int(employee_id))
            if current is None or current.user_id is not None:
                return False
            if self._s.employee_for_user(int(user_id)):
                raise ConflictError("email already linked to another employee")
            self._s.employees[current.employee_id] = replace(current, user_id=int(user_id))
            return True

    def link_new_user(self, *, employee_id: int, user: NewUser) -> int:
        with self._s.lock:
            current = self._s.employees.get(int(employee_id))
            if current is None or current.user_id is not None:
                raise ConflictError("employee already has a user account")
            user_id = self._s.insert_user(user)
            self._s.employees[current.employee_id] = replace(current, user_id=user_id)
            return user_id

    def delete_with_bills(self, employee_id: int) -> bool:
        with self._s.lock:
            employee_id = int(employee_id)
            if employee_id not in self._s.employees:
                return False
            for bill_id in [b.bill_id for b in self._s.bills.values() if b.employee_id == employee_id]:
                del self._s.bills[bill_id]
            del self._s.employees[employee_id]
            return True

    def count(self) -> int:
        return len(self._s.employees)


class FakeBillRepo:
    def __init__(self, store: Store):
        self._s = store
        self._gate: Optional[threading.Barrier] = None
        self._gated_reads = 0

    def hold_reads(self, parties: int) -> None:
        """Make the next ``parties`` reads wait for each other before returning."""

        self._gate = threading.Barrier(parties, timeout=5)
        self._gated_reads = parties

    def create(self, *, employee_id: int, amount: Decimal, bill_type: BillType, submitted_by: str) -> int:
        with self._s.lock:
            if int(employee_id) not in self._s.employees:
                raise ValidationError("employee_id must exist", {"employee_id": "must exist"})
            bill_id = self._s.next_id("bills")
            self._s.bills[bill_id] = Bill(
                bill_id=bill_id,
                employee_id=int(employee_id),
                amount=amount,
                bill_type=BillType(bill_type),
                status=BillStatus.PENDING,
                submitted_by=submitted_by,
                created_at=self._s.now(),
            )
            return bill_id

    def get_by_id(self, bill_id: int) -> Optional[Bill]:
        with self._s.lock:
            bill = self._s.bills.get(int(bill_id))
            gated = self._gated_reads > 0
            if gated:
                self._gated_reads -= 1
        if gated:
            self._gate.wait()
        return bill

    def list_recent(self, *, employee_id: Optional[int] = None, limit: Optional[int] = None):
        with self._s.lock:
            bills = [b for b in self._s.bills.values() if employee_id is None or b.employee_id == int(employee_id)]
        bills.sort(key=lambda b: (b.created_at, b.bill_id), reverse=True)
        return bills[:limit] if limit is not None else bills

    def update_status(self, *, bill_id: int, expected: BillStatus, new: BillStatus) -> bool:
        with self._s.lock:
            bill = self._s.bills.get(int(bill_id))
            if bill is None or bill.status != expected:
                return False
            self._s.bills[bill.bill_id] = replace(bill, status=BillStatus(new))
            return True

    def stats_by_status(self, *, employee_id: Optional[int] = None):
        stats: dict[BillStatus, BillStatusStats] = {}
        for b in self.list_recent(employee_id=employee_id):
            cur = stats.get(b.status, BillStatusStats(0, ZERO))
            stats[b.status] = BillStatusStats(cur.count + 1, cur.amount + b.amount)
        return stats

    # test helper
    def set_status(self, bill_id: int, status: BillStatus) -> None:
        with self._s.lock:
            self._s.bills[bill_id] = replace(self._s.bills[bill_id], status=status)


@dataclass
class World:
    store: Store
    users: FakeUserRepo
    departments: FakeDepartmentRepo
    employees: FakeEmployeeRepo
    bills: FakeBillRepo

    def container(self) -> Container:
        return Container.from_repositories(
            users=self.users, departments=self.departments, employees=self.employees, bills=self.bills
        )

    def add_department(self, name: str) -> int:
        return self.departments.create(dept_name=name)

    def add_admin(self, *, name="Admin", email="admin@example.com", password="admin123") -> Principal:
        user_id = self.store.add_user(name=name, email=email, password=password, role=Role.ADMIN)
        return Principal(user_id=user_id, name=name, role=Role.ADMIN)

    def add_employee(
        self,
        first_name: str,
        last_name: str,
        *,
        dept_id: int,
        email: Optional[str] = None,
        with_user: bool = True,
        password: str = "secret1",
    ) -> tuple[Employee, Optional[Principal]]:
        email = email or f"{first_name}.{last_name}@example.com".lower()
        user_id = None
        if with_user:
            user_id = self.store.add_user(name=f"{first_name} {last_name}", email=email, password=password)
        details = EmployeeDetails(
            first_name=first_name, last_name=last_name, email=email, designation="Engineer", dept_id=dept_id
        )
        employee_id = self.employees.create(details=details, user_id=user_id)
        employee = self.employees.get_by_id(employee_id)
        principal = None
        if user_id is not None:
            principal = Principal(
                user_id=user_id, name=employee.full_name, role=Role.EMPLOYEE, employee_id=employee_id
            )
        return employee, principal

    def add_bill(self, employee: Employee, amount: str, bill_type=BillType.FOOD, status=BillStatus.PENDING) -> int:
        bill_id = self.bills.create(
            employee_id=employee.employee_id,
            amount=Decimal(amount),
            bill_type=bill_type,
            submitted_by=employee.full_name,
        )
        if status != BillStatus.PENDING:
            self.bills.set_status(bill_id, status)
        return bill_id


def make_world() -> World:
    store = Store()
    return World(
        store=store,
        users=FakeUserRepo(store),
        departments=FakeDepartmentRepo(store),
        employees=FakeEmployeeRepo(store),
        bills=FakeBillRepo(store),
    )
