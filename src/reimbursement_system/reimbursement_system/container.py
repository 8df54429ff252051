from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .bills.mysql_bill_repository import MySQLBillRepository
from .bills.repository import BillRepository
from .bills.service import BillService
from .dashboard.service import DashboardService
from .database.connection import DatabaseConnection, DBConfig
from .departments.mysql_department_repository import MySQLDepartmentRepository
from .departments.repository import DepartmentRepository
from .departments.service import DepartmentService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, RegistrationService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    departments_repo: DepartmentRepository
    employees_repo: EmployeeRepository
    bills_repo: BillRepository

    auth_service: AuthService
    registration_service: RegistrationService
    department_service: DepartmentService
    employee_service: EmployeeService
    bill_service: BillService
    dashboard_service: DashboardService

    conn: Optional[DatabaseConnection] = None

    @classmethod
    def from_repositories(
        cls,
        *,
        users: UserRepository,
        departments: DepartmentRepository,
        employees: EmployeeRepository,
        bills: BillRepository,
        conn: Optional[DatabaseConnection] = None,
    ) -> "Container":
        return cls(
            users_repo=users,
            departments_repo=departments,
            employees_repo=employees,
            bills_repo=bills,
            auth_service=AuthService(users),
            registration_service=RegistrationService(users, employees, departments),
            department_service=DepartmentService(departments),
            employee_service=EmployeeService(employees, users, departments, bills),
            bill_service=BillService(bills, employees),
            dashboard_service=DashboardService(bills, employees, departments),
            conn=conn,
        )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return Container.from_repositories(
        users=MySQLUserRepository(conn),
        departments=MySQLDepartmentRepository(conn),
        employees=MySQLEmployeeRepository(conn),
        bills=MySQLBillRepository(conn),
        conn=conn,
    )
