from __future__ import annotations

from decimal import Decimal

import pytest
from werkzeug.security import check_password_hash

from src.reimbursement_system.reimbursement_system.core.enums import BillStatus
from src.reimbursement_system.reimbursement_system.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.reimbursement_system.reimbursement_system.employees.service import EmployeeService


@pytest.fixture()
def service(world):
    return EmployeeService(world.employees, world.users, world.departments, world.bills)


def _form(dept_id, **overrides):
    form = {
        "first_name": "Ann",
        "last_name": "Lee",
        "email": "ann@example.com",
        "designation": "Analyst",
        "department_id": dept_id,
    }
    form.update(overrides)
    return form


def test_create_provisions_new_account_with_one_time_password(world, service, admin, engineering):
    created = service.create_employee(admin, _form(engineering))

    p = created.provisioning
    assert p.is_new
    assert len(p.temporary_password) == 32
    assert created.employee.user_id == p.user_id
    assert created.employee.dept_name == "Engineering"

    user = world.users.get_by_id(p.user_id)
    assert user.name == "Ann Lee"
    assert user.employee_id == created.employee.employee_id
    assert user.password_hash != p.temporary_password
    assert check_password_hash(user.password_hash, p.temporary_password)


def test_create_links_existing_unlinked_user(world, service, admin, engineering):
    user_id = world.store.add_user(name="Ann Lee", email="ann@example.com")

    created = service.create_employee(admin, _form(engineering))

    assert created.provisioning.user_id == user_id
    assert not created.provisioning.is_new
    assert created.provisioning.temporary_password is None
    assert world.users.get_by_id(user_id).employee_id == created.employee.employee_id


def test_create_with_email_of_user_linked_elsewhere_conflicts(world, service, admin, engineering):
    # A user whose account links an employee under a different employee email.
    other, principal = world.add_employee("Xavier", "Young", dept_id=engineering, email="first@y.com")
    world.store.users[principal.user_id].email = "x@y.com"

    with pytest.raises(ConflictError):
        service.create_employee(admin, _form(engineering, email="x@y.com"))

    assert [e.employee_id for e in world.employees.list_all()] == [other.employee_id]


def test_create_validates_fields(world, service, admin, engineering, jane):
    form = _form(engineering, first_name="", email="jane.smith@example.com", department_id="abc")

    with pytest.raises(ValidationError) as exc:
        service.create_employee(admin, form)

    assert exc.value.fields == {
        "first_name": "can't be blank",
        "email": "has already been taken",
        "department_id": "is invalid",
    }


def test_create_requires_admin(service, jane, engineering):
    _, principal = jane
    with pytest.raises(AuthorizationError):
        service.create_employee(principal, _form(engineering))


def test_provision_user_outcomes(world, service, admin, engineering):
    # already linked
    linked, principal = world.add_employee("Jane", "Smith", dept_id=engineering)
    result = service.provision_user(admin, linked.employee_id)
    assert (result.user_id, result.is_new, result.temporary_password) == (principal.user_id, False, None)

    # existing unlinked user with the same email
    loose, _ = world.add_employee("Tom", "Hill", dept_id=engineering, with_user=False)
    user_id = world.store.add_user(name="Tom Hill", email=loose.email)
    result = service.provision_user(admin, loose.employee_id)
    assert (result.user_id, result.is_new) == (user_id, False)
    assert world.employees.get_by_id(loose.employee_id).user_id == user_id

    # no user yet
    fresh, _ = world.add_employee("Eve", "Park", dept_id=engineering, with_user=False)
    result = service.provision_user(admin, fresh.employee_id)
    assert result.is_new and result.temporary_password
    assert world.employees.get_by_id(fresh.employee_id).user_id == result.user_id

    # provisioning again is a no-op
    again = service.provision_user(admin, fresh.employee_id)
    assert (again.user_id, again.is_new) == (result.user_id, False)


def test_provision_user_conflicts_when_email_user_is_linked_elsewhere(world, service, admin, engineering):
    _, principal = world.add_employee("Jane", "Smith", dept_id=engineering)
    loose, _ = world.add_employee("Jan", "Smit", dept_id=engineering, with_user=False, email="jan@example.com")
    world.store.users[principal.user_id].email = "jan@example.com"

    with pytest.raises(ConflictError):
        service.provision_user(admin, loose.employee_id)
    assert world.employees.get_by_id(loose.employee_id).user_id is None


def test_update_keeps_bill_snapshots(world, service, admin, engineering, jane):
    employee, _ = jane
    bill_id = world.add_bill(employee, "12.00")
    finance = world.add_department("Finance")

    updated = service.update_employee(
        admin,
        employee.employee_id,
        _form(finance, first_name="Janet", last_name="Smith", email=employee.email),
    )

    assert updated.full_name == "Janet Smith"
    assert updated.dept_name == "Finance"
    assert world.bills.get_by_id(bill_id).submitted_by == "Jane Smith"


def test_delete_employee_removes_its_bills(world, service, admin, jane, bob):
    employee, _ = jane
    other, _ = bob
    bill_ids = [world.add_bill(employee, "10.00"), world.add_bill(employee, "20.00", status=BillStatus.APPROVED)]
    kept = world.add_bill(other, "5.00")

    service.delete_employee(admin, employee.employee_id)

    with pytest.raises(NotFoundError):
        service.get_employee(admin, employee.employee_id)
    for bill_id in bill_ids:
        assert world.bills.get_by_id(bill_id) is None
    assert world.bills.get_by_id(kept) is not None


def test_delete_missing_employee(service, admin):
    with pytest.raises(NotFoundError):
        service.delete_employee(admin, 123)


def test_bill_totals_for_admin_and_self_only(world, service, admin, jane, bob):
    employee, principal = jane
    _, other = bob
    world.add_bill(employee, "100.00")
    world.add_bill(employee, "50.00", status=BillStatus.APPROVED)
    world.add_bill(employee, "25.00", status=BillStatus.REJECTED)

    assert service.total_bills_amount(admin, employee.employee_id) == Decimal("175.00")
    assert service.total_approved_amount(principal, employee.employee_id) == Decimal("50.00")
    with pytest.raises(AuthorizationError):
        service.bill_totals(other, employee.employee_id)


def test_create_rejects_fields_longer_than_their_columns(world, service, admin, engineering):
    form = _form(engineering, last_name="L" * 101, designation="D" * 101)

    with pytest.raises(ValidationError) as exc:
        service.create_employee(admin, form)

    assert exc.value.fields == {
        "last_name": "is too long (maximum is 100 characters)",
        "designation": "is too long (maximum is 100 characters)",
    }
    assert world.store.employees == {}
