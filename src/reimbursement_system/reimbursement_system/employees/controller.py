from __future__ import annotations

from flask import Flask, jsonify

from ..bills.model import BillTotals
from ..common.http import admin_required, current_principal, read_form
from ..container import Container
from .model import Employee, ProvisioningResult


def employee_to_dict(e: Employee) -> dict:
    return {
        "id": e.employee_id,
        "first_name": e.first_name,
        "last_name": e.last_name,
        "full_name": e.full_name,
        "email": e.email,
        "designation": e.designation,
        "department_id": e.dept_id,
        "department_name": e.dept_name,
        "user_id": e.user_id,
    }


def totals_to_dict(t: BillTotals) -> dict:
    return {"total_bills_amount": str(t.submitted), "total_approved_amount": str(t.approved), "bill_count": t.count}


def provisioning_message(result: ProvisioningResult) -> str:
    if result.is_new:
        return f"User account created. Temporary password: {result.temporary_password}"
    return "Linked to existing user account."


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.route("/employees", methods=["GET"], endpoint="employees")
    @admin_required
    def list_employees():
        employees = service.list_employees(current_principal())
        return jsonify({"employees": [employee_to_dict(e) for e in employees]})

    @app.route("/employees", methods=["POST"], endpoint="create_employee")
    @admin_required
    def create_employee():
        created = service.create_employee(current_principal(), read_form())
        p = created.provisioning
        return (
            jsonify(
                {
                    "message": f"Employee was successfully created. {provisioning_message(p)}",
                    "employee": employee_to_dict(created.employee),
                    "user_id": p.user_id,
                    "user_created": p.is_new,
                    "temporary_password": p.temporary_password,
                }
            ),
            201,
        )

    @app.route("/employees/<int:employee_id>", methods=["GET"], endpoint="employee")
    @admin_required
    def show_employee(employee_id: int):
        principal = current_principal()
        employee = service.get_employee(principal, employee_id)
        totals = service.bill_totals(principal, employee_id)
        return jsonify({"employee": employee_to_dict(employee), "totals": totals_to_dict(totals)})

    @app.route("/employees/<int:employee_id>", methods=["PUT", "PATCH"], endpoint="update_employee")
    @admin_required
    def update_employee(employee_id: int):
        employee = service.update_employee(current_principal(), employee_id, read_form())
        return jsonify({"message": "Employee was successfully updated.", "employee": employee_to_dict(employee)})

    @app.route("/employees/<int:employee_id>", methods=["DELETE"], endpoint="delete_employee")
    @admin_required
    def delete_employee(employee_id: int):
        service.delete_employee(current_principal(), employee_id)
        return jsonify({"message": "Employee was successfully deleted."})

    @app.route("/employees/<int:employee_id>/provision-user", methods=["POST"], endpoint="provision_user")
    @admin_required
    def provision_user(employee_id: int):
        result = service.provision_user(current_principal(), employee_id)
        return jsonify(
            {
                "message": provisioning_message(result),
                "user_id": result.user_id,
                "user_created": result.is_new,
                "temporary_password": result.temporary_password,
            }
        )
