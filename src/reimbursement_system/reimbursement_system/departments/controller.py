from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_principal, read_form
from ..container import Container
from .model import Department


def department_to_dict(d: Department) -> dict:
    return {"id": d.dept_id, "name": d.dept_name, "employee_count": d.employee_count}


def register(app: Flask, container: Container) -> None:
    service = container.department_service

    @app.route("/departments", methods=["GET"], endpoint="departments")
    @admin_required
    def list_departments():
        departments = service.list_departments(current_principal())
        return jsonify({"departments": [department_to_dict(d) for d in departments]})

    @app.route("/departments", methods=["POST"], endpoint="create_department")
    @admin_required
    def create_department():
        dept = service.create_department(current_principal(), name=read_form().get("name", ""))
        return jsonify({"message": "Department was successfully created.", "department": department_to_dict(dept)}), 201

    @app.route("/departments/<int:dept_id>", methods=["GET"], endpoint="department")
    @admin_required
    def show_department(dept_id: int):
        return jsonify({"department": department_to_dict(service.get_department(current_principal(), dept_id))})

    @app.route("/departments/<int:dept_id>", methods=["PUT", "PATCH"], endpoint="update_department")
    @admin_required
    def update_department(dept_id: int):
        dept = service.rename_department(current_principal(), dept_id, name=read_form().get("name", ""))
        return jsonify({"message": "Department was successfully updated.", "department": department_to_dict(dept)})

    @app.route("/departments/<int:dept_id>", methods=["DELETE"], endpoint="delete_department")
    @admin_required
    def delete_department(dept_id: int):
        service.delete_department(current_principal(), dept_id)
        return jsonify({"message": "Department was successfully deleted."})
