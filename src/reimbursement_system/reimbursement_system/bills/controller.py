from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_principal, employee_required, login_required, read_form
from ..container import Container
from .lifecycle import allowed_actions
from .model import Bill, BillListing


def bill_to_dict(b: Bill) -> dict:
    return {
        "id": b.bill_id,
        "employee_id": b.employee_id,
        "amount": str(b.amount),
        "bill_type": b.bill_type.value,
        "status": b.status.value,
        "submitted_by": b.submitted_by,
        "created_at": b.created_at.isoformat() if b.created_at else None,
        "allowed_actions": [a.value for a in allowed_actions(b.status)],
    }


def listing_to_dict(listing: BillListing) -> dict:
    return {
        "bills": [bill_to_dict(b) for b in listing.bills],
        "total_submitted": str(listing.total_submitted),
        "total_approved": str(listing.total_approved),
    }


def register(app: Flask, container: Container) -> None:
    service = container.bill_service

    @app.route("/bills", methods=["GET"], endpoint="bills")
    @login_required
    def list_bills():
        return jsonify(listing_to_dict(service.list_bills(current_principal())))

    @app.route("/bills", methods=["POST"], endpoint="create_bill")
    @employee_required
    def create_bill():
        bill = service.create_bill(current_principal(), read_form())
        return jsonify({"message": "Bill submitted successfully.", "bill": bill_to_dict(bill)}), 201

    @app.route("/bills/<int:bill_id>", methods=["GET"], endpoint="bill")
    @login_required
    def show_bill(bill_id: int):
        return jsonify({"bill": bill_to_dict(service.get_bill(current_principal(), bill_id))})

    @app.route("/bills/<int:bill_id>/approve", methods=["POST"], endpoint="approve_bill")
    @admin_required
    def approve_bill(bill_id: int):
        bill = service.approve(current_principal(), bill_id)
        return jsonify({"message": "Bill approved successfully.", "bill": bill_to_dict(bill)})

    @app.route("/bills/<int:bill_id>/reject", methods=["POST"], endpoint="reject_bill")
    @admin_required
    def reject_bill(bill_id: int):
        bill = service.reject(current_principal(), bill_id)
        return jsonify({"message": "Bill rejected successfully.", "bill": bill_to_dict(bill)})

    @app.route("/bills/<int:bill_id>/revoke-approval", methods=["POST"], endpoint="revoke_approval")
    @admin_required
    def revoke_approval(bill_id: int):
        bill = service.revoke_approval(current_principal(), bill_id)
        return jsonify({"message": "Bill approval revoked successfully.", "bill": bill_to_dict(bill)})

    @app.route("/bills/<int:bill_id>/revoke-rejection", methods=["POST"], endpoint="revoke_rejection")
    @admin_required
    def revoke_rejection(bill_id: int):
        bill = service.revoke_rejection(current_principal(), bill_id)
        return jsonify({"message": "Bill rejection revoked successfully.", "bill": bill_to_dict(bill)})
