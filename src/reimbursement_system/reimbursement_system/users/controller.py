from __future__ import annotations

from datetime import timedelta

from flask import Flask, g, jsonify, session

from ..common.http import current_principal, login_required, read_form
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from .model import Principal


def principal_to_dict(p: Principal) -> dict:
    return {
        "user_id": p.user_id,
        "name": p.name,
        "role": p.role.value,
        "employee_id": p.employee_id,
    }


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    def _start_session(principal: Principal, *, remember: bool) -> None:
        session.clear()
        session.permanent = remember
        session["user_id"] = principal.user_id
        g.principal = principal

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        form = read_form()
        principal = container.auth_service.authenticate(form.get("email", ""), form.get("password", ""))
        _start_session(principal, remember=bool(form.get("remember_me")))
        return jsonify({"message": "Signed in successfully.", "user": principal_to_dict(principal)})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        g.principal = None
        return jsonify({"message": "Signed out successfully."})

    @app.route("/register", methods=["POST"], endpoint="register")
    def register_account():
        principal = container.registration_service.register(read_form())
        _start_session(principal, remember=False)
        return jsonify({"message": "Welcome! You have signed up successfully.", "user": principal_to_dict(principal)}), 201

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify({"user": principal_to_dict(current_principal())})
