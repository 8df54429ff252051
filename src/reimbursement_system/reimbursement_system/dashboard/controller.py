from __future__ import annotations

from flask import Flask, jsonify, redirect, url_for

from ..bills.controller import bill_to_dict
from ..common.http import current_principal, login_required
from ..container import Container
from ..users.access import is_admin


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        principal = current_principal()
        if not is_admin(principal):
            return redirect(url_for("bills"))

        data = container.dashboard_service.build(principal)
        body = {k: (str(v) if not isinstance(v, int) else v) for k, v in data.as_dict().items()}
        body["recent_bills"] = [bill_to_dict(b) for b in data.recent_bills]
        return jsonify(body)
