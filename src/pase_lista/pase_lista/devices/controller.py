from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, handle_errors
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/devices", methods=["GET"], endpoint="admin_devices")
    @admin_required
    @handle_errors
    def devices():
        items = container.device_service.list_devices()
        return jsonify({"success": True, "count": len(items), "devices": [d.to_json() for d in items]})
