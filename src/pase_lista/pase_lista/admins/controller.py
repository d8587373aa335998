from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.web import admin_required, handle_errors, request_data
from ..container import Container
from .service import password_strength


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    @handle_errors
    def login():
        data = request_data()
        username = (data.get("username") or "").strip()
        password = data.get("password") or ""

        s_admin = container.auth_service.authenticate(username, password)

        session.clear()
        session.permanent = True
        session["admin"] = s_admin.username
        session["last_login"] = s_admin.last_login.isoformat() if s_admin.last_login else None

        return jsonify({"success": True, "message": "Inicio de sesión exitoso", "admin": {"username": s_admin.username}})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return jsonify({"success": True, "message": "Sesión cerrada"})

    @app.route("/api/auth/session", methods=["GET"], endpoint="auth_session")
    @admin_required
    def current_session():
        return jsonify({"success": True, "admin": {"username": session["admin"], "last_login": session.get("last_login")}})

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @admin_required
    @handle_errors
    def change_password():
        data = request_data()
        container.auth_service.change_password(
            session["admin"],
            data.get("current_password") or "",
            data.get("new_password") or "",
        )
        return jsonify({"success": True, "message": "Contraseña actualizada"})

    @app.route("/api/auth/validate-password", methods=["POST"], endpoint="auth_validate_password")
    @handle_errors
    def validate_password():
        data = request_data()
        strength = password_strength(data.get("password") or "")
        return jsonify(
            {"success": True, "score": strength.score, "is_strong": strength.is_strong, "issues": strength.issues}
        )

    @app.route("/api/auth/login-attempts", methods=["GET"], endpoint="auth_login_attempts")
    @admin_required
    @handle_errors
    def login_attempts():
        return jsonify({"success": True, **container.auth_service.login_attempts(session["admin"])})
