from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, handle_errors, request_data
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/students/upload", methods=["POST"], endpoint="students_upload")
    @admin_required
    @handle_errors
    def upload():
        uploaded = request.files.get("file")
        if uploaded is not None:
            result = container.student_service.import_csv_bytes(uploaded.read())
        else:
            data = request_data()
            students = data.get("students")
            if not isinstance(students, list) or not students:
                raise ValidationError("Se requiere un archivo CSV o una lista de estudiantes", code="INVALID_STUDENTS_LIST")
            result = container.student_service.replace_all(students)

        return jsonify({"success": True, "message": f"{result.accepted} estudiantes cargados", **result.to_json()})

    @app.route("/api/admin/students/search", methods=["GET"], endpoint="students_search")
    @admin_required
    @handle_errors
    def search():
        students = container.student_service.search(request.args.get("q"), grupo=request.args.get("grupo"))
        return jsonify({"success": True, "count": len(students), "students": [s.to_json() for s in students]})

    @app.route("/api/admin/students/stats", methods=["GET"], endpoint="students_stats")
    @admin_required
    @handle_errors
    def stats():
        return jsonify({"success": True, "stats": container.student_service.stats()})

    @app.route("/api/admin/students/validate", methods=["GET"], endpoint="students_validate")
    @admin_required
    @handle_errors
    def validate():
        return jsonify({"success": True, "integrity": container.student_service.validate_integrity()})

    @app.route("/api/admin/students/clear", methods=["DELETE"], endpoint="students_clear")
    @admin_required
    @handle_errors
    def clear():
        return jsonify({"success": True, "deleted": container.student_service.clear()})
