from __future__ import annotations

import csv
import io
from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..common.web import admin_required, handle_errors, parse_date_arg, request_data
from ..container import Container

_EXPORT_FIELDS = ["date", "matricula", "nombre", "grupo", "timestamp", "status"]


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_register")
    @handle_errors
    def register_attendance():
        data = request_data()
        result = container.attendance_service.register(
            data.get("matricula"),
            device_fingerprint=data.get("device_fingerprint") or data.get("deviceFingerprint"),
            user_agent=request.headers.get("User-Agent"),
        )
        return jsonify(result.to_json()), 201

    @app.route("/api/attendance/check/<matricula>", methods=["GET"], endpoint="attendance_check")
    @handle_errors
    def check_today(matricula: str):
        record = container.attendance_service.find_today(matricula)
        return jsonify(
            {
                "success": True,
                "registered": record is not None,
                "attendance": record.to_json() if record else None,
            }
        )

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @handle_errors
    def today():
        records = container.attendance_service.list_by_date(date.today())
        return jsonify({"success": True, "count": len(records), "attendances": [r.to_json() for r in records]})

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @handle_errors
    def stats():
        day = parse_date_arg(request.args.get("date"))
        return jsonify({"success": True, "stats": container.attendance_service.stats(day)})

    @app.route("/api/attendance/date/<day>", methods=["GET"], endpoint="attendance_by_date")
    @admin_required
    @handle_errors
    def by_date(day: str):
        target = parse_date_arg(day)
        records = container.attendance_service.list_by_date(target)
        return jsonify(
            {"success": True, "date": target.isoformat(), "count": len(records), "attendances": [r.to_json() for r in records]}
        )

    @app.route("/api/attendance/history/<matricula>", methods=["GET"], endpoint="attendance_history")
    @admin_required
    @handle_errors
    def history(matricula: str):
        history = container.attendance_service.history_summary(matricula)
        student = container.student_service.find_by_matricula(matricula)
        return jsonify({"success": True, "student": student.to_json() if student else None, **history})

    def _range_args() -> tuple[date, date]:
        today = date.today()
        start = parse_date_arg(request.args.get("start"), "start") or today - timedelta(days=7)
        end = parse_date_arg(request.args.get("end"), "end") or today
        return start, end

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    @admin_required
    @handle_errors
    def report():
        start, end = _range_args()
        return jsonify({"success": True, "report": container.attendance_service.report(start, end)})

    @app.route("/api/attendance/export", methods=["GET"], endpoint="attendance_export")
    @admin_required
    @handle_errors
    def export():
        start, end = _range_args()
        rows = container.attendance_service.export_rows(start, end)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_EXPORT_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        # BOM so spreadsheets open the accents correctly.
        csv_bytes = out.getvalue().encode("utf-8-sig")
        filename = f"asistencias_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance/validate", methods=["GET"], endpoint="attendance_validate")
    @admin_required
    @handle_errors
    def validate():
        return jsonify({"success": True, "integrity": container.attendance_service.validate_integrity()})

    @app.route("/api/attendance/clear", methods=["DELETE"], endpoint="attendance_clear")
    @admin_required
    @handle_errors
    def clear():
        deleted = container.attendance_service.clear()
        return jsonify({"success": True, "deleted": deleted})

    @app.route("/api/admin/detailed-list", methods=["GET"], endpoint="admin_detailed_list")
    @admin_required
    @handle_errors
    def detailed_list():
        day = parse_date_arg(request.args.get("date"))
        return jsonify({"success": True, **container.attendance_service.detailed_list(day)})
