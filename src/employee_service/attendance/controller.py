from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, g, request

from ..common.http import respond, token_required
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Attendance, CheckInRequest


def attendance_to_dict(a: Optional[Attendance]) -> Optional[Dict[str, Any]]:
    if a is None:
        return None
    return {
        "id": a.attendance_id,
        "employee_id": a.employee_id,
        "employee_name": a.employee_name,
        "location": a.location,
        "work_date": a.work_date.date().isoformat(),
        "check_in_time": a.check_in_time.isoformat(),
        "check_out_time": a.check_out_time.isoformat() if a.check_out_time else None,
        "is_late": a.is_late,
        "status": a.status.value,
    }


def _limit() -> int:
    raw = request.args.get("limit")
    if raw is None or raw == "":
        return DEFAULT_HISTORY_LIMIT
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("limit must be an integer") from None


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/attendances/checkin", methods=["POST"], endpoint="checkin")
    @token_required
    def checkin():
        data = request.get_json(silent=True) or {}
        location = data.get("location", "") if isinstance(data, dict) else ""
        attendance_id = service.check_in(g.claims.user_id, CheckInRequest(location=str(location or "")))
        record = service.get_today_record(g.claims.user_id)
        return respond(attendance_to_dict(record) or {"id": attendance_id}, "check-in successful", 201)

    @app.route("/attendances/checkout", methods=["POST"], endpoint="checkout")
    @token_required
    def checkout():
        record = service.check_out(g.claims.user_id)
        return respond(attendance_to_dict(record), "check-out successful")

    @app.route("/attendances/me", methods=["GET"], endpoint="my_attendance")
    @token_required
    def my_attendance():
        history = service.history(
            caller_role=g.claims.role,
            caller_id=g.claims.user_id,
            employee_id=g.claims.user_id,
            limit=_limit(),
        )
        today = service.get_today_record(g.claims.user_id)
        return respond({
            "today": attendance_to_dict(today),
            "history": [attendance_to_dict(a) for a in history],
        })

    @app.route("/employees/<employee_id>/attendances", methods=["GET"], endpoint="employee_attendance")
    @token_required
    def employee_attendance(employee_id: str):
        history = service.history(
            caller_role=g.claims.role,
            caller_id=g.claims.user_id,
            employee_id=employee_id,
            limit=_limit(),
        )
        return respond([attendance_to_dict(a) for a in history])
