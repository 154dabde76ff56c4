from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from workhub_api.common.http import ok, fail
from workhub_api.common.auth import requires_roles, current_roles, current_employee, resolve_employee
from workhub_api.models.attendance import MonthlyAttendance, MonthlySetting
from workhub_api.services import clock
from workhub_api.services.attendance_service import (
    ATTENDANCE_STATUSES, daily_attendance, month_summary_dict, month_total_days, set_month_days,
)

bp = Blueprint("attendance", __name__, url_prefix="/api")


@bp.get("/daily-attendance")
@requires_roles("admin", "manager", "team-lead")
def daily():
    raw = request.args.get("date")
    if not raw:
        return fail("Missing 'date' query parameter", 400)
    day = clock.parse_date(raw)
    if not day:
        return fail("Invalid date format. Use YYYY-MM-DD", 400)
    status = request.args.get("attendanceStatus") or None
    if status and status not in ATTENDANCE_STATUSES:
        return fail(f"attendanceStatus must be one of {', '.join(ATTENDANCE_STATUSES)}", 400)

    data = daily_attendance(day, search=request.args.get("search"),
                            work_mode=request.args.get("workMode") or None,
                            status_filter=status)
    return ok(data["employees"], date=data["date"], summary=data["summary"])


@bp.get("/attendance-summary")
@jwt_required()
def summary():
    emp = resolve_employee(request.args.get("employeeId"))
    month = request.args.get("month", type=int)
    year = request.args.get("year", type=int)
    if not request.args.get("employeeId") or not month or not year:
        return fail("employeeId, month and year are required", 400)
    if not emp:
        return fail("Employee not found", 404)

    roles = current_roles()
    me = current_employee()
    if not any(r in roles for r in ("admin", "manager", "team-lead")) and (me is None or me.id != emp.id):
        return fail("Forbidden", 403)

    row = MonthlyAttendance.query.filter_by(employee_id=emp.id, month=month, year=year).first()
    if not row:
        return fail("Attendance record not found", 404)
    return ok(month_summary_dict(row))


@bp.get("/monthly-settings")
@jwt_required()
def get_settings():
    today = clock.today_local()
    month = request.args.get("month", type=int) or today.month
    year = request.args.get("year", type=int) or today.year
    s = MonthlySetting.query.filter_by(month=month, year=year).first()
    return ok({
        "month": month,
        "year": year,
        "total_days": s.total_days if s else month_total_days(month, year),
        "is_default": s is None,
    })


@bp.post("/monthly-settings")
@requires_roles("admin")
def post_settings():
    d = request.get_json(silent=True) or {}
    try:
        month = int(d.get("month"))
        year = int(d.get("year"))
        total_days = int(d.get("total_days", d.get("totalDays")))
    except (TypeError, ValueError):
        return fail("month, year and total_days are required integers", 400)

    s, updated = set_month_days(month, year, total_days)
    return ok({"month": s.month, "year": s.year, "total_days": s.total_days},
              updated_records=updated, message="Monthly settings saved")
