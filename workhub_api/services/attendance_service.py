# workhub_api/services/attendance_service.py
from __future__ import annotations

import logging
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal

from flask import current_app
from sqlalchemy import or_

from workhub_api.extensions import db
from workhub_api.common.errors import APIError
from workhub_api.models.employee import Employee
from workhub_api.models.intern import InternWorkLog
from workhub_api.models.attendance import DailyWorkLog, MonthlyAttendance, MonthlySetting
from workhub_api.models.leave import LeaveRequest
from workhub_api.models.permission import PermissionRequest
from workhub_api.services import clock

log = logging.getLogger(__name__)

ATTENDANCE_STATUSES = ("Present", "Late", "Missed", "Leave", "Permission", "Absent")
PERMISSION_BLOCKING = ("Approved", "Pending Manager Approval")


# ---------------- monthly counters ----------------

def month_total_days(month: int, year: int) -> int:
    s = MonthlySetting.query.filter_by(month=month, year=year).first()
    if s:
        return s.total_days
    return int(current_app.config.get("DEFAULT_MONTH_DAYS") or 28)


def get_or_create_month(employee_id: int, month: int, year: int) -> MonthlyAttendance:
    row = MonthlyAttendance.query.filter_by(employee_id=employee_id, month=month, year=year).first()
    if row is None:
        row = MonthlyAttendance(
            employee_id=employee_id, month=month, year=year,
            total_days=month_total_days(month, year),
            working_days=0, permissions=0, leaves=0, missed_days=0,
        )
        db.session.add(row)
        db.session.flush()
    return row


def bump_month(employee_id: int, month: int, year: int, **deltas) -> MonthlyAttendance:
    row = get_or_create_month(employee_id, month, year)
    for field, delta in deltas.items():
        setattr(row, field, (getattr(row, field) or 0) + delta)
    return row


def leave_days_by_month(start: date, end: date) -> Counter:
    """{(year, month): days} for the inclusive range."""
    out = Counter()
    d = start
    while d <= end:
        out[(d.year, d.month)] += 1
        d += timedelta(days=1)
    return out


def set_month_days(month: int, year: int, total_days: int) -> tuple[MonthlySetting, int]:
    if not (1 <= month <= 12):
        raise APIError("BAD_MONTH", "Month must be between 1 and 12", 400)
    if not (1 <= total_days <= 31):
        raise APIError("BAD_TOTAL_DAYS", "Total days must be between 1 and 31", 400)

    s = MonthlySetting.query.filter_by(month=month, year=year).first()
    if s is None:
        s = MonthlySetting(month=month, year=year, total_days=total_days)
        db.session.add(s)
    else:
        s.total_days = total_days

    updated = (MonthlyAttendance.query
               .filter_by(month=month, year=year)
               .update({MonthlyAttendance.total_days: total_days}, synchronize_session=False))
    db.session.commit()
    log.info("Monthly setting %s/%s = %s days (%s attendance rows updated)", month, year, total_days, updated)
    return s, updated


# ---------------- work logs ----------------

def _hours_and_overtime(check_in, check_out):
    if check_out <= check_in:
        raise APIError("BAD_CHECKOUT", "Check-out time must be after check-in time", 400)
    hours = clock.hours_between(check_in, check_out)
    standard = float(current_app.config.get("STANDARD_WORK_HOURS") or 8)
    overtime = round(max(0.0, hours - standard), 2)
    return Decimal(str(hours)), Decimal(str(overtime))


def upsert_worklog(emp: Employee, check_in_raw, check_out_raw=None, project=None, description=None):
    """Returns (row, created). Commits."""
    check_in = clock.parse_datetime(check_in_raw)
    if check_in is None:
        raise APIError("BAD_CHECKIN", "Check-in time is required", 400)
    check_out = clock.parse_datetime(check_out_raw) if check_out_raw else None
    if check_out_raw and check_out is None:
        raise APIError("BAD_CHECKOUT", "Invalid check-out time", 400)

    day = check_in.date()
    row = DailyWorkLog.query.filter_by(employee_id=emp.id, date=day).first()
    created = row is None
    if created:
        row = DailyWorkLog(employee_id=emp.id, date=day, check_in=check_in, status="Present")
        db.session.add(row)
    elif row.check_in is None:
        row.check_in = check_in

    if check_out is not None:
        row.hours, row.overtime_hours = _hours_and_overtime(row.check_in, check_out)
        row.check_out = check_out
    if project is not None:
        row.project = project
    if description is not None:
        row.description = description

    if created:
        bump_month(emp.id, day.month, day.year, working_days=1)

    db.session.commit()
    log.info("Work log %s for employee %s on %s (check_out=%s)",
             "created" if created else "updated", emp.code, day, row.check_out)
    return row, created


def upsert_intern_worklog(intern, check_in_raw, check_out_raw=None, work_type=None, description=None):
    check_in = clock.parse_datetime(check_in_raw)
    if check_in is None:
        raise APIError("BAD_CHECKIN", "Check-in time is required", 400)
    check_out = clock.parse_datetime(check_out_raw) if check_out_raw else None
    if check_out_raw and check_out is None:
        raise APIError("BAD_CHECKOUT", "Invalid check-out time", 400)

    day = check_in.date()
    row = InternWorkLog.query.filter_by(intern_id=intern.id, date=day).first()
    created = row is None
    if created:
        row = InternWorkLog(intern_id=intern.id, date=day, check_in=check_in,
                            department=intern.domain_in_office or "General")
        db.session.add(row)
    elif row.check_in is None:
        row.check_in = check_in

    if check_out is not None:
        row.total_hours, row.overtime_hours = _hours_and_overtime(row.check_in, check_out)
        row.check_out = check_out
    if work_type is not None:
        row.work_type = work_type
    if description is not None:
        row.description = description

    db.session.commit()
    log.info("Intern work log %s for intern #%s on %s", "created" if created else "updated", intern.id, day)
    return row, created


def worklog_dict(r: DailyWorkLog) -> dict:
    return {
        "id": r.id,
        "employee_id": r.employee_id,
        "date": r.date.isoformat(),
        "check_in": r.check_in.isoformat() if r.check_in else None,
        "check_out": r.check_out.isoformat() if r.check_out else None,
        "hours": float(r.hours) if r.hours is not None else None,
        "overtime_hours": float(r.overtime_hours) if r.overtime_hours is not None else None,
        "project": r.project,
        "description": r.description,
        "status": r.status,
    }


def intern_worklog_dict(r: InternWorkLog) -> dict:
    return {
        "id": r.id,
        "intern_id": r.intern_id,
        "date": r.date.isoformat(),
        "check_in": r.check_in.isoformat() if r.check_in else None,
        "check_out": r.check_out.isoformat() if r.check_out else None,
        "total_hours": float(r.total_hours) if r.total_hours is not None else None,
        "overtime_hours": float(r.overtime_hours) if r.overtime_hours is not None else None,
        "project": r.work_type,
        "description": r.description,
        "department": r.department,
    }


# ---------------- daily classification ----------------

def classify(log_row, on_leave: bool, on_permission: bool, late_after=None) -> str:
    if on_permission:
        return "Permission"
    if on_leave:
        return "Leave"
    if log_row is None or (log_row.check_in is None and log_row.check_out is None):
        return "Absent"
    if log_row.check_in is not None and log_row.check_out is None:
        return "Missed"
    if log_row.check_in is None:
        return "Absent"
    cutoff = late_after or clock.late_after()
    return "Late" if log_row.check_in.time() > cutoff else "Present"


def daily_attendance(day: date, search=None, work_mode=None, status_filter=None) -> dict:
    employees = Employee.query.order_by(Employee.code.asc()).all()
    logs = {r.employee_id: r for r in DailyWorkLog.query.filter_by(date=day).all()}

    leave_ids = {r[0] for r in db.session.query(LeaveRequest.employee_id)
                 .filter(LeaveRequest.status == "Approved",
                         LeaveRequest.start_date <= day,
                         LeaveRequest.end_date >= day).all()}
    perm_ids = {r[0] for r in db.session.query(PermissionRequest.employee_id)
                .filter(PermissionRequest.date == day,
                        PermissionRequest.status.in_(PERMISSION_BLOCKING)).all()}

    cutoff = clock.late_after()
    rows = []
    for emp in employees:
        lg = logs.get(emp.id)
        rows.append({
            "id": emp.code,
            "employee_id": emp.id,
            "name": emp.name,
            "designation": emp.designation,
            "workMode": emp.work_mode,
            "attendanceStatus": classify(lg, emp.id in leave_ids, emp.id in perm_ids, cutoff),
            "checkInTime": lg.check_in.isoformat() if lg and lg.check_in else None,
            "checkOutTime": lg.check_out.isoformat() if lg and lg.check_out else None,
            "totalHours": float(lg.hours) if lg and lg.hours is not None else 0,
            "project": lg.project if lg else None,
            "description": lg.description if lg else None,
        })

    q = (search or "").strip().lower()
    if q:
        rows = [r for r in rows
                if q in (r["name"] or "").lower()
                or q in (r["id"] or "").lower()
                or q in (r["designation"] or "").lower()]
    if work_mode:
        rows = [r for r in rows if r["workMode"] == work_mode]
    if status_filter:
        rows = [r for r in rows if r["attendanceStatus"] == status_filter]

    counts = Counter(r["attendanceStatus"] for r in rows)
    summary = {
        "totalEmployees": len(rows),
        "presentCount": counts["Present"],
        "lateCount": counts["Late"],
        "missedCount": counts["Missed"],
        "leaveCount": counts["Leave"],
        "permissionCount": counts["Permission"],
        "absentCount": counts["Absent"],
        "date": day.isoformat(),
    }
    return {"date": day.isoformat(), "employees": rows, "summary": summary}


def month_summary_dict(row: MonthlyAttendance) -> dict:
    return {
        "employee_id": row.employee_id,
        "month": row.month,
        "year": row.year,
        "total_days": row.total_days,
        "working_days": row.working_days,
        "permissions": row.permissions,
        "leaves": row.leaves,
        "missed_days": row.missed_days,
    }


def search_employees_filter(q: str):
    like = f"%{q}%"
    return or_(Employee.name.ilike(like), Employee.code.ilike(like),
               Employee.email.ilike(like), Employee.designation.ilike(like))
