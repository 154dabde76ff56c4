from datetime import datetime
from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required
from sqlalchemy import or_

from workhub_api.extensions import db
from workhub_api.common.http import ok, fail
from workhub_api.common.paging import page_limit, pagination, text_q
from workhub_api.common.auth import (
    requires_roles, current_roles, current_employee, resolve_employee,
)
from workhub_api.models.employee import Employee, WORK_MODES, EMPLOYEE_STATUSES
from workhub_api.models.user import USER_TYPES
from workhub_api.models.attendance import DailyWorkLog, MonthlyAttendance
from workhub_api.services import clock
from workhub_api.services.attendance_service import (
    get_or_create_month, month_total_days, upsert_worklog, worklog_dict,
)

bp = Blueprint("employees", __name__, url_prefix="/api/employees")

STATUS_TOGGLE = ("Active", "Inactive")
STAFF_ROLES = ("admin", "manager", "team-lead")


# ---------- helpers ----------

def _row(e: Employee, att: MonthlyAttendance | None = None, default_days=28):
    return {
        "pk": e.id,
        "id": e.code,
        "name": e.name,
        "designation": e.designation,
        "department": e.department,
        "workMode": e.work_mode,
        "userType": e.user_type,
        "managerId": e.manager_id,
        "totalDays": att.total_days if att else default_days,
        "workingDays": att.working_days if att else 0,
        "permissions": att.permissions if att else 0,
        "leaves": att.leaves if att else 0,
        "missedDays": att.missed_days if att else 0,
        "status": e.status,
        "isActive": e.is_active,
        "phoneNumber": e.phone_number,
        "emailAddress": e.email,
        "address": e.address,
        "dateOfJoining": e.date_of_joining.isoformat() if e.date_of_joining else None,
        "experience": e.experience,
    }


def _can_view(emp: Employee) -> bool:
    roles = current_roles()
    if any(r in roles for r in STAFF_ROLES):
        return True
    me = current_employee()
    return me is not None and me.id == emp.id


def _apply_fields(e: Employee, d: dict):
    """camelCase (dashboard) and snake_case keys are both accepted."""
    mapping = {
        "name": ("name",),
        "designation": ("designation",),
        "department": ("department",),
        "phone_number": ("phoneNumber", "phone_number"),
        "email": ("emailAddress", "email_address", "email"),
        "address": ("address",),
        "experience": ("experience",),
    }
    for attr, keys in mapping.items():
        for k in keys:
            if k in d:
                val = d[k]
                setattr(e, attr, val.strip() if isinstance(val, str) else val)
                break

    wm = d.get("workMode", d.get("work_mode"))
    if wm is not None:
        if wm not in WORK_MODES:
            raise ValueError(f"workMode must be one of {', '.join(WORK_MODES)}")
        e.work_mode = wm

    st = d.get("status")
    if st is not None:
        if st not in EMPLOYEE_STATUSES:
            raise ValueError(f"status must be one of {', '.join(EMPLOYEE_STATUSES)}")
        e.status = st
        e.is_active = st != "Inactive"

    ut = d.get("userType", d.get("user_type"))
    if ut is not None:
        if ut not in USER_TYPES:
            raise ValueError(f"userType must be one of {', '.join(USER_TYPES)}")
        e.user_type = ut

    doj = d.get("dateOfJoining", d.get("date_of_joining"))
    if doj is not None:
        parsed = clock.parse_date(doj)
        if doj and not parsed:
            raise ValueError("dateOfJoining must be YYYY-MM-DD")
        e.date_of_joining = parsed

    if "managerId" in d or "manager_id" in d:
        raw = d.get("managerId", d.get("manager_id"))
        if raw in (None, ""):
            e.manager_id = None
        else:
            mgr = resolve_employee(raw)
            if not mgr:
                raise ValueError("manager not found")
            if e.id is not None and mgr.id == e.id:
                raise ValueError("employee cannot be their own manager")
            e.manager_id = mgr.id


# ---------- list / create ----------

@bp.get("")
@requires_roles(*STAFF_ROLES)
def list_employees():
    today = clock.today_local()
    month = request.args.get("month", type=int) or today.month
    year = request.args.get("year", type=int) or today.year
    page, limit = page_limit()

    q = Employee.query.filter(Employee.is_active.is_(True))
    s = text_q("search", "q")
    if s:
        like = f"%{s}%"
        q = q.filter(or_(Employee.name.ilike(like), Employee.code.ilike(like),
                         Employee.email.ilike(like), Employee.designation.ilike(like)))
    if request.args.get("workMode"):
        q = q.filter(Employee.work_mode == request.args["workMode"])
    if request.args.get("status"):
        q = q.filter(Employee.status == request.args["status"])

    total = q.count()
    items = q.order_by(Employee.name.asc()).offset((page - 1) * limit).limit(limit).all()

    ids = [e.id for e in items]
    att = {}
    if ids:
        for a in MonthlyAttendance.query.filter(MonthlyAttendance.employee_id.in_(ids),
                                                MonthlyAttendance.month == month,
                                                MonthlyAttendance.year == year).all():
            att[a.employee_id] = a
    default_days = month_total_days(month, year)
    return ok([_row(e, att.get(e.id), default_days) for e in items],
              pagination=pagination(page, limit, total), month=month, year=year)


@bp.post("")
@requires_roles("admin", "manager")
def create_employee():
    d = request.get_json(silent=True) or {}
    code = (d.get("id") or d.get("code") or d.get("employee_id") or "").strip()
    name = (d.get("name") or "").strip()
    email = (d.get("emailAddress") or d.get("email") or "").strip().lower()
    if not code or not name or not email:
        return fail("id, name and emailAddress are required", 400)

    total_days = None
    if d.get("totalDays") not in (None, ""):
        try:
            total_days = int(d["totalDays"])
        except (TypeError, ValueError):
            return fail("totalDays must be a whole number", 400)
        if not 1 <= total_days <= 31:
            return fail("totalDays must be between 1 and 31", 400)

    dup = Employee.query.filter(or_(Employee.code == code, db.func.lower(Employee.email) == email)).first()
    if dup:
        return fail("Employee ID or email already exists", 409)

    e = Employee(code=code, name=name, email=email)
    try:
        _apply_fields(e, {k: v for k, v in d.items() if k not in ("emailAddress", "email")})
    except ValueError as ex:
        return fail(str(ex), 400)
    db.session.add(e)
    db.session.flush()

    today = clock.today_local()
    row = get_or_create_month(e.id, today.month, today.year)
    if total_days:
        row.total_days = total_days
    db.session.commit()
    current_app.logger.info("Employee %s (%s) created", e.code, e.email)
    return ok(_row(e, row), 201, message="Employee created successfully")


@bp.get("/profile")
@jwt_required()
def profile_by_email():
    email = (request.args.get("email") or "").strip().lower()
    if not email:
        return fail("email is required", 400)
    e = Employee.query.filter(db.func.lower(Employee.email) == email).first()
    if not e:
        return fail("Employee not found", 404)
    if not _can_view(e):
        return fail("Forbidden", 403)
    today = clock.today_local()
    att = MonthlyAttendance.query.filter_by(employee_id=e.id, month=today.month, year=today.year).first()
    return ok(_row(e, att))


# ---------- single ----------

@bp.get("/<emp_ref>")
@jwt_required()
def get_employee(emp_ref):
    e = resolve_employee(emp_ref)
    if not e:
        return fail("Employee not found", 404)
    if not _can_view(e):
        return fail("Forbidden", 403)
    today = clock.today_local()
    month = request.args.get("month", type=int) or today.month
    year = request.args.get("year", type=int) or today.year
    att = MonthlyAttendance.query.filter_by(employee_id=e.id, month=month, year=year).first()
    return ok(_row(e, att, month_total_days(month, year)))


@bp.put("/<emp_ref>")
@requires_roles("admin", "manager")
def update_employee(emp_ref):
    e = resolve_employee(emp_ref)
    if not e:
        return fail("Employee not found", 404)
    d = request.get_json(silent=True) or {}

    new_code = (d.get("code") or "").strip()
    if new_code and new_code != e.code:
        if Employee.query.filter(Employee.code == new_code, Employee.id != e.id).first():
            return fail("Employee ID already exists", 409)
        e.code = new_code
    new_email = (d.get("emailAddress") or d.get("email") or "").strip().lower()
    if new_email and new_email != e.email:
        if Employee.query.filter(db.func.lower(Employee.email) == new_email, Employee.id != e.id).first():
            return fail("Email already exists", 409)
        e.email = new_email

    try:
        _apply_fields(e, {k: v for k, v in d.items() if k not in ("emailAddress", "email", "email_address")})
    except ValueError as ex:
        return fail(str(ex), 400)
    e.updated_at = datetime.utcnow()
    db.session.commit()
    return ok(_row(e), message="Employee updated successfully")


@bp.delete("/<emp_ref>")
@requires_roles("admin")
def delete_employee(emp_ref):
    e = resolve_employee(emp_ref)
    if not e:
        return fail("Employee not found", 404)
    db.session.delete(e)
    db.session.commit()
    current_app.logger.info("Employee %s deleted", emp_ref)
    return ok({"id": emp_ref}, message="Employee deleted successfully")


# ---------- status ----------

@bp.get("/<emp_ref>/status")
@jwt_required()
def get_status(emp_ref):
    e = resolve_employee(emp_ref)
    if not e:
        return fail("Employee not found", 404)
    return ok({"id": e.code, "status": e.status, "isActive": e.is_active})


@bp.patch("/<emp_ref>/status")
@requires_roles("admin", "manager")
def set_status(emp_ref):
    e = resolve_employee(emp_ref)
    if not e:
        return fail("Employee not found", 404)
    d = request.get_json(silent=True) or {}
    status = d.get("status")
    if status not in STATUS_TOGGLE:
        return fail('Invalid status. Must be "Active" or "Inactive"', 400)
    e.status = status
    e.is_active = status == "Active"
    db.session.commit()
    current_app.logger.info("Employee %s status -> %s", e.code, status)
    return ok({"id": e.code, "status": e.status, "isActive": e.is_active},
              message=f"Employee status updated to {status}")


# ---------- worklog (check-in / check-out) ----------

@bp.get("/<emp_ref>/worklog")
@jwt_required()
def get_worklog(emp_ref):
    e = resolve_employee(emp_ref)
    if not e:
        return fail("Employee not found", 404)
    if not _can_view(e):
        return fail("Forbidden", 403)

    raw = request.args.get("date")
    if raw:
        day = clock.parse_date(raw)
        if not day:
            return fail("date must be YYYY-MM-DD", 400)
        row = DailyWorkLog.query.filter_by(employee_id=e.id, date=day).first()
        return ok(worklog_dict(row) if row else None)

    rows = (DailyWorkLog.query.filter_by(employee_id=e.id)
            .order_by(DailyWorkLog.date.desc()).all())
    return ok([worklog_dict(r) for r in rows])


@bp.post("/<emp_ref>/worklog")
@jwt_required()
def post_worklog(emp_ref):
    e = resolve_employee(emp_ref)
    if not e:
        return fail("Employee not found", 404)
    roles = current_roles()
    me = current_employee()
    if "admin" not in roles and (me is None or me.id != e.id):
        return fail("You can only record your own attendance", 403)

    d = request.get_json(silent=True) or {}
    if not d.get("checkInTime"):
        return fail("Check-in time is required", 400)
    row, created = upsert_worklog(
        e, d.get("checkInTime"), d.get("checkOutTime"),
        project=d.get("workType", d.get("project")),
        description=d.get("workDescription", d.get("description")),
    )
    return ok(worklog_dict(row), 201 if created else 200, message="Work log entry saved successfully")
