from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from workhub_api.common.http import ok, fail
from workhub_api.common.auth import requires_roles, current_roles, current_employee, resolve_employee
from workhub_api.models.overtime import OvertimeRequest
from workhub_api.services import clock
from workhub_api.services import overtime_service as svc

bp = Blueprint("overtime", __name__, url_prefix="/api")

STAFF_ROLES = ("admin", "manager", "team-lead")


def _own_or_admin(d):
    """Employee the caller may act for: themselves, or anyone when admin."""
    me = current_employee()
    raw = d.get("employee_id") or d.get("employeeId")
    if raw in (None, "") or (me is not None and str(raw) in (str(me.id), me.code)):
        return me, None
    if "admin" not in current_roles():
        return None, fail("You can only manage your own overtime", 403)
    return resolve_employee(raw), None


# ---------- employee session ----------

@bp.post("/employees/Overtime")
@jwt_required()
def start_ot():
    d = request.get_json(silent=True) or {}
    emp, err = _own_or_admin(d)
    if err:
        return err
    if emp is None:
        return fail("Employee not found", 404)

    now = clock.now_local()
    raw_date = d.get("ot_date") or d.get("otDate")
    raw_start = d.get("start_time") or d.get("startTime")
    ot_date = clock.parse_date(raw_date) if raw_date else now.date()
    start = clock.parse_time(raw_start) if raw_start else now.time().replace(microsecond=0)
    if not ot_date or not start:
        return fail("ot_date must be YYYY-MM-DD and start_time HH:MM[:SS]", 400)

    ot, existing = svc.start_session(emp, ot_date, start, d.get("reason"))
    if existing:
        return ok(svc.ot_dict(ot), existing=True, message="Resuming active overtime session")
    return ok(svc.ot_dict(ot), 201, existing=False, message="Overtime session started")


@bp.put("/employees/Overtime")
@jwt_required()
def submit_ot_work():
    src = request.form if request.form else (request.get_json(silent=True) or {})
    ot_id = src.get("ot_id")
    work_type = (src.get("work_type") or "").strip()
    work_description = (src.get("work_description") or "").strip()
    if not ot_id or not work_type or not work_description:
        return fail("ot_id, work_type and work_description are required", 400)

    ot = svc.submit_work(
        ot_id, current_employee(), work_type, work_description,
        image1=request.files.get("image1"), image2=request.files.get("image2"),
        is_admin="admin" in current_roles(),
    )
    return ok(svc.ot_dict(ot), message="Work details submitted")


@bp.patch("/employees/Overtime")
@jwt_required()
def end_ot():
    d = request.get_json(silent=True) or {}
    ot_id = d.get("ot_id")
    if not ot_id:
        return fail("ot_id is required", 400)
    raw_end = d.get("end_time") or d.get("endTime")
    end = clock.parse_time(raw_end) if raw_end else clock.now_local().time().replace(microsecond=0)
    if not end:
        return fail("end_time must be HH:MM[:SS]", 400)

    ot = svc.end_session(ot_id, current_employee(), end, is_admin="admin" in current_roles())
    return ok(svc.ot_dict(ot), message="Overtime session ended")


@bp.get("/employees/Overtime")
@jwt_required()
def list_ot():
    roles = current_roles()
    me = current_employee()
    raw = request.args.get("employee_id") or request.args.get("employeeId")
    q = OvertimeRequest.query

    if raw:
        emp = resolve_employee(raw)
        if not emp:
            return fail("Employee not found", 404)
        if not any(r in roles for r in STAFF_ROLES) and (me is None or me.id != emp.id):
            return fail("Forbidden", 403)
        q = q.filter(OvertimeRequest.employee_id == emp.id)
    elif not any(r in roles for r in ("admin", "manager")):
        if me is None:
            return fail("Employee not found", 404)
        q = q.filter(OvertimeRequest.employee_id == me.id)

    if request.args.get("status"):
        q = q.filter(OvertimeRequest.status == request.args["status"])
    rows = q.order_by(OvertimeRequest.ot_date.desc(), OvertimeRequest.id.desc()).all()
    return ok([svc.ot_dict(o) for o in rows], count=len(rows))


@bp.get("/employees/Overtime/active")
@jwt_required()
def active_ot():
    raw = request.args.get("employee_id") or request.args.get("employeeId")
    emp = resolve_employee(raw) if raw else current_employee()
    if emp is None:
        return fail("Employee not found", 404)
    day = clock.parse_date(request.args.get("date")) if request.args.get("date") else clock.today_local()
    ot = (OvertimeRequest.query
          .filter_by(employee_id=emp.id, ot_date=day, is_active=True)
          .order_by(OvertimeRequest.id.desc())
          .first())
    return ok(svc.ot_dict(ot) if ot else None)


@bp.delete("/employees/Overtime")
@requires_roles("admin")
def delete_ot():
    ot_id = request.args.get("ot_id")
    if not ot_id:
        return fail("Missing ot_id parameter", 400)
    svc.delete_request(ot_id)
    return ok({"id": ot_id}, message="OT request deleted successfully")


# ---------- team lead ----------

@bp.get("/team-lead/overtime")
@requires_roles("team-lead", "admin")
def team_lead_queue():
    me = current_employee()
    roles = current_roles()
    if me is None and "admin" not in roles:
        return fail("Team lead not found", 404)
    rows = svc.team_queue(me.id if me else None, is_admin=me is None,
                          status=request.args.get("status") or None)
    return ok([svc.ot_dict(o) for o in rows], count=len(rows))


@bp.route("/team-lead/overtime", methods=["PATCH", "PUT"])
@requires_roles("team-lead", "admin")
def team_lead_decide():
    d = request.get_json(silent=True) or {}
    ot_id = d.get("id") or d.get("ot_id") or d.get("requestId")
    if not ot_id or not d.get("action"):
        return fail("id and action are required", 400)
    ot = svc.team_lead_decide(ot_id, d.get("action"), current_employee(), current_roles(),
                              d.get("comments", d.get("comment")))
    return ok(svc.ot_dict(ot), message=f"Overtime request {ot.status}")


# ---------- manager final approval ----------

@bp.get("/manager/final-approvals/Overtime")
@requires_roles("manager", "admin")
def final_queue():
    raw = request.args.get("employee_id")
    emp = resolve_employee(raw) if raw else None
    if raw and not emp:
        return fail("Employee not found", 404)
    rows = svc.final_queue(emp.id if emp else None)
    return ok([svc.ot_dict(o) for o in rows], count=len(rows))


@bp.put("/manager/final-approvals/Overtime")
@requires_roles("manager", "admin")
def final_decide():
    d = request.get_json(silent=True) or {}
    if not d.get("id") or not d.get("action"):
        return fail("Missing required fields: id and action are required", 400)
    ot = svc.manager_decide(d["id"], d["action"], current_employee(), current_roles(),
                            remarks=d.get("manager_remarks"), batch_id=d.get("batch_id"))
    verb = "approved" if ot.status == "approved" else "rejected"
    return ok(svc.ot_dict(ot), action=d["action"], message=f"Request {verb} successfully")


@bp.patch("/manager/final-approvals/Overtime")
@requires_roles("manager", "admin")
def final_decide_bulk():
    d = request.get_json(silent=True) or {}
    ids = d.get("request_ids")
    if not isinstance(ids, list) or not ids:
        return fail("Missing required fields: request_ids array is required", 400)
    if not d.get("action"):
        return fail("Missing required fields: action is required", 400)
    res = svc.manager_decide_many(ids, d["action"], current_employee(), current_roles(),
                                  remarks=d.get("manager_remarks"), batch_id=d.get("batch_id"))
    verb = "approved" if res["action"] == "approve" else "rejected"
    current_app.logger.info("Bulk OT decision by %s: %s", current_employee(), res)
    return ok(res, message=f"{res['updated_count']} requests {verb} successfully")


# ---------- summary ----------

@bp.get("/overtime-summary")
@jwt_required()
def summary():
    raw = request.args.get("employeeId")
    month = request.args.get("month", type=int)
    year = request.args.get("year", type=int)
    if not raw or not month or not year or not (1 <= month <= 12):
        return fail("employeeId, month (1-12) and year are required", 400)
    emp = resolve_employee(raw)
    if not emp:
        return fail("Employee not found", 404)
    roles = current_roles()
    me = current_employee()
    if not any(r in roles for r in STAFF_ROLES) and (me is None or me.id != emp.id):
        return fail("Forbidden", 403)
    return ok(svc.approved_hours(emp.id, month, year))
