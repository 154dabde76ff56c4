from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from workhub_api.common.http import ok, fail
from workhub_api.common.auth import requires_roles, current_roles, current_employee, resolve_employee
from workhub_api.models.work_submission import WorkSubmission
from workhub_api.services import approval_flow as flow
from workhub_api.services import work_service as svc

bp = Blueprint("work_submissions", __name__, url_prefix="/api")


def _payload():
    d = request.get_json(silent=True) or {}
    return d, d.get("comments", d.get("comment"))


# ---------- employee ----------

@bp.post("/team-lead/work-submission")
@jwt_required()
def submit():
    d = request.get_json(silent=True) or {}
    me = current_employee()
    raw = d.get("employeeId")
    emp = me
    if raw not in (None, "") and (me is None or str(raw) not in (str(me.id), me.code)):
        if "admin" not in current_roles():
            return fail("You can only submit work for yourself", 403)
        emp = resolve_employee(raw)
    if emp is None:
        return fail("Employee not found", 404)

    work_type = (d.get("workType") or "").strip()
    desc = (d.get("workDescription") or "").strip()
    if not work_type or not desc:
        return fail("Missing required fields: employeeId, workType, workDescription", 400)

    ws = svc.submit(emp, work_type, desc, department=d.get("department"),
                    priority=d.get("priority") or "Medium", title=d.get("title"))
    return ok(svc.ws_dict(ws), 201, message="Work submitted successfully")


@bp.get("/work-submissions")
@jwt_required()
def my_submissions():
    roles = current_roles()
    me = current_employee()
    raw = request.args.get("employeeId")
    emp = resolve_employee(raw) if raw else me
    if emp is None:
        return fail("Employee not found", 404)
    if not any(r in roles for r in ("admin", "manager", "team-lead")) and (me is None or me.id != emp.id):
        return fail("Forbidden", 403)
    q = WorkSubmission.query.filter(WorkSubmission.employee_id == emp.id)
    if request.args.get("status"):
        q = q.filter(WorkSubmission.status == request.args["status"])
    rows = q.order_by(WorkSubmission.submitted_at.desc(), WorkSubmission.id.desc()).all()
    return ok([svc.ws_dict(w) for w in rows], count=len(rows))


# ---------- team lead ----------

@bp.get("/team-lead/work-submission")
@requires_roles("team-lead", "admin")
def team_queue():
    me = current_employee()
    roles = current_roles()
    raw = request.args.get("team_lead_id")
    lead = resolve_employee(raw) if raw else me
    if lead is None and "admin" not in roles:
        return fail("Team lead ID is required", 400)
    if "admin" not in roles and (me is None or lead.id != me.id):
        return fail("Forbidden", 403)
    rows = svc.team_queue(lead.id if lead else None, is_admin=lead is None,
                          status=request.args.get("status") or None)
    return ok([svc.ws_dict(w) for w in rows], count=len(rows))


@bp.route("/team-lead/work-submission", methods=["PATCH", "PUT"])
@requires_roles("team-lead", "admin")
def team_decide():
    d, comment = _payload()
    try:
        ws_id = int(d.get("id") or d.get("submissionId"))
    except (TypeError, ValueError):
        return fail("id and action are required", 400)
    if not d.get("action"):
        return fail("id and action are required", 400)
    ws = svc.team_lead_decide(ws_id, d["action"], current_employee(), current_roles(), comment)
    return ok(svc.ws_dict(ws), message=f"Work submission {ws.status}")


@bp.post("/team-lead/work-submission/<int:ws_id>/reject")
@requires_roles("team-lead", "admin")
def team_reject(ws_id):
    _, comment = _payload()
    ws = svc.team_lead_decide(ws_id, "reject", current_employee(), current_roles(), comment)
    return ok(svc.ws_dict(ws), message="Work submission rejected")


# ---------- manager ----------

@bp.get("/manager/final-approvals")
@requires_roles("manager", "admin")
def manager_queue():
    status = request.args.get("status") or None
    if status and status not in svc.MANAGER_STATUSES:
        return fail(f"status must be one of {', '.join(svc.MANAGER_STATUSES)}", 400)
    rows = svc.manager_queue(status)
    return ok([svc.ws_dict(w) for w in rows], count=len(rows))


@bp.post("/manager/final-approvals/<int:ws_id>/approve")
@requires_roles("manager", "admin")
def manager_approve(ws_id):
    _, comment = _payload()
    ws = svc.manager_decide(ws_id, "approve", current_employee(), current_roles(), comment)
    return ok(svc.ws_dict(ws), message="Work submission approved")


@bp.post("/manager/final-approvals/<int:ws_id>/reject")
@requires_roles("manager", "admin")
def manager_reject(ws_id):
    _, comment = _payload()
    ws = svc.manager_decide(ws_id, "reject", current_employee(), current_roles(), comment)
    return ok(svc.ws_dict(ws), message="Work submission rejected")


@bp.get("/manager/final-approvals/WorkSubmission")
@requires_roles("manager", "admin")
def manager_pending():
    rows = svc.manager_queue(flow.WS_PENDING_FINAL)
    return ok([svc.ws_dict(w) for w in rows], count=len(rows))
