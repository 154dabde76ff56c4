"""
Leave and permission requests share one two-stage flow, so both blueprints
are built from the same route set:

  <submit_path>                              POST submit, GET history, PATCH decide (stage from status)
  <submit_path>/<id>                         GET detail + audit trail
  /api/team-lead/<kind>-requests             GET queue, PATCH decide at team-lead stage
  /api/manager/final-approvals/<kind>-requests   GET queue, PATCH decide at manager stage
"""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from workhub_api.extensions import db
from workhub_api.common.http import ok, fail
from workhub_api.common.errors import InvalidState
from workhub_api.common.auth import requires_roles, current_roles, current_employee, resolve_employee
from workhub_api.services import approval_flow as flow
from workhub_api.services import clock
from workhub_api.services import leave_service as svc

STAFF_ROLES = ("admin", "manager", "team-lead")


def _request_id(d):
    raw = d.get("requestId", d.get("id"))
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _subject_employee(d):
    """Employee a request is filed for: the caller, or any employee when the caller is admin."""
    me = current_employee()
    raw = d.get("employeeId")
    if raw in (None, "") or (me is not None and str(raw) in (str(me.id), me.code)):
        return me, None
    if "admin" not in current_roles():
        return None, fail("You can only submit requests for yourself", 403)
    emp = resolve_employee(raw)
    return emp, None


def make_blueprint(kind: str, submit_path: str) -> Blueprint:
    f, model, label = svc.KINDS[kind]
    to_dict = svc.leave_dict if kind == "leave" else svc.permission_dict
    bp = Blueprint(f"{kind}_requests", __name__, url_prefix="/api")
    tl_path = f"/team-lead/{kind}-requests"
    mgr_path = f"/manager/final-approvals/{kind}-requests"

    # ---------- submit ----------
    @bp.post(submit_path, endpoint="submit")
    @jwt_required()
    def submit():
        d = request.get_json(silent=True) or {}
        emp, err = _subject_employee(d)
        if err:
            return err
        if emp is None:
            return fail("Employee not found", 404)
        reason = (d.get("reason") or "").strip()

        if kind == "leave":
            leave_type = (d.get("leaveType") or "").strip()
            start = clock.parse_date(d.get("startDate"))
            end = clock.parse_date(d.get("endDate"))
            if not leave_type or not d.get("startDate") or not d.get("endDate") or not reason:
                return fail("Missing required fields", 400)
            if not start or not end:
                return fail("Dates must be YYYY-MM-DD", 400)
            obj = svc.submit_leave(emp, leave_type, start, end, reason)
        else:
            ptype = (d.get("permissionType") or "").strip()
            day = clock.parse_date(d.get("date"))
            start = clock.parse_time(d.get("startTime"))
            end = clock.parse_time(d.get("endTime"))
            if not ptype or not d.get("date") or not d.get("startTime") or not d.get("endTime") or not reason:
                return fail("Missing required fields", 400)
            if not day or not start or not end:
                return fail("date must be YYYY-MM-DD and times HH:MM", 400)
            obj = svc.submit_permission(emp, ptype, day, start, end, reason)

        return ok(to_dict(obj), 201, message=f"{label} request submitted successfully")

    # ---------- history / lookups ----------
    @bp.get(submit_path, endpoint="list")
    @jwt_required()
    def list_requests():
        roles = current_roles()
        me = current_employee()
        status = request.args.get("status") or None

        lead_raw = request.args.get("teamLeadId")
        if lead_raw:
            lead = resolve_employee(lead_raw)
            if not lead:
                return fail("Team lead not found", 404)
            if "admin" not in roles and (me is None or me.id != lead.id):
                return fail("Forbidden", 403)
            rows = svc.pending_for_team_lead(kind, lead.id, status=status)
            return ok([to_dict(r) for r in rows], count=len(rows))

        mgr_raw = request.args.get("managerId")
        if mgr_raw:
            if not any(r in roles for r in ("admin", "manager")):
                return fail("Forbidden", 403)
            mgr = resolve_employee(mgr_raw)
            rows = svc.pending_for_manager(kind, mgr.id if mgr else None, is_admin="admin" in roles,
                                           status=status)
            return ok([to_dict(r) for r in rows], count=len(rows))

        emp_raw = request.args.get("employeeId")
        emp = resolve_employee(emp_raw) if emp_raw else me
        if emp is None:
            return fail("Employee not found", 404)
        if not any(r in roles for r in STAFF_ROLES) and (me is None or me.id != emp.id):
            return fail("Forbidden", 403)

        q = model.query.filter(model.employee_id == emp.id)
        if status:
            q = q.filter(model.status == status)
        rows = q.order_by(model.created_at.desc(), model.id.desc()).all()
        if request.args.get("count") == "true":
            return ok({"count": len(rows)})
        return ok([to_dict(r) for r in rows], count=len(rows))

    @bp.get(f"{submit_path}/<int:request_id>", endpoint="detail")
    @jwt_required()
    def detail(request_id):
        obj = db.session.get(model, request_id)
        if obj is None:
            return fail(f"{label} request not found", 404)
        roles = current_roles()
        me = current_employee()
        involved = me is not None and (me.id == obj.employee_id
                                       or me.id in [int(x) for x in (obj.team_lead_ids or [])]
                                       or me.id == obj.manager_id)
        if not involved and not any(r in roles for r in ("admin", "manager")):
            return fail("Forbidden", 403)
        data = to_dict(obj)
        data["history"] = flow.history(kind, obj.id)
        return ok(data)

    # ---------- decisions ----------
    def _decide(stage):
        d = request.get_json(silent=True) or {}
        rid = _request_id(d)
        if rid is None or not d.get("action"):
            return fail("requestId and action are required", 400)
        comment = d.get("comments", d.get("comment"))

        if stage is None:
            obj = db.session.get(model, rid)
            if obj is None:
                return fail(f"{label} request not found", 404)
            if obj.status in f.pending_statuses(flow.TEAM_LEAD):
                stage = flow.TEAM_LEAD
            elif obj.status in f.pending_statuses(flow.MANAGER):
                stage = flow.MANAGER
            else:
                raise InvalidState(f"Request is not pending approval. Current status: {obj.status}",
                                   payload={"status": obj.status})

        obj = svc.decide(kind, rid, stage, d.get("action"), current_employee(), current_roles(), comment)
        return ok(to_dict(obj), message=f"{label} request {obj.status.lower()}")

    @bp.patch(submit_path, endpoint="decide")
    @requires_roles("admin", "manager", "team-lead")
    def decide_auto():
        return _decide(None)

    @bp.get(tl_path, endpoint="team_lead_queue")
    @requires_roles("team-lead", "admin")
    def team_lead_queue():
        me = current_employee()
        roles = current_roles()
        lead_raw = request.args.get("teamLeadId")
        lead = resolve_employee(lead_raw) if lead_raw else me
        if lead is None and "admin" not in roles:
            return fail("Team lead not found", 404)
        if "admin" not in roles and (me is None or lead.id != me.id):
            return fail("Forbidden", 403)
        status = request.args.get("status") or None
        rows = svc.pending_for_team_lead(kind, lead.id if lead else None,
                                         is_admin=lead is None, status=status)
        return ok([to_dict(r) for r in rows], count=len(rows))

    @bp.route(tl_path, methods=["PATCH", "PUT"], endpoint="team_lead_decide")
    @requires_roles("team-lead", "admin")
    def team_lead_decide():
        return _decide(flow.TEAM_LEAD)

    @bp.get(mgr_path, endpoint="manager_queue")
    @requires_roles("manager", "admin")
    def manager_queue():
        roles = current_roles()
        me = current_employee()
        mgr_raw = request.args.get("managerId")
        mgr = resolve_employee(mgr_raw) if mgr_raw else me
        status = request.args.get("status") or flow.PENDING_MANAGER
        if status == "all":
            status = None
        rows = svc.pending_for_manager(kind, mgr.id if mgr else None, is_admin="admin" in roles, status=status)
        return ok([to_dict(r) for r in rows], count=len(rows))

    @bp.route(mgr_path, methods=["PATCH", "PUT"], endpoint="manager_decide")
    @requires_roles("manager", "admin")
    def manager_decide():
        return _decide(flow.MANAGER)

    return bp


leave_bp = make_blueprint("leave", "/leave-request")
permission_bp = make_blueprint("permission", "/permission-request")
