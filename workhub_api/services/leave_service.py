# workhub_api/services/leave_service.py
"""Submit and decide leave / permission requests (two-stage approval)."""
from __future__ import annotations

import logging
from datetime import datetime

from workhub_api.extensions import db
from workhub_api.common.errors import APIError, NotFound
from workhub_api.models.employee import TeamMember
from workhub_api.models.leave import LeaveRequest
from workhub_api.models.permission import PermissionRequest
from workhub_api.services import approval_flow as flow
from workhub_api.services import notifications as notes
from workhub_api.services.attendance_service import bump_month, leave_days_by_month

log = logging.getLogger(__name__)

KINDS = {
    "leave": (flow.LEAVE_FLOW, LeaveRequest, "Leave"),
    "permission": (flow.PERMISSION_FLOW, PermissionRequest, "Permission"),
}


def active_team_lead_ids(employee_id: int) -> list[int]:
    rows = (db.session.query(TeamMember.team_lead_id)
            .filter(TeamMember.employee_id == employee_id, TeamMember.is_active.is_(True))
            .distinct()
            .all())
    return sorted({r[0] for r in rows if r[0] != employee_id})


def _leads_or_404(emp) -> list[int]:
    ids = active_team_lead_ids(emp.id)
    if not ids:
        raise NotFound("Team lead not found for this employee")
    return ids


def submit_leave(emp, leave_type, start_date, end_date, reason) -> LeaveRequest:
    if end_date < start_date:
        raise APIError("BAD_RANGE", "End date cannot be before start date", 400)
    leads = _leads_or_404(emp)

    req = LeaveRequest(
        employee_id=emp.id,
        team_lead_ids=leads,
        manager_id=emp.manager_id,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        status=flow.PENDING_TEAM_LEAD,
    )
    db.session.add(req)
    db.session.flush()

    flow.record_action("leave", req.id, "employee", "submit", None, req.status, emp)
    notes.notify_many(
        leads, "team-lead", "New Leave Request",
        f"{emp.name} has requested {leave_type} from {start_date.isoformat()} to {end_date.isoformat()}",
        "leave_request", req.id,
    )
    db.session.commit()
    log.info("Leave request #%s submitted by %s (%s..%s) for leads %s",
             req.id, emp.code, start_date, end_date, leads)
    return req


def submit_permission(emp, permission_type, day, start_time, end_time, reason) -> PermissionRequest:
    if end_time <= start_time:
        raise APIError("BAD_RANGE", "End time must be after start time", 400)
    leads = _leads_or_404(emp)

    req = PermissionRequest(
        employee_id=emp.id,
        team_lead_ids=leads,
        manager_id=emp.manager_id,
        permission_type=permission_type,
        date=day,
        start_time=start_time,
        end_time=end_time,
        reason=reason,
        status=flow.PENDING_TEAM_LEAD,
    )
    db.session.add(req)
    db.session.flush()

    flow.record_action("permission", req.id, "employee", "submit", None, req.status, emp)
    notes.notify_many(
        leads, "team-lead", "New Permission Request",
        f"{emp.name} has requested permission ({permission_type}) on {day.isoformat()} "
        f"from {start_time.strftime('%H:%M')} to {end_time.strftime('%H:%M')}",
        "permission_request", req.id,
    )
    db.session.commit()
    log.info("Permission request #%s submitted by %s on %s", req.id, emp.code, day)
    return req


def decide(kind: str, request_id: int, stage: str, action: str, actor, roles, comment=None):
    """Team-lead or manager decision on a leave/permission request. Commits."""
    f, model, label = KINDS[kind]
    action = flow.parse_action(action)
    obj = db.session.get(model, request_id)
    if obj is None:
        raise NotFound(f"{label} request not found")

    now = datetime.utcnow()
    values = {}
    if stage == flow.TEAM_LEAD:
        flow.ensure_team_lead(obj, actor, roles)
        values.update(team_lead_comments=comment, team_lead_acted_at=now)
        if actor is not None:
            values["team_lead_id"] = actor.id
    else:
        flow.ensure_manager(obj, actor, roles)
        values["manager_comments"] = comment
        if obj.manager_id is None and actor is not None:
            values["manager_id"] = actor.id
    if action == "approve" and stage == flow.MANAGER:
        values["approved_at"] = now
    elif action == "reject":
        values["rejected_at"] = now

    new_status = flow.apply(f, obj, stage, action, actor, comment, values)
    _after_decision(kind, label, obj, stage, new_status, comment)
    db.session.commit()
    return obj


def _after_decision(kind, label, obj, stage, new_status, comment):
    emp = obj.employee
    ref = f"{kind}_request"
    if new_status == flow.PENDING_MANAGER:
        notes.notify(obj.employee_id, "employee", f"{label} Request Approved by Team Lead",
                     notes.with_comment(f"Your {label.lower()} request has been approved by your team lead "
                                        "and forwarded to the manager.", comment),
                     ref, obj.id)
        notes.notify_managers(obj.manager_id, f"{label} Request Awaiting Final Approval",
                              f"{emp.name if emp else 'An employee'}'s {label.lower()} request "
                              "was approved by the team lead.",
                              ref, obj.id)
        return

    who = "team lead" if stage == flow.TEAM_LEAD else "manager"
    verb = "approved" if new_status == flow.APPROVED else "rejected"
    notes.notify(obj.employee_id, "employee", f"{label} Request {verb.title()}",
                 notes.with_comment(f"Your {label.lower()} request has been {verb} by the {who}.", comment),
                 ref, obj.id)

    if new_status == flow.APPROVED:
        if kind == "leave":
            for (year, month), days in leave_days_by_month(obj.start_date, obj.end_date).items():
                bump_month(obj.employee_id, month, year, leaves=days)
        else:
            bump_month(obj.employee_id, obj.date.month, obj.date.year, permissions=1)


def pending_for_team_lead(kind: str, lead_id: int | None, is_admin=False, status=None):
    _, model, _ = KINDS[kind]
    q = model.query
    if status:
        wanted = [status] + ([flow.LEGACY_PENDING] if status == flow.PENDING_TEAM_LEAD else [])
        q = q.filter(model.status.in_(wanted))
    rows = q.order_by(model.created_at.desc(), model.id.desc()).all()
    if is_admin:
        return rows
    # team_lead_ids is a JSON list; portable membership check in Python
    return [r for r in rows if lead_id in [int(x) for x in (r.team_lead_ids or [])]]


def pending_for_manager(kind: str, manager_id: int | None, is_admin=False, status=flow.PENDING_MANAGER):
    _, model, _ = KINDS[kind]
    q = model.query
    if status:
        q = q.filter(model.status == status)
    if not is_admin and manager_id:
        q = q.filter(db.or_(model.manager_id.is_(None), model.manager_id == manager_id))
    return q.order_by(model.created_at.desc(), model.id.desc()).all()


def _employee_brief(e):
    if e is None:
        return None
    return {"id": e.id, "employee_id": e.code, "name": e.name,
            "designation": e.designation, "department": e.department}


def leave_dict(r: LeaveRequest) -> dict:
    return {
        "id": r.id,
        "employee_id": r.employee_id,
        "employee": _employee_brief(r.employee),
        "team_lead_ids": r.team_lead_ids or [],
        "team_lead_id": r.team_lead_id,
        "manager_id": r.manager_id,
        "leave_type": r.leave_type,
        "start_date": r.start_date.isoformat(),
        "end_date": r.end_date.isoformat(),
        "total_days": r.total_days,
        "reason": r.reason,
        "status": flow.normalize_status(r.status),
        "team_lead_comments": r.team_lead_comments,
        "manager_comments": r.manager_comments,
        "approved_at": r.approved_at.isoformat() if r.approved_at else None,
        "rejected_at": r.rejected_at.isoformat() if r.rejected_at else None,
        "created_at": r.created_at.isoformat() if r.created_at else None,
    }


def permission_dict(r: PermissionRequest) -> dict:
    return {
        "id": r.id,
        "employee_id": r.employee_id,
        "employee": _employee_brief(r.employee),
        "team_lead_ids": r.team_lead_ids or [],
        "team_lead_id": r.team_lead_id,
        "manager_id": r.manager_id,
        "permission_type": r.permission_type,
        "date": r.date.isoformat(),
        "start_time": r.start_time.strftime("%H:%M"),
        "end_time": r.end_time.strftime("%H:%M"),
        "reason": r.reason,
        "status": flow.normalize_status(r.status),
        "team_lead_comments": r.team_lead_comments,
        "manager_comments": r.manager_comments,
        "approved_at": r.approved_at.isoformat() if r.approved_at else None,
        "rejected_at": r.rejected_at.isoformat() if r.rejected_at else None,
        "created_at": r.created_at.isoformat() if r.created_at else None,
    }
