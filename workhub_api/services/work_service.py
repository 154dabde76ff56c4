# workhub_api/services/work_service.py
from __future__ import annotations

import logging
from datetime import datetime

from workhub_api.extensions import db
from workhub_api.common.errors import Forbidden, NotFound
from workhub_api.models.work_submission import WorkSubmission
from workhub_api.services import approval_flow as flow
from workhub_api.services import notifications as notes
from workhub_api.services.overtime_service import team_member_ids
from workhub_api.services.leave_service import active_team_lead_ids

log = logging.getLogger(__name__)

PRIORITIES = ("Low", "Medium", "High")
MANAGER_STATUSES = (flow.WS_PENDING_FINAL, flow.WS_FINAL_APPROVED, flow.WS_FINAL_REJECTED)


def submit(emp, work_type, work_description, department=None, priority="Medium", title=None):
    """A team lead's own submission skips the team-lead stage."""
    is_lead = emp.user_type == "team-lead"
    status = flow.WS_PENDING_FINAL if is_lead else flow.WS_PENDING_TEAM_LEAD
    ws = WorkSubmission(
        employee_id=emp.id,
        title=title or work_type,
        work_type=work_type,
        work_description=work_description,
        department=department or emp.department,
        priority=priority if priority in PRIORITIES else "Medium",
        status=status,
        manager_id=emp.manager_id if is_lead else None,
        submitted_at=datetime.utcnow(),
    )
    db.session.add(ws)
    db.session.flush()

    flow.record_action("work_submission", ws.id, "employee", "submit", None, status, emp)
    if is_lead:
        notes.notify_managers(emp.manager_id, "Work Submission Awaiting Approval",
                              f"{emp.name} submitted work: {ws.title}", "work_submission", ws.id)
    else:
        notes.notify_many(active_team_lead_ids(emp.id), "team-lead", "New Work Submission",
                          f"{emp.name} submitted work: {ws.title}", "work_submission", ws.id)
    db.session.commit()
    log.info("Work submission #%s by %s -> %s", ws.id, emp.code, status)
    return ws


def team_queue(lead_id, is_admin=False, status=None):
    q = WorkSubmission.query
    if not is_admin:
        ids = team_member_ids(lead_id)
        if not ids:
            return []
        q = q.filter(WorkSubmission.employee_id.in_(ids))
    if status:
        q = q.filter(WorkSubmission.status == status)
    return q.order_by(WorkSubmission.submitted_at.desc(), WorkSubmission.id.desc()).all()


def team_lead_decide(ws_id, action, actor, roles, comment=None):
    action = flow.parse_action(action)
    ws = db.session.get(WorkSubmission, ws_id)
    if ws is None:
        raise NotFound("Work submission not found")
    if "admin" not in roles:
        if actor is None or ws.employee_id not in team_member_ids(actor.id):
            raise Forbidden("Unauthorized: employee is not in your team")

    now = datetime.utcnow()
    values = {"team_lead_comments": comment}
    if actor is not None:
        values["team_lead_id"] = actor.id
    if action == "approve":
        values["team_lead_approved_at"] = now
    else:
        values["team_lead_rejected_at"] = now
        values["rejection_reason"] = comment
    new_status = flow.apply(flow.WORK_FLOW, ws, flow.TEAM_LEAD, action, actor, comment, values)

    if new_status == flow.WS_PENDING_FINAL:
        notes.notify(ws.employee_id, "employee", "Work Approved by Team Lead",
                     notes.with_comment(f"Your work '{ws.title}' was forwarded for final approval.", comment),
                     "work_submission", ws.id)
        notes.notify_managers(ws.manager_id, "Work Submission Awaiting Final Approval",
                              f"Work '{ws.title}' is awaiting final approval.", "work_submission", ws.id)
    else:
        notes.notify(ws.employee_id, "employee", "Work Rejected by Team Lead",
                     notes.with_comment(f"Your work '{ws.title}' was rejected.", comment),
                     "work_submission", ws.id)
    db.session.commit()
    return ws


def manager_queue(status=None):
    statuses = (status,) if status else MANAGER_STATUSES
    return (WorkSubmission.query
            .filter(WorkSubmission.status.in_(statuses))
            .order_by(WorkSubmission.submitted_at.desc(), WorkSubmission.id.desc())
            .all())


def manager_decide(ws_id, action, actor, roles, comment=None):
    action = flow.parse_action(action)
    if "admin" not in roles and "manager" not in roles:
        raise Forbidden("Only managers can give final approval")
    ws = db.session.get(WorkSubmission, ws_id)
    if ws is None or ws.status != flow.WS_PENDING_FINAL:
        raise NotFound("Work submission not found or not pending final approval")

    now = datetime.utcnow()
    values = {"manager_comments": comment}
    if actor is not None:
        values["manager_id"] = actor.id
    if action == "approve":
        values["final_approved_at"] = now
    else:
        values["final_rejected_at"] = now
        values["rejection_reason"] = comment
    new_status = flow.apply(flow.WORK_FLOW, ws, flow.MANAGER, action, actor, comment, values)

    verb = "approved" if new_status == flow.WS_FINAL_APPROVED else "rejected"
    notes.notify(ws.employee_id, "employee", f"Work {verb.title()}",
                 notes.with_comment(f"Your work '{ws.title}' has been {verb} by the manager.", comment),
                 "work_submission", ws.id)
    db.session.commit()
    return ws


def ws_dict(w: WorkSubmission) -> dict:
    e = w.employee
    return {
        "id": w.id,
        "employee_id": w.employee_id,
        "employee": {"id": e.id, "employee_id": e.code, "name": e.name, "designation": e.designation} if e else None,
        "title": w.title or w.work_type,
        "work_type": w.work_type,
        "work_description": w.work_description,
        "department": w.department,
        "priority": w.priority,
        "status": w.status,
        "team_lead_id": w.team_lead_id,
        "team_lead_comments": w.team_lead_comments,
        "manager_id": w.manager_id,
        "manager_comments": w.manager_comments,
        "rejection_reason": w.rejection_reason,
        "submitted_at": w.submitted_at.isoformat() if w.submitted_at else None,
        "team_lead_approved_at": w.team_lead_approved_at.isoformat() if w.team_lead_approved_at else None,
        "final_approved_at": w.final_approved_at.isoformat() if w.final_approved_at else None,
        "final_rejected_at": w.final_rejected_at.isoformat() if w.final_rejected_at else None,
    }
