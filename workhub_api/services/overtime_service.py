# workhub_api/services/overtime_service.py
"""Overtime sessions: start → work details/images → end, then TL and manager decisions."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from workhub_api.extensions import db
from workhub_api.common.errors import APIError, Forbidden, NotFound
from workhub_api.models.employee import TeamMember
from workhub_api.models.overtime import OvertimeRequest
from workhub_api.services import approval_flow as flow
from workhub_api.services import clock
from workhub_api.services import notifications as notes
from workhub_api.services.storage import save_upload

log = logging.getLogger(__name__)

PLACEHOLDER_REASON = "OT in progress - work details pending"
BULK_REJECT_REMARK = "Bulk rejected by manager"


def _get(ot_id) -> OvertimeRequest:
    ot = db.session.get(OvertimeRequest, int(ot_id)) if str(ot_id).isdigit() else None
    if ot is None:
        raise NotFound("Overtime request not found")
    return ot


def start_session(emp, ot_date, start_time, reason=None):
    """Returns (row, existing). An open session for the same day is resumed."""
    open_row = (OvertimeRequest.query
                .filter_by(employee_id=emp.id, ot_date=ot_date, is_active=True, status=flow.OT_PENDING)
                .order_by(OvertimeRequest.id.desc())
                .first())
    if open_row is not None:
        return open_row, True

    ot = OvertimeRequest(
        employee_id=emp.id,
        ot_date=ot_date,
        start_time=start_time,
        end_time=None,
        reason=reason or PLACEHOLDER_REASON,
        is_active=True,
        status=flow.OT_PENDING,
    )
    db.session.add(ot)
    db.session.commit()
    log.info("OT session #%s started for %s on %s at %s", ot.id, emp.code, ot_date, start_time)
    return ot, False


def submit_work(ot_id, emp, work_type, work_description, image1=None, image2=None, is_admin=False):
    ot = _get(ot_id)
    if not is_admin and (emp is None or ot.employee_id != emp.id):
        raise Forbidden("You can only update your own overtime")
    if ot.status != flow.OT_PENDING:
        raise APIError("INVALID_STATE", f"Overtime is already {ot.status}", 400)

    max_bytes = int(current_app.config.get("MAX_OT_IMAGE_BYTES") or 50 * 1024 * 1024)
    if work_type:
        ot.work_type = work_type
        ot.reason = f"{work_type}: {work_description}" if work_description else work_type
    if image1 is not None:
        ot.image1 = save_upload(image1, f"overtime/{ot.id}", "image1", max_bytes=max_bytes)
    if image2 is not None:
        ot.image2 = save_upload(image2, f"overtime/{ot.id}", "image2", max_bytes=max_bytes)
    db.session.commit()
    log.info("OT #%s work details submitted (images: %s/%s)", ot.id, bool(ot.image1), bool(ot.image2))
    return ot


def end_session(ot_id, emp, end_time, is_admin=False):
    ot = _get(ot_id)
    if not is_admin and (emp is None or ot.employee_id != emp.id):
        raise Forbidden("You can only end your own overtime")
    if not ot.is_active:
        raise APIError("INVALID_STATE", "Overtime session already ended", 400)
    if not ot.image1 or not ot.image2:
        raise APIError("IMAGES_REQUIRED", "Both images must be submitted before ending overtime", 400)

    ot.end_time = end_time
    ot.total_hours = Decimal(str(clock.time_span_hours(ot.start_time, end_time)))
    ot.is_active = False
    db.session.commit()
    log.info("OT #%s ended at %s (%s h)", ot.id, end_time, ot.total_hours)
    return ot


def _ensure_ended(ot: OvertimeRequest):
    if ot.is_active:
        raise APIError("INVALID_STATE", "Overtime session still in progress", 400)


def delete_request(ot_id):
    ot = _get(ot_id)
    db.session.delete(ot)
    db.session.commit()
    log.info("OT #%s deleted", ot_id)


# ---------------- team lead ----------------

def team_member_ids(lead_id: int) -> list[int]:
    rows = (db.session.query(TeamMember.employee_id)
            .filter(TeamMember.team_lead_id == lead_id, TeamMember.is_active.is_(True))
            .all())
    return [r[0] for r in rows]


def team_queue(lead_id, is_admin=False, status=None):
    q = OvertimeRequest.query
    if not is_admin:
        ids = team_member_ids(lead_id)
        if not ids:
            return []
        q = q.filter(OvertimeRequest.employee_id.in_(ids))
    if status:
        q = q.filter(OvertimeRequest.status == status)
    return q.order_by(OvertimeRequest.ot_date.desc(), OvertimeRequest.id.desc()).all()


def team_lead_decide(ot_id, action, actor, roles, comment=None):
    action = flow.parse_action(action)
    ot = _get(ot_id)
    if "admin" not in roles:
        if actor is None or ot.employee_id not in team_member_ids(actor.id):
            raise Forbidden("Unauthorized: employee is not in your team")
    _ensure_ended(ot)

    values = {"team_lead_comments": comment, "team_lead_acted_at": datetime.utcnow()}
    if actor is not None:
        values["team_lead_id"] = actor.id
    new_status = flow.apply(flow.OVERTIME_FLOW, ot, flow.TEAM_LEAD, action, actor, comment, values)

    if new_status == flow.OT_FINAL:
        notes.notify(ot.employee_id, "employee", "Overtime Approved by Team Lead",
                     notes.with_comment("Your overtime request was forwarded for final approval.", comment),
                     "overtime_request", ot.id)
        notes.notify_managers(None, "Overtime Awaiting Final Approval",
                              f"{ot.employee.name if ot.employee else 'An employee'} has overtime on "
                              f"{ot.ot_date.isoformat()} awaiting final approval.",
                              "overtime_final", ot.id)
    else:
        notes.notify(ot.employee_id, "employee", "Overtime Rejected",
                     notes.with_comment("Your overtime request has been rejected by the team lead.", comment),
                     "overtime_request", ot.id)
    db.session.commit()
    return ot


# ---------------- manager final approval ----------------

def final_queue(employee_id=None):
    q = OvertimeRequest.query.filter(OvertimeRequest.status.in_(flow.OT_FINAL_ALIASES))
    if employee_id:
        q = q.filter(OvertimeRequest.employee_id == employee_id)
    return q.order_by(OvertimeRequest.ot_date.desc(), OvertimeRequest.id.desc()).all()


def _final_values(action, actor, remarks, batch_id):
    values = {
        "final_approved_by": actor.id if actor is not None else None,
        "final_approved_at": datetime.utcnow(),
    }
    if action == "approve":
        values["batch_id"] = batch_id or None
        values["manager_remarks"] = remarks or None
    else:
        values["manager_remarks"] = remarks or BULK_REJECT_REMARK
    return values


def _notify_final(ot, new_status, remarks):
    verb = "approved" if new_status == flow.OT_APPROVED else "rejected"
    notes.notify(ot.employee_id, "employee", f"Overtime {verb.title()}",
                 notes.with_comment(f"Your overtime on {ot.ot_date.isoformat()} has been {verb} by the manager.",
                                    remarks),
                 "overtime_final", ot.id)


def manager_decide(ot_id, action, actor, roles, remarks=None, batch_id=None):
    action = flow.parse_action(action)
    if "admin" not in roles and "manager" not in roles:
        raise Forbidden("Only managers can give final approval")
    ot = db.session.get(OvertimeRequest, int(ot_id)) if str(ot_id).isdigit() else None
    if ot is None or ot.status not in flow.OT_FINAL_ALIASES:
        raise NotFound("Request not found or not in Final Approved status")
    _ensure_ended(ot)

    values = _final_values(action, actor, remarks, batch_id)
    new_status = flow.apply(flow.OVERTIME_FLOW, ot, flow.MANAGER, action, actor, remarks, values)
    _notify_final(ot, new_status, values.get("manager_remarks") if action == "reject" else remarks)
    db.session.commit()
    return ot


def manager_decide_many(ids, action, actor, roles, remarks=None, batch_id=None) -> dict:
    """Decide every id still awaiting final approval; others are reported as skipped."""
    action = flow.parse_action(action)
    if "admin" not in roles and "manager" not in roles:
        raise Forbidden("Only managers can give final approval")
    if action == "approve" and not batch_id:
        batch_id = uuid.uuid4().hex[:12]

    wanted = sorted({int(x) for x in ids if str(x).isdigit()})
    rows = (OvertimeRequest.query
            .filter(OvertimeRequest.id.in_(wanted),
                    OvertimeRequest.status.in_(flow.OT_FINAL_ALIASES),
                    OvertimeRequest.is_active.is_(False))
            .all()) if wanted else []

    updated = []
    for ot in rows:
        values = _final_values(action, actor, remarks, batch_id)
        new_status = flow.apply(flow.OVERTIME_FLOW, ot, flow.MANAGER, action, actor, remarks, values)
        _notify_final(ot, new_status, values.get("manager_remarks"))
        updated.append(ot.id)
    db.session.commit()

    skipped = [i for i in wanted if i not in updated]
    log.info("Bulk OT %s: %s updated, %s skipped (batch %s)", action, len(updated), len(skipped), batch_id)
    return {
        "updated_count": len(updated),
        "updated_ids": updated,
        "skipped_ids": skipped,
        "action": action,
        "batch_id": batch_id if action == "approve" else None,
    }


# ---------------- summary ----------------

def approved_hours(employee_id: int, month: int, year: int) -> dict:
    start = datetime(year, month, 1).date()
    end = datetime(year + (month == 12), (month % 12) + 1, 1).date()
    q = (db.session.query(func.coalesce(func.sum(OvertimeRequest.total_hours), 0), func.count(OvertimeRequest.id))
         .filter(OvertimeRequest.employee_id == employee_id,
                 OvertimeRequest.status == flow.OT_APPROVED,
                 OvertimeRequest.ot_date >= start,
                 OvertimeRequest.ot_date < end))
    total, count = q.one()
    return {
        "employee_id": employee_id,
        "month": month,
        "year": year,
        "total_hours": round(float(total or 0), 2),
        "approved_count": int(count or 0),
    }


def ot_dict(o: OvertimeRequest) -> dict:
    e = o.employee
    return {
        "id": o.id,
        "employee_id": o.employee_id,
        "employee": {"id": e.id, "employee_id": e.code, "name": e.name, "designation": e.designation} if e else None,
        "ot_date": o.ot_date.isoformat(),
        "start_time": o.start_time.strftime("%H:%M:%S") if o.start_time else None,
        "end_time": o.end_time.strftime("%H:%M:%S") if o.end_time else None,
        "total_hours": float(o.total_hours) if o.total_hours is not None else None,
        "work_type": o.work_type,
        "reason": o.reason,
        "image1": o.image1,
        "image2": o.image2,
        "is_active": o.is_active,
        "status": o.status,
        "team_lead_id": o.team_lead_id,
        "team_lead_comments": o.team_lead_comments,
        "final_approved_by": o.final_approved_by,
        "final_approved_at": o.final_approved_at.isoformat() if o.final_approved_at else None,
        "batch_id": o.batch_id,
        "manager_remarks": o.manager_remarks,
        "created_at": o.created_at.isoformat() if o.created_at else None,
    }
