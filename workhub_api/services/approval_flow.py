# workhub_api/services/approval_flow.py
"""
Status machine shared by leave, permission, overtime and work-submission
requests.

Each request kind declares its transitions as (stage, action) → Transition.
`apply()` moves one row with a compare-and-set UPDATE so two approvers acting
at once cannot both win, then records a RequestAction audit row. Notifications
and counters are left to the caller, inside the same transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import update

from workhub_api.extensions import db
from workhub_api.common.errors import APIError, Conflict, Forbidden, InvalidState
from workhub_api.models.leave import LeaveRequest
from workhub_api.models.permission import PermissionRequest
from workhub_api.models.overtime import OvertimeRequest
from workhub_api.models.work_submission import WorkSubmission
from workhub_api.models.request_action import RequestAction

log = logging.getLogger(__name__)

ACTIONS = ("approve", "reject")
TEAM_LEAD = "team_lead"
MANAGER = "manager"

# leave / permission
PENDING_TEAM_LEAD = "Pending Team Lead"
PENDING_MANAGER = "Pending Manager Approval"
APPROVED = "Approved"
REJECTED = "Rejected"
LEGACY_PENDING = "Pending"

# overtime
OT_PENDING = "pending"
OT_FINAL = "Final Approved"
OT_FINAL_ALIASES = (OT_FINAL, "final-approval")
OT_APPROVED = "approved"
OT_REJECTED = "rejected"

# work submissions
WS_PENDING_TEAM_LEAD = "Pending Team Lead"
WS_PENDING_FINAL = "Pending Final Approval"
WS_TEAM_LEAD_REJECTED = "Rejected by Team Lead"
WS_FINAL_APPROVED = "Final Approved"
WS_FINAL_REJECTED = "Final Rejected"


@dataclass(frozen=True)
class Transition:
    from_statuses: tuple
    to_status: str


class Flow:
    def __init__(self, kind: str, model, transitions: dict):
        self.kind = kind
        self.model = model
        self.transitions = transitions

    def step(self, stage: str, action: str) -> Transition:
        if action not in ACTIONS:
            raise APIError("BAD_ACTION", 'Invalid action. Must be "approve" or "reject"', 400)
        t = self.transitions.get((stage, action))
        if t is None:
            raise APIError("BAD_STAGE", f"{self.kind} requests have no {stage} stage", 400)
        return t

    def pending_statuses(self, stage: str) -> tuple:
        return self.transitions[(stage, "approve")].from_statuses


_TL_PENDING = (PENDING_TEAM_LEAD, LEGACY_PENDING)

LEAVE_FLOW = Flow("leave", LeaveRequest, {
    (TEAM_LEAD, "approve"): Transition(_TL_PENDING, PENDING_MANAGER),
    (TEAM_LEAD, "reject"):  Transition(_TL_PENDING, REJECTED),
    (MANAGER, "approve"):   Transition((PENDING_MANAGER,), APPROVED),
    (MANAGER, "reject"):    Transition((PENDING_MANAGER,), REJECTED),
})

PERMISSION_FLOW = Flow("permission", PermissionRequest, {
    (TEAM_LEAD, "approve"): Transition(_TL_PENDING, PENDING_MANAGER),
    (TEAM_LEAD, "reject"):  Transition(_TL_PENDING, REJECTED),
    (MANAGER, "approve"):   Transition((PENDING_MANAGER,), APPROVED),
    (MANAGER, "reject"):    Transition((PENDING_MANAGER,), REJECTED),
})

OVERTIME_FLOW = Flow("overtime", OvertimeRequest, {
    (TEAM_LEAD, "approve"): Transition((OT_PENDING,), OT_FINAL),
    (TEAM_LEAD, "reject"):  Transition((OT_PENDING,), OT_REJECTED),
    (MANAGER, "approve"):   Transition(OT_FINAL_ALIASES, OT_APPROVED),
    (MANAGER, "reject"):    Transition(OT_FINAL_ALIASES, OT_REJECTED),
})

WORK_FLOW = Flow("work_submission", WorkSubmission, {
    (TEAM_LEAD, "approve"): Transition((WS_PENDING_TEAM_LEAD,), WS_PENDING_FINAL),
    (TEAM_LEAD, "reject"):  Transition((WS_PENDING_TEAM_LEAD,), WS_TEAM_LEAD_REJECTED),
    (MANAGER, "approve"):   Transition((WS_PENDING_FINAL,), WS_FINAL_APPROVED),
    (MANAGER, "reject"):    Transition((WS_PENDING_FINAL,), WS_FINAL_REJECTED),
})

FLOWS = {f.kind: f for f in (LEAVE_FLOW, PERMISSION_FLOW, OVERTIME_FLOW, WORK_FLOW)}


def normalize_status(status: str | None) -> str | None:
    return PENDING_TEAM_LEAD if status == LEGACY_PENDING else status


def parse_action(raw) -> str:
    action = (raw or "").strip().lower()
    if action not in ACTIONS:
        raise APIError("BAD_ACTION", 'Invalid action. Must be "approve" or "reject"', 400)
    return action


# ---------- authorization ----------

def ensure_team_lead(obj, actor, roles) -> None:
    """Actor must be one of the leads captured on the request at submit time."""
    if "admin" in roles:
        return
    eligible = [int(x) for x in (obj.team_lead_ids or []) if str(x).isdigit()]
    if actor is None or actor.id not in eligible:
        raise Forbidden("Unauthorized: you are not a team lead for this employee")


def ensure_manager(obj, actor, roles) -> None:
    if "admin" in roles:
        return
    if "manager" not in roles:
        raise Forbidden("Only managers can give final approval")
    assigned = getattr(obj, "manager_id", None)
    if assigned and (actor is None or actor.id != assigned):
        raise Forbidden("This request is assigned to a different manager")


# ---------- transition ----------

def record_action(kind, request_id, stage, action, from_status, to_status, actor=None, comment=None):
    ra = RequestAction(
        request_kind=kind,
        request_id=request_id,
        stage=stage,
        action=action,
        from_status=from_status,
        to_status=to_status,
        comment=comment,
        acted_by_employee_id=actor.id if actor is not None else None,
    )
    db.session.add(ra)
    return ra


def apply(flow: Flow, obj, stage: str, action: str, actor=None, comment=None, values=None) -> str:
    """
    Move `obj` along `flow`. Raises InvalidState when obj is not pending at this
    stage and Conflict when another writer changed the status first.
    Does not commit.
    """
    t = flow.step(stage, action)
    current = obj.status
    if current not in t.from_statuses:
        raise InvalidState(
            f"Request is not pending {stage.replace('_', ' ')} approval. Current status: {current}",
            payload={"status": current},
        )

    vals = dict(values or {})
    vals["status"] = t.to_status
    vals["updated_at"] = datetime.utcnow()

    model = flow.model
    res = db.session.execute(
        update(model)
        .where(model.id == obj.id, model.status == current)
        .values(**vals)
        .execution_options(synchronize_session="fetch")
    )
    if res.rowcount != 1:
        raise Conflict("Request was already processed by another approver")

    record_action(flow.kind, obj.id, stage, action, current, t.to_status, actor, comment)
    log.info("%s #%s %s by %s at %s stage: %s -> %s",
             flow.kind, obj.id, action,
             f"employee #{actor.id}" if actor is not None else "admin",
             stage, current, t.to_status)
    return t.to_status


def history(kind: str, request_id: int):
    rows = (RequestAction.query
            .filter_by(request_kind=kind, request_id=request_id)
            .order_by(RequestAction.acted_at.asc(), RequestAction.id.asc())
            .all())
    return [{
        "stage": r.stage, "action": r.action,
        "from_status": r.from_status, "to_status": r.to_status,
        "comment": r.comment, "acted_by": r.acted_by_employee_id,
        "acted_at": r.acted_at.isoformat() if r.acted_at else None,
    } for r in rows]
