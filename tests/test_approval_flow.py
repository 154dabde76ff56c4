from datetime import date

import pytest
from sqlalchemy import update

from workhub_api.extensions import db
from workhub_api.common.errors import APIError, Conflict, Forbidden, InvalidState
from workhub_api.models.leave import LeaveRequest
from workhub_api.models.request_action import RequestAction
from workhub_api.services import approval_flow as flow


@pytest.fixture
def pending_leave(team):
    req = LeaveRequest(employee_id=team.e1.id, team_lead_ids=[team.tl1.id], manager_id=team.m1.id,
                       leave_type="Casual Leave", start_date=date(2025, 6, 2), end_date=date(2025, 6, 2),
                       reason="Errand")
    db.session.add(req)
    db.session.commit()
    return req


def test_apply_moves_status_and_records_action(team, pending_leave):
    new = flow.apply(flow.LEAVE_FLOW, pending_leave, flow.TEAM_LEAD, "approve", team.tl1, "ok",
                     {"team_lead_id": team.tl1.id})
    db.session.commit()
    assert new == "Pending Manager Approval"
    assert pending_leave.status == new
    assert pending_leave.team_lead_id == team.tl1.id
    ra = RequestAction.query.filter_by(request_kind="leave", request_id=pending_leave.id).one()
    assert (ra.from_status, ra.to_status, ra.acted_by_employee_id) == ("Pending Team Lead", new, team.tl1.id)


def test_lost_race_is_a_conflict(team, pending_leave):
    # another approver moves the row behind this session's back
    db.session.execute(
        update(LeaveRequest)
        .where(LeaveRequest.id == pending_leave.id)
        .values(status="Pending Manager Approval")
        .execution_options(synchronize_session=False)
    )
    assert pending_leave.status == "Pending Team Lead"
    with pytest.raises(Conflict) as exc:
        flow.apply(flow.LEAVE_FLOW, pending_leave, flow.TEAM_LEAD, "approve", team.tl1)
    assert exc.value.status_code == 409


def test_wrong_stage_is_invalid_state(team, pending_leave):
    with pytest.raises(InvalidState) as exc:
        flow.apply(flow.LEAVE_FLOW, pending_leave, flow.MANAGER, "approve", team.m1)
    assert exc.value.payload == {"status": "Pending Team Lead"}


def test_action_parsing():
    assert flow.parse_action(" Approve ") == "approve"
    with pytest.raises(APIError):
        flow.parse_action("escalate")
    with pytest.raises(APIError):
        flow.OVERTIME_FLOW.step("employee", "approve")


def test_authorization_helpers(team, pending_leave):
    flow.ensure_team_lead(pending_leave, team.tl1, {"team-lead"})
    flow.ensure_team_lead(pending_leave, None, {"admin"})
    with pytest.raises(Forbidden):
        flow.ensure_team_lead(pending_leave, team.tl2, {"team-lead"})

    flow.ensure_manager(pending_leave, team.m1, {"manager"})
    with pytest.raises(Forbidden):
        flow.ensure_manager(pending_leave, team.m2, {"manager"})
    with pytest.raises(Forbidden):
        flow.ensure_manager(pending_leave, team.tl1, {"team-lead"})


def test_legacy_status_normalised():
    assert flow.normalize_status("Pending") == "Pending Team Lead"
    assert flow.normalize_status("Approved") == "Approved"
    assert "Pending" in flow.LEAVE_FLOW.pending_statuses(flow.TEAM_LEAD)
    assert flow.OVERTIME_FLOW.pending_statuses(flow.MANAGER) == ("Final Approved", "final-approval")
