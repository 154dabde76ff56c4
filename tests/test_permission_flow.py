from workhub_api.extensions import db
from workhub_api.models.attendance import MonthlyAttendance
from workhub_api.models.user import User
from workhub_api.seed_roles import grant_role


def _submit(client, headers, **over):
    body = {"permissionType": "Personal", "date": "2025-03-14", "startTime": "10:00",
            "endTime": "12:00", "reason": "Bank visit"}
    body.update(over)
    return client.post("/api/permission-request", json=body, headers=headers)


def test_permission_approval_bumps_monthly_counter(client, team):
    r = _submit(client, team.h_e1)
    assert r.status_code == 201
    perm = r.get_json()["data"]
    assert perm["status"] == "Pending Team Lead"
    assert (perm["start_time"], perm["end_time"]) == ("10:00", "12:00")

    r = client.put("/api/team-lead/permission-requests",
                   json={"requestId": perm["id"], "action": "approve"}, headers=team.h_tl1)
    assert r.get_json()["data"]["status"] == "Pending Manager Approval"

    r = client.put("/api/manager/final-approvals/permission-requests",
                   json={"requestId": perm["id"], "action": "approve", "comments": "ok"}, headers=team.h_m1)
    assert r.get_json()["data"]["status"] == "Approved"
    assert r.get_json()["data"]["manager_comments"] == "ok"

    att = MonthlyAttendance.query.filter_by(employee_id=team.e1.id, month=3, year=2025).one()
    assert att.permissions == 1
    assert att.leaves == 0


def test_manager_rejection_leaves_counters_alone(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    client.patch("/api/team-lead/permission-requests", json={"requestId": rid, "action": "approve"},
                 headers=team.h_tl1)
    r = client.patch("/api/manager/final-approvals/permission-requests",
                     json={"requestId": rid, "action": "reject"}, headers=team.h_m1)
    assert r.get_json()["data"]["status"] == "Rejected"
    assert MonthlyAttendance.query.filter_by(employee_id=team.e1.id).count() == 0


def test_end_time_must_follow_start_time(client, team):
    r = _submit(client, team.h_e1, startTime="12:00", endTime="12:00")
    assert r.status_code == 400
    assert r.get_json()["error"] == "End time must be after start time"


def test_missing_fields(client, team):
    r = _submit(client, team.h_e1, permissionType="")
    assert r.status_code == 400


def test_manager_cannot_skip_team_lead_stage(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    r = client.patch("/api/manager/final-approvals/permission-requests",
                     json={"requestId": rid, "action": "approve"}, headers=team.h_m1)
    assert r.status_code == 400
    assert r.get_json()["details"] == {"status": "Pending Team Lead"}


def test_team_lead_queue_is_scoped(client, team):
    _submit(client, team.h_e1)
    mine = client.get("/api/team-lead/permission-requests", headers=team.h_tl1).get_json()
    other = client.get("/api/team-lead/permission-requests", headers=team.h_tl2).get_json()
    assert mine["count"] == 1
    assert other["count"] == 0


def test_lead_login_without_profile_cannot_borrow_a_queue(client, team, auth_for):
    u = User(email="lead-only@workhub.test", full_name="Lead Only", user_type="team-lead")
    u.set_password("secret123")
    db.session.add(u)
    db.session.flush()
    grant_role(u, "team-lead")
    db.session.commit()

    r = client.get("/api/team-lead/permission-requests", query_string={"teamLeadId": team.tl1.code},
                   headers=auth_for(u))
    assert r.status_code == 403
