from workhub_api.extensions import db
from workhub_api.models.attendance import MonthlyAttendance
from workhub_api.models.leave import LeaveRequest
from workhub_api.models.notification import Notification


def _submit(client, headers, **over):
    body = {"leaveType": "Sick Leave", "startDate": "2025-03-10", "endDate": "2025-03-12",
            "reason": "Flu"}
    body.update(over)
    return client.post("/api/leave-request", json=body, headers=headers)


def test_leave_two_stage_approval(client, team):
    r = _submit(client, team.h_e1)
    assert r.status_code == 201
    leave = r.get_json()["data"]
    assert leave["status"] == "Pending Team Lead"
    assert leave["team_lead_ids"] == [team.tl1.id]
    assert leave["manager_id"] == team.m1.id
    assert leave["total_days"] == 3

    q = client.get("/api/team-lead/leave-requests", headers=team.h_tl1).get_json()
    assert [x["id"] for x in q["data"]] == [leave["id"]]

    r = client.patch("/api/team-lead/leave-requests",
                     json={"requestId": leave["id"], "action": "approve", "comments": "fine"},
                     headers=team.h_tl1)
    assert r.status_code == 200
    body = r.get_json()["data"]
    assert body["status"] == "Pending Manager Approval"
    assert body["team_lead_id"] == team.tl1.id
    assert body["team_lead_comments"] == "fine"

    q = client.get("/api/manager/final-approvals/leave-requests", headers=team.h_m1).get_json()
    assert [x["id"] for x in q["data"]] == [leave["id"]]

    r = client.patch("/api/manager/final-approvals/leave-requests",
                     json={"requestId": leave["id"], "action": "approve"}, headers=team.h_m1)
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "Approved"
    assert r.get_json()["data"]["approved_at"] is not None

    att = MonthlyAttendance.query.filter_by(employee_id=team.e1.id, month=3, year=2025).one()
    assert att.leaves == 3

    detail = client.get(f"/api/leave-request/{leave['id']}", headers=team.h_e1).get_json()["data"]
    assert [(h["stage"], h["to_status"]) for h in detail["history"]] == [
        ("employee", "Pending Team Lead"),
        ("team_lead", "Pending Manager Approval"),
        ("manager", "Approved"),
    ]


def test_leave_spanning_months_counts_days_per_month(client, team):
    rid = _submit(client, team.h_e1, startDate="2025-01-30", endDate="2025-02-02").get_json()["data"]["id"]
    client.patch("/api/team-lead/leave-requests", json={"requestId": rid, "action": "approve"},
                 headers=team.h_tl1)
    client.patch("/api/manager/final-approvals/leave-requests", json={"requestId": rid, "action": "approve"},
                 headers=team.h_m1)

    jan = MonthlyAttendance.query.filter_by(employee_id=team.e1.id, month=1, year=2025).one()
    feb = MonthlyAttendance.query.filter_by(employee_id=team.e1.id, month=2, year=2025).one()
    assert (jan.leaves, feb.leaves) == (2, 2)


def test_team_lead_reject_is_final(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    r = client.patch("/api/team-lead/leave-requests",
                     json={"requestId": rid, "action": "reject", "comments": "Busy week"},
                     headers=team.h_tl1)
    assert r.get_json()["data"]["status"] == "Rejected"

    r = client.patch("/api/manager/final-approvals/leave-requests",
                     json={"requestId": rid, "action": "approve"}, headers=team.h_m1)
    assert r.status_code == 400
    body = r.get_json()
    assert body["code"] == "INVALID_STATE"
    assert "Rejected" in body["error"]

    note = Notification.query.filter_by(recipient_id=team.e1.id, title="Leave Request Rejected").one()
    assert note.message.endswith("Comments: Busy week")


def test_second_manager_decision_is_rejected(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    client.patch("/api/team-lead/leave-requests", json={"requestId": rid, "action": "approve"},
                 headers=team.h_tl1)
    first = client.patch("/api/manager/final-approvals/leave-requests",
                         json={"requestId": rid, "action": "reject"}, headers=team.h_m1)
    again = client.patch("/api/manager/final-approvals/leave-requests",
                         json={"requestId": rid, "action": "approve"}, headers=team.h_m1)
    assert first.get_json()["data"]["status"] == "Rejected"
    assert again.status_code == 400
    assert db.session.get(LeaveRequest, rid).status == "Rejected"


def test_only_listed_team_leads_may_act(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    r = client.patch("/api/team-lead/leave-requests", json={"requestId": rid, "action": "approve"},
                     headers=team.h_tl2)
    assert r.status_code == 403
    assert db.session.get(LeaveRequest, rid).status == "Pending Team Lead"


def test_manager_must_match_assigned_manager(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    client.patch("/api/team-lead/leave-requests", json={"requestId": rid, "action": "approve"},
                 headers=team.h_tl1)
    r = client.patch("/api/manager/final-approvals/leave-requests",
                     json={"requestId": rid, "action": "approve"}, headers=team.h_m2)
    assert r.status_code == 403


def test_admin_can_act_at_both_stages(client, team, admin_headers):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    r1 = client.patch("/api/leave-request", json={"id": rid, "action": "approve"}, headers=admin_headers)
    r2 = client.patch("/api/leave-request", json={"id": rid, "action": "approve"}, headers=admin_headers)
    assert r1.get_json()["data"]["status"] == "Pending Manager Approval"
    assert r2.get_json()["data"]["status"] == "Approved"


def test_legacy_pending_status_is_team_lead_stage(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    db.session.get(LeaveRequest, rid).status = "Pending"
    db.session.commit()

    q = client.get("/api/team-lead/leave-requests", query_string={"status": "Pending Team Lead"},
                   headers=team.h_tl1).get_json()
    assert q["data"][0]["status"] == "Pending Team Lead"

    r = client.patch("/api/leave-request", json={"requestId": rid, "action": "approve"}, headers=team.h_tl1)
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "Pending Manager Approval"


def test_submit_validation(client, team, make_employee, auth_for):
    assert _submit(client, team.h_e1, reason="").status_code == 400
    r = _submit(client, team.h_e1, startDate="2025-03-12", endDate="2025-03-10")
    assert r.status_code == 400
    assert r.get_json()["error"] == "End date cannot be before start date"

    loner = make_employee("E9")
    r = _submit(client, auth_for(loner))
    assert r.status_code == 404
    assert r.get_json()["error"] == "Team lead not found for this employee"


def test_bad_action_and_unknown_request(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    r = client.patch("/api/team-lead/leave-requests", json={"requestId": rid, "action": "maybe"},
                     headers=team.h_tl1)
    assert r.status_code == 400
    assert r.get_json()["code"] == "BAD_ACTION"

    r = client.patch("/api/team-lead/leave-requests", json={"requestId": 9999, "action": "approve"},
                     headers=team.h_tl1)
    assert r.status_code == 404


def test_employee_cannot_decide(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    r = client.patch("/api/leave-request", json={"requestId": rid, "action": "approve"}, headers=team.h_e1)
    assert r.status_code == 403


def test_notifications_follow_the_request(client, team):
    rid = _submit(client, team.h_e1).get_json()["data"]["id"]
    assert Notification.query.filter_by(recipient_id=team.tl1.id, reference_id=rid).count() == 1

    client.patch("/api/team-lead/leave-requests", json={"requestId": rid, "action": "approve"},
                 headers=team.h_tl1)
    mgr = Notification.query.filter_by(recipient_id=team.m1.id, reference_id=rid).one()
    assert mgr.title == "Leave Request Awaiting Final Approval"
    assert Notification.query.filter_by(recipient_id=team.m2.id).count() == 0


def test_history_listing_and_count(client, team):
    _submit(client, team.h_e1)
    _submit(client, team.h_e1, startDate="2025-04-01", endDate="2025-04-01")
    r = client.get("/api/leave-request", headers=team.h_e1).get_json()
    assert r["count"] == 2
    r = client.get(f"/api/leave-request?employeeId={team.e1.code}&count=true", headers=team.h_tl1).get_json()
    assert r["data"] == {"count": 2}

    r = client.get(f"/api/leave-request?employeeId={team.tl1.id}", headers=team.h_e1)
    assert r.status_code == 403
