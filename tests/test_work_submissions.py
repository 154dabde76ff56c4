from workhub_api.extensions import db
from workhub_api.models.notification import Notification
from workhub_api.models.user import User
from workhub_api.seed_roles import grant_role


def _submit(client, headers, **over):
    body = {"workType": "Feature", "workDescription": "Built the payroll export", "priority": "High"}
    body.update(over)
    return client.post("/api/team-lead/work-submission", json=body, headers=headers)


def test_employee_submission_goes_through_both_stages(client, team):
    r = _submit(client, team.h_e1)
    assert r.status_code == 201
    ws = r.get_json()["data"]
    assert ws["status"] == "Pending Team Lead"
    assert ws["priority"] == "High"
    assert ws["title"] == "Feature"
    assert Notification.query.filter_by(recipient_id=team.tl1.id, type="work_submission").count() == 1

    q = client.get("/api/team-lead/work-submission", headers=team.h_tl1).get_json()
    assert [w["id"] for w in q["data"]] == [ws["id"]]

    r = client.patch("/api/team-lead/work-submission",
                     json={"id": ws["id"], "action": "approve", "comments": "Solid"}, headers=team.h_tl1)
    assert r.get_json()["data"]["status"] == "Pending Final Approval"

    q = client.get("/api/manager/final-approvals/WorkSubmission", headers=team.h_m1).get_json()
    assert [w["id"] for w in q["data"]] == [ws["id"]]

    r = client.post(f"/api/manager/final-approvals/{ws['id']}/approve", json={"comments": "Ship it"},
                    headers=team.h_m1)
    assert r.status_code == 200
    done = r.get_json()["data"]
    assert done["status"] == "Final Approved"
    assert done["manager_id"] == team.m1.id
    assert done["final_approved_at"] is not None


def test_team_lead_own_submission_skips_first_stage(client, team):
    ws = _submit(client, team.h_tl1).get_json()["data"]
    assert ws["status"] == "Pending Final Approval"
    assert ws["manager_id"] == team.m1.id
    assert Notification.query.filter_by(recipient_id=team.m1.id, reference_id=ws["id"]).count() == 1


def test_team_lead_rejection_is_final(client, team):
    ws_id = _submit(client, team.h_e1).get_json()["data"]["id"]
    r = client.post(f"/api/team-lead/work-submission/{ws_id}/reject", json={"comments": "Missing tests"},
                    headers=team.h_tl1)
    data = r.get_json()["data"]
    assert data["status"] == "Rejected by Team Lead"
    assert data["rejection_reason"] == "Missing tests"

    r = client.post(f"/api/manager/final-approvals/{ws_id}/approve", headers=team.h_m1)
    assert r.status_code == 404


def test_lead_outside_team_is_forbidden(client, team):
    ws_id = _submit(client, team.h_e1).get_json()["data"]["id"]
    r = client.patch("/api/team-lead/work-submission", json={"id": ws_id, "action": "approve"},
                     headers=team.h_tl2)
    assert r.status_code == 403


def test_manager_reject_and_status_filter(client, team):
    ws_id = _submit(client, team.h_tl1).get_json()["data"]["id"]
    r = client.post(f"/api/manager/final-approvals/{ws_id}/reject", json={"comments": "Out of scope"},
                    headers=team.h_m1)
    assert r.get_json()["data"]["status"] == "Final Rejected"

    q = client.get("/api/manager/final-approvals", query_string={"status": "Final Rejected"},
                   headers=team.h_m1).get_json()
    assert [w["id"] for w in q["data"]] == [ws_id]
    r = client.get("/api/manager/final-approvals?status=Unknown", headers=team.h_m1)
    assert r.status_code == 400


def test_missing_fields_and_own_history(client, team):
    assert _submit(client, team.h_e1, workDescription="").status_code == 400
    _submit(client, team.h_e1)
    mine = client.get("/api/work-submissions", headers=team.h_e1).get_json()
    assert mine["count"] == 1
    r = client.get(f"/api/work-submissions?employeeId={team.tl1.code}", headers=team.h_e1)
    assert r.status_code == 403


def test_lead_login_without_profile_is_forbidden(client, team, auth_for):
    u = User(email="lead-only@workhub.test", full_name="Lead Only", user_type="team-lead")
    u.set_password("secret123")
    db.session.add(u)
    db.session.flush()
    grant_role(u, "team-lead")
    db.session.commit()

    r = client.get("/api/team-lead/work-submission", query_string={"team_lead_id": team.tl1.id},
                   headers=auth_for(u))
    assert r.status_code == 403
