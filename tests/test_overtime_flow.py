import io
import os

from workhub_api.extensions import db
from workhub_api.models.overtime import OvertimeRequest


def _start(client, headers, day="2025-03-10", start="18:00"):
    return client.post("/api/employees/Overtime", json={"ot_date": day, "start_time": start}, headers=headers)


def _images(client, headers, ot_id, work_type="Deployment", desc="Release 2.3"):
    data = {
        "ot_id": str(ot_id),
        "work_type": work_type,
        "work_description": desc,
        "image1": (io.BytesIO(b"first-shot"), "before.PNG"),
        "image2": (io.BytesIO(b"second-shot"), "after.jpg"),
    }
    return client.put("/api/employees/Overtime", data=data, headers=headers,
                      content_type="multipart/form-data")


def _closed_session(client, headers, day="2025-03-10", start="18:00", end="21:30"):
    ot_id = _start(client, headers, day, start).get_json()["data"]["id"]
    _images(client, headers, ot_id)
    client.patch("/api/employees/Overtime", json={"ot_id": ot_id, "end_time": end}, headers=headers)
    return ot_id


def test_session_lifecycle(app, client, team):
    r = _start(client, team.h_e1)
    assert r.status_code == 201
    body = r.get_json()
    assert body["existing"] is False
    ot = body["data"]
    assert ot["status"] == "pending"
    assert ot["is_active"] is True
    assert ot["end_time"] is None
    assert ot["reason"] == "OT in progress - work details pending"

    again = _start(client, team.h_e1, start="18:30")
    assert again.status_code == 200
    assert again.get_json()["existing"] is True
    assert again.get_json()["data"]["id"] == ot["id"]

    r = client.patch("/api/employees/Overtime", json={"ot_id": ot["id"], "end_time": "21:00"},
                     headers=team.h_e1)
    assert r.status_code == 400
    assert r.get_json()["code"] == "IMAGES_REQUIRED"

    r = _images(client, team.h_e1, ot["id"])
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["reason"] == "Deployment: Release 2.3"
    assert data["image1"] == f"overtime/{ot['id']}/image1.png"
    assert os.path.isfile(os.path.join(app.config["UPLOADS_ROOT"], data["image2"]))

    r = client.patch("/api/employees/Overtime", json={"ot_id": ot["id"], "end_time": "21:30"},
                     headers=team.h_e1)
    assert r.status_code == 200
    closed = r.get_json()["data"]
    assert closed["total_hours"] == 3.5
    assert closed["is_active"] is False

    active = client.get("/api/employees/Overtime/active?date=2025-03-10", headers=team.h_e1).get_json()
    assert active["data"] is None


def test_session_past_midnight(client, team):
    ot_id = _closed_session(client, team.h_e1, start="22:00", end="01:00")
    assert float(db.session.get(OvertimeRequest, ot_id).total_hours) == 3.0


def test_oversized_image_is_refused(app, client, team):
    app.config["MAX_OT_IMAGE_BYTES"] = 4
    ot_id = _start(client, team.h_e1).get_json()["data"]["id"]
    r = _images(client, team.h_e1, ot_id)
    assert r.status_code == 400
    assert r.get_json()["code"] == "FILE_TOO_LARGE"


def test_only_owner_updates_session(client, team):
    ot_id = _start(client, team.h_e1).get_json()["data"]["id"]
    r = _images(client, team.h_tl1, ot_id)
    assert r.status_code == 403


def test_team_lead_then_manager_approval(client, team):
    ot_id = _closed_session(client, team.h_e1)

    q = client.get("/api/team-lead/overtime", headers=team.h_tl1).get_json()
    assert [o["id"] for o in q["data"]] == [ot_id]
    assert client.get("/api/team-lead/overtime", headers=team.h_tl2).get_json()["count"] == 0

    r = client.patch("/api/team-lead/overtime", json={"id": ot_id, "action": "approve"}, headers=team.h_tl2)
    assert r.status_code == 403

    r = client.patch("/api/team-lead/overtime", json={"id": ot_id, "action": "approve"}, headers=team.h_tl1)
    assert r.get_json()["data"]["status"] == "Final Approved"

    q = client.get("/api/manager/final-approvals/Overtime", headers=team.h_m1).get_json()
    assert [o["id"] for o in q["data"]] == [ot_id]

    r = client.put("/api/manager/final-approvals/Overtime",
                   json={"id": ot_id, "action": "approve", "manager_remarks": "Paid", "batch_id": "B-03"},
                   headers=team.h_m1)
    assert r.status_code == 200
    done = r.get_json()["data"]
    assert done["status"] == "approved"
    assert done["batch_id"] == "B-03"
    assert done["final_approved_by"] == team.m1.id

    r = client.put("/api/manager/final-approvals/Overtime", json={"id": ot_id, "action": "approve"},
                   headers=team.h_m1)
    assert r.status_code == 404

    s = client.get(f"/api/overtime-summary?employeeId={team.e1.code}&month=3&year=2025",
                   headers=team.h_e1).get_json()["data"]
    assert s["total_hours"] == 3.5
    assert s["approved_count"] == 1


def test_legacy_final_alias_is_accepted(client, team):
    ot_id = _closed_session(client, team.h_e1)
    db.session.get(OvertimeRequest, ot_id).status = "final-approval"
    db.session.commit()
    r = client.put("/api/manager/final-approvals/Overtime", json={"id": ot_id, "action": "reject"},
                   headers=team.h_m1)
    assert r.get_json()["data"]["status"] == "rejected"
    assert r.get_json()["data"]["manager_remarks"] == "Bulk rejected by manager"


def test_bulk_final_decision(client, team):
    a = _closed_session(client, team.h_e1, day="2025-03-10")
    b = _closed_session(client, team.h_e1, day="2025-03-11")
    c = _closed_session(client, team.h_e1, day="2025-03-12")
    for ot_id in (a, b):
        client.patch("/api/team-lead/overtime", json={"id": ot_id, "action": "approve"}, headers=team.h_tl1)

    r = client.patch("/api/manager/final-approvals/Overtime",
                     json={"request_ids": [a, b, c, 9999], "action": "approve"}, headers=team.h_m1)
    assert r.status_code == 200
    res = r.get_json()["data"]
    assert res["updated_count"] == 2
    assert sorted(res["updated_ids"]) == [a, b]
    assert res["skipped_ids"] == [c, 9999]
    assert res["batch_id"]
    assert {db.session.get(OvertimeRequest, i).batch_id for i in (a, b)} == {res["batch_id"]}
    assert db.session.get(OvertimeRequest, c).status == "pending"


def test_bulk_requires_ids(client, team):
    r = client.patch("/api/manager/final-approvals/Overtime", json={"action": "approve"}, headers=team.h_m1)
    assert r.status_code == 400


def test_employee_cannot_give_final_approval(client, team):
    r = client.put("/api/manager/final-approvals/Overtime", json={"id": 1, "action": "approve"},
                   headers=team.h_e1)
    assert r.status_code == 403


def test_admin_deletes_request(client, team, admin_headers):
    ot_id = _start(client, team.h_e1).get_json()["data"]["id"]
    assert client.delete(f"/api/employees/Overtime?ot_id={ot_id}", headers=team.h_e1).status_code == 403
    r = client.delete(f"/api/employees/Overtime?ot_id={ot_id}", headers=admin_headers)
    assert r.status_code == 200
    assert db.session.get(OvertimeRequest, ot_id) is None


def test_open_session_cannot_be_decided(client, team):
    ot_id = _start(client, team.h_e1).get_json()["data"]["id"]

    r = client.patch("/api/team-lead/overtime", json={"id": ot_id, "action": "approve"}, headers=team.h_tl1)
    assert r.status_code == 400
    assert r.get_json()["code"] == "INVALID_STATE"
    ot = db.session.get(OvertimeRequest, ot_id)
    assert (ot.status, ot.is_active) == ("pending", True)

    # a row already forwarded while still open is held back from the manager too
    ot.status = "Final Approved"
    db.session.commit()
    r = client.put("/api/manager/final-approvals/Overtime", json={"id": ot_id, "action": "approve"},
                   headers=team.h_m1)
    assert r.status_code == 400
    r = client.patch("/api/manager/final-approvals/Overtime",
                     json={"request_ids": [ot_id], "action": "approve"}, headers=team.h_m1)
    assert r.get_json()["data"]["skipped_ids"] == [ot_id]
    assert db.session.get(OvertimeRequest, ot_id).total_hours is None


def test_decided_session_is_not_resumed(client, team):
    ot_id = _start(client, team.h_e1).get_json()["data"]["id"]
    ot = db.session.get(OvertimeRequest, ot_id)
    ot.status = "approved"
    db.session.commit()

    r = _start(client, team.h_e1, start="20:00")
    assert r.status_code == 201
    assert r.get_json()["existing"] is False
    assert r.get_json()["data"]["id"] != ot_id


def test_work_description_is_required(client, team):
    ot_id = _start(client, team.h_e1).get_json()["data"]["id"]
    r = client.put("/api/employees/Overtime", json={"ot_id": ot_id, "work_type": "Deployment"},
                   headers=team.h_e1)
    assert r.status_code == 400
    assert _images(client, team.h_e1, ot_id, desc="").status_code == 400
