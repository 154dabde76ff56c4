import io
import os

from workhub_api.extensions import db
from workhub_api.models.intern import Intern


def _form(**over):
    data = {
        "name": "Ira Intern",
        "email": "ira@college.test",
        "phoneNumber": "9000000001",
        "college": "City College",
        "yearOrPassedOut": "2025",
        "department": "Engineering",
        "domainInOffice": "Backend",
        "paidOrUnpaid": "Paid",
        "mentorName": "Tara Lead",
        "aadhar": (io.BytesIO(b"aadhar"), "aadhar.pdf"),
        "photo": (io.BytesIO(b"photo"), "me.jpg"),
        "marksheet": (io.BytesIO(b"marks"), "marks.pdf"),
    }
    data.update(over)
    return data


def _create(client, headers, **over):
    return client.post("/api/interns", data=_form(**over), headers=headers, content_type="multipart/form-data")


def test_create_intern_with_documents(app, client, admin_headers):
    r = _create(client, admin_headers)
    assert r.status_code == 201
    it = r.get_json()["data"]
    assert it["status"] == "Active"
    assert it["photo_path"] == f"interns/{it['id']}/photo.jpg"
    assert it["resume_path"] is None
    assert os.path.isfile(os.path.join(app.config["UPLOADS_ROOT"], it["aadhar_path"]))


def test_create_validation(client, admin_headers):
    r = _create(client, admin_headers, college="")
    assert r.status_code == 400
    data = _form()
    del data["marksheet"]
    r = client.post("/api/interns", data=data, headers=admin_headers, content_type="multipart/form-data")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Missing required documents (Aadhar, Photo, Marksheet)"
    assert _create(client, admin_headers, paidOrUnpaid="Maybe").status_code == 400

    assert _create(client, admin_headers).status_code == 201
    assert _create(client, admin_headers, email="IRA@college.test").status_code == 409


def test_list_filter_and_status(client, admin_headers):
    _create(client, admin_headers)
    second = _create(client, admin_headers, email="kai@college.test", name="Kai", paidOrUnpaid="Unpaid")
    kai_id = second.get_json()["data"]["id"]

    r = client.get("/api/interns?paid_or_unpaid=Unpaid", headers=admin_headers).get_json()
    assert [i["name"] for i in r["data"]] == ["Kai"]
    assert r["pagination"]["totalCount"] == 1

    r = client.patch(f"/api/interns/{kai_id}/status", json={"status": "Completed"}, headers=admin_headers)
    assert r.get_json()["data"]["status"] == "Completed"
    r = client.patch(f"/api/interns/{kai_id}/status", json={"status": "Gone"}, headers=admin_headers)
    assert r.status_code == 400

    r = client.put(f"/api/interns/{kai_id}", json={"mentorName": "Maya", "email": "ira@college.test"},
                   headers=admin_headers)
    assert r.status_code == 409


def test_intern_worklog_and_delete(app, client, admin_headers):
    it = _create(client, admin_headers).get_json()["data"]
    r = client.post(f"/api/interns/{it['id']}/worklog",
                    json={"checkInTime": "2025-03-10T09:00:00", "checkOutTime": "2025-03-10T18:30:00",
                          "workType": "API", "workDescription": "Endpoints"},
                    headers=admin_headers)
    assert r.status_code == 201
    log = r.get_json()["data"]
    assert log["total_hours"] == 9.5
    assert log["overtime_hours"] == 1.5
    assert log["department"] == "Backend"

    r = client.get(f"/api/interns/{it['id']}/worklog?date=2025-03-10", headers=admin_headers)
    assert r.get_json()["data"]["description"] == "Endpoints"

    photo = os.path.join(app.config["UPLOADS_ROOT"], it["photo_path"])
    assert client.delete(f"/api/interns/{it['id']}", headers=admin_headers).status_code == 200
    assert db.session.get(Intern, it["id"]) is None
    assert not os.path.exists(photo)


def test_intern_records_own_attendance(client, admin_headers):
    it = _create(client, admin_headers).get_json()["data"]
    r = client.post("/api/auth", json={"action": "signup", "email": it["email"], "password": "pw",
                                       "userType": "intern"})
    assert r.get_json()["data"]["user"]["intern_id"] == it["id"]
    tokens = client.post("/api/auth", json={"action": "signin", "email": it["email"],
                                            "password": "pw"}).get_json()["data"]
    h = {"Authorization": f"Bearer {tokens['access']}"}

    r = client.post(f"/api/interns/{it['id']}/worklog", json={"checkInTime": "2025-03-10T09:05:00"}, headers=h)
    assert r.status_code == 201
    assert client.get("/api/interns", headers=h).status_code == 403
