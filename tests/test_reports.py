import io

from openpyxl import load_workbook


def _day(client, emp, headers, check_in, check_out):
    client.post(f"/api/employees/{emp.code}/worklog", headers=headers,
                json={"checkInTime": check_in, "checkOutTime": check_out, "project": "Portal"})


def test_monthly_report_json(client, make_employee, auth_for, admin_headers):
    e1 = make_employee("R1", name="Ravi")
    e2 = make_employee("R2", name="Sana")
    h1 = auth_for(e1)
    _day(client, e1, h1, "2025-03-03T08:55:00", "2025-03-03T18:55:00")
    _day(client, e1, h1, "2025-03-04T09:30:00", "2025-03-04T17:30:00")
    _day(client, e1, h1, "2025-04-01T09:00:00", "2025-04-01T17:00:00")

    r = client.get("/api/admin/monthly-report?month=3&year=2025", headers=admin_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body["count"] == 2
    ravi = next(x for x in body["data"] if x["employee"]["employee_id"] == "R1")
    assert [d["status"] for d in ravi["dailyWorkLog"]] == ["Present", "Late"]
    assert ravi["summary"]["totalHours"] == 18.0
    assert ravi["summary"]["workingDays"] == 2
    assert ravi["summary"]["lateDays"] == 1

    only = client.get(f"/api/admin/monthly-report?month=3&year=2025&employeeIds={e2.code}",
                      headers=admin_headers).get_json()
    assert [x["employee"]["name"] for x in only["data"]] == ["Sana"]


def test_monthly_report_xlsx(client, make_employee, auth_for, admin_headers):
    e1 = make_employee("R1", name="Ravi")
    _day(client, e1, auth_for(e1), "2025-03-03T09:00:00", "2025-03-03T19:00:00")

    r = client.get("/api/admin/monthly-report?month=3&year=2025&format=xlsx", headers=admin_headers)
    assert r.status_code == 200
    assert r.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert "monthly-report-202503-1employees.xlsx" in r.headers["Content-Disposition"]

    wb = load_workbook(io.BytesIO(r.data))
    assert wb.sheetnames == ["Summary", "Ravi"]
    rows = list(wb["Ravi"].iter_rows(min_row=4, values_only=True))
    assert rows[0] == ("2025-03-03", "09:00", "19:00", 8, 2, 10, "Present")


def test_report_access_and_validation(client, make_employee, auth_for, admin_headers):
    e = make_employee("R1")
    assert client.get("/api/admin/monthly-report", headers=auth_for(e)).status_code == 403
    assert client.get("/api/admin/monthly-report?month=13&year=2025", headers=admin_headers).status_code == 400
    assert client.get("/api/admin/monthly-report?employeeIds=NOPE", headers=admin_headers).status_code == 404
    assert client.get("/api/admin/monthly-report?format=pdf", headers=admin_headers).status_code == 400
