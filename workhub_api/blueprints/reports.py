from flask import Blueprint, request, send_file

from workhub_api.common.http import ok, fail
from workhub_api.common.auth import requires_roles, resolve_employee
from workhub_api.services import clock
from workhub_api.services.reports import monthly_report, monthly_report_xlsx

bp = Blueprint("reports", __name__, url_prefix="/api/admin")


@bp.get("/monthly-report")
@requires_roles("admin", "manager")
def monthly():
    today = clock.today_local()
    month = request.args.get("month", type=int) or today.month
    year = request.args.get("year", type=int) or today.year
    if not (1 <= month <= 12):
        return fail("month must be between 1 and 12", 400)

    ids = None
    raw = (request.args.get("employeeIds") or "").strip()
    if raw:
        ids = []
        for ref in raw.split(","):
            emp = resolve_employee(ref.strip())
            if emp is None:
                return fail(f"Employee {ref.strip()} not found", 404)
            ids.append(emp.id)

    rows = monthly_report(month, year, ids)
    fmt = (request.args.get("format") or "json").lower()
    if fmt == "json":
        return ok(rows, month=month, year=year, count=len(rows))
    if fmt != "xlsx":
        return fail("format must be json or xlsx", 400)

    bio = monthly_report_xlsx(month, year, rows)
    filename = f"monthly-report-{year}{month:02d}-{len(rows)}employees.xlsx"
    return send_file(bio, mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                     as_attachment=True, download_name=filename)
