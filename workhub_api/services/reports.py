# workhub_api/services/reports.py
from __future__ import annotations

import calendar
import logging
from datetime import date
from io import BytesIO

from openpyxl import Workbook

from workhub_api.models.employee import Employee
from workhub_api.models.attendance import DailyWorkLog, MonthlyAttendance
from workhub_api.services import clock
from workhub_api.services.attendance_service import month_total_days
from workhub_api.services.overtime_service import approved_hours

log = logging.getLogger(__name__)


def _num(x) -> float:
    return float(x) if x is not None else 0.0


def monthly_report(month: int, year: int, employee_ids=None) -> list[dict]:
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    cutoff = clock.late_after()

    q = Employee.query
    if employee_ids:
        q = q.filter(Employee.id.in_(employee_ids))
    employees = q.order_by(Employee.code.asc()).all()

    out = []
    for emp in employees:
        logs = (DailyWorkLog.query
                .filter(DailyWorkLog.employee_id == emp.id,
                        DailyWorkLog.date >= first, DailyWorkLog.date <= last)
                .order_by(DailyWorkLog.date.asc())
                .all())
        att = MonthlyAttendance.query.filter_by(employee_id=emp.id, month=month, year=year).first()
        ot = approved_hours(emp.id, month, year)

        late_days = sum(1 for r in logs if r.check_in and r.check_out and r.check_in.time() > cutoff)
        days = []
        for r in logs:
            if r.check_in and not r.check_out:
                status = "Missed"
            elif r.check_in and r.check_in.time() > cutoff:
                status = "Late"
            else:
                status = r.status or "Present"
            days.append({
                "date": r.date.isoformat(),
                "checkIn": r.check_in.strftime("%H:%M") if r.check_in else None,
                "checkOut": r.check_out.strftime("%H:%M") if r.check_out else None,
                "hours": _num(r.hours),
                "otHours": _num(r.overtime_hours),
                "project": r.project,
                "description": r.description,
                "status": status,
            })

        out.append({
            "employee": {
                "id": emp.id, "employee_id": emp.code, "name": emp.name,
                "designation": emp.designation, "workMode": emp.work_mode,
            },
            "dailyWorkLog": days,
            "summary": {
                "totalDays": att.total_days if att else month_total_days(month, year),
                "workingDays": att.working_days if att else len(logs),
                "permissions": att.permissions if att else 0,
                "leaves": att.leaves if att else 0,
                "missedDays": att.missed_days if att else 0,
                "totalHours": round(sum(_num(r.hours) for r in logs), 2),
                "overtimeHours": ot["total_hours"],
                "lateDays": late_days,
            },
        })
    log.info("Monthly report %s/%s built for %s employees", month, year, len(out))
    return out


def _sheet_title(name: str, used: set) -> str:
    # Excel sheet names: max 31 chars, no []:*?/\
    base = "".join(ch for ch in (name or "Employee") if ch not in '[]:*?/\\')[:28] or "Employee"
    title, n = base, 1
    while title in used:
        n += 1
        title = f"{base[:26]}-{n}"
    used.add(title)
    return title


def monthly_report_xlsx(month: int, year: int, rows: list[dict]) -> BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = "Summary"
    ws.append(["Monthly Employee Report Summary"])
    ws.append([f"Month: {calendar.month_name[month]} {year}"])
    ws.append([f"Total Employees: {len(rows)}"])
    ws.append([])
    ws.append(["Employee ID", "Employee Name", "Designation", "Work Mode", "Total Days", "Working Days",
               "Total Hours", "OT Hours", "Leaves", "Permissions", "Missed Days", "Late Days"])
    for r in rows:
        e, s = r["employee"], r["summary"]
        ws.append([e["employee_id"], e["name"], e["designation"], e["workMode"], s["totalDays"], s["workingDays"],
                   s["totalHours"], s["overtimeHours"], s["leaves"], s["permissions"], s["missedDays"], s["lateDays"]])

    used = {"Summary"}
    for r in rows:
        sh = wb.create_sheet(_sheet_title(r["employee"]["name"], used))
        sh.append([f"{r['employee']['name']} - Work Log"])
        sh.append([])
        sh.append(["Date", "Check-in", "Check-out", "Regular Hours", "OT Hours", "Total Hours", "Status"])
        for d in r["dailyWorkLog"]:
            sh.append([d["date"], d["checkIn"] or "-", d["checkOut"] or "-",
                       round(d["hours"] - d["otHours"], 2), d["otHours"], d["hours"], d["status"]])

    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio
