from datetime import datetime
from flask import Blueprint, request, current_app
from sqlalchemy import or_

from workhub_api.extensions import db
from workhub_api.common.http import ok, fail
from workhub_api.common.paging import page_limit, pagination
from workhub_api.common.auth import requires_roles, current_roles, current_employee, resolve_employee
from workhub_api.models.employee import Employee, TeamMember

bp = Blueprint("team", __name__, url_prefix="/api/team-lead")


def _member_row(tm: TeamMember):
    e = tm.employee
    return {
        "team_member_id": tm.id,
        "id": e.id,
        "employee_id": e.code,
        "name": e.name,
        "designation": e.designation,
        "workMode": e.work_mode,
        "status": e.status,
        "phoneNumber": e.phone_number,
        "emailAddress": e.email,
        "dateOfJoining": e.date_of_joining.isoformat() if e.date_of_joining else None,
        "added_date": tm.added_date.isoformat() if tm.added_date else None,
    }


def _employee_row(e: Employee):
    return {
        "id": e.id,
        "employee_id": e.code,
        "name": e.name,
        "designation": e.designation,
        "workMode": e.work_mode,
        "status": e.status,
        "phoneNumber": e.phone_number,
        "emailAddress": e.email,
    }


def _lead_or_error(raw):
    if not raw:
        return None, fail("Team lead ID is required", 400)
    lead = resolve_employee(raw)
    if lead is None or not lead.is_active:
        return None, fail("Team lead not found or inactive", 404)
    roles = current_roles()
    if not any(r in roles for r in ("admin", "manager")):
        me = current_employee()
        if me is None or me.id != lead.id:
            return None, fail("Forbidden", 403)
    return lead, None


@bp.get("")
@requires_roles("team-lead", "manager", "admin")
def get_team():
    lead, err = _lead_or_error(request.args.get("team_lead_id"))
    if err:
        return err

    if request.args.get("get_available") == "true":
        page, limit = page_limit()
        taken = [r[0] for r in db.session.query(TeamMember.employee_id)
                 .filter(TeamMember.team_lead_id == lead.id, TeamMember.is_active.is_(True)).all()]
        taken.append(lead.id)

        q = Employee.query.filter(Employee.is_active.is_(True), ~Employee.id.in_(taken))
        search = (request.args.get("search") or "").strip()
        if search:
            like = f"%{search}%"
            q = q.filter(or_(Employee.name.ilike(like), Employee.designation.ilike(like),
                             Employee.code.ilike(like)))
        wm = request.args.get("work_mode")
        if wm and wm != "All Modes":
            q = q.filter(Employee.work_mode == wm)
        st = request.args.get("status")
        if st and st != "All Status":
            q = q.filter(Employee.status == st)

        total = q.count()
        items = q.order_by(Employee.name.asc()).offset((page - 1) * limit).limit(limit).all()
        return ok([_employee_row(e) for e in items], pagination=pagination(page, limit, total))

    members = (TeamMember.query
               .filter(TeamMember.team_lead_id == lead.id, TeamMember.is_active.is_(True))
               .order_by(TeamMember.added_date.desc())
               .all())
    return ok([_member_row(m) for m in members], count=len(members),
              team_lead={"id": lead.id, "employee_id": lead.code, "name": lead.name})


@bp.post("")
@requires_roles("team-lead", "manager", "admin")
def add_member():
    d = request.get_json(silent=True) or {}
    if not d.get("employee_id") or not d.get("team_lead_id"):
        return fail("Employee ID and Team Lead ID are required", 400)
    lead, err = _lead_or_error(d.get("team_lead_id"))
    if err:
        return err
    emp = resolve_employee(d.get("employee_id"))
    if emp is None or not emp.is_active:
        return fail("Employee not found or inactive", 404)
    if emp.id == lead.id:
        return fail("A team lead cannot be a member of their own team", 400)

    tm = TeamMember.query.filter_by(employee_id=emp.id, team_lead_id=lead.id).first()
    if tm is not None and tm.is_active:
        return fail("Employee is already a member of this team", 400)
    if tm is None:
        tm = TeamMember(employee_id=emp.id, team_lead_id=lead.id, is_active=True)
        db.session.add(tm)
    else:
        tm.is_active = True
        tm.added_date = datetime.utcnow()
    db.session.commit()
    current_app.logger.info("Employee %s added to team of %s", emp.code, lead.code)
    return ok(_member_row(tm), 201, message="Team member added successfully")


@bp.delete("")
@requires_roles("team-lead", "manager", "admin")
def remove_member():
    d = request.get_json(silent=True) or {}
    tm_id = d.get("team_member_id") or request.args.get("team_member_id")
    if not tm_id:
        return fail("Team member ID is required", 400)
    tm = db.session.get(TeamMember, int(tm_id)) if str(tm_id).isdigit() else None
    if tm is None:
        return fail("Team member not found", 404)
    _, err = _lead_or_error(str(tm.team_lead_id))
    if err:
        return err

    tm.is_active = False
    tm.updated_at = datetime.utcnow()
    db.session.commit()
    current_app.logger.info("Team member #%s removed (soft)", tm.id)
    return ok(_member_row(tm), message="Team member removed successfully")
