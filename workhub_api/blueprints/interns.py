from datetime import datetime
from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required
from sqlalchemy import or_

from workhub_api.extensions import db
from workhub_api.common.http import ok, fail
from workhub_api.common.paging import page_limit, pagination, text_q
from workhub_api.common.auth import requires_roles, current_roles, current_user, resolve_intern
from workhub_api.models.intern import Intern, InternWorkLog, INTERN_STATUSES, PAID_OPTIONS, INTERN_DOCUMENTS
from workhub_api.services import clock
from workhub_api.services.storage import save_upload, remove_upload
from workhub_api.services.attendance_service import upsert_intern_worklog, intern_worklog_dict

bp = Blueprint("interns", __name__, url_prefix="/api/interns")

REQUIRED_FIELDS = {
    "name": "name",
    "email": "email",
    "phoneNumber": "phone_number",
    "college": "college",
    "yearOrPassedOut": "year_or_passed_out",
    "department": "department",
    "domainInOffice": "domain_in_office",
    "paidOrUnpaid": "paid_or_unpaid",
}
OPTIONAL_FIELDS = {"mentorName": "mentor_name", "code": "code"}
REQUIRED_DOCS = ("aadhar", "photo", "marksheet")


def _row(i: Intern):
    return {
        "id": i.id,
        "code": i.code,
        "name": i.name,
        "email": i.email,
        "phone_number": i.phone_number,
        "college": i.college,
        "year_or_passed_out": i.year_or_passed_out,
        "department": i.department,
        "domain_in_office": i.domain_in_office,
        "paid_or_unpaid": i.paid_or_unpaid,
        "mentor_name": i.mentor_name,
        "status": i.status,
        "aadhar_path": i.aadhar_path,
        "photo_path": i.photo_path,
        "marksheet_path": i.marksheet_path,
        "resume_path": i.resume_path,
        "created_at": i.created_at.isoformat() if i.created_at else None,
    }


def _is_self(i: Intern) -> bool:
    u = current_user()
    return u is not None and (i.user_id == u.id or (u.email or "").lower() == i.email.lower())


def _can_view(i: Intern) -> bool:
    roles = current_roles()
    return any(r in roles for r in ("admin", "manager", "team-lead")) or _is_self(i)


def _field(src, camel, snake):
    v = src.get(camel)
    if v is None:
        v = src.get(snake)
    return v.strip() if isinstance(v, str) else v


@bp.post("")
@requires_roles("admin", "manager")
def create_intern():
    form = request.form
    values = {snake: _field(form, camel, snake) for camel, snake in REQUIRED_FIELDS.items()}
    if any(not v for v in values.values()):
        return fail("Missing required fields", 400)
    if values["paid_or_unpaid"] not in PAID_OPTIONS:
        return fail(f"paidOrUnpaid must be one of {', '.join(PAID_OPTIONS)}", 400)

    files = {k: request.files.get(k) for k in INTERN_DOCUMENTS}
    if any(files[k] is None or not files[k].filename for k in REQUIRED_DOCS):
        return fail("Missing required documents (Aadhar, Photo, Marksheet)", 400)

    values["email"] = values["email"].lower()
    if Intern.query.filter(db.func.lower(Intern.email) == values["email"]).first():
        return fail("An intern with this email already exists", 409)

    for camel, snake in OPTIONAL_FIELDS.items():
        values[snake] = _field(form, camel, snake) or None

    intern = Intern(**values)
    db.session.add(intern)
    db.session.flush()

    saved = []
    try:
        for kind, f in files.items():
            if f is not None and f.filename:
                path = save_upload(f, f"interns/{intern.id}", kind)
                setattr(intern, f"{kind}_path", path)
                saved.append(path)
        db.session.commit()
    except Exception:
        db.session.rollback()
        for p in saved:
            remove_upload(p)
        raise

    current_app.logger.info("Intern #%s (%s) created with %s documents", intern.id, intern.email, len(saved))
    return ok(_row(intern), 201, message="Intern added successfully")


@bp.get("")
@requires_roles("admin", "manager", "team-lead")
def list_interns():
    page, limit = page_limit()
    q = Intern.query

    status = request.args.get("status")
    if status and status != "All Status":
        q = q.filter(Intern.status == status)
    paid = request.args.get("paid_or_unpaid")
    if paid and paid != "All":
        q = q.filter(Intern.paid_or_unpaid == paid)
    s = text_q("search", "q")
    if s:
        like = f"%{s}%"
        q = q.filter(or_(Intern.name.ilike(like), Intern.email.ilike(like), Intern.college.ilike(like)))

    total = q.count()
    items = (q.order_by(Intern.created_at.desc(), Intern.id.desc())
             .offset((page - 1) * limit).limit(limit).all())
    return ok([_row(i) for i in items], pagination=pagination(page, limit, total))


@bp.get("/profile")
@jwt_required()
def profile_by_email():
    email = (request.args.get("email") or "").strip().lower()
    if not email:
        return fail("email is required", 400)
    i = Intern.query.filter(db.func.lower(Intern.email) == email).first()
    if not i:
        return fail("Intern not found", 404)
    if not _can_view(i):
        return fail("Forbidden", 403)
    return ok(_row(i))


@bp.get("/<intern_ref>")
@jwt_required()
def get_intern(intern_ref):
    i = resolve_intern(intern_ref)
    if not i:
        return fail("Intern not found", 404)
    if not _can_view(i):
        return fail("Forbidden", 403)
    return ok(_row(i))


@bp.put("/<intern_ref>")
@requires_roles("admin", "manager")
def update_intern(intern_ref):
    i = resolve_intern(intern_ref)
    if not i:
        return fail("Intern not found", 404)
    d = request.get_json(silent=True) or {}

    email = (_field(d, "email", "email") or "").lower()
    if email and email != i.email.lower():
        if Intern.query.filter(db.func.lower(Intern.email) == email, Intern.id != i.id).first():
            return fail("Email already in use by another intern", 409)
        i.email = email

    for camel, snake in list(REQUIRED_FIELDS.items()) + list(OPTIONAL_FIELDS.items()):
        if snake == "email":
            continue
        v = _field(d, camel, snake)
        if v is not None:
            setattr(i, snake, v)
    if i.paid_or_unpaid not in PAID_OPTIONS:
        return fail(f"paidOrUnpaid must be one of {', '.join(PAID_OPTIONS)}", 400)
    if "status" in d:
        if d["status"] not in INTERN_STATUSES:
            return fail("Invalid status. Must be Active, Inactive, or Completed", 400)
        i.status = d["status"]

    i.updated_at = datetime.utcnow()
    db.session.commit()
    return ok(_row(i), message="Intern updated successfully")


@bp.delete("/<intern_ref>")
@requires_roles("admin")
def delete_intern(intern_ref):
    i = resolve_intern(intern_ref)
    if not i:
        return fail("Intern not found", 404)
    paths = [i.aadhar_path, i.photo_path, i.marksheet_path, i.resume_path]
    db.session.delete(i)
    db.session.commit()
    for p in paths:
        remove_upload(p)
    current_app.logger.info("Intern %s deleted", intern_ref)
    return ok({"id": intern_ref}, message="Intern deleted successfully")


@bp.patch("/<intern_ref>/status")
@requires_roles("admin", "manager")
def set_status(intern_ref):
    i = resolve_intern(intern_ref)
    if not i:
        return fail("Intern not found", 404)
    status = (request.get_json(silent=True) or {}).get("status")
    if status not in INTERN_STATUSES:
        return fail("Invalid status. Must be Active, Inactive, or Completed", 400)
    i.status = status
    db.session.commit()
    current_app.logger.info("Intern #%s status -> %s", i.id, status)
    return ok(_row(i), message=f"Intern status updated to {status}")


# ---------- worklog ----------

@bp.get("/<intern_ref>/worklog")
@jwt_required()
def get_worklog(intern_ref):
    i = resolve_intern(intern_ref)
    if not i:
        return fail("Intern not found", 404)
    if not _can_view(i):
        return fail("Forbidden", 403)

    raw = request.args.get("date")
    if raw:
        day = clock.parse_date(raw)
        if not day:
            return fail("date must be YYYY-MM-DD", 400)
        row = InternWorkLog.query.filter_by(intern_id=i.id, date=day).first()
        return ok(intern_worklog_dict(row) if row else None)

    rows = InternWorkLog.query.filter_by(intern_id=i.id).order_by(InternWorkLog.date.desc()).all()
    return ok([intern_worklog_dict(r) for r in rows])


@bp.post("/<intern_ref>/worklog")
@jwt_required()
def post_worklog(intern_ref):
    i = resolve_intern(intern_ref)
    if not i:
        return fail("Intern not found", 404)
    if "admin" not in current_roles() and not _is_self(i):
        return fail("You can only record your own attendance", 403)

    d = request.get_json(silent=True) or {}
    if not d.get("checkInTime"):
        return fail("Check-in time is required", 400)
    row, created = upsert_intern_worklog(
        i, d.get("checkInTime"), d.get("checkOutTime"),
        work_type=d.get("workType"), description=d.get("workDescription"),
    )
    return ok(intern_worklog_dict(row), 201 if created else 200, message="Work log entry saved successfully")
