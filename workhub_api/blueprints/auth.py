from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity
)
from workhub_api.extensions import db
from workhub_api.common.http import ok, fail
from workhub_api.models.user import User, USER_TYPES
from workhub_api.models.employee import Employee
from workhub_api.models.intern import Intern
from workhub_api.seed_roles import grant_role

bp = Blueprint("auth", __name__, url_prefix="/api")

SELF_SIGNUP_TYPES = tuple(t for t in USER_TYPES if t != "admin")


def _user_payload(u: User):
    emp = Employee.query.filter_by(user_id=u.id).first()
    intern = Intern.query.filter_by(user_id=u.id).first() if u.user_type == "intern" else None
    return {
        "id": u.id, "email": u.email, "full_name": u.full_name,
        "userType": u.user_type, "roles": u.role_codes(),
        "employee_id": emp.id if emp else None,
        "employee_code": emp.code if emp else None,
        "intern_id": intern.id if intern else None,
    }

def _tokens(u: User):
    roles = u.role_codes()
    add_claims = {"roles": roles, "email": u.email, "name": u.full_name, "user_type": u.user_type}
    access = create_access_token(identity=str(u.id), additional_claims=add_claims)
    refresh = create_refresh_token(identity=str(u.id), additional_claims={"roles": roles})
    return access, refresh

def _link_profile(u: User):
    """Bind an existing employee/intern row with the same email to this login."""
    emp = Employee.query.filter(db.func.lower(Employee.email) == u.email).first()
    if emp and emp.user_id is None:
        emp.user_id = u.id
    intern = Intern.query.filter(db.func.lower(Intern.email) == u.email).first()
    if intern and intern.user_id is None:
        intern.user_id = u.id

@bp.post("/auth")
def auth():
    data = request.get_json(silent=True) or {}
    action = (data.get("action") or "").strip().lower()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if action not in ("signup", "signin"):
        return fail("Invalid action", 400, code="BAD_ACTION")
    if not email or not password:
        return fail("Email and password are required", 400, code="VALIDATION_ERROR")

    if action == "signup":
        user_type = (data.get("userType") or data.get("user_type") or "employee").strip()
        if user_type not in SELF_SIGNUP_TYPES:
            return fail(f"userType must be one of {', '.join(SELF_SIGNUP_TYPES)}", 400, code="BAD_USER_TYPE")
        if User.query.filter_by(email=email).first():
            return fail("Email already exists", 400, code="DUPLICATE_EMAIL")
        u = User(email=email, full_name=data.get("name") or data.get("full_name"), user_type=user_type)
        u.set_password(password)
        db.session.add(u)
        db.session.flush()
        grant_role(u, user_type)
        _link_profile(u)
        db.session.commit()
        current_app.logger.info("Account created for %s (%s)", email, user_type)
        return ok({"user": _user_payload(u)}, 201, message="Account created successfully")

    u = User.query.filter_by(email=email, is_active=True).first()
    if not u or not u.check_password(password):
        return fail("Invalid email or password", 401, code="INVALID_CREDENTIALS")
    access, refresh = _tokens(u)
    return ok({"user": _user_payload(u), "access": access, "refresh": refresh})

@bp.post("/auth/refresh")
@jwt_required(refresh=True)
def refresh():
    uid = get_jwt_identity()
    u = db.session.get(User, int(uid)) if uid else None
    if not u or not u.is_active:
        return fail("User not found", 401)
    access, _ = _tokens(u)
    return ok({"access": access})

@bp.get("/auth/me")
@jwt_required()
def me():
    uid = get_jwt_identity()
    u = db.session.get(User, int(uid)) if uid else None
    if not u:
        return fail("User not found", 404)
    return ok(_user_payload(u))

@bp.post("/validate-role")
def validate_role():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    if not email:
        return jsonify({"role": None}), 401
    u = User.query.filter_by(email=email).first()
    if not u:
        return jsonify({"role": None}), 404
    return jsonify({"role": u.user_type}), 200
