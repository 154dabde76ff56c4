# workhub_api/common/auth.py
from __future__ import annotations

from functools import wraps
from typing import Optional, Set

from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity

from workhub_api.common.http import fail
from workhub_api.extensions import db
from workhub_api.models.user import User
from workhub_api.models.security import user_role_codes
from workhub_api.models.employee import Employee
from workhub_api.models.intern import Intern


# ---------- helpers ----------

def _identity_int() -> Optional[int]:
    uid = get_jwt_identity()
    try:
        return int(uid) if uid is not None else None
    except (TypeError, ValueError):
        return None


def current_user() -> Optional[User]:
    uid = _identity_int()
    return db.session.get(User, uid) if uid else None


def current_roles() -> Set[str]:
    """Roles from the JWT claim; falls back to a live DB read for old tokens."""
    claims = get_jwt() or {}
    roles = set(claims.get("roles") or [])
    if roles:
        return roles
    u = current_user()
    if not u:
        return set()
    roles = user_role_codes(u.id)
    if u.user_type:
        roles.add(u.user_type)
    return roles


def is_admin(roles: Set[str] | None = None) -> bool:
    return "admin" in (roles if roles is not None else current_roles())


def current_employee() -> Optional[Employee]:
    """Employee profile bound to the JWT user (via Employee.user_id, then email)."""
    u = current_user()
    if not u:
        return None
    emp = Employee.query.filter_by(user_id=u.id).first()
    if emp is None:
        emp = Employee.query.filter(db.func.lower(Employee.email) == (u.email or "").lower()).first()
    return emp


def resolve_employee(raw) -> Optional[Employee]:
    """Accept numeric id or human code (e.g. DS093)."""
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None
    if s.isdigit():
        emp = db.session.get(Employee, int(s))
        if emp:
            return emp
    return Employee.query.filter_by(code=s).first()


def resolve_intern(raw) -> Optional[Intern]:
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None
    if s.isdigit():
        it = db.session.get(Intern, int(s))
        if it:
            return it
    return Intern.query.filter_by(code=s).first()


# ---------- decorators ----------

def requires_roles(*codes: str):
    """
    Require that the current user has AT LEAST ONE of the given role codes.
    - Uses roles in JWT if present; falls back to DB.
    - 'admin' role always passes.
    """
    def outer(fn):
        @wraps(fn)
        @jwt_required()
        def inner(*args, **kwargs):
            if get_jwt_identity() is None:
                return fail("Unauthorized", status=401)

            roles = current_roles()
            if not roles and current_user() is None:
                return fail("Unauthorized", status=401)

            if "admin" in roles:
                return fn(*args, **kwargs)

            if codes and not any(r in roles for r in codes):
                return fail("Forbidden", status=403)

            return fn(*args, **kwargs)
        return inner
    return outer
