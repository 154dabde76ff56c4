# workhub_api/seed_roles.py
from workhub_api.extensions import db
from workhub_api.models.security import Role, UserRole
from workhub_api.models.user import User

DEFAULT_ROLES = [
    ("admin", "Administrator"),
    ("manager", "Manager"),
    ("team-lead", "Team Lead"),
    ("employee", "Employee"),
    ("intern", "Intern"),
]

def ensure_role(code: str, name: str | None = None) -> Role:
    r = Role.query.filter_by(code=code).first()
    if not r:
        r = Role(code=code, name=name or dict(DEFAULT_ROLES).get(code))
        db.session.add(r)
        db.session.flush()
    elif name and r.name != name:
        r.name = name
    return r

def grant_role(user: User, code: str) -> bool:
    """Attach role `code` to user; returns False when already granted. Does not commit."""
    role = ensure_role(code)
    exists = UserRole.query.filter_by(user_id=user.id, role_id=role.id).first()
    if exists:
        return False
    db.session.add(UserRole(user_id=user.id, role_id=role.id))
    return True

def _ensure_roles():
    return {code: ensure_role(code, label) for code, label in DEFAULT_ROLES}

def _mirror_user_types():
    # every user carries a role matching its user_type
    granted = 0
    for u in User.query.all():
        if u.user_type and grant_role(u, u.user_type):
            granted += 1
    return granted

def run():
    _ensure_roles()
    db.session.flush()
    granted = _mirror_user_types()
    db.session.commit()
    return {"ok": True, "roles": len(DEFAULT_ROLES), "granted": granted}
