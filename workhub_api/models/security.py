# workhub_api/models/security.py
from workhub_api.extensions import db

class Role(db.Model):
    """A user type granted as a role; `user_type` on users is mirrored here by seed-roles."""
    __tablename__ = "roles"
    id   = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False)   # admin | manager | team-lead | employee | intern
    name = db.Column(db.String(80), nullable=True)

    grants = db.relationship("UserRole", back_populates="role",
                             cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Role {self.code}>"


class UserRole(db.Model):
    __tablename__ = "user_roles"
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)

    role = db.relationship("Role", back_populates="grants")
    user = db.relationship("User", backref=db.backref("grants", cascade="all, delete-orphan",
                                                      passive_deletes=True))


def user_role_codes(user_id: int) -> set[str]:
    """Role codes granted to the given user through user_roles."""
    rows = (db.session.query(Role.code)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == user_id)
            .all())
    return {r[0] for r in rows}
