from datetime import datetime
from workhub_api.extensions import db
from werkzeug.security import generate_password_hash, check_password_hash

USER_TYPES = ("admin", "manager", "team-lead", "employee", "intern")

class User(db.Model):
    __tablename__ = "users"

    id            = db.Column(db.Integer, primary_key=True)
    email         = db.Column(db.String(255), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name     = db.Column(db.String(255), nullable=True)
    user_type     = db.Column(db.String(20), nullable=False, default="employee")
    is_active     = db.Column(db.Boolean, nullable=False, default=True)
    created_at    = db.Column(db.DateTime, default=datetime.utcnow)

    # --- helpers ---
    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.password_hash, raw)

    roles = db.relationship(
        "Role",
        secondary="user_roles",
        lazy="joined",
        viewonly=True,
        overlaps="grants,user,role",
    )

    def role_codes(self):
        codes = [r.code for r in self.roles]
        if self.user_type and self.user_type not in codes:
            codes.append(self.user_type)
        return codes

    @property
    def employee_id(self):
        """First Employee.id linked via Employee.user_id == self.id, or None."""
        from workhub_api.models.employee import Employee  # late import to avoid circulars
        emp = Employee.query.filter_by(user_id=self.id).first()
        return emp.id if emp else None
