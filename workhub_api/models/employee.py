from datetime import datetime
from workhub_api.extensions import db

WORK_MODES = ("Office", "WFH", "Hybrid")
EMPLOYEE_STATUSES = ("Active", "Warning", "On Leave", "Inactive")

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    manager_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    user_id    = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)

    code  = db.Column(db.String(32), unique=True, nullable=False)   # human id, e.g. DS093
    name  = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone_number = db.Column(db.String(20), nullable=True)
    address      = db.Column(db.Text, nullable=True)

    designation = db.Column(db.String(120), nullable=True)
    department  = db.Column(db.String(120), nullable=True)
    experience  = db.Column(db.String(60), nullable=True)
    date_of_joining = db.Column(db.Date, nullable=True)

    work_mode = db.Column(db.String(10), nullable=False, default="Office")
    user_type = db.Column(db.String(20), nullable=False, default="employee")
    status    = db.Column(db.String(16), nullable=False, default="Active")
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_emp_manager_id", "manager_id"),
        db.Index("ix_emp_user_type", "user_type"),
    )

    manager = db.relationship("Employee", remote_side=[id], lazy="joined")
    user    = db.relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Employee id={self.id} code={self.code!r}>"


class TeamMember(db.Model):
    __tablename__ = "team_members"

    id = db.Column(db.Integer, primary_key=True)
    employee_id  = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    team_lead_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    added_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    is_active  = db.Column(db.Boolean, nullable=False, default=True)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee  = db.relationship("Employee", foreign_keys=[employee_id], lazy="joined")
    team_lead = db.relationship("Employee", foreign_keys=[team_lead_id], lazy="joined")
