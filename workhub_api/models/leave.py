from datetime import datetime
from workhub_api.extensions import db

LEAVE_TYPES = ("Sick Leave", "Casual Leave", "Annual Leave", "Personal Leave")

class LeaveRequest(db.Model):
    __tablename__ = "leave_requests"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    # every active lead of the employee at submit time may act on the request
    team_lead_ids = db.Column(db.JSON, nullable=False, default=list)
    team_lead_id  = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)   # lead who acted
    manager_id    = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True, index=True)

    leave_type = db.Column(db.String(40), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date   = db.Column(db.Date, nullable=False)
    reason     = db.Column(db.Text, nullable=False)
    status     = db.Column(db.String(32), nullable=False, default="Pending Team Lead", index=True)

    team_lead_comments = db.Column(db.Text)
    manager_comments   = db.Column(db.Text)
    team_lead_acted_at = db.Column(db.DateTime)
    approved_at = db.Column(db.DateTime)
    rejected_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee  = db.relationship("Employee", foreign_keys=[employee_id], lazy="joined")
    team_lead = db.relationship("Employee", foreign_keys=[team_lead_id])
    manager   = db.relationship("Employee", foreign_keys=[manager_id])

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1
