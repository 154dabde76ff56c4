from datetime import datetime
from workhub_api.extensions import db

class PermissionRequest(db.Model):
    """Short absence within a working day (e.g. late arrival, early exit)."""
    __tablename__ = "permission_requests"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    team_lead_ids = db.Column(db.JSON, nullable=False, default=list)
    team_lead_id  = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    manager_id    = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True, index=True)

    permission_type = db.Column(db.String(60), nullable=False)
    date       = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time   = db.Column(db.Time, nullable=False)
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
