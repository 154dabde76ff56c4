from datetime import datetime
from workhub_api.extensions import db

class WorkSubmission(db.Model):
    __tablename__ = "work_submissions"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=True)
    work_type = db.Column(db.String(80), nullable=False)
    work_description = db.Column(db.Text, nullable=False)
    department = db.Column(db.String(120), nullable=True)
    priority = db.Column(db.String(16), nullable=False, default="Medium")
    status = db.Column(db.String(32), nullable=False, default="Pending Team Lead", index=True)

    team_lead_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    team_lead_comments = db.Column(db.Text)
    team_lead_approved_at = db.Column(db.DateTime)
    team_lead_rejected_at = db.Column(db.DateTime)
    rejection_reason = db.Column(db.Text)

    manager_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    manager_comments = db.Column(db.Text)
    final_approved_at = db.Column(db.DateTime)
    final_rejected_at = db.Column(db.DateTime)

    submitted_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee  = db.relationship("Employee", foreign_keys=[employee_id], lazy="joined")
    team_lead = db.relationship("Employee", foreign_keys=[team_lead_id])
    manager   = db.relationship("Employee", foreign_keys=[manager_id])
