from datetime import datetime
from workhub_api.extensions import db

class OvertimeRequest(db.Model):
    __tablename__ = "overtime_requests"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    ot_date    = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time   = db.Column(db.Time, nullable=True)          # null while the session is open
    total_hours = db.Column(db.Numeric(6, 2), nullable=True)
    work_type   = db.Column(db.String(80), nullable=True)
    reason      = db.Column(db.Text, nullable=False, default="OT in progress - work details pending")
    image1 = db.Column(db.String(512), nullable=True)
    image2 = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    status = db.Column(db.String(32), nullable=False, default="pending", index=True)

    team_lead_id       = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    team_lead_comments = db.Column(db.Text)
    team_lead_acted_at = db.Column(db.DateTime)
    final_approved_by  = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    final_approved_at  = db.Column(db.DateTime)
    batch_id        = db.Column(db.String(64), nullable=True)
    manager_remarks = db.Column(db.Text)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    employee = db.relationship("Employee", foreign_keys=[employee_id], lazy="joined")
