from datetime import datetime
from workhub_api.extensions import db

class RequestAction(db.Model):
    """Audit row for every decision taken on a leave/permission/OT/work request."""
    __tablename__ = "request_actions"

    id = db.Column(db.Integer, primary_key=True)
    request_kind = db.Column(db.String(20), nullable=False)   # leave|permission|overtime|work_submission
    request_id   = db.Column(db.Integer, nullable=False)
    stage  = db.Column(db.String(20), nullable=False)         # employee|team_lead|manager
    action = db.Column(db.String(20), nullable=False)         # submit|approve|reject
    from_status = db.Column(db.String(32))
    to_status   = db.Column(db.String(32), nullable=False)
    comment = db.Column(db.Text)
    acted_by_employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="SET NULL"))
    acted_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_request_actions_kind_id", "request_kind", "request_id"),
    )

    acted_by = db.relationship("Employee")
