from datetime import datetime
from workhub_api.extensions import db

RECIPIENT_TYPES = ("employee", "team-lead", "manager", "admin")

class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_type = db.Column(db.String(20), nullable=False)
    recipient_id   = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    title   = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type    = db.Column(db.String(40), nullable=False)         # e.g. leave_request, overtime_final
    reference_id = db.Column(db.Integer, nullable=True)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    read_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_notifications_recipient", "recipient_id", "is_read"),
    )


class PushSubscription(db.Model):
    """Stored browser push subscription; delivery happens outside this service."""
    __tablename__ = "push_subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=True, index=True)
    user_type = db.Column(db.String(20), nullable=True)
    endpoint = db.Column(db.Text, nullable=False, unique=True)
    p256dh = db.Column(db.Text, nullable=True)
    auth   = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)
