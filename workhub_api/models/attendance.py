from datetime import datetime
from workhub_api.extensions import db

class DailyWorkLog(db.Model):
    """One row per employee per local working day."""
    __tablename__ = "daily_work_logs"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    check_in  = db.Column(db.DateTime, nullable=True)
    check_out = db.Column(db.DateTime, nullable=True)
    hours          = db.Column(db.Numeric(6, 2), nullable=True)
    overtime_hours = db.Column(db.Numeric(6, 2), nullable=True)
    project     = db.Column(db.String(160), nullable=True)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), nullable=False, default="Present")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("employee_id", "date", name="uq_work_log_emp_date"),
    )

    employee = db.relationship("Employee", lazy="joined")


class MonthlyAttendance(db.Model):
    __tablename__ = "monthly_attendance"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    month = db.Column(db.Integer, nullable=False)
    year  = db.Column(db.Integer, nullable=False)
    total_days   = db.Column(db.Integer, nullable=False, default=28)
    working_days = db.Column(db.Integer, nullable=False, default=0)
    permissions  = db.Column(db.Integer, nullable=False, default=0)
    leaves       = db.Column(db.Integer, nullable=False, default=0)
    missed_days  = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint("employee_id", "month", "year", name="uq_monthly_att_emp_month"),
    )


class MonthlySetting(db.Model):
    __tablename__ = "monthly_settings"

    id = db.Column(db.Integer, primary_key=True)
    month = db.Column(db.Integer, nullable=False)
    year  = db.Column(db.Integer, nullable=False)
    total_days = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("month", "year", name="uq_monthly_settings_month_year"),
    )
