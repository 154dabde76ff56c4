from datetime import datetime
from workhub_api.extensions import db

INTERN_STATUSES = ("Active", "Inactive", "Completed")
PAID_OPTIONS = ("Paid", "Unpaid")
INTERN_DOCUMENTS = ("aadhar", "photo", "marksheet", "resume")

class Intern(db.Model):
    __tablename__ = "interns"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)
    code  = db.Column(db.String(32), unique=True, nullable=True)
    name  = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone_number = db.Column(db.String(20), nullable=False)

    college            = db.Column(db.String(200), nullable=False)
    year_or_passed_out = db.Column(db.String(40), nullable=False)
    department         = db.Column(db.String(120), nullable=False)
    domain_in_office   = db.Column(db.String(120), nullable=False)
    paid_or_unpaid     = db.Column(db.String(10), nullable=False)
    mentor_name        = db.Column(db.String(160), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="Active", index=True)

    # relative to UPLOADS_ROOT
    aadhar_path    = db.Column(db.String(512))
    photo_path     = db.Column(db.String(512))
    marksheet_path = db.Column(db.String(512))
    resume_path    = db.Column(db.String(512))

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    user = db.relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<Intern id={self.id} email={self.email!r}>"


class InternWorkLog(db.Model):
    __tablename__ = "intern_work_logs"

    id = db.Column(db.Integer, primary_key=True)
    intern_id = db.Column(db.Integer, db.ForeignKey("interns.id", ondelete="CASCADE"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    check_in  = db.Column(db.DateTime, nullable=True)
    check_out = db.Column(db.DateTime, nullable=True)
    total_hours    = db.Column(db.Numeric(6, 2), nullable=True)
    overtime_hours = db.Column(db.Numeric(6, 2), nullable=True)
    work_type   = db.Column(db.String(160), nullable=True)
    description = db.Column(db.Text, nullable=True)
    department  = db.Column(db.String(120), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("intern_id", "date", name="uq_intern_log_intern_date"),
    )

    intern = db.relationship("Intern", lazy="joined")
