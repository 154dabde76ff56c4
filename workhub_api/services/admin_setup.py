# workhub_api/services/admin_setup.py
import logging

from workhub_api.extensions import db
from workhub_api.models.user import User
from workhub_api.models.employee import Employee
from workhub_api.seed_roles import grant_role

log = logging.getLogger(__name__)


def ensure_admin(email: str, password: str, name: str = "Administrator", code: str = "ADMIN"):
    """Create or reset an admin login plus its employee profile. Returns (user, employee, created)."""
    email = email.strip().lower()
    u = User.query.filter_by(email=email).first()
    created = u is None
    if created:
        u = User(email=email, full_name=name, user_type="admin")
        db.session.add(u)
    u.user_type = "admin"
    u.is_active = True
    u.set_password(password)
    db.session.flush()
    grant_role(u, "admin")

    emp = Employee.query.filter(db.func.lower(Employee.email) == email).first()
    if emp is None:
        emp = Employee(code=code, name=name, email=email, user_type="admin", designation="Administrator")
        db.session.add(emp)
    emp.user_id = u.id
    emp.user_type = "admin"
    db.session.commit()
    log.info("Admin %s %s", email, "created" if created else "updated")
    return u, emp, created
