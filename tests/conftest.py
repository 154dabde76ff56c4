import os
from types import SimpleNamespace

import pytest
from flask_jwt_extended import create_access_token

from workhub_api import create_app
from workhub_api.extensions import db
from workhub_api.models.user import User
from workhub_api.models.employee import Employee, TeamMember
from workhub_api.seed_roles import grant_role


@pytest.fixture(scope="function")
def app(tmp_path):
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app("workhub_api.config.TestingConfig")
    app.config["UPLOADS_ROOT"] = str(tmp_path / "uploads")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


def _headers(user: User):
    token = create_access_token(identity=str(user.id), additional_claims={"roles": user.role_codes()})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_employee(app):
    def _make(code, user_type="employee", manager=None, name=None, **fields):
        email = fields.pop("email", f"{code.lower()}@workhub.test")
        u = User(email=email, full_name=name or code, user_type=user_type)
        u.set_password("secret123")
        db.session.add(u)
        db.session.flush()
        grant_role(u, user_type)
        e = Employee(code=code, name=name or code, email=email, user_type=user_type,
                     manager_id=manager.id if manager else None, user_id=u.id, **fields)
        db.session.add(e)
        db.session.commit()
        return e
    return _make


@pytest.fixture
def auth_for(app):
    """Bearer headers for an Employee (via its login) or a bare User."""
    def _auth(person):
        user = person if isinstance(person, User) else db.session.get(User, person.user_id)
        return _headers(user)
    return _auth


@pytest.fixture
def add_to_team(app):
    def _add(member, lead):
        tm = TeamMember(employee_id=member.id, team_lead_id=lead.id, is_active=True)
        db.session.add(tm)
        db.session.commit()
        return tm
    return _add


@pytest.fixture
def admin_headers(app):
    u = User(email="root@workhub.test", full_name="Root", user_type="admin")
    u.set_password("secret123")
    db.session.add(u)
    db.session.flush()
    grant_role(u, "admin")
    db.session.commit()
    return _headers(u)


@pytest.fixture
def team(make_employee, add_to_team, auth_for):
    """Manager M1 → lead TL1 → employee E1, plus an outsider lead TL2 and manager M2."""
    m1 = make_employee("M1", "manager", name="Maya Manager")
    m2 = make_employee("M2", "manager", name="Omar Other")
    tl1 = make_employee("TL1", "team-lead", manager=m1, name="Tara Lead")
    tl2 = make_employee("TL2", "team-lead", manager=m2, name="Theo Lead")
    e1 = make_employee("E1", "employee", manager=m1, name="Eli Employee")
    add_to_team(e1, tl1)
    return SimpleNamespace(
        m1=m1, m2=m2, tl1=tl1, tl2=tl2, e1=e1,
        h_m1=auth_for(m1), h_m2=auth_for(m2), h_tl1=auth_for(tl1), h_tl2=auth_for(tl2), h_e1=auth_for(e1),
    )
