"""
Shared fixtures.

Every test gets a fresh SQLite file under ``tmp_path``. Fixtures are opt-in:
a test that needs the seeded tenant asks for ``tenant``; one that needs a
signed-in manager asks for ``manager``.

The app context is only held while seeding, so each test request gets its
own ``g`` and session exactly as in production. Fixtures therefore hand out
ids, not ORM objects.
"""

from datetime import date, time
from types import SimpleNamespace

import pytest

from timetally import create_app
from timetally.extensions import db
from timetally.models import Employee
from timetally.seed import add_employee, ensure_admin
from timetally.timesheets import replace_break_rules

# ---------------------------------------------------------------------------
# Well-known values
# ---------------------------------------------------------------------------

SUBDOMAIN = "acme"
MANAGER_PIN = "1234"
ADMIN_EMAIL = "admin@timetally.test"
ADMIN_PASSWORD = "s3cret"

# Monday 3 June 2024 .. Sunday 9 June 2024
WEEK_START = date(2024, 6, 3)
WEEK_END = date(2024, 6, 9)
SATURDAY = date(2024, 6, 8)
SUNDAY = date(2024, 6, 9)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{(tmp_path / 'test.db').as_posix()}",
        "PIN_HASH_METHOD": "pbkdf2:sha256:1000",
        "TENANT_BASE_DOMAINS": ["timetally.test"],
        "DEFAULT_MANAGER_PIN": "0000",
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def tenant(app):
    """Client ``acme`` with rules 0/5/7h -> 0/30/60 min and two employees."""
    from timetally.admin_mgmt import provision_client
    from timetally.payloads import ClientCreate

    with app.app_context():
        ensure_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
        client = provision_client(ClientCreate(
            business_name="Acme Coffee",
            contact_email="owner@acme.test",
            subdomain=SUBDOMAIN,
            manager_pin=MANAGER_PIN,
        ))
        replace_break_rules(client, [(0, 0), (5, 30), (7, 60)])
        sarah = add_employee(client, "Sarah", "Johnson", "1111", "25", "30", "35")
        mike = add_employee(client, "Mike", "Chen", "2222", "20", "25", "30")
        return SimpleNamespace(client_id=client.id, sarah_id=sarah.id, mike_id=mike.id)


@pytest.fixture
def other_tenant(app):
    """A second client, for isolation checks."""
    from timetally.admin_mgmt import provision_client
    from timetally.payloads import ClientCreate

    with app.app_context():
        client = provision_client(ClientCreate(
            business_name="Other Bakery",
            contact_email="owner@other.test",
            subdomain="other",
            manager_pin="9999",
        ))
        emp = add_employee(client, "Olga", "Ivanova", "1111", "22", "27", "32")
        return SimpleNamespace(client_id=client.id, employee_id=emp.id)


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------

def _tenant_client(app, subdomain=SUBDOMAIN):
    c = app.test_client()
    c.environ_base["HTTP_X_SUBDOMAIN"] = subdomain
    return c


@pytest.fixture
def anon(app, tenant):
    """Unauthenticated client bound to the ``acme`` tenant."""
    return _tenant_client(app)


@pytest.fixture
def manager(app, tenant):
    c = _tenant_client(app)
    r = c.post("/api/client/auth/manager", json={"pin": MANAGER_PIN})
    assert r.status_code == 200, r.get_json()
    return c


@pytest.fixture
def sarah(app, tenant):
    c = _tenant_client(app)
    r = c.post("/api/client/auth/employee", json={"pin": "1111"})
    assert r.status_code == 200, r.get_json()
    return c


@pytest.fixture
def admin(app, tenant):
    c = app.test_client()
    r = c.post("/api/admin/auth", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert r.status_code == 200, r.get_json()
    return c


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------

@pytest.fixture
def week(app, tenant):
    """Sarah: Mon 09-17, Sat 09-13, Sun 10-15:30. Mike: Tue 08-12:30, Wed in progress."""
    from timetally.payloads import TimesheetPayload
    from timetally.timesheets import save_entry

    shifts = {
        tenant.sarah_id: [
            (WEEK_START, time(9), time(17)),
            (SATURDAY, time(9), time(13)),
            (SUNDAY, time(10), time(15, 30)),
        ],
        tenant.mike_id: [
            (date(2024, 6, 4), time(8), time(12, 30)),
            (date(2024, 6, 5), time(8), None),
        ],
    }
    ids = {}
    with app.app_context():
        for emp_id, rows in shifts.items():
            emp = db.session.get(Employee, emp_id)
            for d, s, e in rows:
                ts, _ = save_entry(emp, TimesheetPayload(work_date=d, start_time=s, end_time=e), "employee")
                ids[(emp_id, d)] = ts.id
    return ids
