"""
Shared test fixtures for the personnel API tests.
"""
import os
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

from personnel.core.database import Base, get_db  # noqa: E402
from personnel.core.security import get_password_hash  # noqa: E402
from personnel.main import app  # noqa: E402
from personnel.models.department import Department  # noqa: E402
from personnel.models.employee import Employee  # noqa: E402
from personnel.models.user import User  # noqa: E402

TEST_PASSWORD = "secret123"


@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared by every session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_employee(db, emp_no: int, first_name: str = "Ana", last_name: str = "Pereira", **overrides) -> Employee:
    fields = dict(
        emp_no=emp_no,
        ci=f"CI-{emp_no}",
        first_name=first_name,
        last_name=last_name,
        birth_date=date(1990, 5, 17),
        gender="F",
        hire_date=date(2020, 1, 15),
        email=f"emp{emp_no}@example.com",
    )
    fields.update(overrides)
    e = Employee(**fields)
    db.add(e)
    db.commit()
    return e


@pytest.fixture
def employee(db_session):
    return make_employee(db_session, 1001)


@pytest.fixture
def department(db_session):
    d = Department(dept_no=1, dept_name="Engineering")
    db_session.add(d)
    db_session.commit()
    return d


@pytest.fixture
def user(db_session, employee):
    u = User(emp_no=employee.emp_no, username="apereira", password_hash=get_password_hash(TEST_PASSWORD))
    db_session.add(u)
    db_session.commit()
    return u


@pytest.fixture
def auth_headers(client, user):
    resp = client.post("/auth/login", json={"username": "apereira", "password": TEST_PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def fail_writes():
    """Make INSERTs (or UPDATEs) of a model fail the way a broken database would."""
    registered = []

    def _fail(model, event_name="before_insert"):
        def _raise(mapper, connection, target):
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        event.listen(model, event_name, _raise)
        registered.append((model, event_name, _raise))

    yield _fail
    for model, event_name, fn in registered:
        event.remove(model, event_name, fn)
