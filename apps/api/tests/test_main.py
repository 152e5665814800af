"""
Tests for app wiring - health check, error responses, demo data.
"""
from sqlalchemy import select

from personnel.models.employee import Employee
from personnel.services.seed import seed_demo_data


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_not_found_shape(client):
    resp = client.get("/departments/77")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Department not found"}


def test_request_validation_keeps_default_shape(client):
    resp = client.post("/departments", json={})
    assert resp.status_code == 422
    assert isinstance(resp.json()["detail"], list)


class TestSeed:
    def test_seed_loads_once(self, db_session):
        assert seed_demo_data(db_session) is True
        assert seed_demo_data(db_session) is False

        assert len(db_session.execute(select(Employee)).scalars().all()) == 3

    def test_seeded_user_can_log_in(self, client, db_session):
        seed_demo_data(db_session)

        resp = client.post("/auth/login", json={"username": "apereira", "password": "password123"})
        assert resp.status_code == 200
        assert resp.json()["emp_no"] == 1001

    def test_seeded_organisation_reports(self, client, db_session):
        seed_demo_data(db_session)
        token = client.post("/auth/login", json={"username": "msilva", "password": "password123"}).json()["access_token"]

        resp = client.get("/reports/organizational", headers={"Authorization": f"Bearer {token}"})

        departments = {d["department_name"]: d for d in resp.json()["departments"]}
        assert departments["Engineering"]["manager"]["full_name"] == "Martin Silva"
        assert departments["Finance"]["employees"] == []
