"""
Tests for /salaries endpoints.
"""
from datetime import date

from sqlalchemy import select

from personnel.models.audit_log import AuditLog, SalaryAuditLog
from personnel.models.salary import Salary
from personnel.routers import salaries as salaries_router


def _salary(client, amount="8000.00", from_date="2024-01-01", to_date=None, emp_no=1001):
    payload = {"emp_no": emp_no, "amount": amount, "from_date": from_date}
    if to_date is not None:
        payload["to_date"] = to_date
    return client.post("/salaries", json=payload)


class TestSalaries:
    def test_create_stores_cents(self, client, db_session, employee):
        resp = _salary(client, amount="8000.50")

        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["salary"] == 800050
        assert body["is_current"] is True
        assert body["amount"] == "8000.50"
        assert db_session.get(Salary, (1001, date(2024, 1, 1))).salary == 800050

    def test_non_positive_amount_rejected(self, client, employee):
        assert _salary(client, amount="0").status_code == 422
        assert _salary(client, amount="-10").status_code == 422

    def test_overlapping_salary_rejected(self, client, employee):
        assert _salary(client, from_date="2024-01-01").status_code == 201

        resp = _salary(client, amount="9000.00", from_date="2024-06-01")

        assert resp.status_code == 422
        assert resp.json()["detail"]["field"] == "from_date"

    def test_salary_raise_is_audited(self, client, db_session, employee):
        _salary(client, amount="8000.00", from_date="2024-01-01")

        resp = client.put("/salaries/1001/2024-01-01", json={"amount": "9000.00"})

        assert resp.status_code == 200
        assert resp.json()["salary"] == 900000
        general = db_session.execute(select(AuditLog).order_by(AuditLog.id.desc())).scalars().first()
        assert "8000.00" in general.description
        assert "9000.00" in general.description
        assert general.record_key == "emp_1001"
        trail = db_session.execute(select(SalaryAuditLog).order_by(SalaryAuditLog.id)).scalars().all()
        assert [t.salary for t in trail] == [800000, 900000]

    def test_close_and_follow_up(self, client, employee):
        _salary(client, amount="8000.00", from_date="2024-01-01")

        resp = client.put("/salaries/1001/2024-01-01", json={"to_date": "2024-07-01"})
        assert resp.status_code == 200
        assert resp.json()["to_date"] == "2024-07-01"

        assert _salary(client, amount="9000.00", from_date="2024-07-01").status_code == 201

    def test_update_without_to_date_keeps_end(self, client, employee):
        _salary(client, from_date="2024-01-01", to_date="2024-07-01")

        resp = client.put("/salaries/1001/2024-01-01", json={"amount": "8500.00"})
        assert resp.json()["to_date"] == "2024-07-01"

    def test_delete(self, client, db_session, employee):
        _salary(client)

        assert client.delete("/salaries/1001/2024-01-01").status_code == 200
        assert client.get("/salaries", params={"emp_no": 1001}).json() == []
        assert client.delete("/salaries/1001/2024-01-01").status_code == 404

    def test_audit_failure_keeps_salary(self, client, db_session, engine, employee):
        AuditLog.__table__.drop(engine)

        resp = _salary(client, amount="7000.00")

        assert resp.status_code == 201
        rows = client.get("/salaries", params={"emp_no": 1001}).json()
        assert [r["salary"] for r in rows] == [700000]

    def test_second_open_salary_blocked_by_index(self, client, employee, monkeypatch):
        # Two writers both passed the overlap check before either committed
        monkeypatch.setattr(salaries_router, "validate_no_overlapping_salary", lambda *a, **kw: True)
        assert _salary(client, from_date="2024-01-01").status_code == 201

        resp = _salary(client, amount="9000.00", from_date="2024-06-01")

        assert resp.status_code == 409
        rows = client.get("/salaries", params={"emp_no": 1001}).json()
        assert len(rows) == 1

    def test_non_date_end_date_rejected(self, client, employee):
        resp = client.post(
            "/salaries",
            json={"emp_no": 1001, "amount": "8000.00", "from_date": "2024-01-01", "to_date": 20250101},
        )

        assert resp.status_code == 422
        assert client.get("/salaries", params={"emp_no": 1001}).json() == []
