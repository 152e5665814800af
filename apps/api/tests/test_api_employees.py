"""
Tests for /employees endpoints.
"""
from datetime import date

from sqlalchemy import select

from personnel.models.audit_log import AuditLog, AuditOperation
from personnel.models.department_employee import DepartmentEmployee
from personnel.models.employee import Employee
from personnel.models.salary import Salary
from personnel.models.user import User
from personnel.routers import employees as employees_router

NEW_EMPLOYEE = {
    "ci": "7654321-0",
    "first_name": "Martin",
    "last_name": "Silva",
    "birth_date": "1990-07-02",
    "gender": "M",
    "hire_date": "2018-06-01",
    "email": "martin.silva@example.com",
}


def _audit_rows(db, table="employees"):
    return db.execute(select(AuditLog).where(AuditLog.table_name == table).order_by(AuditLog.id)).scalars().all()


class TestEmployeeRoundTrip:
    def test_create_then_read(self, client, auth_headers, db_session):
        resp = client.post("/employees", json=NEW_EMPLOYEE, headers=auth_headers)

        assert resp.status_code == 201, resp.text
        created = resp.json()
        assert created["emp_no"] == 1002  # next after the logged-in employee
        assert created["full_name"] == "Martin Silva"

        resp = client.get(f"/employees/{created['emp_no']}", headers=auth_headers)
        assert resp.status_code == 200
        detail = resp.json()
        for field in ("ci", "first_name", "last_name", "birth_date", "gender", "hire_date", "email"):
            assert detail[field] == NEW_EMPLOYEE[field]
        assert detail["has_user"] is False
        assert detail["current_department"] is None
        assert detail["is_manager"] is False

        entries = _audit_rows(db_session)
        assert entries[-1].operation == AuditOperation.CREATE
        assert entries[-1].actor == "apereira"

    def test_create_with_initial_department(self, client, auth_headers, department, db_session):
        payload = dict(NEW_EMPLOYEE, dept_no=department.dept_no)
        resp = client.post("/employees", json=payload, headers=auth_headers)

        assert resp.status_code == 201, resp.text
        assert resp.json()["current_department"] == "Engineering"

    def test_create_with_unknown_department_is_rejected(self, client, auth_headers, db_session):
        payload = dict(NEW_EMPLOYEE, dept_no=99)
        resp = client.post("/employees", json=payload, headers=auth_headers)

        assert resp.status_code == 404
        assert db_session.execute(select(Employee).where(Employee.ci == NEW_EMPLOYEE["ci"])).first() is None

    def test_duplicate_email_rejected(self, client, auth_headers):
        payload = dict(NEW_EMPLOYEE, email="EMP1001@example.com")
        resp = client.post("/employees", json=payload, headers=auth_headers)

        assert resp.status_code == 422
        assert resp.json()["detail"] == {"field": "email", "message": "An employee with this email already exists"}

    def test_explicit_emp_no_collision(self, client, auth_headers):
        payload = dict(NEW_EMPLOYEE, emp_no=1001)
        resp = client.post("/employees", json=payload, headers=auth_headers)

        assert resp.status_code == 409
        assert resp.json()["detail"]["field"] == "emp_no"

    def test_failed_assignment_rolls_back_employee(self, client, auth_headers, department, db_session, fail_writes):
        fail_writes(DepartmentEmployee)
        payload = dict(NEW_EMPLOYEE, dept_no=department.dept_no)

        resp = client.post("/employees", json=payload, headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"detail": "The employee could not be created. Please try again."}
        assert db_session.execute(select(Employee).where(Employee.ci == NEW_EMPLOYEE["ci"])).first() is None
        assert db_session.execute(select(DepartmentEmployee)).first() is None
        assert _audit_rows(db_session) == []

    def test_email_taken_between_check_and_insert(self, client, auth_headers, db_session, monkeypatch):
        # Another request grabbed the email after the uniqueness check passed
        monkeypatch.setattr(employees_router, "is_email_unique", lambda *a, **kw: True)
        payload = dict(NEW_EMPLOYEE, email="emp1001@example.com")

        resp = client.post("/employees", json=payload, headers=auth_headers)

        assert resp.status_code == 409
        assert resp.json()["detail"]["field"] == "emp_no"
        assert db_session.execute(select(Employee).where(Employee.ci == NEW_EMPLOYEE["ci"])).first() is None

    def test_list_marks_users(self, client, auth_headers):
        client.post("/employees", json=NEW_EMPLOYEE, headers=auth_headers)

        resp = client.get("/employees", headers=auth_headers)
        assert resp.status_code == 200
        rows = resp.json()
        assert [r["emp_no"] for r in rows] == [1001, 1002]
        assert [r["has_user"] for r in rows] == [True, False]

    def test_requires_authentication(self, client, employee):
        assert client.get("/employees").status_code in (401, 403)

    def test_unknown_employee(self, client, auth_headers):
        resp = client.get("/employees/4242", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Employee not found"


class TestEmployeeUpdate:
    def test_update_fields(self, client, auth_headers, db_session):
        emp_no = client.post("/employees", json=NEW_EMPLOYEE, headers=auth_headers).json()["emp_no"]

        resp = client.put(f"/employees/{emp_no}", json={"last_name": "Suarez"}, headers=auth_headers)

        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Martin Suarez"
        update = _audit_rows(db_session)[-1]
        assert update.operation == AuditOperation.UPDATE
        assert update.old_value == "last_name=Silva"
        assert update.new_value == "last_name=Suarez"

    def test_update_to_taken_email(self, client, auth_headers):
        emp_no = client.post("/employees", json=NEW_EMPLOYEE, headers=auth_headers).json()["emp_no"]

        resp = client.put(f"/employees/{emp_no}", json={"email": "emp1001@example.com"}, headers=auth_headers)
        assert resp.status_code == 422

    def test_concurrent_email_change_is_a_conflict(self, client, auth_headers, db_session, monkeypatch):
        emp_no = client.post("/employees", json=NEW_EMPLOYEE, headers=auth_headers).json()["emp_no"]
        monkeypatch.setattr(employees_router, "is_email_unique", lambda *a, **kw: True)

        resp = client.put(f"/employees/{emp_no}", json={"email": "emp1001@example.com"}, headers=auth_headers)

        assert resp.status_code == 409
        assert resp.json()["detail"]["field"] == "email"
        db_session.expire_all()
        assert db_session.get(Employee, emp_no).email == NEW_EMPLOYEE["email"]
        assert _audit_rows(db_session)[-1].operation == AuditOperation.CREATE


class TestEmployeeDelete:
    def test_delete_removes_user_too(self, client, auth_headers, db_session):
        emp_no = client.post("/employees", json=NEW_EMPLOYEE, headers=auth_headers).json()["emp_no"]
        db_session.add(User(emp_no=emp_no, username="msilva", password_hash="x"))
        db_session.commit()

        resp = client.delete(f"/employees/{emp_no}", headers=auth_headers)

        assert resp.status_code == 200
        db_session.expire_all()
        assert db_session.get(Employee, emp_no) is None
        assert db_session.get(User, emp_no) is None
        assert _audit_rows(db_session)[-1].operation == AuditOperation.DELETE

    def test_delete_refused_while_history_exists(self, client, auth_headers, db_session):
        emp_no = client.post("/employees", json=NEW_EMPLOYEE, headers=auth_headers).json()["emp_no"]
        db_session.add(Salary(emp_no=emp_no, from_date=date(2020, 1, 1), to_date=None, salary=500000))
        db_session.commit()

        resp = client.delete(f"/employees/{emp_no}", headers=auth_headers)

        assert resp.status_code == 409
        assert "salaries" in resp.json()["detail"]["message"]
        db_session.expire_all()
        assert db_session.get(Employee, emp_no) is not None
