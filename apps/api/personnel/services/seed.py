"""Demo data for a fresh database.

Loads a small organisation (three people, five departments) so the API has
something to show right after the first start. Does nothing once any
employee exists.
"""

import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from personnel.core.money import to_minor_units
from personnel.core.security import get_password_hash
from personnel.models.department import Department
from personnel.models.department_employee import DepartmentEmployee
from personnel.models.department_manager import DepartmentManager
from personnel.models.employee import Employee
from personnel.models.salary import Salary
from personnel.models.title import Title
from personnel.models.user import User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEPARTMENTS = [
    (1, "Human Resources"),
    (2, "Engineering"),
    (3, "Sales"),
    (4, "Finance"),
    (5, "Operations"),
]

# emp_no, ci, first, last, birth, gender, hire, email, username
EMPLOYEES = [
    (1001, "4567890-1", "Ana", "Pereira", date(1985, 3, 14), "F", date(2015, 1, 10), "ana.pereira@example.com", "apereira"),
    (1002, "3456789-2", "Martin", "Silva", date(1990, 7, 2), "M", date(2018, 6, 1), "martin.silva@example.com", "msilva"),
    (1003, "2345678-3", "Lucia", "Gomez", date(1993, 11, 23), "F", date(2021, 9, 15), "lucia.gomez@example.com", "lgomez"),
]

# emp_no, dept_no, from
ASSIGNMENTS = [
    (1001, 1, date(2015, 1, 10)),
    (1002, 2, date(2018, 6, 1)),
    (1003, 3, date(2021, 9, 15)),
]

MANAGERS = [
    (1001, 1, date(2017, 1, 1)),
    (1002, 2, date(2020, 3, 1)),
]

# emp_no, title, from, to
TITLES = [
    (1001, "HR Analyst", date(2015, 1, 10), date(2017, 1, 1)),
    (1001, "HR Manager", date(2017, 1, 1), None),
    (1002, "Software Engineer", date(2018, 6, 1), date(2020, 3, 1)),
    (1002, "Engineering Manager", date(2020, 3, 1), None),
    (1003, "Account Executive", date(2021, 9, 15), None),
]

# emp_no, amount, from, to
SALARIES = [
    (1001, "6500.00", date(2015, 1, 10), date(2017, 1, 1)),
    (1001, "8000.00", date(2017, 1, 1), None),
    (1002, "7000.00", date(2018, 6, 1), date(2020, 3, 1)),
    (1002, "9500.00", date(2020, 3, 1), None),
    (1003, "5500.00", date(2021, 9, 15), None),
]


def seed_demo_data(db: Session) -> bool:
    """Insert the demo organisation. Returns False when data already exists."""
    if db.execute(select(func.count()).select_from(Employee)).scalar_one():
        logger.info("Demo data skipped: employees already present")
        return False

    db.add_all(Department(dept_no=n, dept_name=name) for n, name in DEPARTMENTS)

    password_hash = get_password_hash(DEMO_PASSWORD)
    for emp_no, ci, first, last, birth, gender, hire, email, username in EMPLOYEES:
        db.add(
            Employee(
                emp_no=emp_no,
                ci=ci,
                first_name=first,
                last_name=last,
                birth_date=birth,
                gender=gender,
                hire_date=hire,
                email=email,
            )
        )
        db.add(User(emp_no=emp_no, username=username, password_hash=password_hash))
    db.flush()

    db.add_all(DepartmentEmployee(emp_no=e, dept_no=d, from_date=f, to_date=None) for e, d, f in ASSIGNMENTS)
    db.add_all(DepartmentManager(emp_no=e, dept_no=d, from_date=f, to_date=None) for e, d, f in MANAGERS)
    db.add_all(Title(emp_no=e, title=t, from_date=f, to_date=to) for e, t, f, to in TITLES)
    db.add_all(
        Salary(emp_no=e, salary=to_minor_units(amount), from_date=f, to_date=to) for e, amount, f, to in SALARIES
    )
    db.commit()

    logger.info("Demo data loaded: %s employees, %s departments", len(EMPLOYEES), len(DEPARTMENTS))
    return True
