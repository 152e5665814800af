from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel.models.department import Department
from personnel.models.employee import Employee
from personnel.models.user import User


def is_email_unique(db: Session, email: str, exclude_emp_no: Optional[int] = None) -> bool:
    stmt = select(Employee.emp_no).where(Employee.email == email.lower())
    if exclude_emp_no is not None:
        stmt = stmt.where(Employee.emp_no != exclude_emp_no)
    return db.execute(stmt).first() is None


def is_ci_unique(db: Session, ci: str, exclude_emp_no: Optional[int] = None) -> bool:
    stmt = select(Employee.emp_no).where(Employee.ci == ci)
    if exclude_emp_no is not None:
        stmt = stmt.where(Employee.emp_no != exclude_emp_no)
    return db.execute(stmt).first() is None


def is_username_unique(db: Session, username: str, exclude_emp_no: Optional[int] = None) -> bool:
    stmt = select(User.emp_no).where(User.username == username)
    if exclude_emp_no is not None:
        stmt = stmt.where(User.emp_no != exclude_emp_no)
    return db.execute(stmt).first() is None


def is_department_name_unique(db: Session, name: str) -> bool:
    return db.execute(select(Department.dept_no).where(Department.dept_name == name)).first() is None
