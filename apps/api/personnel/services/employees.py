from sqlalchemy import func, select
from sqlalchemy.orm import Session

from personnel.models.department_employee import DepartmentEmployee
from personnel.models.department_manager import DepartmentManager
from personnel.models.employee import Employee
from personnel.models.salary import Salary
from personnel.models.title import Title

# First generated employee number is EMP_NO_BASE + 1
EMP_NO_BASE = 1000


def next_emp_no(db: Session) -> int:
    current = db.execute(select(func.max(Employee.emp_no))).scalar()
    return (current or EMP_NO_BASE) + 1


def tenure_record_counts(db: Session, emp_no: int) -> dict[str, int]:
    """Rows in each tenure table that still reference the employee."""
    counts = {}
    for table, model in (
        ("dept_emp", DepartmentEmployee),
        ("dept_manager", DepartmentManager),
        ("titles", Title),
        ("salaries", Salary),
    ):
        counts[table] = db.execute(
            select(func.count()).select_from(model).where(model.emp_no == emp_no)
        ).scalar_one()
    return counts
