import csv
import io
from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from personnel.core.dates import is_current, today as current_day
from personnel.core.money import format_money, to_major_units
from personnel.models.department import Department
from personnel.models.department_employee import DepartmentEmployee
from personnel.models.department_manager import DepartmentManager
from personnel.models.employee import Employee
from personnel.models.salary import Salary
from personnel.models.title import Title
from personnel.models.user import User
from personnel.schemas.reports import (
    DashboardOut,
    DepartmentHeadcount,
    OrgDepartment,
    OrgEmployee,
    OrgManager,
    OrganizationalReport,
    PayrollReport,
    PayrollRow,
    UpcomingAnniversary,
)
from personnel.services.audit import recent_salary_changes, salary_view

T = TypeVar("T")

NO_DEPARTMENT = "No department"
NO_TITLE = "No title"
ANNIVERSARY_WINDOW_DAYS = 30


def current_record(rows: Iterable[T], today: Optional[date] = None) -> Optional[T]:
    """Latest-starting row that is still current, if any."""
    today = today or current_day()
    active = [r for r in rows if is_current(r.to_date, today)]
    if not active:
        return None
    return max(active, key=lambda r: r.from_date)


def _group_by_employee(rows: Iterable[T]) -> dict[int, list[T]]:
    grouped: dict[int, list[T]] = defaultdict(list)
    for r in rows:
        grouped[r.emp_no].append(r)
    return grouped


def payroll_report(db: Session, today: Optional[date] = None) -> PayrollReport:
    today = today or current_day()

    employees = db.execute(select(Employee)).scalars().all()
    dept_names = {d.dept_no: d.dept_name for d in db.execute(select(Department)).scalars().all()}
    assignments = _group_by_employee(db.execute(select(DepartmentEmployee)).scalars().all())
    titles = _group_by_employee(db.execute(select(Title)).scalars().all())
    salaries = _group_by_employee(db.execute(select(Salary)).scalars().all())

    rows: list[PayrollRow] = []
    for e in employees:
        dept = current_record(assignments.get(e.emp_no, []), today)
        title = current_record(titles.get(e.emp_no, []), today)
        salary = current_record(salaries.get(e.emp_no, []), today)
        cents = salary.salary if salary else 0

        rows.append(
            PayrollRow(
                emp_no=e.emp_no,
                ci=e.ci,
                full_name=e.full_name,
                department=dept_names.get(dept.dept_no, NO_DEPARTMENT) if dept else NO_DEPARTMENT,
                title=title.title if title else NO_TITLE,
                current_salary=cents,
                current_salary_display=format_money(cents),
                hire_date=e.hire_date,
            )
        )

    rows.sort(key=lambda r: (r.department, r.full_name))
    total = sum(r.current_salary for r in rows)
    return PayrollReport(
        rows=rows,
        employee_count=len(rows),
        total_payroll=total,
        total_payroll_display=format_money(total),
    )


def payroll_csv(report: PayrollReport) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Employee No", "CI", "Full Name", "Department", "Title", "Current Salary", "Hire Date"])
    for r in report.rows:
        writer.writerow(
            [
                r.emp_no,
                r.ci,
                r.full_name,
                r.department,
                r.title,
                f"{to_major_units(r.current_salary):.2f}",
                r.hire_date.isoformat(),
            ]
        )
    return buf.getvalue()


def organizational_report(db: Session, today: Optional[date] = None) -> OrganizationalReport:
    today = today or current_day()

    departments = db.execute(select(Department)).scalars().all()
    employees = {e.emp_no: e for e in db.execute(select(Employee)).scalars().all()}
    titles = _group_by_employee(db.execute(select(Title)).scalars().all())

    members_by_dept: dict[int, list[DepartmentEmployee]] = defaultdict(list)
    for a in db.execute(select(DepartmentEmployee)).scalars().all():
        if is_current(a.to_date, today):
            members_by_dept[a.dept_no].append(a)

    managers_by_dept: dict[int, list[DepartmentManager]] = defaultdict(list)
    for m in db.execute(select(DepartmentManager)).scalars().all():
        managers_by_dept[m.dept_no].append(m)

    out: list[OrgDepartment] = []
    for d in departments:
        manager = None
        current_manager = current_record(managers_by_dept.get(d.dept_no, []), today)
        if current_manager and current_manager.emp_no in employees:
            manager = OrgManager(
                emp_no=current_manager.emp_no,
                full_name=employees[current_manager.emp_no].full_name,
                from_date=current_manager.from_date,
            )

        members: list[OrgEmployee] = []
        for a in members_by_dept.get(d.dept_no, []):
            emp = employees.get(a.emp_no)
            if emp is None:
                continue
            title = current_record(titles.get(a.emp_no, []), today)
            members.append(
                OrgEmployee(
                    emp_no=emp.emp_no,
                    full_name=emp.full_name,
                    title=title.title if title else NO_TITLE,
                    from_date=a.from_date,
                )
            )
        members.sort(key=lambda m: m.full_name)

        out.append(
            OrgDepartment(
                dept_no=d.dept_no,
                department_name=d.dept_name,
                manager=manager,
                employees=members,
                employee_count=len(members),
            )
        )

    out.sort(key=lambda d: d.department_name)
    return OrganizationalReport(
        departments=out,
        department_count=len(out),
        total_employees=sum(d.employee_count for d in out),
    )


def _anniversary_on_or_after(hire_date: date, today: date) -> date:
    def in_year(year: int) -> date:
        try:
            return hire_date.replace(year=year)
        except ValueError:
            # Feb 29 hires celebrate on Feb 28 in common years
            return date(year, 2, 28)

    candidate = in_year(today.year)
    if candidate < today:
        candidate = in_year(today.year + 1)
    return candidate


def upcoming_anniversaries(
    employees: Iterable[Employee],
    today: date,
    window_days: int = ANNIVERSARY_WINDOW_DAYS,
    limit: int = 10,
) -> list[UpcomingAnniversary]:
    horizon = today + timedelta(days=window_days)
    out: list[UpcomingAnniversary] = []
    for e in employees:
        anniversary = _anniversary_on_or_after(e.hire_date, today)
        years = anniversary.year - e.hire_date.year
        if years < 1 or anniversary > horizon:
            continue
        out.append(
            UpcomingAnniversary(
                emp_no=e.emp_no,
                employee_name=e.full_name,
                hire_date=e.hire_date,
                anniversary_date=anniversary,
                years_of_service=years,
            )
        )
    out.sort(key=lambda a: (a.anniversary_date, a.employee_name))
    return out[:limit]


def dashboard(db: Session, today: Optional[date] = None) -> DashboardOut:
    today = today or current_day()

    employees = db.execute(select(Employee)).scalars().all()
    dept_names = {d.dept_no: d.dept_name for d in db.execute(select(Department)).scalars().all()}
    active_users = db.execute(select(func.count()).select_from(User)).scalar_one()

    headcount = Counter(
        dept_names.get(a.dept_no, NO_DEPARTMENT)
        for a in db.execute(select(DepartmentEmployee)).scalars().all()
        if is_current(a.to_date, today)
    )

    recent = recent_salary_changes(db, limit=10)
    names = {e.emp_no: e.full_name for e in employees}

    return DashboardOut(
        total_employees=len(employees),
        total_departments=len(dept_names),
        active_users=active_users,
        new_employees_this_month=sum(
            1 for e in employees if e.hire_date.year == today.year and e.hire_date.month == today.month
        ),
        recent_salary_changes=[salary_view(r, names) for r in recent],
        employees_by_department=[
            DepartmentHeadcount(department_name=name, count=count) for name, count in sorted(headcount.items())
        ],
        upcoming_anniversaries=upcoming_anniversaries(employees, today),
    )
