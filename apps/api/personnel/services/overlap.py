"""
Date-range overlap checks for tenure records.

Every tenure kind (department assignment, managership, title, salary) is a
half-open interval [from_date, to_date) where a missing end means "still
open". A proposed interval is accepted only when it intersects none of the
subject's existing rows. The checks read a snapshot and return a verdict;
they never write.
"""

from datetime import date
from typing import Callable, Iterable, Optional, Tuple, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel.models.department_employee import DepartmentEmployee
from personnel.models.department_manager import DepartmentManager
from personnel.models.salary import Salary
from personnel.models.title import Title

T = TypeVar("T")

Span = Tuple[Optional[date], Optional[date]]


def _starts_before(point: date, end: Optional[date]) -> bool:
    # An open end is +infinity
    return end is None or point < end


def intervals_overlap(
    a_start: date,
    a_end: Optional[date],
    b_start: date,
    b_end: Optional[date],
) -> bool:
    """Half-open intersection: a_start < b_end and b_start < a_end."""
    return _starts_before(a_start, b_end) and _starts_before(b_start, a_end)


def find_overlap(
    records: Iterable[T],
    start: date,
    end: Optional[date],
    span: Callable[[T], Span],
    exclude: Optional[Callable[[T], bool]] = None,
) -> Optional[T]:
    """Return the first record whose span intersects [start, end), if any.

    Records without a usable start date are left out of the comparison.
    """
    for record in records:
        if exclude is not None and exclude(record):
            continue
        rec_start, rec_end = span(record)
        if rec_start is None:
            continue
        if intervals_overlap(start, end, rec_start, rec_end):
            return record
    return None


def _tenure_span(record) -> Span:
    return record.from_date, record.to_date


def validate_date_range(start: date, end: Optional[date]) -> None:
    if end is not None and end <= start:
        raise ValueError("to_date must be after from_date")


def validate_no_overlapping_assignment(
    db: Session,
    emp_no: int,
    from_date: date,
    to_date: Optional[date],
    exclude_dept_no: Optional[int] = None,
) -> bool:
    """An employee belongs to at most one department at any moment."""
    rows = db.execute(
        select(DepartmentEmployee).where(DepartmentEmployee.emp_no == emp_no)
    ).scalars().all()

    exclude = None
    if exclude_dept_no is not None:
        exclude = lambda r: r.dept_no == exclude_dept_no

    return find_overlap(rows, from_date, to_date, span=_tenure_span, exclude=exclude) is None


def validate_single_active_manager(
    db: Session,
    dept_no: int,
    from_date: date,
    to_date: Optional[date],
    exclude_emp_no: Optional[int] = None,
) -> bool:
    """A department has at most one manager at any moment."""
    rows = db.execute(
        select(DepartmentManager).where(DepartmentManager.dept_no == dept_no)
    ).scalars().all()

    exclude = None
    if exclude_emp_no is not None:
        exclude = lambda r: r.emp_no == exclude_emp_no

    return find_overlap(rows, from_date, to_date, span=_tenure_span, exclude=exclude) is None


def validate_no_overlapping_title(
    db: Session,
    emp_no: int,
    from_date: date,
    to_date: Optional[date],
    exclude: Optional[Tuple[str, date]] = None,
) -> bool:
    """An employee holds one title at a time. `exclude` is a (title, from_date) key."""
    rows = db.execute(select(Title).where(Title.emp_no == emp_no)).scalars().all()

    skip = None
    if exclude is not None:
        title_name, title_from = exclude
        skip = lambda r: r.title == title_name and r.from_date == title_from

    return find_overlap(rows, from_date, to_date, span=_tenure_span, exclude=skip) is None


def validate_no_overlapping_salary(
    db: Session,
    emp_no: int,
    from_date: date,
    to_date: Optional[date],
    exclude_from_date: Optional[date] = None,
) -> bool:
    rows = db.execute(select(Salary).where(Salary.emp_no == emp_no)).scalars().all()

    exclude = None
    if exclude_from_date is not None:
        exclude = lambda r: r.from_date == exclude_from_date

    return find_overlap(rows, from_date, to_date, span=_tenure_span, exclude=exclude) is None
