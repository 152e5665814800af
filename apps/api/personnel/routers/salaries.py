from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel.core.database import commit_or_conflict, get_db
from personnel.core.dates import is_current, today
from personnel.core.exceptions import ConflictError, NotFoundError, ValidationError
from personnel.core.money import format_money, to_major_units, to_minor_units
from personnel.models.audit_log import AuditOperation
from personnel.models.employee import Employee
from personnel.models.salary import Salary
from personnel.routers.auth import get_actor
from personnel.schemas.salaries import SalaryCreate, SalaryOut, SalaryUpdate
from personnel.services import audit
from personnel.services.overlap import validate_date_range, validate_no_overlapping_salary

router = APIRouter()

OVERLAP_MESSAGE = "The employee already has a salary during this period"
OPEN_CONFLICT_MESSAGE = "The employee already has an open-ended salary"


def _salary_out(s: Salary, employee_name: str) -> SalaryOut:
    return SalaryOut(
        emp_no=s.emp_no,
        employee_name=employee_name,
        from_date=s.from_date,
        to_date=s.to_date,
        salary=s.salary,
        amount=to_major_units(s.salary),
        is_current=is_current(s.to_date, today()),
    )


def _require_employee(db: Session, emp_no: int) -> Employee:
    e = db.get(Employee, emp_no)
    if not e:
        raise NotFoundError("Employee")
    return e


def _require_salary(db: Session, emp_no: int, from_date: date) -> Salary:
    s = db.get(Salary, (emp_no, from_date))
    if not s:
        raise NotFoundError("Salary")
    return s


def _check_range(from_date: date, to_date: Optional[date]) -> None:
    try:
        validate_date_range(from_date, to_date)
    except ValueError as exc:
        raise ValidationError(str(exc), field="to_date")


def _latest_amount(db: Session, emp_no: int) -> int:
    latest = db.execute(
        select(Salary).where(Salary.emp_no == emp_no).order_by(Salary.from_date.desc()).limit(1)
    ).scalar_one_or_none()
    return latest.salary if latest else 0


@router.get("", response_model=list[SalaryOut])
@router.get("/", response_model=list[SalaryOut])
def list_salaries(emp_no: Optional[int] = None, db: Session = Depends(get_db)):
    stmt = select(Salary, Employee.first_name, Employee.last_name).join(
        Employee, Employee.emp_no == Salary.emp_no, isouter=True
    )
    if emp_no is not None:
        stmt = stmt.where(Salary.emp_no == emp_no)
    rows = db.execute(stmt.order_by(Salary.emp_no, Salary.from_date.desc())).all()

    out = []
    for s, first_name, last_name in rows:
        name = f"{first_name} {last_name}" if first_name else f"Employee #{s.emp_no}"
        out.append(_salary_out(s, name))
    return out


@router.post("", response_model=SalaryOut, status_code=201)
@router.post("/", response_model=SalaryOut, status_code=201)
def create_salary(
    payload: SalaryCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Add a salary period. The amount is given in major units and stored in cents."""
    e = _require_employee(db, payload.emp_no)
    _check_range(payload.from_date, payload.to_date)

    if db.get(Salary, (payload.emp_no, payload.from_date)):
        raise ConflictError("A salary starting on this date already exists", field="from_date")
    if not validate_no_overlapping_salary(db, payload.emp_no, payload.from_date, payload.to_date):
        raise ValidationError(OVERLAP_MESSAGE, field="from_date")

    previous = _latest_amount(db, payload.emp_no)
    s = Salary(
        emp_no=payload.emp_no,
        from_date=payload.from_date,
        to_date=payload.to_date,
        salary=to_minor_units(payload.amount),
    )
    db.add(s)
    commit_or_conflict(db, OPEN_CONFLICT_MESSAGE, field="to_date")

    out = _salary_out(s, e.full_name)
    audit.record_salary_change(
        db,
        employee_id=out.emp_no,
        old_amount=previous,
        new_amount=out.salary,
        actor=actor,
        note=f"New salary from {out.from_date.isoformat()}",
    )
    return out


@router.put("/{emp_no}/{from_date}", response_model=SalaryOut)
def update_salary(
    emp_no: int,
    from_date: date,
    payload: SalaryUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Change the amount and/or the end date of a salary period."""
    s = _require_salary(db, emp_no, from_date)
    e = _require_employee(db, emp_no)

    new_end = payload.to_date if "to_date" in payload.model_fields_set else s.to_date
    _check_range(s.from_date, new_end)
    if not validate_no_overlapping_salary(db, emp_no, s.from_date, new_end, exclude_from_date=from_date):
        raise ValidationError(OVERLAP_MESSAGE, field="to_date")

    old_amount, old_end = s.salary, s.to_date
    if payload.amount is not None:
        s.salary = to_minor_units(payload.amount)
    s.to_date = new_end
    commit_or_conflict(db, OPEN_CONFLICT_MESSAGE, field="to_date")

    out = _salary_out(s, e.full_name)
    if out.salary != old_amount:
        audit.record_salary_change(
            db,
            employee_id=emp_no,
            old_amount=old_amount,
            new_amount=out.salary,
            actor=actor,
            note=f"Salary from {from_date.isoformat()} updated",
        )
    elif out.to_date != old_end:
        audit.record_change(
            db,
            table="salaries",
            operation=AuditOperation.UPDATE,
            description=f"Updated end date of salary from {from_date.isoformat()} for {out.employee_name}",
            actor=actor,
            employee_id=emp_no,
            record_key=f"emp_{emp_no}",
            old_value=old_end.isoformat() if old_end else "open",
            new_value=out.to_date.isoformat() if out.to_date else "open",
        )
    return out


@router.delete("/{emp_no}/{from_date}")
def delete_salary(
    emp_no: int,
    from_date: date,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    s = _require_salary(db, emp_no, from_date)
    amount = s.salary

    db.delete(s)
    commit_or_conflict(db, "The salary could not be deleted")

    audit.record_change(
        db,
        table="salaries",
        operation=AuditOperation.DELETE,
        description=f"Deleted salary of {format_money(amount)} from {from_date.isoformat()}",
        actor=actor,
        employee_id=emp_no,
        record_key=f"emp_{emp_no}",
        old_value=format_money(amount),
    )
    return {"message": "Salary deleted"}
