from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from personnel.core.database import commit_or_conflict, get_db
from personnel.core.dates import is_current, today
from personnel.core.exceptions import ConflictError, NotFoundError, ValidationError
from personnel.models.audit_log import AuditOperation
from personnel.models.department import Department
from personnel.models.department_employee import DepartmentEmployee
from personnel.models.department_manager import DepartmentManager
from personnel.models.employee import Employee
from personnel.routers.auth import get_actor
from personnel.schemas.departments import DepartmentCreate, DepartmentOut, TenureClose, TenureCreate, TenureOut
from personnel.services import audit
from personnel.services.overlap import (
    validate_date_range,
    validate_no_overlapping_assignment,
    validate_single_active_manager,
)
from personnel.services.validators import is_department_name_unique

router = APIRouter()


def _require_department(db: Session, dept_no: int) -> Department:
    d = db.get(Department, dept_no)
    if not d:
        raise NotFoundError("Department")
    return d


def _require_employee(db: Session, emp_no: int) -> Employee:
    e = db.get(Employee, emp_no)
    if not e:
        raise NotFoundError("Employee")
    return e


def _check_range(from_date, to_date) -> None:
    try:
        validate_date_range(from_date, to_date)
    except ValueError as exc:
        raise ValidationError(str(exc), field="to_date")


def _tenure_out(db: Session, row) -> TenureOut:
    e = db.get(Employee, row.emp_no)
    return TenureOut(
        emp_no=row.emp_no,
        dept_no=row.dept_no,
        employee_name=e.full_name if e else f"Employee #{row.emp_no}",
        from_date=row.from_date,
        to_date=row.to_date,
        is_current=is_current(row.to_date, today()),
    )


def _tenure_list(db: Session, model, dept_no: int) -> list[TenureOut]:
    rows = db.execute(
        select(model).where(model.dept_no == dept_no).order_by(model.from_date.desc())
    ).scalars().all()
    return [_tenure_out(db, r) for r in rows]


def _span_text(from_date, to_date) -> str:
    return f"{from_date.isoformat()} to {to_date.isoformat() if to_date else 'open'}"


# --- Departments ---
@router.get("", response_model=list[DepartmentOut])
@router.get("/", response_model=list[DepartmentOut])
def list_departments(db: Session = Depends(get_db)):
    return db.execute(select(Department).order_by(Department.dept_no)).scalars().all()


@router.post("", response_model=DepartmentOut, status_code=201)
@router.post("/", response_model=DepartmentOut, status_code=201)
def create_department(
    payload: DepartmentCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    name = payload.dept_name.strip()
    if not name:
        raise ValidationError("Department name is required", field="dept_name")
    if not is_department_name_unique(db, name):
        raise ValidationError("A department with this name already exists", field="dept_name")
    if payload.dept_no is not None and db.get(Department, payload.dept_no):
        raise ConflictError(f"Department number {payload.dept_no} is already in use", field="dept_no")

    dept_no = payload.dept_no
    if dept_no is None:
        dept_no = (db.execute(select(func.max(Department.dept_no))).scalar() or 0) + 1

    d = Department(dept_no=dept_no, dept_name=name)
    db.add(d)
    commit_or_conflict(db, "A department with this number or name already exists", field="dept_name")
    db.refresh(d)
    out = DepartmentOut.model_validate(d)

    audit.record_change(
        db,
        table="departments",
        operation=AuditOperation.CREATE,
        description=f"Created department {out.dept_name}",
        actor=actor,
        record_key=f"dept_{out.dept_no}",
    )
    return out


@router.get("/{dept_no}", response_model=DepartmentOut)
def get_department(dept_no: int, db: Session = Depends(get_db)):
    return _require_department(db, dept_no)


# --- Assignments ---
@router.get("/{dept_no}/employees", response_model=list[TenureOut])
def list_assignments(dept_no: int, db: Session = Depends(get_db)):
    """Everyone ever assigned to the department, most recent first."""
    _require_department(db, dept_no)
    return _tenure_list(db, DepartmentEmployee, dept_no)


@router.post("/{dept_no}/employees", response_model=TenureOut, status_code=201)
def add_assignment(
    dept_no: int,
    payload: TenureCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    d = _require_department(db, dept_no)
    e = _require_employee(db, payload.emp_no)
    _check_range(payload.from_date, payload.to_date)

    if db.get(DepartmentEmployee, (payload.emp_no, dept_no)):
        raise ConflictError("This employee already has an assignment in this department", field="emp_no")
    if not validate_no_overlapping_assignment(db, payload.emp_no, payload.from_date, payload.to_date):
        raise ValidationError(
            "The employee is already assigned to a department during this period", field="from_date"
        )

    row = DepartmentEmployee(
        emp_no=payload.emp_no, dept_no=dept_no, from_date=payload.from_date, to_date=payload.to_date
    )
    db.add(row)
    commit_or_conflict(db, "The employee already has an open department assignment", field="to_date")

    out = _tenure_out(db, row)
    audit.record_change(
        db,
        table="dept_emp",
        operation=AuditOperation.CREATE,
        description=f"Assigned {e.full_name} to {d.dept_name} ({_span_text(out.from_date, out.to_date)})",
        actor=actor,
        employee_id=out.emp_no,
        record_key=f"emp_{out.emp_no}_dept_{dept_no}",
    )
    return out


@router.put("/{dept_no}/employees/{emp_no}", response_model=TenureOut)
def close_assignment(
    dept_no: int,
    emp_no: int,
    payload: TenureClose,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Set the end date of an assignment."""
    row = db.get(DepartmentEmployee, (emp_no, dept_no))
    if not row:
        raise NotFoundError("Assignment")
    _check_range(row.from_date, payload.to_date)
    if not validate_no_overlapping_assignment(db, emp_no, row.from_date, payload.to_date, exclude_dept_no=dept_no):
        raise ValidationError(
            "The employee is already assigned to a department during this period", field="to_date"
        )

    old_end = row.to_date
    row.to_date = payload.to_date
    commit_or_conflict(db, "The assignment could not be updated", field="to_date")

    out = _tenure_out(db, row)
    audit.record_change(
        db,
        table="dept_emp",
        operation=AuditOperation.UPDATE,
        description=f"Closed assignment of {out.employee_name} to department {dept_no} on {payload.to_date.isoformat()}",
        actor=actor,
        employee_id=emp_no,
        record_key=f"emp_{emp_no}_dept_{dept_no}",
        old_value=old_end.isoformat() if old_end else "open",
        new_value=payload.to_date.isoformat(),
    )
    return out


# --- Managers ---
@router.get("/{dept_no}/managers", response_model=list[TenureOut])
def list_managers(dept_no: int, db: Session = Depends(get_db)):
    _require_department(db, dept_no)
    return _tenure_list(db, DepartmentManager, dept_no)


@router.post("/{dept_no}/managers", response_model=TenureOut, status_code=201)
def add_manager(
    dept_no: int,
    payload: TenureCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    d = _require_department(db, dept_no)
    e = _require_employee(db, payload.emp_no)
    _check_range(payload.from_date, payload.to_date)

    if db.get(DepartmentManager, (payload.emp_no, dept_no)):
        raise ConflictError("This employee has already managed this department", field="emp_no")
    if not validate_single_active_manager(db, dept_no, payload.from_date, payload.to_date):
        raise ValidationError("The department already has a manager during this period", field="from_date")

    row = DepartmentManager(
        emp_no=payload.emp_no, dept_no=dept_no, from_date=payload.from_date, to_date=payload.to_date
    )
    db.add(row)
    commit_or_conflict(db, "The department already has an open-ended manager", field="to_date")

    out = _tenure_out(db, row)
    audit.record_change(
        db,
        table="dept_manager",
        operation=AuditOperation.CREATE,
        description=f"Made {e.full_name} manager of {d.dept_name} ({_span_text(out.from_date, out.to_date)})",
        actor=actor,
        employee_id=out.emp_no,
        record_key=f"emp_{out.emp_no}_dept_{dept_no}",
    )
    return out


@router.put("/{dept_no}/managers/{emp_no}", response_model=TenureOut)
def close_manager(
    dept_no: int,
    emp_no: int,
    payload: TenureClose,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    row = db.get(DepartmentManager, (emp_no, dept_no))
    if not row:
        raise NotFoundError("Manager tenure")
    _check_range(row.from_date, payload.to_date)
    if not validate_single_active_manager(db, dept_no, row.from_date, payload.to_date, exclude_emp_no=emp_no):
        raise ValidationError("The department already has a manager during this period", field="to_date")

    old_end = row.to_date
    row.to_date = payload.to_date
    commit_or_conflict(db, "The manager tenure could not be updated", field="to_date")

    out = _tenure_out(db, row)
    audit.record_change(
        db,
        table="dept_manager",
        operation=AuditOperation.UPDATE,
        description=f"Closed management of department {dept_no} by {out.employee_name} on {payload.to_date.isoformat()}",
        actor=actor,
        employee_id=emp_no,
        record_key=f"emp_{emp_no}_dept_{dept_no}",
        old_value=old_end.isoformat() if old_end else "open",
        new_value=payload.to_date.isoformat(),
    )
    return out
