import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from personnel.core.database import commit_or_conflict, get_db
from personnel.core.dates import is_current, today
from personnel.core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from personnel.models.audit_log import AuditOperation
from personnel.models.department import Department
from personnel.models.department_employee import DepartmentEmployee
from personnel.models.department_manager import DepartmentManager
from personnel.models.employee import Employee
from personnel.models.user import User
from personnel.routers.auth import get_current_user
from personnel.schemas.employees import EmployeeCreate, EmployeeDetail, EmployeeOut, EmployeeUpdate
from personnel.services import audit
from personnel.services.employees import next_emp_no, tenure_record_counts
from personnel.services.reports import current_record
from personnel.services.validators import is_ci_unique, is_email_unique

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_employee(db: Session, emp_no: int) -> Employee:
    e = db.get(Employee, emp_no)
    if not e:
        raise NotFoundError("Employee")
    return e


def _employee_data(e: Employee, **extra) -> dict:
    data = EmployeeOut.model_validate(e).model_dump()
    data.update(extra)
    return data


def _detail(db: Session, e: Employee) -> EmployeeDetail:
    day = today()
    assignments = db.execute(
        select(DepartmentEmployee).where(DepartmentEmployee.emp_no == e.emp_no)
    ).scalars().all()
    current = current_record(assignments, day)
    dept_name = None
    if current:
        dept = db.get(Department, current.dept_no)
        dept_name = dept.dept_name if dept else None

    managerships = db.execute(
        select(DepartmentManager).where(DepartmentManager.emp_no == e.emp_no)
    ).scalars().all()

    return EmployeeDetail(
        **_employee_data(
            e,
            has_user=db.get(User, e.emp_no) is not None,
            current_department=dept_name,
            is_manager=any(is_current(m.to_date, day) for m in managerships),
        )
    )


# --- Employees ---
@router.get("", response_model=list[EmployeeOut])
@router.get("/", response_model=list[EmployeeOut])
def list_employees(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List all employees ordered by employee number."""
    employees = db.execute(select(Employee).order_by(Employee.emp_no)).scalars().all()
    with_user = set(db.execute(select(User.emp_no)).scalars().all())
    return [EmployeeOut(**_employee_data(e, has_user=e.emp_no in with_user)) for e in employees]


@router.get("/{emp_no}", response_model=EmployeeDetail)
def get_employee(
    emp_no: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _detail(db, _require_employee(db, emp_no))


@router.post("", response_model=EmployeeDetail, status_code=201)
@router.post("/", response_model=EmployeeDetail, status_code=201)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create an employee, optionally placing them in a department from today on."""
    email = str(payload.email).lower()
    if payload.emp_no is not None and db.get(Employee, payload.emp_no):
        raise ConflictError(f"Employee number {payload.emp_no} is already in use", field="emp_no")
    if not is_email_unique(db, email):
        raise ValidationError("An employee with this email already exists", field="email")
    if not is_ci_unique(db, payload.ci):
        raise ValidationError("An employee with this national id already exists", field="ci")

    department = None
    if payload.dept_no is not None:
        department = db.get(Department, payload.dept_no)
        if not department:
            raise NotFoundError("Department")

    e = Employee(
        emp_no=payload.emp_no or next_emp_no(db),
        ci=payload.ci,
        first_name=payload.first_name,
        last_name=payload.last_name,
        birth_date=payload.birth_date,
        gender=payload.gender,
        hire_date=payload.hire_date,
        email=email,
    )

    try:
        db.add(e)
        db.flush()
        if department is not None:
            db.add(DepartmentEmployee(emp_no=e.emp_no, dept_no=department.dept_no, from_date=today(), to_date=None))
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Employee create rejected by a constraint for ci=%s", payload.ci)
        raise ConflictError("An employee with this number, email or national id already exists", field="emp_no")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Employee create failed for ci=%s", payload.ci)
        raise PersistenceError("The employee could not be created. Please try again.")

    db.refresh(e)
    out = _detail(db, e)

    description = f"Created employee {e.full_name}"
    if department is not None:
        description += f" in department {department.dept_name}"
    audit.record_change(
        db,
        table="employees",
        operation=AuditOperation.CREATE,
        description=description,
        actor=current_user.username,
        employee_id=out.emp_no,
        record_key=f"emp_{out.emp_no}",
    )
    return out


@router.put("/{emp_no}", response_model=EmployeeOut)
def update_employee(
    emp_no: int,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    e = _require_employee(db, emp_no)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in changes:
        changes["email"] = str(changes["email"]).lower()
        if not is_email_unique(db, changes["email"], exclude_emp_no=emp_no):
            raise ValidationError("An employee with this email already exists", field="email")
    if "ci" in changes:
        changes["ci"] = changes["ci"].strip()
        if not is_ci_unique(db, changes["ci"], exclude_emp_no=emp_no):
            raise ValidationError("An employee with this national id already exists", field="ci")

    changed = {k: v for k, v in changes.items() if getattr(e, k) != v}
    old_value = "; ".join(f"{k}={getattr(e, k)}" for k in changed)
    for k, v in changed.items():
        setattr(e, k, v)

    if not changed:
        return EmployeeOut(**_employee_data(e, has_user=db.get(User, emp_no) is not None))

    commit_or_conflict(
        db,
        "An employee with this email or national id already exists",
        field="email" if "email" in changed else "ci",
    )
    db.refresh(e)
    out = EmployeeOut(**_employee_data(e, has_user=db.get(User, emp_no) is not None))

    audit.record_change(
        db,
        table="employees",
        operation=AuditOperation.UPDATE,
        description=f"Updated employee {out.full_name}: {', '.join(sorted(changed))}",
        actor=current_user.username,
        employee_id=emp_no,
        record_key=f"emp_{emp_no}",
        old_value=old_value,
        new_value="; ".join(f"{k}={v}" for k, v in changed.items()),
    )
    return out


@router.delete("/{emp_no}")
def delete_employee(
    emp_no: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete an employee and their login. Refused while tenure history remains."""
    e = _require_employee(db, emp_no)

    remaining = {table: n for table, n in tenure_record_counts(db, emp_no).items() if n}
    if remaining:
        listing = ", ".join(f"{n} in {table}" for table, n in sorted(remaining.items()))
        raise ConflictError(f"Employee still has related records ({listing}); remove them first")

    full_name, actor = e.full_name, current_user.username
    try:
        user = db.get(User, emp_no)
        if user:
            db.delete(user)
            db.flush()
        db.delete(e)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Employee delete failed for emp_no=%s", emp_no)
        raise PersistenceError("The employee could not be deleted. Please try again.")

    audit.record_change(
        db,
        table="employees",
        operation=AuditOperation.DELETE,
        description=f"Deleted employee {full_name}",
        actor=actor,
        employee_id=emp_no,
        record_key=f"emp_{emp_no}",
    )
    return {"message": f"Employee {emp_no} deleted"}
