from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from personnel.core.database import commit_or_conflict, get_db
from personnel.core.dates import is_current, today
from personnel.core.exceptions import ConflictError, NotFoundError, ValidationError
from personnel.models.audit_log import AuditOperation
from personnel.models.employee import Employee
from personnel.models.title import Title
from personnel.routers.auth import get_actor
from personnel.schemas.titles import TitleCreate, TitleOut, TitleUpdate
from personnel.services import audit
from personnel.services.overlap import validate_date_range, validate_no_overlapping_title

router = APIRouter()

OVERLAP_MESSAGE = "The employee already holds a title during this period"


def _title_out(t: Title, names: dict[int, str]) -> TitleOut:
    return TitleOut(
        emp_no=t.emp_no,
        employee_name=names.get(t.emp_no, f"Employee #{t.emp_no}"),
        title=t.title,
        from_date=t.from_date,
        to_date=t.to_date,
        is_current=is_current(t.to_date, today()),
    )


def _name_of(db: Session, emp_no: int) -> dict[int, str]:
    e = db.get(Employee, emp_no)
    return {emp_no: e.full_name} if e else {}


def _require_title(db: Session, emp_no: int, title: str, from_date: date) -> Title:
    t = db.get(Title, (emp_no, title, from_date))
    if not t:
        raise NotFoundError("Title")
    return t


def _record_key(t: TitleOut) -> str:
    return f"emp_{t.emp_no}_{t.title}_{t.from_date.isoformat()}"


@router.get("", response_model=list[TitleOut])
@router.get("/", response_model=list[TitleOut])
def list_titles(emp_no: Optional[int] = None, db: Session = Depends(get_db)):
    stmt = select(Title)
    if emp_no is not None:
        stmt = stmt.where(Title.emp_no == emp_no)
    rows = db.execute(stmt.order_by(Title.emp_no, Title.from_date.desc())).scalars().all()

    emp_nos = sorted({t.emp_no for t in rows})
    employees = db.execute(select(Employee).where(Employee.emp_no.in_(emp_nos))).scalars().all()
    names = {e.emp_no: e.full_name for e in employees}
    return [_title_out(t, names) for t in rows]


@router.post("", response_model=TitleOut, status_code=201)
@router.post("/", response_model=TitleOut, status_code=201)
def create_title(
    payload: TitleCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    if not db.get(Employee, payload.emp_no):
        raise NotFoundError("Employee")
    try:
        validate_date_range(payload.from_date, payload.to_date)
    except ValueError as exc:
        raise ValidationError(str(exc), field="to_date")

    if db.get(Title, (payload.emp_no, payload.title, payload.from_date)):
        raise ConflictError("This title record already exists", field="title")
    if not validate_no_overlapping_title(db, payload.emp_no, payload.from_date, payload.to_date):
        raise ValidationError(OVERLAP_MESSAGE, field="from_date")

    t = Title(emp_no=payload.emp_no, title=payload.title, from_date=payload.from_date, to_date=payload.to_date)
    db.add(t)
    commit_or_conflict(db, "The employee already has an open-ended title", field="to_date")

    out = _title_out(t, _name_of(db, payload.emp_no))
    audit.record_change(
        db,
        table="titles",
        operation=AuditOperation.CREATE,
        description=f"Assigned title {out.title} to {out.employee_name} from {out.from_date.isoformat()}",
        actor=actor,
        employee_id=out.emp_no,
        record_key=_record_key(out),
        new_value=out.title,
    )
    return out


@router.put("/{emp_no}/{title}/{from_date}", response_model=TitleOut)
def update_title(
    emp_no: int,
    title: str,
    from_date: date,
    payload: TitleUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Change the end date of a title; an open end reopens it."""
    t = _require_title(db, emp_no, title, from_date)
    try:
        validate_date_range(t.from_date, payload.to_date)
    except ValueError as exc:
        raise ValidationError(str(exc), field="to_date")
    if not validate_no_overlapping_title(db, emp_no, t.from_date, payload.to_date, exclude=(title, from_date)):
        raise ValidationError(OVERLAP_MESSAGE, field="to_date")

    old_end = t.to_date
    t.to_date = payload.to_date
    commit_or_conflict(db, "The employee already has an open-ended title", field="to_date")

    out = _title_out(t, _name_of(db, emp_no))
    audit.record_change(
        db,
        table="titles",
        operation=AuditOperation.UPDATE,
        description=f"Updated end date of title {out.title} for {out.employee_name}",
        actor=actor,
        employee_id=emp_no,
        record_key=_record_key(out),
        old_value=old_end.isoformat() if old_end else "open",
        new_value=out.to_date.isoformat() if out.to_date else "open",
    )
    return out


@router.delete("/{emp_no}/{title}/{from_date}")
def delete_title(
    emp_no: int,
    title: str,
    from_date: date,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    t = _require_title(db, emp_no, title, from_date)
    out = _title_out(t, _name_of(db, emp_no))

    db.delete(t)
    commit_or_conflict(db, "The title could not be deleted")

    audit.record_change(
        db,
        table="titles",
        operation=AuditOperation.DELETE,
        description=f"Removed title {out.title} from {out.employee_name}",
        actor=actor,
        employee_id=emp_no,
        record_key=_record_key(out),
        old_value=out.title,
    )
    return {"message": "Title deleted"}
