"""
Audit trail writer.

Every mutation on employee, department, title and salary data is followed by
an append-only audit row. Writing that row must never undo or block the
mutation itself: callers commit their business change first, then call into
this module, which absorbs persistence errors and reports them through an
AuditResult instead of raising.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from personnel.core.config import settings
from personnel.core.money import format_money
from personnel.models.audit_log import AuditLog, AuditOperation, SalaryAuditLog
from personnel.models.employee import Employee
from personnel.schemas.audit import GeneralAuditView, SalaryAuditView

logger = logging.getLogger(__name__)

# Salary rows with a general "salaries" row this close in time are duplicates
DUPLICATE_WINDOW = timedelta(minutes=5)

OPERATION_LABELS = {
    AuditOperation.CREATE: "Created",
    AuditOperation.UPDATE: "Updated",
    AuditOperation.DELETE: "Deleted",
}

TABLE_LABELS = {
    "employees": "Employees",
    "salaries": "Salaries",
    "titles": "Titles",
    "departments": "Departments",
    "dept_emp": "Department assignments",
    "dept_manager": "Department managers",
}


class AuditStatus(str, enum.Enum):
    recorded = "recorded"
    skipped = "skipped"
    failed = "failed"


@dataclass(frozen=True)
class AuditResult:
    status: AuditStatus
    entry_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def recorded(self) -> bool:
        return self.status is AuditStatus.recorded


def resolve_actor(actor: Optional[str]) -> str:
    actor = (actor or "").strip()
    return actor or settings.default_actor


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    if value is None or len(value) <= limit:
        return value
    return value[: limit - 1] + "…"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def record_change(
    db: Session,
    table: str,
    operation: Union[AuditOperation, str],
    description: str,
    actor: Optional[str],
    employee_id: Optional[int] = None,
    record_key: Optional[str] = None,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None,
) -> AuditResult:
    """Append a general audit entry. Call only after the business change is committed."""
    try:
        if not isinstance(operation, AuditOperation):
            operation = AuditOperation(str(operation).strip().upper())
    except ValueError as exc:
        logger.error("Audit write failed: table=%s unknown operation %r", table, operation)
        return AuditResult(AuditStatus.failed, error=str(exc))

    entry = AuditLog(
        actor=_clip(resolve_actor(actor), 50),
        changed_at=_now(),
        operation=operation,
        table_name=table,
        description=_clip(description, 500),
        record_key=_clip(record_key, 100),
        emp_no=employee_id,
        old_value=_clip(old_value, 500),
        new_value=_clip(new_value, 500),
    )

    try:
        db.add(entry)
        db.commit()
        entry_id = entry.id
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Audit write failed: table=%s operation=%s emp_no=%s", table, operation.value, employee_id)
        return AuditResult(AuditStatus.failed, error=str(exc))

    logger.debug("Audit entry %s recorded: table=%s operation=%s", entry_id, table, operation.value)
    return AuditResult(AuditStatus.recorded, entry_id=entry_id)


def record_salary_change(
    db: Session,
    employee_id: int,
    old_amount: int,
    new_amount: int,
    actor: Optional[str],
    note: str,
) -> AuditResult:
    """Log a salary change in both the salary trail and the general trail.

    Amounts are in cents; descriptions show them in major units.
    """
    actor = resolve_actor(actor)
    old_text = format_money(old_amount)
    new_text = format_money(new_amount)

    try:
        if db.get(Employee, employee_id) is None:
            logger.warning("Salary audit skipped: employee %s does not exist", employee_id)
            return AuditResult(AuditStatus.skipped, error=f"employee {employee_id} not found")

        db.add(
            SalaryAuditLog(
                actor=_clip(actor, 50),
                changed_at=_now(),
                description=_clip(f"{note}. Previous salary: {old_text}, new salary: {new_text}", 250),
                salary=new_amount,
                emp_no=employee_id,
            )
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Salary audit write failed: emp_no=%s", employee_id)
        return AuditResult(AuditStatus.failed, error=str(exc))

    # Commits the salary row together with the general one
    return record_change(
        db,
        table="salaries",
        operation=AuditOperation.UPDATE,
        description=f"{note}: {old_text} → {new_text}",
        actor=actor,
        employee_id=employee_id,
        record_key=f"emp_{employee_id}",
        old_value=old_text,
        new_value=new_text,
    )


# --- Queries ---
def recent_changes(db: Session, limit: int = 50, employee_id: Optional[int] = None) -> list[AuditLog]:
    stmt = select(AuditLog)
    if employee_id is not None:
        stmt = stmt.where(AuditLog.emp_no == employee_id)
    stmt = stmt.order_by(AuditLog.changed_at.desc(), AuditLog.id.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())


def recent_salary_changes(db: Session, limit: int = 50, employee_id: Optional[int] = None) -> list[SalaryAuditLog]:
    stmt = select(SalaryAuditLog)
    if employee_id is not None:
        stmt = stmt.where(SalaryAuditLog.emp_no == employee_id)
    stmt = stmt.order_by(SalaryAuditLog.changed_at.desc(), SalaryAuditLog.id.desc()).limit(limit)
    return list(db.execute(stmt).scalars().all())


def employee_names(db: Session, emp_nos: set[int]) -> dict[int, str]:
    if not emp_nos:
        return {}
    rows = db.execute(
        select(Employee.emp_no, Employee.first_name, Employee.last_name).where(Employee.emp_no.in_(sorted(emp_nos)))
    ).all()
    return {r.emp_no: f"{r.first_name} {r.last_name}" for r in rows}


def _employee_label(names: dict[int, str], emp_no: Optional[int]) -> str:
    if emp_no is None:
        return "N/A"
    return names.get(emp_no, f"Employee #{emp_no}")


def general_view(entry: AuditLog, names: dict[int, str]) -> GeneralAuditView:
    operation = AuditOperation(entry.operation)
    return GeneralAuditView(
        id=entry.id,
        changed_at=_as_utc(entry.changed_at),
        actor=entry.actor,
        operation=operation.value,
        operation_label=OPERATION_LABELS.get(operation, operation.value),
        table_name=entry.table_name,
        table_label=TABLE_LABELS.get(entry.table_name, entry.table_name),
        description=entry.description,
        emp_no=entry.emp_no,
        employee_name=_employee_label(names, entry.emp_no),
        record_key=entry.record_key,
        old_value=entry.old_value,
        new_value=entry.new_value,
    )


def salary_view(entry: SalaryAuditLog, names: dict[int, str]) -> SalaryAuditView:
    return SalaryAuditView(
        id=entry.id,
        changed_at=_as_utc(entry.changed_at),
        actor=entry.actor,
        description=entry.description,
        emp_no=entry.emp_no,
        employee_name=_employee_label(names, entry.emp_no),
        salary=entry.salary,
        salary_display=format_money(entry.salary),
    )


def combined_feed(
    db: Session,
    general_limit: int = 100,
    salary_limit: int = 50,
) -> list[Union[GeneralAuditView, SalaryAuditView]]:
    """General and salary trails merged newest first.

    A salary row is dropped when a general "salaries" row for the same
    employee lies within DUPLICATE_WINDOW of it.
    """
    general = recent_changes(db, limit=general_limit)
    salaries = recent_salary_changes(db, limit=salary_limit)

    names = employee_names(
        db,
        {e.emp_no for e in general if e.emp_no is not None} | {s.emp_no for s in salaries},
    )

    feed: list[Union[GeneralAuditView, SalaryAuditView]] = [general_view(e, names) for e in general]

    salary_stamps = [
        (e.emp_no, _as_utc(e.changed_at)) for e in general if e.table_name == "salaries" and e.emp_no is not None
    ]
    for entry in salaries:
        stamp = _as_utc(entry.changed_at)
        duplicate = any(
            emp_no == entry.emp_no and abs(changed_at - stamp) < DUPLICATE_WINDOW
            for emp_no, changed_at in salary_stamps
        )
        if not duplicate:
            feed.append(salary_view(entry, names))

    feed.sort(key=lambda v: v.changed_at, reverse=True)
    return feed
