from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from personnel.core.database import get_db
from personnel.schemas.audit import AuditView, GeneralAuditView, SalaryAuditView
from personnel.services import audit

router = APIRouter()


@router.get("", response_model=list[AuditView])
@router.get("/", response_model=list[AuditView])
def audit_feed(
    general_limit: int = Query(100, ge=1, le=1000),
    salary_limit: int = Query(50, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """General and salary trails merged, newest first."""
    return audit.combined_feed(db, general_limit=general_limit, salary_limit=salary_limit)


@router.get("/general", response_model=list[GeneralAuditView])
def general_changes(
    limit: int = Query(50, ge=1, le=1000),
    emp_no: Optional[int] = None,
    db: Session = Depends(get_db),
):
    entries = audit.recent_changes(db, limit=limit, employee_id=emp_no)
    names = audit.employee_names(db, {e.emp_no for e in entries if e.emp_no is not None})
    return [audit.general_view(e, names) for e in entries]


@router.get("/salaries", response_model=list[SalaryAuditView])
def salary_changes(
    limit: int = Query(50, ge=1, le=1000),
    emp_no: Optional[int] = None,
    db: Session = Depends(get_db),
):
    entries = audit.recent_salary_changes(db, limit=limit, employee_id=emp_no)
    names = audit.employee_names(db, {e.emp_no for e in entries})
    return [audit.salary_view(e, names) for e in entries]
