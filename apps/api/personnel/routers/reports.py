from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from personnel.core.database import get_db
from personnel.core.dates import today
from personnel.models.user import User
from personnel.routers.auth import get_current_user
from personnel.schemas.reports import DashboardOut, OrganizationalReport, PayrollReport
from personnel.services import reports

router = APIRouter()
dashboard_router = APIRouter()


@router.get("/payroll", response_model=PayrollReport)
def payroll(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Current department, title and salary for every employee."""
    return reports.payroll_report(db)


@router.get("/payroll.csv")
def payroll_csv(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    body = reports.payroll_csv(reports.payroll_report(db))
    filename = f"payroll_{today().strftime('%Y%m%d')}.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/organizational", response_model=OrganizationalReport)
def organizational(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Departments with their current manager and members."""
    return reports.organizational_report(db)


@dashboard_router.get("", response_model=DashboardOut)
@dashboard_router.get("/", response_model=DashboardOut)
def dashboard(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return reports.dashboard(db)
