from datetime import date
from typing import Optional

from pydantic import BaseModel

from personnel.schemas.audit import SalaryAuditView


class PayrollRow(BaseModel):
    emp_no: int
    ci: str
    full_name: str
    department: str
    title: str
    current_salary: int  # cents
    current_salary_display: str
    hire_date: date


class PayrollReport(BaseModel):
    rows: list[PayrollRow]
    employee_count: int
    total_payroll: int
    total_payroll_display: str


class OrgEmployee(BaseModel):
    emp_no: int
    full_name: str
    title: str
    from_date: date


class OrgManager(BaseModel):
    emp_no: int
    full_name: str
    from_date: date


class OrgDepartment(BaseModel):
    dept_no: int
    department_name: str
    manager: Optional[OrgManager] = None
    employees: list[OrgEmployee]
    employee_count: int


class OrganizationalReport(BaseModel):
    departments: list[OrgDepartment]
    department_count: int
    total_employees: int


class DepartmentHeadcount(BaseModel):
    department_name: str
    count: int


class UpcomingAnniversary(BaseModel):
    emp_no: int
    employee_name: str
    hire_date: date
    anniversary_date: date
    years_of_service: int


class DashboardOut(BaseModel):
    total_employees: int
    total_departments: int
    active_users: int
    new_employees_this_month: int
    recent_salary_changes: list[SalaryAuditView]
    employees_by_department: list[DepartmentHeadcount]
    upcoming_anniversaries: list[UpcomingAnniversary]
