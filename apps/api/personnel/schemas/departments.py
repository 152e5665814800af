from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from personnel.schemas.common import OpenEndDate


class DepartmentCreate(BaseModel):
    dept_no: Optional[int] = Field(default=None, gt=0)
    dept_name: str = Field(min_length=1, max_length=50)


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    dept_no: int
    dept_name: str


class TenureCreate(BaseModel):
    """Adds an employee to a department, either as a member or as its manager."""

    emp_no: int = Field(gt=0)
    from_date: date
    to_date: OpenEndDate = None


class TenureClose(BaseModel):
    to_date: date


class TenureOut(BaseModel):
    emp_no: int
    dept_no: int
    employee_name: str
    from_date: date
    to_date: Optional[date] = None
    is_current: bool
