from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from personnel.schemas.common import OpenEndDate


class SalaryCreate(BaseModel):
    emp_no: int = Field(gt=0)
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)  # major units
    from_date: date
    to_date: OpenEndDate = None


class SalaryUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=15, decimal_places=2)
    # Leave out to keep the current end; send null / "" / "9999-12-31" to reopen
    to_date: OpenEndDate = None


class SalaryOut(BaseModel):
    emp_no: int
    employee_name: str
    from_date: date
    to_date: Optional[date] = None
    salary: int  # cents
    amount: Decimal
    is_current: bool
