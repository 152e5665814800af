from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class GeneralAuditView(BaseModel):
    kind: Literal["general"] = "general"
    id: int
    changed_at: datetime
    actor: str
    operation: str
    operation_label: str
    table_name: str
    table_label: str
    description: str
    emp_no: Optional[int] = None
    employee_name: str
    record_key: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None


class SalaryAuditView(BaseModel):
    kind: Literal["salary"] = "salary"
    id: int
    changed_at: datetime
    actor: str
    description: str
    emp_no: int
    employee_name: str
    salary: int  # cents
    salary_display: str


AuditView = Annotated[Union[GeneralAuditView, SalaryAuditView], Field(discriminator="kind")]
