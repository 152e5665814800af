from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from personnel.schemas.common import OpenEndDate


class TitleCreate(BaseModel):
    emp_no: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=50)
    from_date: date
    to_date: OpenEndDate = None

    @field_validator("title")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title is required")
        return v


class TitleUpdate(BaseModel):
    # emp_no, title and from_date form the key; only the end date can change
    to_date: OpenEndDate = None


class TitleOut(BaseModel):
    emp_no: int
    employee_name: str
    title: str
    from_date: date
    to_date: Optional[date] = None
    is_current: bool
