from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import date
from typing import Optional, Literal

Gender = Literal["M", "F"]


class EmployeeCreate(BaseModel):
    emp_no: Optional[int] = Field(default=None, gt=0)  # assigned when omitted
    ci: str = Field(min_length=1, max_length=50)
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    birth_date: date
    gender: Gender
    hire_date: date
    email: EmailStr
    dept_no: Optional[int] = None  # initial department, open-ended from today

    @field_validator("ci", "first_name", "last_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class EmployeeUpdate(BaseModel):
    ci: Optional[str] = Field(default=None, min_length=1, max_length=50)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    hire_date: Optional[date] = None
    email: Optional[EmailStr] = None


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    emp_no: int
    ci: str
    first_name: str
    last_name: str
    full_name: str
    birth_date: date
    gender: str
    hire_date: date
    email: str
    has_user: bool = False


class EmployeeDetail(EmployeeOut):
    current_department: Optional[str] = None
    is_manager: bool = False
