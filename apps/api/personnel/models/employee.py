from sqlalchemy import Column, Date, Integer, String

from personnel.core.database import Base

class Employee(Base):
    __tablename__ = "employees"

    emp_no = Column(Integer, primary_key=True, autoincrement=False)

    ci = Column(String(50), nullable=False, unique=True, index=True)  # national id
    birth_date = Column(Date, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    gender = Column(String(1), nullable=False)  # "M" / "F"
    hire_date = Column(Date, nullable=False)
    email = Column(String(100), nullable=False, unique=True, index=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
