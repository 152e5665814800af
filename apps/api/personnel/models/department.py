from sqlalchemy import Column, Integer, String

from personnel.core.database import Base

class Department(Base):
    __tablename__ = "departments"

    dept_no = Column(Integer, primary_key=True, autoincrement=False)
    dept_name = Column(String(50), nullable=False, unique=True)
