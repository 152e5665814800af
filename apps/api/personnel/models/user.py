from sqlalchemy import Column, ForeignKey, Integer, String

from personnel.core.database import Base

class User(Base):
    __tablename__ = "users"

    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)

    username = Column(String(100), nullable=False, unique=True, index=True)
    password_hash = Column(String(100), nullable=False)
