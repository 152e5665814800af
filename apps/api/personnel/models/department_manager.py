from sqlalchemy import Column, Date, ForeignKey, Index, Integer, text

from personnel.core.database import Base

class DepartmentManager(Base):
    __tablename__ = "dept_manager"

    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)
    dept_no = Column(Integer, ForeignKey("departments.dept_no"), primary_key=True, index=True)

    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=True)  # NULL = current manager

    __table_args__ = (
        # One open-ended manager per department
        Index(
            "uq_dept_manager_open",
            "dept_no",
            unique=True,
            sqlite_where=text("to_date IS NULL"),
            postgresql_where=text("to_date IS NULL"),
        ),
    )
