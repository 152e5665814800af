from sqlalchemy import Column, Date, ForeignKey, Index, Integer, text

from personnel.core.database import Base

class DepartmentEmployee(Base):
    """An employee's assignment to a department over [from_date, to_date)."""

    __tablename__ = "dept_emp"

    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)
    dept_no = Column(Integer, ForeignKey("departments.dept_no"), primary_key=True, index=True)

    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=True)  # NULL = still assigned

    __table_args__ = (
        # At most one open-ended assignment per employee
        Index(
            "uq_dept_emp_open",
            "emp_no",
            unique=True,
            sqlite_where=text("to_date IS NULL"),
            postgresql_where=text("to_date IS NULL"),
        ),
    )
