from sqlalchemy import BigInteger, Column, Date, ForeignKey, Index, Integer, text

from personnel.core.database import Base

class Salary(Base):
    __tablename__ = "salaries"

    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)
    from_date = Column(Date, primary_key=True)

    salary = Column(BigInteger, nullable=False)  # cents
    to_date = Column(Date, nullable=True)  # NULL = current salary

    __table_args__ = (
        Index(
            "uq_salaries_open",
            "emp_no",
            unique=True,
            sqlite_where=text("to_date IS NULL"),
            postgresql_where=text("to_date IS NULL"),
        ),
    )
