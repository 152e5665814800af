import enum

from sqlalchemy import BigInteger, Column, DateTime, Enum, Integer, String

from personnel.core.database import Base

class AuditOperation(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditLog(Base):
    """General change trail: one row per mutation on any table."""

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)

    actor = Column(String(50), nullable=False)
    changed_at = Column(DateTime(timezone=True), nullable=False, index=True)
    operation = Column(Enum(AuditOperation, name="audit_operation"), nullable=False)
    table_name = Column(String(50), nullable=False)  # employees, salaries, titles, ...
    description = Column(String(500), nullable=False)

    record_key = Column(String(100), nullable=True)
    # Plain column, not a foreign key: entries outlive the employee they describe
    emp_no = Column(Integer, nullable=True, index=True)
    old_value = Column(String(500), nullable=True)
    new_value = Column(String(500), nullable=True)

    def __repr__(self):
        return f"<AuditLog {self.id}: {self.actor} {self.operation} {self.table_name}>"


class SalaryAuditLog(Base):
    """Salary-specific trail kept alongside the general one."""

    __tablename__ = "salary_audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)

    actor = Column(String(50), nullable=False)
    changed_at = Column(DateTime(timezone=True), nullable=False, index=True)
    description = Column(String(250), nullable=False)
    salary = Column(BigInteger, nullable=False)  # new amount, cents
    emp_no = Column(Integer, nullable=False, index=True)

    def __repr__(self):
        return f"<SalaryAuditLog {self.id}: {self.actor} emp={self.emp_no}>"
