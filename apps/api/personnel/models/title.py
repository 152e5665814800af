from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, text

from personnel.core.database import Base

class Title(Base):
    __tablename__ = "titles"

    emp_no = Column(Integer, ForeignKey("employees.emp_no"), primary_key=True)
    title = Column(String(50), primary_key=True)
    from_date = Column(Date, primary_key=True)

    to_date = Column(Date, nullable=True)  # NULL = current title

    __table_args__ = (
        Index(
            "uq_titles_open",
            "emp_no",
            unique=True,
            sqlite_where=text("to_date IS NULL"),
            postgresql_where=text("to_date IS NULL"),
        ),
    )
