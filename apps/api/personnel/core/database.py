import logging
import os
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase

from personnel.core.exceptions import ConflictError, PersistenceError

# Load environment variables once, at import time
load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set. Check your .env file.")

# SQLite connections are shared across the threadpool FastAPI runs sync routes in
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)

class Base(DeclarativeBase):
    pass

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_conflict(db: Session, message: str, field: Optional[str] = None) -> None:
    """Commit the session; constraint violations become ConflictError, any
    other database failure becomes PersistenceError. Rolls back on failure."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Commit rejected by a constraint: %s", message)
        raise ConflictError(message, field=field)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Commit failed")
        raise PersistenceError("The change could not be saved. Please try again.")
