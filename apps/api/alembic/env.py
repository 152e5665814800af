from logging.config import fileConfig
import os

from sqlalchemy import engine_from_config, pool
from alembic import context

from dotenv import load_dotenv

# -------------------------------------------------------------------
# Load environment variables (.env in apps/api/)
# -------------------------------------------------------------------
load_dotenv()

config = context.config

# -------------------------------------------------------------------
# sqlalchemy.url always comes from DATABASE_URL
# -------------------------------------------------------------------
db_url = os.getenv("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL is not set. Check apps/api/.env")

config.set_main_option("sqlalchemy.url", db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# -------------------------------------------------------------------
# Models & metadata for autogenerate
# -------------------------------------------------------------------
from personnel.core.database import Base
from personnel.models.employee import Employee  # noqa: F401
from personnel.models.department import Department  # noqa: F401
from personnel.models.department_employee import DepartmentEmployee  # noqa: F401
from personnel.models.department_manager import DepartmentManager  # noqa: F401
from personnel.models.title import Title  # noqa: F401
from personnel.models.salary import Salary  # noqa: F401
from personnel.models.user import User  # noqa: F401
from personnel.models.audit_log import AuditLog, SalaryAuditLog  # noqa: F401

target_metadata = Base.metadata

# SQLite cannot ALTER most constraints in place
render_as_batch = db_url.startswith("sqlite")


# -------------------------------------------------------------------
# Offline migrations
# -------------------------------------------------------------------
def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of running it."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=render_as_batch,
    )

    with context.begin_transaction():
        context.run_migrations()


# -------------------------------------------------------------------
# Online migrations
# -------------------------------------------------------------------
def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=render_as_batch,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
