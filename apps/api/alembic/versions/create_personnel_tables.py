"""create personnel tables

Revision ID: create_personnel_tables
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_personnel_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPEN_ENDED = sa.text('to_date IS NULL')


def _open_ended_index(name: str, table: str, column: str) -> None:
    # At most one row per subject with an open end date
    op.create_index(
        name,
        table,
        [column],
        unique=True,
        sqlite_where=OPEN_ENDED,
        postgresql_where=OPEN_ENDED,
    )


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'employees',
        sa.Column('emp_no', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('ci', sa.String(length=50), nullable=False),
        sa.Column('birth_date', sa.Date(), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('gender', sa.String(length=1), nullable=False),
        sa.Column('hire_date', sa.Date(), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint('emp_no'),
    )
    op.create_index(op.f('ix_employees_ci'), 'employees', ['ci'], unique=True)
    op.create_index(op.f('ix_employees_email'), 'employees', ['email'], unique=True)

    op.create_table(
        'departments',
        sa.Column('dept_no', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('dept_name', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('dept_no'),
        sa.UniqueConstraint('dept_name'),
    )

    op.create_table(
        'dept_emp',
        sa.Column('emp_no', sa.Integer(), nullable=False),
        sa.Column('dept_no', sa.Integer(), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['emp_no'], ['employees.emp_no']),
        sa.ForeignKeyConstraint(['dept_no'], ['departments.dept_no']),
        sa.PrimaryKeyConstraint('emp_no', 'dept_no'),
    )
    op.create_index(op.f('ix_dept_emp_dept_no'), 'dept_emp', ['dept_no'], unique=False)
    _open_ended_index('uq_dept_emp_open', 'dept_emp', 'emp_no')

    op.create_table(
        'dept_manager',
        sa.Column('emp_no', sa.Integer(), nullable=False),
        sa.Column('dept_no', sa.Integer(), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['emp_no'], ['employees.emp_no']),
        sa.ForeignKeyConstraint(['dept_no'], ['departments.dept_no']),
        sa.PrimaryKeyConstraint('emp_no', 'dept_no'),
    )
    op.create_index(op.f('ix_dept_manager_dept_no'), 'dept_manager', ['dept_no'], unique=False)
    _open_ended_index('uq_dept_manager_open', 'dept_manager', 'dept_no')

    op.create_table(
        'titles',
        sa.Column('emp_no', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=50), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['emp_no'], ['employees.emp_no']),
        sa.PrimaryKeyConstraint('emp_no', 'title', 'from_date'),
    )
    _open_ended_index('uq_titles_open', 'titles', 'emp_no')

    op.create_table(
        'salaries',
        sa.Column('emp_no', sa.Integer(), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('salary', sa.BigInteger(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=True),
        sa.ForeignKeyConstraint(['emp_no'], ['employees.emp_no']),
        sa.PrimaryKeyConstraint('emp_no', 'from_date'),
    )
    _open_ended_index('uq_salaries_open', 'salaries', 'emp_no')

    op.create_table(
        'users',
        sa.Column('emp_no', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['emp_no'], ['employees.emp_no']),
        sa.PrimaryKeyConstraint('emp_no'),
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('actor', sa.String(length=50), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            'operation',
            sa.Enum('CREATE', 'UPDATE', 'DELETE', name='audit_operation'),
            nullable=False,
        ),
        sa.Column('table_name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('record_key', sa.String(length=100), nullable=True),
        sa.Column('emp_no', sa.Integer(), nullable=True),
        sa.Column('old_value', sa.String(length=500), nullable=True),
        sa.Column('new_value', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_log_changed_at'), 'audit_log', ['changed_at'], unique=False)
    op.create_index(op.f('ix_audit_log_emp_no'), 'audit_log', ['emp_no'], unique=False)

    op.create_table(
        'salary_audit_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('actor', sa.String(length=50), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('description', sa.String(length=250), nullable=False),
        sa.Column('salary', sa.BigInteger(), nullable=False),
        sa.Column('emp_no', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_salary_audit_log_changed_at'), 'salary_audit_log', ['changed_at'], unique=False)
    op.create_index(op.f('ix_salary_audit_log_emp_no'), 'salary_audit_log', ['emp_no'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('salary_audit_log')
    op.drop_table('audit_log')
    op.drop_table('users')
    op.drop_table('salaries')
    op.drop_table('titles')
    op.drop_table('dept_manager')
    op.drop_table('dept_emp')
    op.drop_table('departments')
    op.drop_table('employees')
    sa.Enum(name='audit_operation').drop(op.get_bind(), checkfirst=True)
