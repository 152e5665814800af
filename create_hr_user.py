#!/usr/bin/env python3
"""
Script to give an existing employee a login.
Run this after the database migration has been completed.

Usage:
    python create_hr_user.py <emp_no> <username> [password]

Example:
    python create_hr_user.py 1001 apereira mypassword123

When no password is given a random one is generated and printed once.
"""

import sys
from pathlib import Path

# Add the apps/api directory to the path so we can import personnel
api_dir = Path(__file__).parent / "apps" / "api"
sys.path.insert(0, str(api_dir))

from sqlalchemy.exc import SQLAlchemyError

from personnel.core.database import SessionLocal
from personnel.core.security import generate_random_password, get_password_hash
from personnel.models.employee import Employee
from personnel.models.user import User
from personnel.services.validators import is_username_unique


def create_hr_user(emp_no: int, username: str, password: str) -> bool:
    """Create a user row for an employee."""
    db = SessionLocal()

    try:
        employee = db.get(Employee, emp_no)
        if not employee:
            print(f"❌ Employee {emp_no} does not exist!")
            return False

        if db.get(User, emp_no):
            print(f"❌ Employee {emp_no} already has a login!")
            return False

        if not is_username_unique(db, username):
            print(f"❌ Username {username} is already taken!")
            return False

        db.add(User(emp_no=emp_no, username=username, password_hash=get_password_hash(password)))
        db.commit()

        print("✅ Login created successfully!")
        print(f"   Employee: {employee.emp_no} {employee.full_name}")
        print(f"   Username: {username}")
        return True
    except SQLAlchemyError as e:
        db.rollback()
        print(f"❌ Error creating login: {e}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) not in (3, 4):
        print("Usage: python create_hr_user.py <emp_no> <username> [password]")
        print("Example: python create_hr_user.py 1001 apereira mypassword123")
        sys.exit(1)

    try:
        emp_no = int(sys.argv[1])
    except ValueError:
        print("❌ emp_no must be a number!")
        sys.exit(1)

    username = sys.argv[2].strip()
    if len(username) < 3:
        print("❌ Username must be at least 3 characters!")
        sys.exit(1)

    if len(sys.argv) == 4:
        password = sys.argv[3]
    else:
        password = generate_random_password()
        print(f"🔑 Generated password: {password}")

    success = create_hr_user(emp_no, username, password)
    sys.exit(0 if success else 1)
