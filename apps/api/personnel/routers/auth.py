import logging
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from personnel.core.config import settings
from personnel.core.database import commit_or_conflict, get_db
from personnel.core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from personnel.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from personnel.models.audit_log import AuditOperation
from personnel.models.employee import Employee
from personnel.models.user import User
from personnel.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
)
from personnel.services import audit
from personnel.services.employees import next_emp_no
from personnel.services.validators import is_ci_unique, is_email_unique, is_username_unique

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Invalid authentication credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_token(token: str, db: Session) -> User:
    payload = decode_token(token)
    if payload is None or payload.get("sub") is None:
        raise _unauthorized()

    try:
        emp_no = int(payload["sub"])
    except (TypeError, ValueError):
        raise _unauthorized()

    user = db.get(User, emp_no)
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from the bearer token."""
    return _user_from_token(credentials.credentials, db)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous calls get None instead of a 401."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, db)


def get_actor(user: Optional[User] = Depends(get_optional_user)) -> str:
    """Name recorded in the audit trail for the current request."""
    return audit.resolve_actor(user.username if user else None)


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = db.execute(select(User).where(User.username == req.username)).scalar_one_or_none()

    if user is None or not verify_password(req.password, user.password_hash):
        logger.info("Failed login for username=%s", req.username)
        raise _unauthorized("Invalid username or password")

    employee = db.get(Employee, user.emp_no)

    expires = (
        timedelta(days=settings.remember_me_expire_days)
        if req.remember_me
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    access_token = create_access_token({"sub": str(user.emp_no), "username": user.username}, expires)

    return LoginResponse(
        access_token=access_token,
        emp_no=user.emp_no,
        username=user.username,
        full_name=employee.full_name if employee else user.username,
    )


@router.get("/me")
def get_current_user_info(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    employee = db.get(Employee, current_user.emp_no)
    return {
        "emp_no": current_user.emp_no,
        "username": current_user.username,
        "full_name": employee.full_name if employee else None,
        "email": employee.email if employee else None,
    }


@router.post("/register", response_model=LoginResponse, status_code=201)
def register(req: RegisterRequest, db: Session = Depends(get_db)):
    """Create an employee and its login in one transaction."""
    email = str(req.email).lower()
    if not is_email_unique(db, email):
        raise ValidationError("An employee with this email already exists", field="email")
    if not is_ci_unique(db, req.ci):
        raise ValidationError("An employee with this national id already exists", field="ci")
    if not is_username_unique(db, req.username):
        raise ValidationError("This username is already taken", field="username")

    employee = Employee(
        emp_no=next_emp_no(db),
        ci=req.ci.strip(),
        first_name=req.first_name.strip(),
        last_name=req.last_name.strip(),
        birth_date=req.birth_date,
        gender=req.gender,
        hire_date=req.hire_date,
        email=email,
    )
    user = User(
        emp_no=employee.emp_no,
        username=req.username,
        password_hash=get_password_hash(req.password),
    )

    try:
        db.add(employee)
        db.flush()
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Registration rejected by a constraint for username=%s", req.username)
        raise ConflictError("An employee or user with these details already exists", field="username")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Registration failed for username=%s", req.username)
        raise PersistenceError("Could not create the account. Please try again.")

    emp_no, full_name = employee.emp_no, employee.full_name
    audit.record_change(
        db,
        table="employees",
        operation=AuditOperation.CREATE,
        description=f"Registered employee {full_name} with user {req.username}",
        actor=req.username,
        employee_id=emp_no,
        record_key=f"emp_{emp_no}",
    )

    token = create_access_token({"sub": str(emp_no), "username": req.username})
    return LoginResponse(access_token=token, emp_no=emp_no, username=req.username, full_name=full_name)


@router.post("/change-password")
def change_password(
    req: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.get(User, current_user.emp_no)
    if user is None:
        raise NotFoundError("User")

    if not verify_password(req.current_password, user.password_hash):
        raise ValidationError("The current password is incorrect", field="current_password")

    user.password_hash = get_password_hash(req.new_password)
    commit_or_conflict(db, "The password could not be updated", field="new_password")
    return {"message": "Password updated successfully"}
