# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Accounts are either ADMIN (manages retailers) or USER (a retailer). A USER
is also the tenant: its id is the tenant_id every ledger row is scoped by.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, upper, lower, digit and special char required
- Session tokens managed separately (see session_service.py)
- Deactivated accounts cannot log in
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app

from ..errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import ROLE_ADMIN, ROLE_USER, User
from ..time_utils import utcnow
from ..validation import PHONE_RE


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""

    def __init__(self, message: str):
        super().__init__(message, errors={"password": message})


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Hash password using bcrypt with cost factor 12, after the strength check."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() compares in constant time. A malformed stored hash
    counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _normalize_email(email) -> str:
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        raise ValidationError("A valid email is required", errors={"email": "invalid email"})
    return email.strip().lower()


def create_user(
    *,
    name: str,
    email: str,
    password: str,
    mobile_number: str | None = None,
    role: str = ROLE_USER,
) -> User:
    """
    Create a login account with a bcrypt password hash.

    Raises:
        ValidationError / PasswordValidationError: bad name, email, mobile or password
        ConflictError: email already registered
    """
    errors = {}
    if not isinstance(name, str) or len(name.strip()) < 2:
        errors["name"] = "must be at least 2 characters"
    if mobile_number is not None and not PHONE_RE.match(str(mobile_number)):
        errors["mobile_number"] = "must be exactly 10 digits"
    if role not in (ROLE_ADMIN, ROLE_USER):
        errors["role"] = f"must be one of: {ROLE_ADMIN}, {ROLE_USER}"
    if errors:
        raise ValidationError("Validation error", errors=errors)

    email = _normalize_email(email)
    if db.session.query(User.id).filter(User.email == email).first():
        raise ConflictError("User with this email already exists")

    user = User(
        name=name.strip(),
        email=email,
        mobile_number=mobile_number,
        password_hash=hash_password(password),
        role=role,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()

    current_app.logger.info("User created id=%s role=%s", user.id, user.role)
    return user


def authenticate(email: str, password: str) -> User:
    """
    Check credentials and stamp last_login_at.

    Raises AuthenticationError with one message for every failure so the
    response does not reveal which accounts exist.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = db.session.query(User).filter(User.email == str(email).strip().lower()).first()
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(*, role: str | None = None, page: int = 1, limit: int = 10) -> tuple[list[User], int]:
    query = db.session.query(User)
    if role:
        query = query.filter(User.role == role)
    total = query.count()
    rows = query.order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def set_user_active(user_id: int, active: bool) -> User:
    """Activate/deactivate a retailer account. Deactivation revokes its sessions."""
    from .session_service import revoke_all_user_sessions

    user = get_user(user_id)
    if user.is_admin:
        raise ValidationError("Admin accounts cannot be toggled")
    if user.is_active == active:
        raise ValidationError(f"User is already {'active' if active else 'deactivated'}")

    user.is_active = active
    db.session.commit()
    if not active:
        revoke_all_user_sessions(user.id, reason="User account deactivated")

    current_app.logger.info("User %s id=%s", "activated" if active else "deactivated", user.id)
    return user


def reset_password(user_id: int, new_password: str) -> User:
    from .session_service import revoke_all_user_sessions

    user = get_user(user_id)
    user.password_hash = hash_password(new_password)
    db.session.commit()
    revoke_all_user_sessions(user.id, reason="Password reset")

    current_app.logger.info("Password reset for user id=%s", user.id)
    return user


def ensure_admin(*, email: str, password: str, name: str = "Administrator") -> tuple[User, bool]:
    """Create the bootstrap admin if missing. Returns (user, created)."""
    existing = db.session.query(User).filter(User.email == email.strip().lower()).first()
    if existing is not None:
        return existing, False
    return create_user(name=name, email=email, password=password, role=ROLE_ADMIN), True
