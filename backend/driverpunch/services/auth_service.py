# Overview: Service-layer operations for auth; encapsulates account creation and credential checks.

"""
Authentication Service

WHY: Every punch and every review decision must be attributable to an
account. Accounts are email/password; passwords are hashed with bcrypt.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 6 characters
- Emails are case-insensitive and unique
- Session tokens managed separately (see session_service.py)
"""

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import User
from ..models.auth import ROLES, ROLE_ADMIN, ROLE_DRIVER
from driverpunch.time_utils import utcnow

MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    """Raised for sign-up and sign-in failures shown to the user."""
    pass


class PasswordValidationError(AuthError):
    """Raised when password doesn't meet strength requirements."""
    pass


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def hash_password(password: str) -> str:
    """Validate then hash a password with bcrypt (cost 12)."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Malformed hashes verify as False rather than raising.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def sign_up(
    email: str,
    password: str,
    role: str,
    driver_id: str | None = None,
    *,
    allow_admin: bool | None = None,
) -> User:
    """
    Create an account.

    Args:
        email: Login email (unique, case-insensitive)
        password: Plaintext password, at least 6 characters
        role: "admin" or "driver"
        driver_id: External driver identifier, kept for driver accounts only
        allow_admin: Override for ALLOW_ADMIN_SIGNUP (CLI bootstrap passes True)

    Raises:
        AuthError: invalid role, disabled admin sign-up or duplicate email
        PasswordValidationError: weak password
    """
    email = normalize_email(email)
    if not email or "@" not in email:
        raise AuthError("A valid email is required")

    if role not in ROLES:
        raise AuthError(f"Invalid role. Must be one of: {', '.join(ROLES)}")

    if allow_admin is None:
        allow_admin = bool(current_app.config.get("ALLOW_ADMIN_SIGNUP"))
    if role == ROLE_ADMIN and not allow_admin:
        raise AuthError("Admin sign-up is disabled. Contact an administrator.")

    if db.session.query(User).filter_by(email=email).first():
        raise AuthError("Email already registered")

    password_hash = hash_password(password)

    driver_ref = (driver_id or "").strip() or None
    user = User(
        email=email,
        password_hash=password_hash,
        role=role,
        driver_id=driver_ref if role == ROLE_DRIVER else None,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent sign-up for the same email
        db.session.rollback()
        raise AuthError("Email already registered")
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Return the active User for these credentials, or None.

    Updates last_login_at on success.
    """
    email = normalize_email(email)
    if not email or not password:
        return None

    user = db.session.query(User).filter(
        User.email == email,
        User.is_active.is_(True),
    ).first()
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user
