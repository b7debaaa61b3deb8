# Overview: Service-layer operations for operators (users); password hashing and lookups.

"""
Operators are the attribution identity for sales, payments and activity log
entries. Authentication happens upstream; this module only stores accounts.

Passwords are hashed with bcrypt (cost factor 12).
"""

import bcrypt

from ..extensions import db
from ..models import User
from ..models.auth import VALID_ROLES, ROLE_EMPLOYEE
from ..validation import coerce_str
from . import audit_service
from .errors import ValidationError


MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_operator(
    name: str,
    email: str,
    password: str,
    role: str = ROLE_EMPLOYEE,
    created_by_id: int | None = None,
) -> User:
    name = coerce_str("name", name, required=True, max_length=128)
    email = coerce_str("email", email, required=True, max_length=255).lower()
    if role not in VALID_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(VALID_ROLES)}")

    if db.session.query(User).filter_by(email=email).first():
        raise ValidationError(f"Email {email} already registered")

    user = User(name=name, email=email, password_hash=hash_password(password), role=role)
    db.session.add(user)
    db.session.flush()

    audit_service.append_entry(
        created_by_id,
        audit_service.ACTION_CREATE_USER,
        f"Created user: {name} ({role})",
    )
    db.session.commit()
    return user


def get_active_operator(operator_id: int) -> User | None:
    user = db.session.get(User, operator_id)
    if user is None or not user.is_active:
        return None
    return user


def list_operators() -> list[User]:
    return db.session.query(User).order_by(User.id).all()
