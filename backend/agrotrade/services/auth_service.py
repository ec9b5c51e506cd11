"""
Registration, credential checks and profile lookups.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS)
- Emails are stored lower-cased; uniqueness is therefore case-insensitive
- The password hash never leaves this module's callers through to_dict()
"""

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..constants import ROLE_DIRECTOR
from ..errors import Conflict, Forbidden, NotFound
from ..extensions import db
from ..models import User


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=current_app.config["BCRYPT_ROUNDS"])
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check; malformed hashes count as a mismatch."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def find_by_email(email: str) -> User | None:
    return db.session.query(User).filter(User.email == email.strip().lower()).first()


def create_user(*, name: str, email: str, password: str, role: str, branch: str, contact: str) -> User:
    """
    Create a user from already-validated fields.

    Raises Conflict if the email is taken. The unique index is the final
    arbiter, so two concurrent registrations cannot both succeed.
    """
    email = email.strip().lower()
    if find_by_email(email):
        raise Conflict("Email already registered")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
        branch=branch,
        contact=contact,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise Conflict("Email already registered") from exc

    current_app.logger.info("Registered user id=%s role=%s branch=%s", user.id, role, branch)
    return user


def authenticate(email: str, password: str) -> User | None:
    """Return the user when the credentials match, None otherwise."""
    user = find_by_email(email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def get_profile(viewer: User, user_id: int) -> User:
    """Users may read their own profile; directors may read anyone's."""
    if viewer.id != user_id and viewer.role != ROLE_DIRECTOR:
        raise Forbidden("You can only view your own profile")
    return get_user(user_id)
