"""Accounts: password hashing, registration and credential checks."""

from __future__ import annotations

import logging
import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from learnhub.core.errors import ConflictError, DuplicateKeyError, InvalidInputError
from learnhub.models.principal import Role
from learnhub.models.user import User
from learnhub.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

# Argon2 hash strings carry their own salt and parameters
_ph = PasswordHasher()

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    """Return the user when the credentials match, else None.

    Upgrades the stored hash when the hasher's parameters have changed.
    """
    user = repo.get_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        return None

    if _ph.check_needs_rehash(user.password_hash):
        repo.update_password_hash(user.id, _ph.hash(password))
        logger.info("Rehashed password for user=%s", user.id)

    return user


def register_user(
    repo: UserRepo,
    *,
    name: str,
    email: str,
    password: str,
    role: Role = Role.STUDENT,
) -> User:
    """Create an account.  Public registration only ever passes STUDENT."""
    if not name or not name.strip():
        raise InvalidInputError("Name is required")
    if not _EMAIL_RE.match(email.strip()):
        raise InvalidInputError("Invalid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    user = User.new(
        name=name, email=email, password_hash=hash_password(password), role=role
    )
    try:
        repo.add(user)
    except DuplicateKeyError:
        raise ConflictError("Email already registered") from None

    logger.info("User registered id=%s role=%s", user.id, user.role.value)
    return user
