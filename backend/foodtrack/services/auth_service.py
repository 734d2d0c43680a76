# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Organization Authentication Service

Organizations are the login principals: an organization registers with a
name, email and password, and logs in with email and password. Successful
registration or login issues a bearer token (see session_service.py).

SECURITY NOTES:
- Passwords hashed with Argon2id (argon2-cffi), fresh random salt per hash
- Verification is constant-time and never raises for malformed stored hashes
- Unknown email and wrong password produce the same InvalidCredentials error
"""

from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ApiError, ConflictError, InvalidCredentials, StorageError, ValidationError
from ..extensions import db
from ..models import AccessToken, Organization
from . import session_service
from .transaction import unit_of_work
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()

MAX_PASSWORD_LENGTH = 1024


def _salt_from_encoded(encoded: str) -> str:
    # $argon2id$v=19$m=65536,t=3,p=4$<salt>$<hash>
    parts = encoded.split("$")
    return parts[4] if len(parts) == 6 else ""


def hash_password(password: str) -> tuple[str, str]:
    """
    Hash password with Argon2id.

    Returns (encoded_hash, salt). The encoded hash is self-describing and
    already carries the salt; the salt is returned separately for the
    organizations.password_salt column.
    """
    if not isinstance(password, str) or not password:
        raise ValidationError("password is required")
    if len(password) > MAX_PASSWORD_LENGTH:
        raise ValidationError(f"password exceeds max length {MAX_PASSWORD_LENGTH}")
    try:
        encoded = _hasher.hash(password)
    except HashingError as exc:
        logger.error("Password hashing failed: %s", exc)
        raise ApiError("Failed to hash password") from exc
    return encoded, _salt_from_encoded(encoded)


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against an Argon2 hash.

    Returns False for a wrong password and for an empty or malformed stored
    hash (e.g. organizations created without a password).
    """
    if not password_hash or not isinstance(password, str):
        return False
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{key} is required")
    return value.strip()


def email_taken(email: str, exclude_org_id: int | None = None) -> bool:
    query = db.session.query(Organization.id).filter(Organization.email == email)
    if exclude_org_id is not None:
        query = query.filter(Organization.id != exclude_org_id)
    return query.first() is not None


def register_organization(data: dict) -> tuple[Organization, str]:
    """
    Create an organization with login credentials and issue its first token.

    Organization row and access token row are written in one transaction.

    Returns (organization, plaintext_token).

    Raises:
        ValidationError: missing name/email/password
        ConflictError: email already registered
        StorageError: database failure
    """
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    name = _require_str(data, "name")
    email = _require_str(data, "email")
    password = data.get("password")
    if len(name) > 255 or len(email) > 255:
        raise ValidationError("name and email must be at most 255 characters")

    password_hash, password_salt = hash_password(password)

    with unit_of_work(conflict_message="Email already registered"):
        if email_taken(email):
            raise ConflictError("Email already registered")
        org = Organization(
            name=name,
            email=email,
            password_hash=password_hash,
            password_salt=password_salt,
        )
        db.session.add(org)
        db.session.flush()
        _, token = session_service.issue_token(org.id, commit=False)

    logger.info("Registered organization %s", org.id)
    return org, token


def authenticate(email: str, password: str) -> Organization:
    """
    Look up an organization by email and check its password.

    Raises InvalidCredentials for unknown email or wrong password.
    """
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        raise InvalidCredentials()

    try:
        org = db.session.query(Organization).filter(
            Organization.email == email.strip()
        ).first()
    except SQLAlchemyError as exc:
        raise StorageError() from exc

    if not org or not verify_password(password, org.password_hash):
        raise InvalidCredentials()
    return org


def login(data: dict) -> tuple[Organization, str]:
    """Authenticate by email/password and issue a fresh token."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    org = authenticate(data.get("email"), data.get("password"))
    with unit_of_work():
        _, token = session_service.issue_token(org.id, commit=False)
    return org, token


def change_password(org: Organization, password: str) -> None:
    """
    Replace an organization's credentials and revoke every token it holds.

    Caller commits.
    """
    org.password_hash, org.password_salt = hash_password(password)
    db.session.query(AccessToken).filter(
        AccessToken.org_id == org.id,
        AccessToken.is_revoked.is_(False),
    ).update({"is_revoked": True, "revoked_at": utcnow()}, synchronize_session=False)
