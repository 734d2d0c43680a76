# Overview: Service-layer operations for access tokens; issue, verify, revoke and resolve tenants.

"""
Access Token Management Service

Tokens are HS256-signed JWTs carrying {sub, iat, exp, jti}. The signature and
the encoded expiry make forged or garbled tokens fail fast without touching
the database (verify_token). Every issued token also gets an access_tokens
row, which is the second, server-side source of truth: it is what request
authentication consults, and it is what logout revokes.

TOKEN STATES:
- Issued -> Valid (row present, not revoked, now < expires_at)
- Valid -> Revoked (logout; terminal)
- Valid -> Expired (derived from time; never persisted)

The database stores only the SHA-256 digest of each token. Lookup is by
exact digest equality, so a token string is accepted only if this server
issued it.
"""

from __future__ import annotations

import hashlib
import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta, timezone

import jwt
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import StorageError, Unauthorized
from ..extensions import db
from ..models import AccessToken
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

# Fixed lifetime: exp = iat + 7 days
TOKEN_LIFETIME = timedelta(days=7)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Claims:
    org_id: int
    issued_at: int
    expires_at: int
    token_id: str


def hash_token(token: str) -> str:
    """SHA-256 hex digest used as the access_tokens lookup key."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _signing_key() -> str:
    return current_app.config["JWT_SECRET"]


def _algorithm() -> str:
    return current_app.config.get("JWT_ALGORITHM", "HS256")


def extract_bearer_token(auth_header: str | None) -> str | None:
    """
    Pull the token out of an `Authorization: Bearer <token>` header.

    Returns None when the header is absent or not a bearer header. What a
    missing token means is up to the caller (401 for protected routes, 400
    for logout).
    """
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    token = auth_header[len(BEARER_PREFIX):].strip()
    return token or None


def issue_token(org_id: int, *, commit: bool = True) -> tuple[AccessToken, str]:
    """
    Create a signed token for an organization and persist its access_tokens row.

    Returns (access_token_row, plaintext_token). With commit=False the row is
    only flushed, so the caller can include it in a larger transaction
    (registration writes the organization and its first token together).
    """
    now = utcnow().replace(microsecond=0)
    expires_at = now + TOKEN_LIFETIME

    claims = {
        "sub": str(org_id),
        "iat": int(now.replace(tzinfo=timezone.utc).timestamp()),
        "exp": int(expires_at.replace(tzinfo=timezone.utc).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    token = jwt.encode(claims, _signing_key(), algorithm=_algorithm())

    row = AccessToken(
        token_hash=hash_token(token),
        org_id=org_id,
        created_at=now,
        expires_at=expires_at,
        is_revoked=False,
    )
    db.session.add(row)
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    return row, token


def verify_token(token: str) -> Claims:
    """
    Validate signature and encoded expiry. No database access.

    Does NOT check revocation; resolve_access_token does that.

    Raises Unauthorized("expired") or Unauthorized("invalid").
    """
    try:
        payload = jwt.decode(
            token,
            _signing_key(),
            algorithms=[_algorithm()],
            options={"require": ["sub", "iat", "exp", "jti"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("invalid")

    try:
        org_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthorized("invalid")

    return Claims(
        org_id=org_id,
        issued_at=payload["iat"],
        expires_at=payload["exp"],
        token_id=payload["jti"],
    )


def resolve_access_token(token: str | None) -> AccessToken:
    """
    Resolve a bearer token to its live access_tokens row.

    1. missing token -> Unauthorized("missing")
    2. (optional) signature check when VERIFY_TOKEN_SIGNATURE is on
    3. no row for the token -> Unauthorized("invalid")
    4. row revoked -> Unauthorized("revoked")
    5. now >= expires_at -> Unauthorized("expired")

    By default the row lookup alone decides: the token string is unguessable
    (signed payload with a random jti), so an exact match proves issuance.
    """
    if not token:
        raise Unauthorized("missing")

    if current_app.config.get("VERIFY_TOKEN_SIGNATURE"):
        verify_token(token)

    try:
        row = db.session.query(AccessToken).filter_by(token_hash=hash_token(token)).first()
    except SQLAlchemyError as exc:
        raise StorageError() from exc

    if row is None:
        raise Unauthorized("invalid")
    if not row.is_valid(utcnow()):
        raise Unauthorized("revoked" if row.is_revoked else "expired")
    return row


def resolve_org_id(token: str | None) -> int:
    """Tenant resolver: bearer token -> authenticated organization id."""
    return resolve_access_token(token).org_id


def revoke_token(token: str) -> bool:
    """
    Revoke a token (logout).

    Idempotent: revoking an already revoked or unknown token is not an error.
    Returns True if a live row was flipped to revoked.
    """
    try:
        updated = db.session.query(AccessToken).filter(
            AccessToken.token_hash == hash_token(token),
            AccessToken.is_revoked.is_(False),
        ).update(
            {"is_revoked": True, "revoked_at": utcnow()},
            synchronize_session=False,
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageError() from exc

    if updated:
        logger.info("Revoked access token")
    return bool(updated)
