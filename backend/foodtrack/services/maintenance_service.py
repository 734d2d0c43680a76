# Overview: Service-layer operations for maintenance; encapsulates business logic and database work.

from __future__ import annotations

from datetime import timedelta

from ..extensions import db
from ..models import AccessToken
from ..time_utils import utcnow


def cleanup_access_tokens(*, retention_days: int = 30) -> int:
    """
    Delete access tokens that are expired or revoked and older than retention_days.

    Live tokens are never touched, whatever their age.
    Returns count of rows deleted.
    """
    now = utcnow()
    cutoff = now - timedelta(days=retention_days)
    deleted = db.session.query(AccessToken).filter(
        db.or_(
            AccessToken.expires_at <= now,
            AccessToken.is_revoked.is_(True),
        ),
        AccessToken.created_at < cutoff,
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted
