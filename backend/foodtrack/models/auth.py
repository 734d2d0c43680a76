from __future__ import annotations

from ..extensions import db


class AccessToken(db.Model):
    """
    One issued session.

    The signed token itself is only ever held by the client; the row keeps its
    SHA-256 digest, which is what request authentication looks up. The row is
    the server-side source of truth for revocation and expiry, independent of
    the expiry encoded in the token's claims.

    Rows are never deleted by request handling: logout only flips is_revoked.
    `flask tokens cleanup` purges old revoked/expired rows.
    """
    __tablename__ = "access_tokens"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)
    org_id = db.Column(
        db.Integer,
        db.ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime, nullable=True)

    organization = db.relationship("Organization")

    def is_valid(self, now) -> bool:
        return not self.is_revoked and now < self.expires_at
