# Overview: Service-layer operations for organizations; self-scoped CRUD.

"""
Organization Service

An authenticated organization can only see and change itself. Any request
naming a different organization id is rejected with Forbidden before a query
runs. Deleting an organization removes all of its data and tokens through
ON DELETE CASCADE.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError, NotFound, StorageError, ValidationError
from ..extensions import db
from ..models import Organization
from ..validation import ModelValidationPolicy, in_int_range, validate_payload
from . import auth_service
from .tenant_service import require_self
from .transaction import unit_of_work


ORGANIZATION_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "email"}),
    required_on_create=frozenset({"name", "email"}),
    list_fields=frozenset({"password"}),
)


def _load(org_id: int) -> Organization:
    if not in_int_range(org_id):
        raise NotFound.for_entity("Organization")
    try:
        org = db.session.query(Organization).filter_by(id=org_id).first()
    except SQLAlchemyError as exc:
        raise StorageError() from exc
    if org is None:
        raise NotFound.for_entity("Organization")
    return org


def create_organization(data: dict) -> Organization:
    """
    Create an organization without issuing a token.

    A password is optional. Without one the organization cannot log in until
    a password is set.
    """
    patch = validate_payload(model=Organization, payload=data, policy=ORGANIZATION_POLICY, partial=False)
    password = patch.pop("password", None)

    org = Organization(**patch)
    if password is not None:
        org.password_hash, org.password_salt = auth_service.hash_password(password)

    with unit_of_work(conflict_message="Email already registered"):
        if auth_service.email_taken(org.email):
            raise ConflictError("Email already registered")
        db.session.add(org)
    return org


def list_organizations(org_id: int) -> list[Organization]:
    """Only the caller's own organization is ever listed."""
    try:
        return db.session.query(Organization).filter_by(id=org_id).all()
    except SQLAlchemyError as exc:
        raise StorageError() from exc


def get_organization(requested_id: int, org_id: int) -> Organization:
    require_self(requested_id, org_id)
    return _load(requested_id)


def update_organization(requested_id: int, data: dict, org_id: int) -> Organization:
    """
    Update name/email and optionally the password.

    Changing the password revokes every token of the organization, including
    the one used for this request.
    """
    require_self(requested_id, org_id)
    org = _load(requested_id)
    patch = validate_payload(model=Organization, payload=data, policy=ORGANIZATION_POLICY, partial=True)
    password = patch.pop("password", None)
    if "password" in (data or {}) and password is None:
        raise ValidationError("password cannot be null")

    with unit_of_work(conflict_message="Email already registered"):
        if "email" in patch and auth_service.email_taken(patch["email"], exclude_org_id=org.id):
            raise ConflictError("Email already registered")
        for key, value in patch.items():
            setattr(org, key, value)
        if password is not None:
            auth_service.change_password(org, password)
    return org


def delete_organization(requested_id: int, org_id: int) -> None:
    require_self(requested_id, org_id)
    org = _load(requested_id)
    with unit_of_work():
        db.session.delete(org)
