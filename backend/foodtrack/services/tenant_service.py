"""
Multi-Tenant Service: Tenant Validation and Scoping Helpers

Every request is scoped to one organization (g.org_id after @require_auth),
and cross-tenant access is denied.

SECURITY INVARIANTS:
1. Every authenticated request has g.org_id set
2. Ids referenced from client input (ingredients, employees) are validated
   against g.org_id before anything is written
3. Every entity query filters by org_id
4. Cross-tenant attempts are logged

USAGE:
    from foodtrack.services.tenant_service import require_ids_in_org

    ingredients = require_ids_in_org(Ingredient, [1, 2], g.org_id, "ingredient")
"""

from __future__ import annotations

import logging

from flask import has_request_context, request

from ..errors import Forbidden, ValidationError
from ..extensions import db

logger = logging.getLogger(__name__)


def require_self(requested_org_id: int, org_id: int) -> None:
    """
    Organizations may only act on themselves.

    Checked before any query runs.
    """
    if requested_org_id != org_id:
        _log_cross_tenant_attempt(
            f"Organization {org_id} requested organization {requested_org_id}",
            org_id=org_id,
        )
        raise Forbidden("Access denied")


def scoped_query(model, org_id: int):
    """
    Base query for a model restricted to one organization.

    Usage:
        recipes = scoped_query(Recipe, g.org_id).order_by(Recipe.id).all()
    """
    return db.session.query(model).filter(model.org_id == org_id)


def require_ids_in_org(model, ids: list[int], org_id: int, label: str) -> list:
    """
    Load every referenced row and verify it belongs to the organization.

    A missing id and an id owned by another organization are reported the
    same way, so callers cannot discover other tenants' rows.

    Returns rows in the order of `ids`.

    Raises:
        ValidationError if any id is missing or cross-tenant
    """
    if not ids:
        return []

    rows = scoped_query(model, org_id).filter(model.id.in_(ids)).all()
    by_id = {row.id: row for row in rows}
    missing = [i for i in ids if i not in by_id]

    if missing:
        _log_cross_tenant_attempt(
            f"{label} ids not found in organization {org_id}: {missing}",
            org_id=org_id,
        )
        raise ValidationError(
            f"Unknown {label} id(s): {', '.join(str(i) for i in missing)}"
        )

    return [by_id[i] for i in ids]


def _log_cross_tenant_attempt(reason: str, org_id: int | None = None) -> None:
    path = request.path if has_request_context() else None
    method = request.method if has_request_context() else None
    logger.warning(
        "Tenant scope violation org_id=%s %s %s: %s",
        org_id, method, path, reason,
    )
