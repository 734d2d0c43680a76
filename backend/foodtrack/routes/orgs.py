# Overview: Flask API routes for organizations; self-scoped CRUD.

from flask import Blueprint, jsonify, g

from ..decorators import require_auth
from ..services import organization_service
from ..validation import json_body


orgs_bp = Blueprint("orgs", __name__, url_prefix="/api/orgs")


@orgs_bp.post("")
def create_org_route():
    """
    Create an organization (no token issued; use /api/auth/register to sign up).

    Request body: {"name": "...", "email": "...", "password": "..."(optional)}
    """
    data = json_body()
    org = organization_service.create_organization(data)
    return jsonify(org.to_dict()), 201


@orgs_bp.get("")
@require_auth
def list_orgs_route():
    """List organizations visible to the caller: only its own."""
    orgs = organization_service.list_organizations(g.org_id)
    return jsonify([o.to_dict() for o in orgs])


@orgs_bp.get("/<int:org_id>")
@require_auth
def get_org_route(org_id: int):
    org = organization_service.get_organization(org_id, g.org_id)
    return jsonify(org.to_dict())


@orgs_bp.put("/<int:org_id>")
@require_auth
def update_org_route(org_id: int):
    data = json_body()
    org = organization_service.update_organization(org_id, data, g.org_id)
    return jsonify(org.to_dict())


@orgs_bp.delete("/<int:org_id>")
@require_auth
def delete_org_route(org_id: int):
    organization_service.delete_organization(org_id, g.org_id)
    return "", 204
