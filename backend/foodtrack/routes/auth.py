# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- POST /api/auth/register: create organization + first token (201)
- POST /api/auth/login: email/password -> token (200, 401 on bad credentials)
- POST /api/auth/logout: revoke the bearer token (idempotent)
- POST /api/auth/validate: check a token and return its organization
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth
from ..errors import ValidationError
from ..services import auth_service
from ..services import session_service
from ..time_utils import to_utc_z
from ..validation import json_body


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Register an organization.

    Request body: {"name": "...", "email": "...", "password": "..."}
    Returns: {"token": "...", "organization": {...}}
    """
    data = json_body()
    org, token = auth_service.register_organization(data)
    return jsonify({"token": token, "organization": org.to_dict()}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate an organization and issue a new token.

    The token must be sent as `Authorization: Bearer <token>` on protected
    routes. Valid for 7 days unless revoked by logout.
    """
    data = json_body()
    org, token = auth_service.login(data)
    current_app.logger.info("Organization %s logged in", org.id)
    return jsonify({"token": token, "organization": org.to_dict()}), 200


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>

    Logging out an already revoked or unknown token still succeeds.
    """
    token = session_service.extract_bearer_token(request.headers.get("Authorization"))
    if not token:
        raise ValidationError("No authentication token provided")

    session_service.revoke_token(token)
    return jsonify({"message": "Logged out successfully"}), 200


@auth_bp.post("/validate")
@require_auth
def validate_route():
    """Confirm the bearer token is live and return the organization it belongs to."""
    row = g.access_token
    return jsonify({
        "organization": row.organization.to_dict(),
        "expires_at": to_utc_z(row.expires_at),
        "message": "Token valid",
    }), 200
