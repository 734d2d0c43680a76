# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, g

from .services import session_service


def require_auth(f):
    """
    Require a valid bearer token and establish tenant context.

    Sets the following Flask g attributes:
    - g.org_id: The authenticated organization ID (tenant context)
    - g.access_token: The AccessToken row backing this request

    Raises Unauthorized (401) if the Authorization header is missing or the
    token is unknown, revoked or expired. The reason is logged, never returned.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = session_service.extract_bearer_token(request.headers.get("Authorization"))
        row = session_service.resolve_access_token(token)

        g.org_id = row.org_id
        g.access_token = row

        return f(*args, **kwargs)

    return decorated_function
