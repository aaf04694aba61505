# Overview: Request authentication decorators for API routes.

from functools import wraps
from flask import request, g

from .models import ROLE_ADMIN, ROLE_USER
from .responses import error
from .services import session_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user') and hasattr(g, 'role')


def require_auth(f):
    """
    Require a valid bearer session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.role: Role claim captured at login (ADMIN / USER)
    - g.tenant_id: The retailer user id for USER sessions, None for ADMIN
    - g.session_context: The full SessionContext object
    - g.auth_token: The raw bearer token (logout revokes it)

    Returns 401 when the header is missing or the token is invalid, expired,
    idle too long, revoked, or belongs to a deactivated account.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return error("Authentication required", 401)

        token = auth_header.split(" ", 1)[1].strip()

        context = session_service.validate_session(token)

        if not context:
            return error("Invalid or expired token", 401)

        g.current_user = context.user
        g.role = context.role
        g.tenant_id = context.tenant_id
        g.session_context = context
        g.auth_token = token

        return f(*args, **kwargs)

    return decorated_function


def _require_role(role: str, message: str):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return error("Authentication required", 401)
            if g.role != role:
                return error(message, 403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_user(f):
    """Require a retailer (USER) session; g.tenant_id is then set."""
    return _require_role(ROLE_USER, "Retailer access required")(f)


def require_admin(f):
    return _require_role(ROLE_ADMIN, "Admin access required")(f)
