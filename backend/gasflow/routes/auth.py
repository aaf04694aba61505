# Overview: Flask API routes for login, logout and the current identity.

from flask import Blueprint, request, g

from ..decorators import require_auth
from ..responses import success
from ..services import auth_service, session_service
from ..time_utils import to_utc_z


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login():
    """
    Exchange email + password for a bearer token.

    Request body: {"email": "...", "password": "..."}
    Returns: {token, expires_at, user}
    """
    data = request.get_json(silent=True) or {}

    user = auth_service.authenticate(data.get("email"), data.get("password"))
    session, token = session_service.create_session(
        user,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )

    return success({
        "token": token,
        "expires_at": to_utc_z(session.expires_at),
        "user": user.to_dict(),
    }, "Login successful")


@auth_bp.post("/logout")
@require_auth
def logout():
    session_service.revoke_session(g.auth_token)
    return success(None, "Logged out")


@auth_bp.get("/me")
@require_auth
def me():
    return success(g.current_user.to_dict(), "Current user retrieved")
