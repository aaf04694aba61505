# Overview: Flask API routes for retailer account management; ADMIN sessions only.

"""
Admin Routes

Admins register retailer (USER) accounts, toggle them, reset their
passwords, and can browse distributors and staff across every retailer.
"""

from flask import Blueprint, request

from ..decorators import require_admin, require_auth
from ..models import ROLE_USER
from ..responses import created, paginated, parse_pagination, success
from ..services import auth_service, distributor_service, staff_service


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.post("/users")
@require_auth
@require_admin
def register_user_route():
    """
    Register a retailer account.

    Request body: {"name", "email", "password", "mobile_number"?}
    """
    data = request.get_json(silent=True) or {}
    user = auth_service.create_user(
        name=data.get("name"),
        email=data.get("email"),
        password=data.get("password"),
        mobile_number=data.get("mobile_number"),
        role=ROLE_USER,
    )
    return created(user.to_dict(), "User registered successfully")


@admin_bp.get("/users")
@require_auth
@require_admin
def list_users_route():
    page, limit = parse_pagination(request.args)
    users, total = auth_service.list_users(role=request.args.get("role"), page=page, limit=limit)
    return paginated([u.to_dict() for u in users], page=page, limit=limit, total=total,
                     message="Users retrieved successfully")


@admin_bp.get("/users/<int:user_id>")
@require_auth
@require_admin
def get_user_route(user_id: int):
    return success(auth_service.get_user(user_id).to_dict(), "User retrieved successfully")


@admin_bp.patch("/users/<int:user_id>/deactivate")
@require_auth
@require_admin
def deactivate_user_route(user_id: int):
    user = auth_service.set_user_active(user_id, False)
    return success(user.to_dict(), "User deactivated successfully")


@admin_bp.patch("/users/<int:user_id>/activate")
@require_auth
@require_admin
def activate_user_route(user_id: int):
    user = auth_service.set_user_active(user_id, True)
    return success(user.to_dict(), "User activated successfully")


@admin_bp.post("/users/<int:user_id>/reset-password")
@require_auth
@require_admin
def reset_password_route(user_id: int):
    data = request.get_json(silent=True) or {}
    user = auth_service.reset_password(user_id, data.get("new_password"))
    return success(user.to_dict(), "Password reset successfully")


@admin_bp.get("/distributors")
@require_auth
@require_admin
def list_all_distributors_route():
    page, limit = parse_pagination(request.args)
    rows, total = distributor_service.list_all_distributors(page=page, limit=limit)
    return paginated([d.to_dict() for d in rows], page=page, limit=limit, total=total,
                     message="Distributors retrieved successfully")


@admin_bp.get("/staff")
@require_auth
@require_admin
def list_all_staff_route():
    return success([s.to_dict() for s in staff_service.list_all_staff()], "Staff retrieved successfully")
