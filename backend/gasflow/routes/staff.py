# Overview: Flask API routes for staff; parses input and returns JSON responses.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_user
from ..responses import created, success
from ..services import staff_service
from ..validation import query_bool


staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


@staff_bp.post("")
@require_auth
@require_user
def create_staff_route():
    """Request body: {"staff_name": "...", "mobile_number": "9876543210"}"""
    data = request.get_json(silent=True) or {}
    staff = staff_service.create_staff(tenant_id=g.tenant_id, payload=data)
    return created(staff.to_dict(), "Staff member created successfully")


@staff_bp.get("")
@require_auth
@require_user
def list_staff_route():
    rows = staff_service.list_staff(
        tenant_id=g.tenant_id,
        active_only=bool(query_bool(request.args, "active_only", False)),
    )
    return success([s.to_dict() for s in rows], "Staff retrieved successfully")


@staff_bp.get("/top-performers")
@require_auth
@require_user
def top_performers_route():
    limit = max(1, min(request.args.get("limit", 5, type=int), 50))
    return success(staff_service.top_performers(tenant_id=g.tenant_id, limit=limit),
                   "Top performers retrieved successfully")


@staff_bp.get("/<int:staff_id>")
@require_auth
@require_user
def get_staff_route(staff_id: int):
    return success(staff_service.get_staff(tenant_id=g.tenant_id, staff_id=staff_id).to_dict(),
                   "Staff member retrieved successfully")


@staff_bp.put("/<int:staff_id>")
@require_auth
@require_user
def update_staff_route(staff_id: int):
    data = request.get_json(silent=True) or {}
    staff = staff_service.update_staff(tenant_id=g.tenant_id, staff_id=staff_id, payload=data)
    return success(staff.to_dict(), "Staff member updated successfully")


@staff_bp.patch("/<int:staff_id>/deactivate")
@require_auth
@require_user
def deactivate_staff_route(staff_id: int):
    staff = staff_service.deactivate_staff(tenant_id=g.tenant_id, staff_id=staff_id)
    return success(staff.to_dict(), "Staff member deactivated successfully")


@staff_bp.patch("/<int:staff_id>/activate")
@require_auth
@require_user
def activate_staff_route(staff_id: int):
    staff = staff_service.activate_staff(tenant_id=g.tenant_id, staff_id=staff_id)
    return success(staff.to_dict(), "Staff member activated successfully")


@staff_bp.get("/<int:staff_id>/performance")
@require_auth
@require_user
def staff_performance_route(staff_id: int):
    return success(staff_service.staff_performance(tenant_id=g.tenant_id, staff_id=staff_id),
                   "Staff performance retrieved successfully")


@staff_bp.get("/<int:staff_id>/summary")
@require_auth
@require_user
def staff_summary_route(staff_id: int):
    return success(staff_service.staff_summary(tenant_id=g.tenant_id, staff_id=staff_id),
                   "Staff summary retrieved successfully")
