# Overview: Flask API routes for distributors; parses input and returns JSON responses.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_user
from ..responses import created, paginated, parse_pagination, success
from ..services import distributor_service, payment_service
from ..validation import query_bool


distributors_bp = Blueprint("distributors", __name__, url_prefix="/api/distributors")


@distributors_bp.post("")
@require_auth
@require_user
def create_distributor_route():
    """
    Request body:
    {
        "distributor_name": "Sharma Gas Agency",
        "contact_number": "9876543210",
        "address": "12 Market Road"
    }
    """
    data = request.get_json(silent=True) or {}
    distributor = distributor_service.create_distributor(tenant_id=g.tenant_id, payload=data)
    return created(distributor.to_dict(), "Distributor created successfully")


@distributors_bp.get("")
@require_auth
@require_user
def list_distributors_route():
    """
    Query parameters:
    - include_inactive: default true
    - search: substring of the distributor name
    - page, limit
    """
    page, limit = parse_pagination(request.args)
    rows, total = distributor_service.list_distributors(
        tenant_id=g.tenant_id,
        include_inactive=bool(query_bool(request.args, "include_inactive", True)),
        search=request.args.get("search"),
        page=page,
        limit=limit,
    )
    return paginated([d.to_dict() for d in rows], page=page, limit=limit, total=total,
                     message="Distributors retrieved successfully")


@distributors_bp.get("/<int:distributor_id>")
@require_auth
@require_user
def get_distributor_route(distributor_id: int):
    distributor = distributor_service.get_distributor(tenant_id=g.tenant_id, distributor_id=distributor_id)
    return success(distributor.to_dict(), "Distributor retrieved successfully")


@distributors_bp.put("/<int:distributor_id>")
@require_auth
@require_user
def update_distributor_route(distributor_id: int):
    data = request.get_json(silent=True) or {}
    distributor = distributor_service.update_distributor(
        tenant_id=g.tenant_id, distributor_id=distributor_id, payload=data
    )
    return success(distributor.to_dict(), "Distributor updated successfully")


@distributors_bp.patch("/<int:distributor_id>/deactivate")
@require_auth
@require_user
def deactivate_distributor_route(distributor_id: int):
    distributor = distributor_service.deactivate_distributor(tenant_id=g.tenant_id, distributor_id=distributor_id)
    return success(distributor.to_dict(), "Distributor deactivated successfully")


@distributors_bp.patch("/<int:distributor_id>/activate")
@require_auth
@require_user
def activate_distributor_route(distributor_id: int):
    distributor = distributor_service.activate_distributor(tenant_id=g.tenant_id, distributor_id=distributor_id)
    return success(distributor.to_dict(), "Distributor activated successfully")


@distributors_bp.get("/<int:distributor_id>/balance/financial")
@require_auth
@require_user
def financial_balance_route(distributor_id: int):
    data = distributor_service.financial_balance(tenant_id=g.tenant_id, distributor_id=distributor_id)
    return success(data, "Financial balance retrieved successfully")


@distributors_bp.get("/<int:distributor_id>/balance/cylinders")
@require_auth
@require_user
def cylinder_balance_route(distributor_id: int):
    data = distributor_service.cylinder_balance(tenant_id=g.tenant_id, distributor_id=distributor_id)
    return success(data, "Cylinder balance retrieved successfully")


@distributors_bp.get("/<int:distributor_id>/summary")
@require_auth
@require_user
def distributor_summary_route(distributor_id: int):
    data = distributor_service.distributor_summary(tenant_id=g.tenant_id, distributor_id=distributor_id)
    return success(data, "Distributor summary retrieved successfully")


@distributors_bp.get("/<int:distributor_id>/payments/summary")
@require_auth
@require_user
def distributor_payment_summary_route(distributor_id: int):
    data = payment_service.distributor_payment_summary(tenant_id=g.tenant_id, distributor_id=distributor_id)
    return success(data, "Distributor payment summary retrieved successfully")
