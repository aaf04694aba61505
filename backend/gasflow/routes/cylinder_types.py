# Overview: Flask API routes for the cylinder catalog (read-only reference data).

from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import success
from ..services import catalog_service


cylinder_types_bp = Blueprint("cylinder_types", __name__, url_prefix="/api/cylinder-types")


@cylinder_types_bp.get("")
@require_auth
def list_cylinder_types_route():
    rows = catalog_service.list_cylinder_types(
        company=request.args.get("company"),
        category=request.args.get("category"),
    )
    return success([ct.to_dict() for ct in rows], "Cylinder types retrieved successfully")


@cylinder_types_bp.get("/<int:cylinder_type_id>")
@require_auth
def get_cylinder_type_route(cylinder_type_id: int):
    return success(catalog_service.get_cylinder_type(cylinder_type_id).to_dict(),
                   "Cylinder type retrieved successfully")
