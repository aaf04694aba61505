# Overview: Flask API routes for inventory; parses input and returns JSON responses.

"""
Inventory Routes

Reads are open to any retailer session. Writes are limited to the one-time
opening stock and manual adjustments; orders and sales move stock through
their own endpoints.
"""

from flask import Blueprint, request, g

from ..decorators import require_auth, require_user
from ..responses import created, paginated, parse_pagination, success
from ..services import inventory_service
from ..validation import coerce_date, coerce_id, query_bool, query_date


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@require_auth
@require_user
def list_inventory_route():
    """
    Query parameters:
    - cylinder_type_id, company: filters
    - low_stock=true with optional threshold
    """
    rows = inventory_service.list_inventory(
        tenant_id=g.tenant_id,
        cylinder_type_id=request.args.get("cylinder_type_id", type=int),
        company=request.args.get("company"),
        low_stock=bool(query_bool(request.args, "low_stock", False)),
        threshold=request.args.get("threshold", type=int),
    )
    return success([r.to_dict() for r in rows], "Inventory retrieved successfully")


@inventory_bp.get("/summary")
@require_auth
@require_user
def inventory_summary_route():
    data = inventory_service.get_summary(
        tenant_id=g.tenant_id,
        threshold=request.args.get("threshold", type=int),
    )
    return success(data, "Inventory summary retrieved successfully")


@inventory_bp.get("/low-stock")
@require_auth
@require_user
def low_stock_route():
    data = inventory_service.get_low_stock(
        tenant_id=g.tenant_id,
        threshold=request.args.get("threshold", type=int),
    )
    return success(data, "Low stock items retrieved successfully")


@inventory_bp.get("/movements")
@require_auth
@require_user
def movements_route():
    data = inventory_service.collect_movements(
        tenant_id=g.tenant_id,
        cylinder_type_id=request.args.get("cylinder_type_id", type=int),
        start=query_date(request.args, "start_date"),
        end=query_date(request.args, "end_date"),
        limit=request.args.get("limit", 50, type=int),
    )
    return success(data, "Inventory movements retrieved successfully")


@inventory_bp.get("/valuation")
@require_auth
@require_user
def valuation_route():
    return success(inventory_service.get_valuation(tenant_id=g.tenant_id),
                   "Inventory valuation retrieved successfully")


@inventory_bp.get("/cylinder-type/<int:cylinder_type_id>")
@require_auth
@require_user
def by_cylinder_type_route(cylinder_type_id: int):
    data = inventory_service.get_by_cylinder_type(tenant_id=g.tenant_id, cylinder_type_id=cylinder_type_id)
    return success(data, "Inventory retrieved successfully")


@inventory_bp.post("/opening-stock")
@require_auth
@require_user
def opening_stock_route():
    """
    Request body:
    {
        "items": [{"cylinder_type_id": 1, "full_cylinders": 20, "empty_cylinders": 5}],
        "opening_date": "2024-01-01"   // optional
    }
    """
    data = request.get_json(silent=True) or {}
    opening_date = data.get("opening_date")
    rows = inventory_service.opening_stock(
        tenant_id=g.tenant_id,
        items=data.get("items"),
        opening_date=coerce_date(opening_date, "opening_date") if opening_date else None,
    )
    return created([r.to_dict() for r in rows], "Opening stock set successfully")


@inventory_bp.post("/adjustment")
@require_auth
@require_user
def adjustment_route():
    """
    Request body:
    {
        "cylinder_type_id": 1,
        "full_cylinder_change": -2,
        "empty_cylinder_change": 0,
        "reason": "Damaged in transit",
        "adjustment_date": "2024-01-05"   // optional
    }
    """
    data = request.get_json(silent=True) or {}
    adjustment_date = data.get("adjustment_date")
    adjustment = inventory_service.adjust(
        tenant_id=g.tenant_id,
        cylinder_type_id=coerce_id(data.get("cylinder_type_id"), "cylinder_type_id"),
        full_delta=data.get("full_cylinder_change", 0),
        empty_delta=data.get("empty_cylinder_change", 0),
        reason=data.get("reason"),
        adjustment_date=coerce_date(adjustment_date, "adjustment_date") if adjustment_date else None,
    )
    balance = inventory_service.get_balance(tenant_id=g.tenant_id, cylinder_type_id=adjustment.cylinder_type_id)
    return created({"adjustment": adjustment.to_dict(), "inventory": balance},
                   "Inventory adjusted successfully")


@inventory_bp.get("/adjustments")
@require_auth
@require_user
def list_adjustments_route():
    page, limit = parse_pagination(request.args)
    rows, total = inventory_service.list_adjustments(
        tenant_id=g.tenant_id,
        cylinder_type_id=request.args.get("cylinder_type_id", type=int),
        start=query_date(request.args, "start_date"),
        end=query_date(request.args, "end_date"),
        page=page,
        limit=limit,
    )
    return paginated([a.to_dict() for a in rows], page=page, limit=limit, total=total,
                     message="Adjustments retrieved successfully")
