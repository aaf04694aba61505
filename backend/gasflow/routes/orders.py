# Overview: Flask API routes for distributor orders; parses input and returns JSON responses.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_user
from ..responses import created, paginated, parse_pagination, success
from ..services import order_service
from ..validation import enforce_date_range, query_date


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("")
@require_auth
@require_user
def create_order_route():
    """
    Request body:
    {
        "distributor_id": 1,
        "order_date": "2024-01-15",
        "delivery_person": "Ravi",
        "items": [{"cylinder_type_id": 1, "quantity": 10, "price_per_cylinder_cents": 85000}],
        "returns": [{"cylinder_type_id": 1, "quantity": 4}]    // optional
    }
    """
    data = request.get_json(silent=True) or {}
    order = order_service.create_order(
        tenant_id=g.tenant_id,
        distributor_id=data.get("distributor_id"),
        order_date=data.get("order_date"),
        delivery_person=data.get("delivery_person"),
        items=data.get("items"),
        returns=data.get("returns"),
    )
    return created(order.to_dict(), "Order created successfully")


@orders_bp.get("")
@require_auth
@require_user
def list_orders_route():
    page, limit = parse_pagination(request.args)
    start = query_date(request.args, "start_date")
    end = query_date(request.args, "end_date")
    enforce_date_range(start, end)
    rows, total = order_service.list_orders(
        tenant_id=g.tenant_id,
        distributor_id=request.args.get("distributor_id", type=int),
        start=start,
        end=end,
        page=page,
        limit=limit,
    )
    return paginated(rows, page=page, limit=limit, total=total, message="Orders retrieved successfully")


@orders_bp.get("/distributor/<int:distributor_id>")
@require_auth
@require_user
def orders_for_distributor_route(distributor_id: int):
    page, limit = parse_pagination(request.args)
    rows, total = order_service.list_orders_for_distributor(
        tenant_id=g.tenant_id, distributor_id=distributor_id, page=page, limit=limit
    )
    return paginated(rows, page=page, limit=limit, total=total, message="Orders retrieved successfully")


@orders_bp.get("/<int:order_id>")
@require_auth
@require_user
def get_order_route(order_id: int):
    order = order_service.get_order(tenant_id=g.tenant_id, order_id=order_id)
    return success(order.to_dict(), "Order retrieved successfully")


@orders_bp.get("/<int:order_id>/items")
@require_auth
@require_user
def order_items_route(order_id: int):
    items = order_service.get_order_items(tenant_id=g.tenant_id, order_id=order_id)
    return success([i.to_dict() for i in items], "Order items retrieved successfully")


@orders_bp.get("/<int:order_id>/returns")
@require_auth
@require_user
def order_returns_route(order_id: int):
    returns = order_service.get_order_returns(tenant_id=g.tenant_id, order_id=order_id)
    return success([r.to_dict() for r in returns], "Order returns retrieved successfully")


@orders_bp.get("/<int:order_id>/summary")
@require_auth
@require_user
def order_summary_route(order_id: int):
    return success(order_service.get_order_summary(tenant_id=g.tenant_id, order_id=order_id),
                   "Order summary retrieved successfully")
