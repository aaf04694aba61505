# Overview: Flask API routes for daily sales; parses input and returns JSON responses.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_user
from ..responses import created, paginated, parse_pagination, success
from ..services import sales_service
from ..validation import coerce_date, enforce_date_range, query_date


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _date_window():
    start = query_date(request.args, "start_date")
    end = query_date(request.args, "end_date")
    enforce_date_range(start, end)
    return start, end


@sales_bp.post("")
@require_auth
@require_user
def create_sale_route():
    """
    Request body:
    {
        "staff_id": 1,
        "sales_date": "2024-01-15",
        "items": [{"cylinder_type_id": 1, "quantity_sold": 5, "selling_price_per_cylinder_cents": 95000}],
        "empties_received": [{"cylinder_type_id": 1, "quantity_received": 4}],   // optional
        "customer_loans": [{"customer_id": 3, "cylinder_type_id": 1, "quantity_loaned": 1}]  // optional
    }
    """
    data = request.get_json(silent=True) or {}
    sale = sales_service.create_sale(
        tenant_id=g.tenant_id,
        staff_id=data.get("staff_id"),
        sales_date=data.get("sales_date"),
        items=data.get("items"),
        empties_received=data.get("empties_received"),
        customer_loans=data.get("customer_loans"),
    )
    return created(sales_service.get_sale_details(tenant_id=g.tenant_id, sales_id=sale.id),
                   "Sales recorded successfully")


@sales_bp.get("")
@require_auth
@require_user
def list_sales_route():
    page, limit = parse_pagination(request.args)
    start, end = _date_window()
    rows, total, totals = sales_service.list_sales(
        tenant_id=g.tenant_id,
        staff_id=request.args.get("staff_id", type=int),
        start=start,
        end=end,
        page=page,
        limit=limit,
    )
    return paginated(rows, page=page, limit=limit, total=total, totals=totals,
                     message="Sales retrieved successfully")


@sales_bp.get("/summary")
@require_auth
@require_user
def sales_summary_route():
    start, end = _date_window()
    return success(sales_service.get_sales_summary(tenant_id=g.tenant_id, start=start, end=end),
                   "Sales summary retrieved successfully")


@sales_bp.get("/analytics")
@require_auth
@require_user
def sales_analytics_route():
    start, end = _date_window()
    return success(sales_service.get_sales_analytics(tenant_id=g.tenant_id, start=start, end=end),
                   "Sales analytics retrieved successfully")


@sales_bp.get("/<int:sales_id>")
@require_auth
@require_user
def get_sale_route(sales_id: int):
    sale = sales_service.get_sale(tenant_id=g.tenant_id, sales_id=sales_id)
    return success(sale.to_dict(), "Sales record retrieved successfully")


@sales_bp.get("/<int:sales_id>/details")
@require_auth
@require_user
def sale_details_route(sales_id: int):
    return success(sales_service.get_sale_details(tenant_id=g.tenant_id, sales_id=sales_id),
                   "Sales details retrieved successfully")


@sales_bp.get("/staff/<int:staff_id>")
@require_auth
@require_user
def sales_for_staff_route(staff_id: int):
    page, limit = parse_pagination(request.args)
    rows, total, totals = sales_service.list_sales_for_staff(
        tenant_id=g.tenant_id, staff_id=staff_id, page=page, limit=limit
    )
    return paginated(rows, page=page, limit=limit, total=total, totals=totals,
                     message="Staff sales retrieved successfully")


@sales_bp.get("/date/<sales_date>")
@require_auth
@require_user
def sales_by_date_route(sales_date: str):
    data = sales_service.get_sales_by_date(
        tenant_id=g.tenant_id, sales_date=coerce_date(sales_date, "date")
    )
    return success(data, "Sales retrieved successfully")
