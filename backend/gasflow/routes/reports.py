# Overview: Flask API routes for reports; read-only, date ranges validated up front.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_user
from ..responses import success
from ..services import report_service
from ..time_utils import today
from ..validation import query_date


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _required_window():
    return (
        query_date(request.args, "start_date", required=True),
        query_date(request.args, "end_date", required=True),
    )


@reports_bp.get("/dashboard")
@require_auth
@require_user
def dashboard_route():
    return success(report_service.dashboard(tenant_id=g.tenant_id, today=today()),
                   "Dashboard retrieved successfully")


@reports_bp.get("/financial/profit-loss")
@require_auth
@require_user
def profit_loss_route():
    start, end = _required_window()
    return success(report_service.profit_loss(tenant_id=g.tenant_id, start=start, end=end),
                   "Profit and loss report retrieved successfully")


@reports_bp.get("/financial/revenue")
@require_auth
@require_user
def revenue_route():
    start, end = _required_window()
    return success(report_service.revenue_analysis(tenant_id=g.tenant_id, start=start, end=end),
                   "Revenue analysis retrieved successfully")


@reports_bp.get("/sales/overview")
@require_auth
@require_user
def sales_overview_route():
    start, end = _required_window()
    return success(report_service.sales_overview(tenant_id=g.tenant_id, start=start, end=end),
                   "Sales overview retrieved successfully")


@reports_bp.get("/sales/trends")
@require_auth
@require_user
def sales_trends_route():
    start, end = _required_window()
    data = report_service.sales_trends(
        tenant_id=g.tenant_id,
        period=request.args.get("period", "daily"),
        start=start,
        end=end,
    )
    return success(data, "Sales trends retrieved successfully")


@reports_bp.get("/inventory/movement")
@require_auth
@require_user
def inventory_movement_route():
    start, end = _required_window()
    return success(report_service.inventory_movement(tenant_id=g.tenant_id, start=start, end=end),
                   "Inventory movement retrieved successfully")


@reports_bp.get("/analytics/monthly")
@require_auth
@require_user
def monthly_comparison_route():
    year = request.args.get("year", today().year, type=int)
    return success(report_service.monthly_comparison(tenant_id=g.tenant_id, year=year),
                   "Monthly comparison retrieved successfully")
