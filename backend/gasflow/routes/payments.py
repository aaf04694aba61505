# Overview: Flask API routes for distributor payments; parses input and returns JSON responses.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_user
from ..responses import created, paginated, parse_pagination, success
from ..services import payment_service
from ..validation import enforce_date_range, query_date


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.post("")
@require_auth
@require_user
def create_payment_route():
    """
    Request body:
    {
        "distributor_id": 1,
        "amount_paid_cents": 500000,
        "payment_date": "2024-01-20",
        "payment_method": "UPI",
        "transaction_reference": "UTR123"   // optional
    }
    """
    data = request.get_json(silent=True) or {}
    payment = payment_service.create_payment(tenant_id=g.tenant_id, payload=data)
    return created(payment.to_dict(), "Payment recorded successfully")


@payments_bp.get("")
@require_auth
@require_user
def list_payments_route():
    page, limit = parse_pagination(request.args)
    start = query_date(request.args, "start_date")
    end = query_date(request.args, "end_date")
    enforce_date_range(start, end)
    rows, total = payment_service.list_payments(
        tenant_id=g.tenant_id,
        distributor_id=request.args.get("distributor_id", type=int),
        payment_method=request.args.get("payment_method"),
        start=start,
        end=end,
        page=page,
        limit=limit,
    )
    return paginated([p.to_dict() for p in rows], page=page, limit=limit, total=total,
                     message="Payments retrieved successfully")


@payments_bp.get("/summary")
@require_auth
@require_user
def payment_summary_route():
    start = query_date(request.args, "start_date")
    end = query_date(request.args, "end_date")
    enforce_date_range(start, end)
    return success(payment_service.payment_summary(tenant_id=g.tenant_id, start=start, end=end),
                   "Payment summary retrieved successfully")


@payments_bp.get("/<int:payment_id>")
@require_auth
@require_user
def get_payment_route(payment_id: int):
    payment = payment_service.get_payment(tenant_id=g.tenant_id, payment_id=payment_id)
    return success(payment.to_dict(), "Payment retrieved successfully")


@payments_bp.put("/<int:payment_id>")
@require_auth
@require_user
def update_payment_route(payment_id: int):
    data = request.get_json(silent=True) or {}
    payment = payment_service.update_payment(tenant_id=g.tenant_id, payment_id=payment_id, payload=data)
    return success(payment.to_dict(), "Payment updated successfully")


@payments_bp.delete("/<int:payment_id>")
@require_auth
@require_user
def delete_payment_route(payment_id: int):
    payment_service.delete_payment(tenant_id=g.tenant_id, payment_id=payment_id)
    return success(None, "Payment deleted successfully")


@payments_bp.get("/distributor/<int:distributor_id>")
@require_auth
@require_user
def payments_for_distributor_route(distributor_id: int):
    page, limit = parse_pagination(request.args)
    rows, total = payment_service.list_payments_for_distributor(
        tenant_id=g.tenant_id, distributor_id=distributor_id, page=page, limit=limit
    )
    return paginated([p.to_dict() for p in rows], page=page, limit=limit, total=total,
                     message="Payments retrieved successfully")
