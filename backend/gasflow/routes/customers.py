# Overview: Flask API routes for customers and their cylinder loans.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_user
from ..responses import created, paginated, parse_pagination, success
from ..services import customer_service
from ..validation import coerce_date, coerce_id, query_bool


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.post("")
@require_auth
@require_user
def create_customer_route():
    """Request body: {"customer_name", "phone_number", "address"?}"""
    data = request.get_json(silent=True) or {}
    customer = customer_service.create_customer(tenant_id=g.tenant_id, payload=data)
    return created(customer.to_dict(), "Customer created successfully")


@customers_bp.get("")
@require_auth
@require_user
def list_customers_route():
    page, limit = parse_pagination(request.args)
    rows, total = customer_service.list_customers(
        tenant_id=g.tenant_id,
        is_active=query_bool(request.args, "is_active"),
        search=request.args.get("search"),
        page=page,
        limit=limit,
    )
    return paginated([c.to_dict() for c in rows], page=page, limit=limit, total=total,
                     message="Customers retrieved successfully")


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_user
def get_customer_route(customer_id: int):
    return success(customer_service.get_customer(tenant_id=g.tenant_id, customer_id=customer_id).to_dict(),
                   "Customer retrieved successfully")


@customers_bp.put("/<int:customer_id>")
@require_auth
@require_user
def update_customer_route(customer_id: int):
    data = request.get_json(silent=True) or {}
    customer = customer_service.update_customer(tenant_id=g.tenant_id, customer_id=customer_id, payload=data)
    return success(customer.to_dict(), "Customer updated successfully")


@customers_bp.patch("/<int:customer_id>/deactivate")
@require_auth
@require_user
def deactivate_customer_route(customer_id: int):
    customer = customer_service.deactivate_customer(tenant_id=g.tenant_id, customer_id=customer_id)
    return success(customer.to_dict(), "Customer deactivated successfully")


@customers_bp.patch("/<int:customer_id>/activate")
@require_auth
@require_user
def activate_customer_route(customer_id: int):
    customer = customer_service.activate_customer(tenant_id=g.tenant_id, customer_id=customer_id)
    return success(customer.to_dict(), "Customer activated successfully")


@customers_bp.get("/<int:customer_id>/loans")
@require_auth
@require_user
def customer_loans_route(customer_id: int):
    loans = customer_service.list_loans(tenant_id=g.tenant_id, customer_id=customer_id)
    return success([loan.to_dict() for loan in loans], "Customer loans retrieved successfully")


@customers_bp.get("/<int:customer_id>/returns")
@require_auth
@require_user
def customer_loan_returns_route(customer_id: int):
    returns = customer_service.list_loan_returns(tenant_id=g.tenant_id, customer_id=customer_id)
    return success([r.to_dict() for r in returns], "Loan returns retrieved successfully")


@customers_bp.post("/<int:customer_id>/returns")
@require_auth
@require_user
def record_loan_return_route(customer_id: int):
    """
    Request body:
    {"cylinder_type_id": 1, "quantity_returned": 1, "return_date": "2024-01-20"?}
    """
    data = request.get_json(silent=True) or {}
    return_date = data.get("return_date")
    loan_return = customer_service.record_loan_return(
        tenant_id=g.tenant_id,
        customer_id=customer_id,
        cylinder_type_id=coerce_id(data.get("cylinder_type_id"), "cylinder_type_id"),
        quantity=data.get("quantity_returned"),
        return_date=coerce_date(return_date, "return_date") if return_date else None,
    )
    return created(loan_return.to_dict(), "Loan return recorded successfully")


@customers_bp.get("/<int:customer_id>/pending")
@require_auth
@require_user
def pending_returns_route(customer_id: int):
    return success(customer_service.pending_returns(tenant_id=g.tenant_id, customer_id=customer_id),
                   "Pending returns retrieved successfully")
