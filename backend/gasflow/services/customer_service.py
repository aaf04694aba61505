# Overview: Service-layer operations for customers and their cylinder loans.

"""
Customer Loan Ledger

Loans are written by sales recording; this module owns customers, the loan
history and loan returns. The pending balance per (customer, cylinder type)
is sum(loaned) - sum(returned), computed at read time.

Returns can never exceed the pending balance: record_loan_return rejects an
over-return instead of letting the balance go negative. The customer row is
locked while the balance is checked so concurrent returns serialize.
"""

from __future__ import annotations

from datetime import date

from flask import current_app
from sqlalchemy import func

from ..errors import ConflictError, InactiveError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, CustomerCylinderLoan, CylinderType, LoanCylinderReturn
from ..time_utils import today
from ..validation import CUSTOMER_POLICY, coerce_quantity, enforce_rules_customer, validate_payload
from .catalog_service import get_cylinder_type
from .concurrency import lock_for_update, unit_of_work


def _duplicate(tenant_id: int, name: str, phone: str, *, exclude_id: int | None = None) -> bool:
    query = db.session.query(Customer.id).filter(
        Customer.tenant_id == tenant_id,
        Customer.customer_name == name,
        Customer.phone_number == phone,
    )
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    return query.first() is not None


def create_customer(*, tenant_id: int, payload: dict) -> Customer:
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
    enforce_rules_customer(patch)

    if _duplicate(tenant_id, patch["customer_name"], patch["phone_number"]):
        raise ConflictError("Customer with this name and phone number already exists")

    with unit_of_work() as session:
        customer = Customer(tenant_id=tenant_id, is_active=True, **patch)
        session.add(customer)
        session.flush()
    return customer


def get_customer(*, tenant_id: int, customer_id: int) -> Customer:
    customer = db.session.query(Customer).filter_by(id=customer_id, tenant_id=tenant_id).first()
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


def require_customers(*, tenant_id: int, customer_ids) -> dict[int, Customer]:
    """Batch ownership check; every id must belong to the tenant and be active."""
    wanted = list(dict.fromkeys(customer_ids))
    if not wanted:
        return {}
    rows = db.session.query(Customer).filter(
        Customer.tenant_id == tenant_id,
        Customer.id.in_(wanted),
    ).all()
    found = {row.id: row for row in rows}
    if len(found) != len(wanted):
        raise NotFoundError("One or more customers not found")
    inactive = [cid for cid in wanted if not found[cid].is_active]
    if inactive:
        raise InactiveError(f"Customer {found[inactive[0]].customer_name} is deactivated")
    return found


def list_customers(
    *,
    tenant_id: int,
    is_active: bool | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Customer], int]:
    query = db.session.query(Customer).filter(Customer.tenant_id == tenant_id)
    if is_active is not None:
        query = query.filter(Customer.is_active.is_(is_active))
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(db.or_(Customer.customer_name.ilike(term), Customer.phone_number.ilike(term)))

    total = query.count()
    rows = (
        query.order_by(Customer.created_at.desc(), Customer.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def update_customer(*, tenant_id: int, customer_id: int, payload: dict) -> Customer:
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
    enforce_rules_customer(patch)

    customer = get_customer(tenant_id=tenant_id, customer_id=customer_id)

    name = patch.get("customer_name", customer.customer_name)
    phone = patch.get("phone_number", customer.phone_number)
    if (name, phone) != (customer.customer_name, customer.phone_number):
        if _duplicate(tenant_id, name, phone, exclude_id=customer.id):
            raise ConflictError("Another customer with this name and phone number already exists")

    with unit_of_work():
        for key, value in patch.items():
            setattr(customer, key, value)
    return customer


def deactivate_customer(*, tenant_id: int, customer_id: int) -> Customer:
    customer = get_customer(tenant_id=tenant_id, customer_id=customer_id)
    if not customer.is_active:
        raise ValidationError("Customer is already deactivated")
    with unit_of_work():
        customer.is_active = False
    return customer


def activate_customer(*, tenant_id: int, customer_id: int) -> Customer:
    customer = get_customer(tenant_id=tenant_id, customer_id=customer_id)
    if customer.is_active:
        raise ValidationError("Customer is already active")
    with unit_of_work():
        customer.is_active = True
    return customer


def list_loans(*, tenant_id: int, customer_id: int) -> list[CustomerCylinderLoan]:
    get_customer(tenant_id=tenant_id, customer_id=customer_id)
    return (
        db.session.query(CustomerCylinderLoan)
        .filter_by(tenant_id=tenant_id, customer_id=customer_id)
        .order_by(CustomerCylinderLoan.loan_date.desc(), CustomerCylinderLoan.id.desc())
        .all()
    )


def list_loan_returns(*, tenant_id: int, customer_id: int) -> list[LoanCylinderReturn]:
    get_customer(tenant_id=tenant_id, customer_id=customer_id)
    return (
        db.session.query(LoanCylinderReturn)
        .filter_by(tenant_id=tenant_id, customer_id=customer_id)
        .order_by(LoanCylinderReturn.return_date.desc(), LoanCylinderReturn.id.desc())
        .all()
    )


def _loan_totals(tenant_id: int, customer_id: int) -> tuple[dict, dict]:
    loaned = dict(
        db.session.query(CustomerCylinderLoan.cylinder_type_id, func.sum(CustomerCylinderLoan.quantity_loaned))
        .filter(CustomerCylinderLoan.tenant_id == tenant_id, CustomerCylinderLoan.customer_id == customer_id)
        .group_by(CustomerCylinderLoan.cylinder_type_id)
        .all()
    )
    returned = dict(
        db.session.query(LoanCylinderReturn.cylinder_type_id, func.sum(LoanCylinderReturn.quantity_returned))
        .filter(LoanCylinderReturn.tenant_id == tenant_id, LoanCylinderReturn.customer_id == customer_id)
        .group_by(LoanCylinderReturn.cylinder_type_id)
        .all()
    )
    return loaned, returned


def pending_returns(*, tenant_id: int, customer_id: int) -> list[dict]:
    """Per cylinder type loaned minus returned; only positive balances are listed."""
    get_customer(tenant_id=tenant_id, customer_id=customer_id)
    loaned, returned = _loan_totals(tenant_id, customer_id)

    pending = []
    for cylinder_type_id in sorted(loaned):
        total_loaned = int(loaned[cylinder_type_id] or 0)
        total_returned = int(returned.get(cylinder_type_id) or 0)
        if total_loaned - total_returned <= 0:
            continue
        pending.append({
            "cylinder_type": db.session.get(CylinderType, cylinder_type_id).to_dict(),
            "total_loaned": total_loaned,
            "total_returned": total_returned,
            "pending_return": total_loaned - total_returned,
        })
    return pending


def record_loan_return(
    *,
    tenant_id: int,
    customer_id: int,
    cylinder_type_id: int,
    quantity: int,
    return_date: date | None = None,
) -> LoanCylinderReturn:
    """
    Record cylinders a customer brought back against their loans.

    Rejects quantities above the current pending balance for that type.
    Loan returns do not move inventory, mirroring loans.
    """
    quantity = coerce_quantity(quantity, "quantity_returned")

    with unit_of_work() as session:
        customer = lock_for_update(
            session.query(Customer).filter_by(id=customer_id, tenant_id=tenant_id)
        ).first()
        if customer is None:
            raise NotFoundError("Customer not found")
        cylinder_type = get_cylinder_type(cylinder_type_id)

        loaned, returned = _loan_totals(tenant_id, customer_id)
        outstanding = int(loaned.get(cylinder_type_id) or 0) - int(returned.get(cylinder_type_id) or 0)
        if quantity > outstanding:
            raise ValidationError(
                f"Return exceeds pending loan balance for {cylinder_type.label} "
                f"(pending: {outstanding}, returned: {quantity})",
                errors={"quantity_returned": f"cannot exceed pending balance of {outstanding}"},
            )

        loan_return = LoanCylinderReturn(
            tenant_id=tenant_id,
            customer_id=customer_id,
            cylinder_type_id=cylinder_type_id,
            quantity_returned=quantity,
            return_date=return_date or today(),
        )
        session.add(loan_return)
        session.flush()

    current_app.logger.info(
        "Loan return recorded tenant=%s customer=%s type=%s qty=%d",
        tenant_id, customer_id, cylinder_type_id, quantity,
    )
    return loan_return
