# Overview: Service-layer operations for distributors; encapsulates business logic and database work.

"""
Distributor Service

Distributors are tenant-scoped and soft-deactivated, never deleted.
A deactivated distributor keeps its history but cannot take new orders or
payments.

Balances are derived at read time from orders, payments and returns; no
running total is stored, so they can never go stale:
- financial balance = sum(order totals) - sum(payments)
- cylinder balance  = sum(full received per type) - sum(empties returned per type)
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import func

from ..errors import ConflictError, InactiveError, NotFoundError, ValidationError
from ..extensions import db
from ..models import CylinderReturn, CylinderType, Distributor, Order, OrderItem, Payment
from ..validation import (
    DISTRIBUTOR_POLICY,
    enforce_rules_distributor,
    validate_payload,
)
from .concurrency import unit_of_work


def _duplicate_name(tenant_id: int, name: str, *, exclude_id: int | None = None) -> bool:
    query = db.session.query(Distributor.id).filter(
        Distributor.tenant_id == tenant_id,
        Distributor.distributor_name == name,
    )
    if exclude_id is not None:
        query = query.filter(Distributor.id != exclude_id)
    return query.first() is not None


def create_distributor(*, tenant_id: int, payload: dict) -> Distributor:
    """
    Create a distributor.

    Raises:
        ValidationError: malformed payload
        ConflictError: tenant already has a distributor with this name
    """
    patch = validate_payload(model=Distributor, payload=payload, policy=DISTRIBUTOR_POLICY, partial=False)
    enforce_rules_distributor(patch)

    if _duplicate_name(tenant_id, patch["distributor_name"]):
        raise ConflictError("You already have a distributor with this name")

    with unit_of_work() as session:
        distributor = Distributor(tenant_id=tenant_id, is_active=True, **patch)
        session.add(distributor)
        session.flush()

    current_app.logger.info("Distributor created tenant=%s id=%s", tenant_id, distributor.id)
    return distributor


def get_distributor(*, tenant_id: int, distributor_id: int) -> Distributor:
    """Fetch an owned distributor; other tenants' rows read as not found."""
    distributor = db.session.query(Distributor).filter_by(id=distributor_id, tenant_id=tenant_id).first()
    if distributor is None:
        raise NotFoundError("Distributor not found")
    return distributor


def require_active_distributor(*, tenant_id: int, distributor_id: int) -> Distributor:
    distributor = get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)
    if not distributor.is_active:
        raise InactiveError("Distributor is deactivated")
    return distributor


def list_distributors(
    *,
    tenant_id: int,
    include_inactive: bool = True,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Distributor], int]:
    query = db.session.query(Distributor).filter(Distributor.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(Distributor.is_active.is_(True))
    if search:
        query = query.filter(Distributor.distributor_name.ilike(f"%{search.strip()}%"))

    total = query.count()
    rows = (
        query.order_by(Distributor.created_at.desc(), Distributor.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def list_all_distributors(*, page: int = 1, limit: int = 10) -> tuple[list[Distributor], int]:
    """Admin view across every tenant."""
    query = db.session.query(Distributor)
    total = query.count()
    rows = query.order_by(Distributor.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def update_distributor(*, tenant_id: int, distributor_id: int, payload: dict) -> Distributor:
    patch = validate_payload(model=Distributor, payload=payload, policy=DISTRIBUTOR_POLICY, partial=True)
    enforce_rules_distributor(patch)

    distributor = get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)

    name = patch.get("distributor_name")
    if name and name != distributor.distributor_name:
        if _duplicate_name(tenant_id, name, exclude_id=distributor.id):
            raise ConflictError("You already have a distributor with this name")

    with unit_of_work():
        for key, value in patch.items():
            setattr(distributor, key, value)

    return distributor


def deactivate_distributor(*, tenant_id: int, distributor_id: int) -> Distributor:
    distributor = get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)
    if not distributor.is_active:
        raise ValidationError("Distributor is already deactivated")
    with unit_of_work():
        distributor.is_active = False
    current_app.logger.info("Distributor deactivated tenant=%s id=%s", tenant_id, distributor_id)
    return distributor


def activate_distributor(*, tenant_id: int, distributor_id: int) -> Distributor:
    distributor = get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)
    if distributor.is_active:
        raise ValidationError("Distributor is already active")
    with unit_of_work():
        distributor.is_active = True
    return distributor


def _status_for(balance: int) -> str:
    if balance > 0:
        return "owed"
    if balance < 0:
        return "credit"
    return "settled"


def compute_financial_balance(tenant_id: int, distributor_id: int) -> dict:
    """Aggregate balance without the ownership check (callers have done it)."""
    total_orders = db.session.query(
        func.coalesce(func.sum(Order.total_amount_cents), 0)
    ).filter(Order.tenant_id == tenant_id, Order.distributor_id == distributor_id).scalar()

    total_paid = db.session.query(
        func.coalesce(func.sum(Payment.amount_paid_cents), 0)
    ).filter(Payment.tenant_id == tenant_id, Payment.distributor_id == distributor_id).scalar()

    balance = int(total_orders) - int(total_paid)
    return {
        "total_orders_cents": int(total_orders),
        "total_paid_cents": int(total_paid),
        "balance_cents": balance,
        "status": _status_for(balance),
    }


def financial_balance(*, tenant_id: int, distributor_id: int) -> dict:
    """Money owed to the distributor: sum(order totals) - sum(payments)."""
    get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)
    return compute_financial_balance(tenant_id, distributor_id)


def cylinder_balance(*, tenant_id: int, distributor_id: int) -> dict:
    """
    Per cylinder type: full cylinders received minus empties returned.

    A type appears only when either side is nonzero.
    """
    get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)

    received = dict(
        db.session.query(OrderItem.cylinder_type_id, func.sum(OrderItem.quantity))
        .join(Order, Order.id == OrderItem.order_id)
        .filter(Order.tenant_id == tenant_id, Order.distributor_id == distributor_id)
        .group_by(OrderItem.cylinder_type_id)
        .all()
    )
    returned = dict(
        db.session.query(CylinderReturn.cylinder_type_id, func.sum(CylinderReturn.quantity))
        .filter(CylinderReturn.tenant_id == tenant_id, CylinderReturn.distributor_id == distributor_id)
        .group_by(CylinderReturn.cylinder_type_id)
        .all()
    )

    balances = []
    for cylinder_type in db.session.query(CylinderType).order_by(CylinderType.id).all():
        full_received = int(received.get(cylinder_type.id) or 0)
        empty_returned = int(returned.get(cylinder_type.id) or 0)
        if full_received == 0 and empty_returned == 0:
            continue
        balances.append({
            "cylinder_type": cylinder_type.to_dict(),
            "full_received": full_received,
            "empty_returned": empty_returned,
            "pending_return": full_received - empty_returned,
        })

    return {
        "cylinder_balances": balances,
        "summary": {"total_pending_return": sum(b["pending_return"] for b in balances)},
    }


def distributor_summary(*, tenant_id: int, distributor_id: int) -> dict:
    distributor = get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)

    order_count = db.session.query(func.count(Order.id)).filter(
        Order.tenant_id == tenant_id, Order.distributor_id == distributor_id
    ).scalar()
    payment_count = db.session.query(func.count(Payment.id)).filter(
        Payment.tenant_id == tenant_id, Payment.distributor_id == distributor_id
    ).scalar()
    return_count = db.session.query(func.count(CylinderReturn.id)).filter(
        CylinderReturn.tenant_id == tenant_id, CylinderReturn.distributor_id == distributor_id
    ).scalar()

    return {
        "distributor": distributor.to_dict(),
        "financial_balance": compute_financial_balance(tenant_id, distributor_id),
        "cylinder_balance": cylinder_balance(tenant_id=tenant_id, distributor_id=distributor_id),
        "stats": {
            "total_orders": order_count,
            "total_payments": payment_count,
            "total_returns": return_count,
        },
    }
