# Overview: Service-layer operations for distributor payments; encapsulates business logic and database work.

"""
Payment Service

Payments reduce what the tenant owes a distributor. Unlike orders they are
mutable: a recorded payment can be corrected (update) or voided (delete),
and the distributor's financial balance follows automatically because it
is aggregated at read time.
"""

from __future__ import annotations

from datetime import date

from flask import current_app
from sqlalchemy import func

from ..errors import NotFoundError
from ..extensions import db
from ..models import Distributor, Order, Payment
from ..time_utils import to_iso_date
from ..validation import (
    PAYMENT_POLICY,
    PAYMENT_UPDATE_POLICY,
    enforce_rules_payment,
    validate_payload,
)
from .concurrency import unit_of_work
from .distributor_service import compute_financial_balance, get_distributor, require_active_distributor


def create_payment(*, tenant_id: int, payload: dict) -> Payment:
    """
    Record a payment to an owned, active distributor.

    Raises:
        ValidationError: malformed payload / unknown payment method
        NotFoundError: distributor not owned
        InactiveError: distributor is deactivated
    """
    patch = validate_payload(model=Payment, payload=payload, policy=PAYMENT_POLICY, partial=False)
    enforce_rules_payment(patch)

    require_active_distributor(tenant_id=tenant_id, distributor_id=patch["distributor_id"])

    with unit_of_work() as session:
        payment = Payment(tenant_id=tenant_id, **patch)
        session.add(payment)
        session.flush()

    current_app.logger.info(
        "Payment recorded tenant=%s payment=%s distributor=%s amount_cents=%s",
        tenant_id, payment.id, payment.distributor_id, payment.amount_paid_cents,
    )
    return payment


def get_payment(*, tenant_id: int, payment_id: int) -> Payment:
    payment = db.session.query(Payment).filter_by(id=payment_id, tenant_id=tenant_id).first()
    if payment is None:
        raise NotFoundError("Payment not found")
    return payment


def list_payments(
    *,
    tenant_id: int,
    distributor_id: int | None = None,
    payment_method: str | None = None,
    start: date | None = None,
    end: date | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Payment], int]:
    query = db.session.query(Payment).filter(Payment.tenant_id == tenant_id)
    if distributor_id:
        query = query.filter(Payment.distributor_id == distributor_id)
    if payment_method:
        query = query.filter(Payment.payment_method == payment_method)
    if start:
        query = query.filter(Payment.payment_date >= start)
    if end:
        query = query.filter(Payment.payment_date <= end)

    total = query.count()
    rows = (
        query.order_by(Payment.payment_date.desc(), Payment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def list_payments_for_distributor(
    *, tenant_id: int, distributor_id: int, page: int = 1, limit: int = 10
) -> tuple[list[Payment], int]:
    get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)
    return list_payments(tenant_id=tenant_id, distributor_id=distributor_id, page=page, limit=limit)


def update_payment(*, tenant_id: int, payment_id: int, payload: dict) -> Payment:
    patch = validate_payload(model=Payment, payload=payload, policy=PAYMENT_UPDATE_POLICY, partial=True)
    enforce_rules_payment(patch)

    payment = get_payment(tenant_id=tenant_id, payment_id=payment_id)
    with unit_of_work():
        for key, value in patch.items():
            setattr(payment, key, value)

    current_app.logger.info("Payment updated tenant=%s payment=%s", tenant_id, payment_id)
    return payment


def delete_payment(*, tenant_id: int, payment_id: int) -> None:
    payment = get_payment(tenant_id=tenant_id, payment_id=payment_id)
    with unit_of_work() as session:
        session.delete(payment)
    current_app.logger.info("Payment voided tenant=%s payment=%s", tenant_id, payment_id)


def payment_summary(*, tenant_id: int, start: date | None = None, end: date | None = None) -> dict:
    def _window(query):
        query = query.filter(Payment.tenant_id == tenant_id)
        if start:
            query = query.filter(Payment.payment_date >= start)
        if end:
            query = query.filter(Payment.payment_date <= end)
        return query

    amount, count = _window(
        db.session.query(func.coalesce(func.sum(Payment.amount_paid_cents), 0), func.count(Payment.id))
    ).one()

    by_method = _window(
        db.session.query(Payment.payment_method, func.sum(Payment.amount_paid_cents), func.count(Payment.id))
    ).group_by(Payment.payment_method).order_by(Payment.payment_method).all()

    amount_col = func.sum(Payment.amount_paid_cents)
    by_distributor = _window(
        db.session.query(Distributor.id, Distributor.distributor_name, amount_col, func.count(Payment.id))
        .join(Distributor, Distributor.id == Payment.distributor_id)
    ).group_by(Distributor.id, Distributor.distributor_name).order_by(amount_col.desc()).limit(10).all()

    return {
        "total": {"amount_cents": int(amount), "count": int(count)},
        "by_method": [
            {"method": method, "amount_cents": int(total or 0), "count": int(n)}
            for method, total, n in by_method
        ],
        "by_distributor": [
            {"distributor_id": did, "distributor_name": name, "amount_cents": int(total or 0), "count": int(n)}
            for did, name, total, n in by_distributor
        ],
    }


def distributor_payment_summary(*, tenant_id: int, distributor_id: int) -> dict:
    distributor = get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)

    payment_count = db.session.query(func.count(Payment.id)).filter(
        Payment.tenant_id == tenant_id, Payment.distributor_id == distributor_id
    ).scalar()
    order_count = db.session.query(func.count(Order.id)).filter(
        Order.tenant_id == tenant_id, Order.distributor_id == distributor_id
    ).scalar()
    last_payment = (
        db.session.query(Payment)
        .filter(Payment.tenant_id == tenant_id, Payment.distributor_id == distributor_id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
        .first()
    )
    balance = compute_financial_balance(tenant_id, distributor_id)

    return {
        "distributor": {
            "id": distributor.id,
            "distributor_name": distributor.distributor_name,
            "contact_number": distributor.contact_number,
        },
        "payments": {
            "total_cents": balance["total_paid_cents"],
            "count": int(payment_count),
            "last": {
                "amount_cents": last_payment.amount_paid_cents,
                "date": to_iso_date(last_payment.payment_date),
                "method": last_payment.payment_method,
            } if last_payment else None,
        },
        "orders": {
            "total_cents": balance["total_orders_cents"],
            "count": int(order_count),
        },
        "balance": {
            "amount_cents": balance["balance_cents"],
            "status": balance["status"],
        },
    }
