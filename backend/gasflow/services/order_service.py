# Overview: Service-layer operations for order intake; encapsulates business logic and database work.

"""
Order Intake

create_order records a purchase of full cylinders from a distributor plus
any empties handed back with it, as one all-or-nothing transaction:

1. distributor must belong to the tenant and be active
2. every referenced cylinder type must exist (one batch query)
3. Order + OrderItem rows, total_amount_cents frozen as sum(qty * price)
4. each return is checked against the locked empty count
5. inventory: +qty full per item, -qty empty per return; CylinderReturn rows

Any failure after step 1 rolls back every write made by the call.
Orders are immutable once created.
"""

from __future__ import annotations

from datetime import date

from flask import current_app
from sqlalchemy import func

from ..errors import InsufficientStockError, NotFoundError
from ..extensions import db
from ..models import CylinderReturn, Order, OrderItem
from ..validation import coerce_date, coerce_id, enforce_rules_delivery_person, validate_line_items
from .catalog_service import require_cylinder_types
from .concurrency import unit_of_work
from .distributor_service import get_distributor, require_active_distributor
from .inventory_service import apply_delta, lock_inventory_row


def create_order(
    *,
    tenant_id: int,
    distributor_id: int,
    order_date: date | str,
    delivery_person: str,
    items,
    returns=None,
) -> Order:
    """
    Record an order with its items and returns.

    Raises:
        ValidationError: malformed input
        NotFoundError: distributor not owned / unknown cylinder type
        InactiveError: distributor is deactivated
        InsufficientStockError: a return exceeds the empties on hand
    """
    distributor_id = coerce_id(distributor_id, "distributor_id")
    order_date = coerce_date(order_date, "order_date")
    delivery_person = enforce_rules_delivery_person(delivery_person)
    items = validate_line_items(items, field="items", positive=("quantity", "price_per_cylinder_cents"))
    returns = validate_line_items(returns, field="returns", positive=("quantity",), required=False)

    require_active_distributor(tenant_id=tenant_id, distributor_id=distributor_id)

    with unit_of_work() as session:
        cylinder_types = require_cylinder_types(
            [item["cylinder_type_id"] for item in items] + [ret["cylinder_type_id"] for ret in returns]
        )

        order = Order(
            tenant_id=tenant_id,
            distributor_id=distributor_id,
            order_date=order_date,
            delivery_person=delivery_person,
            total_amount_cents=sum(i["quantity"] * i["price_per_cylinder_cents"] for i in items),
        )
        session.add(order)
        session.flush()

        for item in items:
            session.add(OrderItem(
                order_id=order.id,
                cylinder_type_id=item["cylinder_type_id"],
                quantity=item["quantity"],
                price_per_cylinder_cents=item["price_per_cylinder_cents"],
            ))

        for ret in returns:
            cylinder_type = cylinder_types[ret["cylinder_type_id"]]
            row = lock_inventory_row(tenant_id, ret["cylinder_type_id"], create=False)
            if row is None:
                raise InsufficientStockError(
                    f"No inventory found for {cylinder_type.label}",
                    cylinder_type_id=cylinder_type.id,
                    available=0,
                    requested=ret["quantity"],
                )
            if row.empty_cylinders < ret["quantity"]:
                raise InsufficientStockError(
                    f"Insufficient empty cylinders for {cylinder_type.label}. "
                    f"Available: {row.empty_cylinders}, Requested: {ret['quantity']}",
                    cylinder_type_id=cylinder_type.id,
                    available=row.empty_cylinders,
                    requested=ret["quantity"],
                )
            apply_delta(row, empty_delta=-ret["quantity"], context="Return")
            session.add(CylinderReturn(
                tenant_id=tenant_id,
                distributor_id=distributor_id,
                order_id=order.id,
                cylinder_type_id=ret["cylinder_type_id"],
                quantity=ret["quantity"],
                return_date=order_date,
            ))

        for item in items:
            row = lock_inventory_row(tenant_id, item["cylinder_type_id"])
            apply_delta(row, full_delta=item["quantity"], context="Order")

        session.flush()

    current_app.logger.info(
        "Order created tenant=%s order=%s distributor=%s total_cents=%s",
        tenant_id, order.id, distributor_id, order.total_amount_cents,
    )
    return order


def get_order(*, tenant_id: int, order_id: int) -> Order:
    order = db.session.query(Order).filter_by(id=order_id, tenant_id=tenant_id).first()
    if order is None:
        raise NotFoundError("Order not found")
    return order


def _order_row(order: Order, item_count: int) -> dict:
    data = order.to_dict(include_items=False)
    data["item_count"] = item_count
    return data


def list_orders(
    *,
    tenant_id: int,
    distributor_id: int | None = None,
    start: date | None = None,
    end: date | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[dict], int]:
    item_count = (
        db.session.query(func.count(OrderItem.id))
        .filter(OrderItem.order_id == Order.id)
        .correlate(Order)
        .scalar_subquery()
    )
    query = db.session.query(Order, item_count).filter(Order.tenant_id == tenant_id)
    if distributor_id:
        query = query.filter(Order.distributor_id == distributor_id)
    if start:
        query = query.filter(Order.order_date >= start)
    if end:
        query = query.filter(Order.order_date <= end)

    total = query.count()
    rows = (
        query.order_by(Order.order_date.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return [_order_row(order, count) for order, count in rows], total


def list_orders_for_distributor(
    *, tenant_id: int, distributor_id: int, page: int = 1, limit: int = 10
) -> tuple[list[dict], int]:
    get_distributor(tenant_id=tenant_id, distributor_id=distributor_id)
    return list_orders(tenant_id=tenant_id, distributor_id=distributor_id, page=page, limit=limit)


def get_order_items(*, tenant_id: int, order_id: int) -> list[OrderItem]:
    return list(get_order(tenant_id=tenant_id, order_id=order_id).items)


def get_order_returns(*, tenant_id: int, order_id: int) -> list[CylinderReturn]:
    return list(get_order(tenant_id=tenant_id, order_id=order_id).returns)


def get_order_summary(*, tenant_id: int, order_id: int) -> dict:
    order = get_order(tenant_id=tenant_id, order_id=order_id)
    items = [item.to_dict() for item in order.items]
    returns = [ret.to_dict() for ret in order.returns]
    return {
        "order": order.to_dict(include_items=False),
        "items": items,
        "returns": returns,
        "summary": {
            "total_items": len(items),
            "total_cylinders": sum(i["quantity"] for i in items),
            "total_returns": sum(r["quantity"] for r in returns),
            "total_amount_cents": order.total_amount_cents,
        },
    }
