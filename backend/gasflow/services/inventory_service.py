# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/gasflow/services/inventory_service.py

"""
GasFlow Inventory Invariants (authoritative)

Inventory model:
- One Inventory row per (tenant, cylinder type) holds running full/empty counts.
- Rows are created lazily, with a zero baseline, by the first adjustment,
  order or sale that touches the pair.
- Writers: adjustments and opening stock (this module), order intake and
  sales recording (through lock_inventory_row + apply_delta). Everything
  else only reads.

Business invariants:
- full_cylinders and empty_cylinders are never negative. Every write checks
  the locked row first; a failing check raises InsufficientStockError and the
  surrounding unit of work rolls back, so nothing is partially applied.
- Every inventory change that is not an order or a sale writes exactly one
  InventoryAdjustment row in the same transaction (opening stock included).
- Opening stock is a one-time baseline: refused once any row exists.

Concurrency:
- Rows are read with SELECT ... FOR UPDATE before check-then-write.
- The unique (tenant_id, cylinder_type_id) key makes concurrent lazy inserts
  fail loudly (IntegrityError) instead of producing duplicate rows.
"""

from __future__ import annotations

from datetime import date, datetime

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import AlreadyInitializedError, InsufficientStockError, ValidationError
from ..extensions import db
from ..models import (
    CylinderReturn,
    CylinderType,
    DailySales,
    EmptyReceivedOnSale,
    Inventory,
    InventoryAdjustment,
    Order,
    OrderItem,
    SalesItem,
    User,
)
from ..time_utils import today, utcnow, to_iso_date, to_utc_z
from ..validation import MAX_INT32, coerce_integer, enforce_rules_adjustment, validate_opening_stock_items
from .catalog_service import get_cylinder_type, require_cylinder_types
from .concurrency import lock_for_update, unit_of_work


OPENING_STOCK_REASON = "Opening Stock"


def _low_stock_threshold(threshold: int | None) -> int:
    if threshold is None:
        return current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    return threshold


# ---------------------------------------------------------------------------
# Ledger primitives (run inside the caller's unit of work)
# ---------------------------------------------------------------------------

def lock_inventory_row(tenant_id: int, cylinder_type_id: int, *, create: bool = True) -> Inventory | None:
    """
    Fetch the (tenant, type) row under a row lock.

    With create=True a missing row is inserted with a zero baseline and
    flushed so later checks in the same transaction see it.
    """
    query = db.session.query(Inventory).filter_by(
        tenant_id=tenant_id,
        cylinder_type_id=cylinder_type_id,
    )
    row = lock_for_update(query).first()
    if row is None and create:
        row = Inventory(
            tenant_id=tenant_id,
            cylinder_type_id=cylinder_type_id,
            full_cylinders=0,
            empty_cylinders=0,
            last_updated=utcnow(),
        )
        db.session.add(row)
        db.session.flush()
    return row


def apply_delta(row: Inventory, *, full_delta: int = 0, empty_delta: int = 0, context: str = "Adjustment") -> Inventory:
    """
    Apply signed deltas to a locked row, refusing any negative result.

    Raises InsufficientStockError before touching the row.
    """
    new_full = row.full_cylinders + full_delta
    new_empty = row.empty_cylinders + empty_delta

    if new_full < 0:
        raise InsufficientStockError(
            f"{context} would result in negative full cylinders for "
            f"{row.cylinder_type.label} (current: {row.full_cylinders}, change: {full_delta})",
            cylinder_type_id=row.cylinder_type_id,
            available=row.full_cylinders,
            requested=-full_delta,
        )
    if new_empty < 0:
        raise InsufficientStockError(
            f"{context} would result in negative empty cylinders for "
            f"{row.cylinder_type.label} (current: {row.empty_cylinders}, change: {empty_delta})",
            cylinder_type_id=row.cylinder_type_id,
            available=row.empty_cylinders,
            requested=-empty_delta,
        )
    if new_full > MAX_INT32 or new_empty > MAX_INT32:
        raise ValidationError(
            f"{context} would exceed the storable cylinder count for {row.cylinder_type.label}"
        )

    row.full_cylinders = new_full
    row.empty_cylinders = new_empty
    row.last_updated = utcnow()
    return row


# ---------------------------------------------------------------------------
# Writers
# ---------------------------------------------------------------------------

def adjust(
    *,
    tenant_id: int,
    cylinder_type_id: int,
    full_delta: int = 0,
    empty_delta: int = 0,
    reason: str,
    adjustment_date: date | None = None,
) -> InventoryAdjustment:
    """
    Manually correct inventory for one cylinder type.

    Both resulting counts must stay >= 0, otherwise InsufficientStockError and
    no effect. On success the inventory row and exactly one audit row are
    written in one transaction.
    """
    full_delta = coerce_integer(full_delta, "full_cylinder_change")
    empty_delta = coerce_integer(empty_delta, "empty_cylinder_change")
    reason = enforce_rules_adjustment(
        full_cylinder_change=full_delta,
        empty_cylinder_change=empty_delta,
        reason=reason,
    )
    adjustment_date = adjustment_date or today()

    with unit_of_work() as session:
        get_cylinder_type(cylinder_type_id)

        row = lock_inventory_row(tenant_id, cylinder_type_id)
        apply_delta(row, full_delta=full_delta, empty_delta=empty_delta)

        adjustment = InventoryAdjustment(
            tenant_id=tenant_id,
            cylinder_type_id=cylinder_type_id,
            full_cylinder_change=full_delta,
            empty_cylinder_change=empty_delta,
            reason=reason,
            adjustment_date=adjustment_date,
        )
        session.add(adjustment)
        session.flush()

    current_app.logger.info(
        "Inventory adjusted tenant=%s type=%s full=%+d empty=%+d",
        tenant_id, cylinder_type_id, full_delta, empty_delta,
    )
    return adjustment


def opening_stock(*, tenant_id: int, items, opening_date: date | None = None) -> list[Inventory]:
    """
    One-time inventory baseline for a tenant.

    Fails with AlreadyInitializedError if the tenant has any inventory row.
    The check runs under a lock on the tenant's user row, so concurrent
    calls for the same tenant are serialized. Creates one Inventory row plus
    one paired InventoryAdjustment per item, all-or-nothing.
    """
    items = validate_opening_stock_items(items)
    opening_date = opening_date or today()

    try:
        with unit_of_work() as session:
            lock_for_update(session.query(User).filter_by(id=tenant_id)).first()
            already = session.query(Inventory.id).filter_by(tenant_id=tenant_id).first()
            if already is not None:
                raise AlreadyInitializedError("Opening stock already set. Use adjustments to modify inventory.")

            require_cylinder_types(item["cylinder_type_id"] for item in items)

            rows = []
            now = utcnow()
            for item in items:
                row = Inventory(
                    tenant_id=tenant_id,
                    cylinder_type_id=item["cylinder_type_id"],
                    full_cylinders=item["full_cylinders"],
                    empty_cylinders=item["empty_cylinders"],
                    last_updated=now,
                )
                session.add(row)
                session.add(InventoryAdjustment(
                    tenant_id=tenant_id,
                    cylinder_type_id=item["cylinder_type_id"],
                    full_cylinder_change=item["full_cylinders"],
                    empty_cylinder_change=item["empty_cylinders"],
                    reason=OPENING_STOCK_REASON,
                    adjustment_date=opening_date,
                ))
                rows.append(row)
            session.flush()
    except IntegrityError as exc:
        # A concurrent writer created a row for this tenant first
        raise AlreadyInitializedError(
            "Opening stock already set. Use adjustments to modify inventory."
        ) from exc

    current_app.logger.info("Opening stock set tenant=%s types=%d", tenant_id, len(rows))
    return rows


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_balance(*, tenant_id: int, cylinder_type_id: int) -> dict:
    """Current {full, empty} for the pair; {0, 0} when no row exists."""
    row = db.session.query(Inventory).filter_by(
        tenant_id=tenant_id,
        cylinder_type_id=cylinder_type_id,
    ).first()
    if row is None:
        return {"full": 0, "empty": 0}
    return {"full": row.full_cylinders, "empty": row.empty_cylinders}


def has_inventory(tenant_id: int) -> bool:
    return db.session.query(Inventory.id).filter_by(tenant_id=tenant_id).first() is not None


def list_inventory(
    *,
    tenant_id: int,
    cylinder_type_id: int | None = None,
    company: str | None = None,
    low_stock: bool = False,
    threshold: int | None = None,
) -> list[Inventory]:
    query = (
        db.session.query(Inventory)
        .join(CylinderType, CylinderType.id == Inventory.cylinder_type_id)
        .filter(Inventory.tenant_id == tenant_id)
    )
    if cylinder_type_id:
        query = query.filter(Inventory.cylinder_type_id == cylinder_type_id)
    if company:
        query = query.filter(CylinderType.company == company)
    if low_stock:
        query = query.filter(Inventory.full_cylinders < _low_stock_threshold(threshold))
    return query.order_by(CylinderType.company, CylinderType.category, CylinderType.weight_kg).all()


def get_summary(*, tenant_id: int, threshold: int | None = None) -> dict:
    threshold = _low_stock_threshold(threshold)
    rows = list_inventory(tenant_id=tenant_id)

    total_full = sum(r.full_cylinders for r in rows)
    total_empty = sum(r.empty_cylinders for r in rows)

    by_company: dict[str, dict] = {}
    for r in rows:
        bucket = by_company.setdefault(r.cylinder_type.company, {"full": 0, "empty": 0, "total": 0})
        bucket["full"] += r.full_cylinders
        bucket["empty"] += r.empty_cylinders
        bucket["total"] += r.full_cylinders + r.empty_cylinders

    low_stock_items = [
        {"cylinder_type": r.cylinder_type.to_dict(), "full_cylinders": r.full_cylinders}
        for r in rows
        if r.full_cylinders < threshold
    ]

    return {
        "summary": {
            "total_full": total_full,
            "total_empty": total_empty,
            "total_cylinders": total_full + total_empty,
        },
        "by_company": by_company,
        "low_stock_count": len(low_stock_items),
        "low_stock_items": low_stock_items,
    }


def get_by_cylinder_type(*, tenant_id: int, cylinder_type_id: int) -> dict:
    """Inventory view for one type; zero counts when untouched, NotFoundError for unknown types."""
    cylinder_type = get_cylinder_type(cylinder_type_id)
    row = db.session.query(Inventory).filter_by(
        tenant_id=tenant_id,
        cylinder_type_id=cylinder_type_id,
    ).first()
    if row is None:
        return {
            "id": None,
            "cylinder_type_id": cylinder_type.id,
            "cylinder_type": cylinder_type.to_dict(),
            "full_cylinders": 0,
            "empty_cylinders": 0,
            "total_cylinders": 0,
            "last_updated": None,
        }
    return row.to_dict()


def list_adjustments(
    *,
    tenant_id: int,
    cylinder_type_id: int | None = None,
    start: date | None = None,
    end: date | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[InventoryAdjustment], int]:
    query = db.session.query(InventoryAdjustment).filter(InventoryAdjustment.tenant_id == tenant_id)
    if cylinder_type_id:
        query = query.filter(InventoryAdjustment.cylinder_type_id == cylinder_type_id)
    if start:
        query = query.filter(InventoryAdjustment.adjustment_date >= start)
    if end:
        query = query.filter(InventoryAdjustment.adjustment_date <= end)

    total = query.count()
    rows = (
        query.order_by(InventoryAdjustment.adjustment_date.desc(), InventoryAdjustment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def get_low_stock(*, tenant_id: int, threshold: int | None = None) -> list[dict]:
    threshold = _low_stock_threshold(threshold)
    if threshold < 0:
        raise ValidationError("threshold cannot be negative", errors={"threshold": "cannot be negative"})
    rows = (
        db.session.query(Inventory)
        .filter(Inventory.tenant_id == tenant_id, Inventory.full_cylinders < threshold)
        .order_by(Inventory.full_cylinders.asc(), Inventory.id.asc())
        .all()
    )
    return [
        {
            "cylinder_type": r.cylinder_type.to_dict(),
            "full_cylinders": r.full_cylinders,
            "empty_cylinders": r.empty_cylinders,
            "threshold": threshold,
            "stock_level": "out_of_stock" if r.full_cylinders == 0 else "low_stock",
        }
        for r in rows
    ]


def collect_movements(
    *,
    tenant_id: int,
    cylinder_type_id: int | None = None,
    start: date | None = None,
    end: date | None = None,
    limit: int | None = 50,
) -> list[dict]:
    """
    Every inventory movement as one stream, newest first.

    Sources: adjustments (both counts), order items (+full), returns to
    distributors (-empty), sales items (-full) and empties received on
    sales (+empty).
    """
    if limit is not None and limit < 1:
        raise ValidationError("limit must be >= 1", errors={"limit": "must be >= 1"})

    def _window(query, date_column, type_column):
        if cylinder_type_id:
            query = query.filter(type_column == cylinder_type_id)
        if start:
            query = query.filter(date_column >= start)
        if end:
            query = query.filter(date_column <= end)
        return query

    movements: list[dict] = []

    adjustments = _window(
        db.session.query(InventoryAdjustment).filter(InventoryAdjustment.tenant_id == tenant_id),
        InventoryAdjustment.adjustment_date,
        InventoryAdjustment.cylinder_type_id,
    ).all()
    for adj in adjustments:
        movements.append({
            "type": "adjustment",
            "date": adj.adjustment_date,
            "cylinder_type": adj.cylinder_type.to_dict(),
            "full_change": adj.full_cylinder_change,
            "empty_change": adj.empty_cylinder_change,
            "description": adj.reason,
            "reference_id": adj.id,
            "created_at": adj.created_at,
        })

    order_items = _window(
        db.session.query(OrderItem).join(Order, Order.id == OrderItem.order_id).filter(Order.tenant_id == tenant_id),
        Order.order_date,
        OrderItem.cylinder_type_id,
    ).all()
    for item in order_items:
        movements.append({
            "type": "order",
            "date": item.order.order_date,
            "cylinder_type": item.cylinder_type.to_dict(),
            "full_change": item.quantity,
            "empty_change": 0,
            "description": f"Order from {item.order.distributor.distributor_name}",
            "reference_id": item.order_id,
            "created_at": item.order.created_at,
        })

    returns = _window(
        db.session.query(CylinderReturn).filter(CylinderReturn.tenant_id == tenant_id),
        CylinderReturn.return_date,
        CylinderReturn.cylinder_type_id,
    ).all()
    for ret in returns:
        movements.append({
            "type": "return",
            "date": ret.return_date,
            "cylinder_type": ret.cylinder_type.to_dict(),
            "full_change": 0,
            "empty_change": -ret.quantity,
            "description": "Empties returned to distributor",
            "reference_id": ret.order_id,
            "created_at": ret.created_at,
        })

    sales_items = _window(
        db.session.query(SalesItem).join(DailySales, DailySales.id == SalesItem.sales_id)
        .filter(DailySales.tenant_id == tenant_id),
        DailySales.sales_date,
        SalesItem.cylinder_type_id,
    ).all()
    for item in sales_items:
        movements.append({
            "type": "sale",
            "date": item.sale.sales_date,
            "cylinder_type": item.cylinder_type.to_dict(),
            "full_change": -item.quantity_sold,
            "empty_change": 0,
            "description": f"Sale by {item.sale.staff.staff_name}",
            "reference_id": item.sales_id,
            "created_at": item.sale.created_at,
        })

    empties = _window(
        db.session.query(EmptyReceivedOnSale).join(DailySales, DailySales.id == EmptyReceivedOnSale.sales_id)
        .filter(DailySales.tenant_id == tenant_id),
        DailySales.sales_date,
        EmptyReceivedOnSale.cylinder_type_id,
    ).all()
    for empty in empties:
        movements.append({
            "type": "empty_received",
            "date": empty.sale.sales_date,
            "cylinder_type": empty.cylinder_type.to_dict(),
            "full_change": 0,
            "empty_change": empty.quantity_received,
            "description": f"Empties received on sale by {empty.sale.staff.staff_name}",
            "reference_id": empty.sales_id,
            "created_at": empty.sale.created_at,
        })

    movements.sort(key=lambda m: (m["date"], m["created_at"] or datetime.min), reverse=True)
    if limit is not None:
        movements = movements[:limit]

    for m in movements:
        m["date"] = to_iso_date(m["date"])
        m["created_at"] = to_utc_z(m["created_at"])
    return movements


def latest_purchase_price_cents(
    *, tenant_id: int, cylinder_type_id: int, as_of: date | None = None
) -> int:
    """
    Price paid on the most recent order of this type (on or before as_of).

    Returns 0 when the type was never ordered.
    """
    query = (
        db.session.query(OrderItem.price_per_cylinder_cents)
        .join(Order, Order.id == OrderItem.order_id)
        .filter(Order.tenant_id == tenant_id, OrderItem.cylinder_type_id == cylinder_type_id)
    )
    if as_of is not None:
        query = query.filter(Order.order_date <= as_of)
    row = query.order_by(Order.order_date.desc(), Order.id.desc(), OrderItem.id.desc()).first()
    return int(row[0]) if row else 0


def get_valuation(*, tenant_id: int) -> dict:
    items = []
    for row in list_inventory(tenant_id=tenant_id):
        price = latest_purchase_price_cents(tenant_id=tenant_id, cylinder_type_id=row.cylinder_type_id)
        items.append({
            "cylinder_type": row.cylinder_type.to_dict(),
            "full_cylinders": row.full_cylinders,
            "empty_cylinders": row.empty_cylinders,
            "price_per_cylinder_cents": price,
            "full_value_cents": row.full_cylinders * price,
        })
    return {
        "items": items,
        "total_value_cents": sum(i["full_value_cents"] for i in items),
    }


def get_totals(*, tenant_id: int) -> dict:
    full, empty = db.session.query(
        func.coalesce(func.sum(Inventory.full_cylinders), 0),
        func.coalesce(func.sum(Inventory.empty_cylinders), 0),
    ).filter(Inventory.tenant_id == tenant_id).one()
    return {"total_full": int(full), "total_empty": int(empty)}
