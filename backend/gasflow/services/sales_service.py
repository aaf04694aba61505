# Overview: Service-layer operations for sales recording; encapsulates business logic and database work.

"""
Sales Recording

create_sale records one staff member's sales for a day, as one
all-or-nothing transaction:

1. staff must belong to the tenant and be active
2. every cylinder type (items, empties, loans) must exist; every loan
   customer must belong to the tenant
3. each item is checked against the locked full count
4. DailySales + SalesItem rows; -qty full per item
5. EmptyReceivedOnSale rows; +qty empty per entry (row created lazily)
6. CustomerCylinderLoan rows, which do not touch inventory

Money is integer minor units throughout.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date

from flask import current_app
from sqlalchemy import func

from ..errors import InsufficientStockError, NotFoundError
from ..extensions import db
from ..models import CustomerCylinderLoan, DailySales, EmptyReceivedOnSale, SalesItem, Staff
from ..time_utils import to_iso_date
from ..validation import coerce_date, coerce_id, validate_line_items
from .catalog_service import require_cylinder_types
from .concurrency import unit_of_work
from .customer_service import require_customers
from .inventory_service import apply_delta, lock_inventory_row
from .staff_service import get_staff, require_active_staff


def create_sale(
    *,
    tenant_id: int,
    staff_id: int,
    sales_date: date | str,
    items,
    empties_received=None,
    customer_loans=None,
) -> DailySales:
    """
    Record a day's sales for one staff member.

    Raises:
        ValidationError: malformed input
        NotFoundError: staff/customer not owned, unknown cylinder type
        InactiveError: staff member (or loan customer) is deactivated
        InsufficientStockError: an item exceeds the full cylinders on hand
    """
    staff_id = coerce_id(staff_id, "staff_id")
    sales_date = coerce_date(sales_date, "sales_date")
    items = validate_line_items(
        items, field="items", positive=("quantity_sold", "selling_price_per_cylinder_cents")
    )
    empties_received = validate_line_items(
        empties_received, field="empties_received", positive=("quantity_received",), required=False
    )
    customer_loans = validate_line_items(
        customer_loans,
        field="customer_loans",
        positive=("quantity_loaned",),
        ids=("customer_id", "cylinder_type_id"),
        required=False,
    )

    require_active_staff(tenant_id=tenant_id, staff_id=staff_id)

    with unit_of_work() as session:
        cylinder_types = require_cylinder_types(
            [i["cylinder_type_id"] for i in items]
            + [e["cylinder_type_id"] for e in empties_received]
            + [loan["cylinder_type_id"] for loan in customer_loans]
        )
        if customer_loans:
            require_customers(tenant_id=tenant_id, customer_ids=[loan["customer_id"] for loan in customer_loans])

        sale = DailySales(tenant_id=tenant_id, staff_id=staff_id, sales_date=sales_date)
        session.add(sale)
        session.flush()

        for item in items:
            cylinder_type = cylinder_types[item["cylinder_type_id"]]
            row = lock_inventory_row(tenant_id, item["cylinder_type_id"], create=False)
            if row is None:
                raise InsufficientStockError(
                    f"No inventory found for {cylinder_type.label}",
                    cylinder_type_id=cylinder_type.id,
                    available=0,
                    requested=item["quantity_sold"],
                )
            if row.full_cylinders < item["quantity_sold"]:
                raise InsufficientStockError(
                    f"Insufficient stock for {cylinder_type.label}. "
                    f"Available: {row.full_cylinders}, Requested: {item['quantity_sold']}",
                    cylinder_type_id=cylinder_type.id,
                    available=row.full_cylinders,
                    requested=item["quantity_sold"],
                )
            apply_delta(row, full_delta=-item["quantity_sold"], context="Sale")
            session.add(SalesItem(
                sales_id=sale.id,
                cylinder_type_id=item["cylinder_type_id"],
                quantity_sold=item["quantity_sold"],
                selling_price_per_cylinder_cents=item["selling_price_per_cylinder_cents"],
            ))

        for empty in empties_received:
            row = lock_inventory_row(tenant_id, empty["cylinder_type_id"])
            apply_delta(row, empty_delta=empty["quantity_received"], context="Sale")
            session.add(EmptyReceivedOnSale(
                sales_id=sale.id,
                cylinder_type_id=empty["cylinder_type_id"],
                quantity_received=empty["quantity_received"],
            ))

        for loan in customer_loans:
            session.add(CustomerCylinderLoan(
                tenant_id=tenant_id,
                customer_id=loan["customer_id"],
                sales_id=sale.id,
                cylinder_type_id=loan["cylinder_type_id"],
                quantity_loaned=loan["quantity_loaned"],
                loan_date=sales_date,
            ))

        session.flush()

    current_app.logger.info(
        "Sale recorded tenant=%s sale=%s staff=%s items=%d empties=%d loans=%d",
        tenant_id, sale.id, staff_id, len(items), len(empties_received), len(customer_loans),
    )
    return sale


def get_sale(*, tenant_id: int, sales_id: int) -> DailySales:
    sale = db.session.query(DailySales).filter_by(id=sales_id, tenant_id=tenant_id).first()
    if sale is None:
        raise NotFoundError("Sales record not found")
    return sale


def get_sale_details(*, tenant_id: int, sales_id: int) -> dict:
    sale = get_sale(tenant_id=tenant_id, sales_id=sales_id)
    data = sale.to_dict()
    data["customer_loans"] = [loan.to_dict() for loan in sale.customer_loans]
    return data


def _apply_filters(query, *, tenant_id, staff_id=None, start=None, end=None):
    query = query.filter(DailySales.tenant_id == tenant_id)
    if staff_id:
        query = query.filter(DailySales.staff_id == staff_id)
    if start:
        query = query.filter(DailySales.sales_date >= start)
    if end:
        query = query.filter(DailySales.sales_date <= end)
    return query


def _totals(*, tenant_id, staff_id=None, start=None, end=None) -> dict:
    revenue, cylinders = _apply_filters(
        db.session.query(
            func.coalesce(func.sum(SalesItem.quantity_sold * SalesItem.selling_price_per_cylinder_cents), 0),
            func.coalesce(func.sum(SalesItem.quantity_sold), 0),
        ).join(DailySales, DailySales.id == SalesItem.sales_id),
        tenant_id=tenant_id, staff_id=staff_id, start=start, end=end,
    ).one()
    empties = _apply_filters(
        db.session.query(func.coalesce(func.sum(EmptyReceivedOnSale.quantity_received), 0))
        .join(DailySales, DailySales.id == EmptyReceivedOnSale.sales_id),
        tenant_id=tenant_id, staff_id=staff_id, start=start, end=end,
    ).scalar()
    records = _apply_filters(
        db.session.query(func.count(DailySales.id)),
        tenant_id=tenant_id, staff_id=staff_id, start=start, end=end,
    ).scalar()
    return {
        "total_revenue_cents": int(revenue),
        "total_cylinders_sold": int(cylinders),
        "total_empties_received": int(empties),
        "sales_records": int(records),
    }


def list_sales(
    *,
    tenant_id: int,
    staff_id: int | None = None,
    start: date | None = None,
    end: date | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[dict], int, dict]:
    """Paginated sales records plus totals over the whole filtered range."""
    query = _apply_filters(db.session.query(DailySales), tenant_id=tenant_id, staff_id=staff_id, start=start, end=end)
    total = query.count()
    rows = (
        query.order_by(DailySales.sales_date.desc(), DailySales.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return [s.to_dict(include_items=False) for s in rows], total, _totals(
        tenant_id=tenant_id, staff_id=staff_id, start=start, end=end
    )


def list_sales_for_staff(
    *, tenant_id: int, staff_id: int, page: int = 1, limit: int = 10
) -> tuple[list[dict], int, dict]:
    get_staff(tenant_id=tenant_id, staff_id=staff_id)
    return list_sales(tenant_id=tenant_id, staff_id=staff_id, page=page, limit=limit)


def get_sales_by_date(*, tenant_id: int, sales_date: date) -> dict:
    sales = (
        db.session.query(DailySales)
        .join(Staff, Staff.id == DailySales.staff_id)
        .filter(DailySales.tenant_id == tenant_id, DailySales.sales_date == sales_date)
        .order_by(Staff.staff_name.asc(), DailySales.id.asc())
        .all()
    )
    return {
        "date": to_iso_date(sales_date),
        "sales": [s.to_dict() for s in sales],
        "summary": {
            "total_revenue_cents": sum(s.total_revenue_cents for s in sales),
            "total_cylinders_sold": sum(s.total_cylinders_sold for s in sales),
            "total_empties_received": sum(s.total_empties_received for s in sales),
            "sales_count": len(sales),
        },
    }


def get_sales_summary(*, tenant_id: int, start: date | None = None, end: date | None = None) -> dict:
    by_staff = _apply_filters(
        db.session.query(
            Staff.id,
            Staff.staff_name,
            func.count(func.distinct(DailySales.id)),
            func.coalesce(func.sum(SalesItem.quantity_sold * SalesItem.selling_price_per_cylinder_cents), 0),
        )
        .select_from(DailySales)
        .join(Staff, Staff.id == DailySales.staff_id)
        .outerjoin(SalesItem, SalesItem.sales_id == DailySales.id),
        tenant_id=tenant_id, start=start, end=end,
    ).group_by(Staff.id, Staff.staff_name).all()

    return {
        "total": _totals(tenant_id=tenant_id, start=start, end=end),
        "by_staff": sorted(
            (
                {
                    "staff_id": staff_id,
                    "staff_name": name,
                    "sales_count": int(count),
                    "revenue_cents": int(revenue),
                }
                for staff_id, name, count, revenue in by_staff
            ),
            key=lambda row: row["revenue_cents"],
            reverse=True,
        ),
    }


def get_sales_analytics(*, tenant_id: int, start: date | None = None, end: date | None = None) -> dict:
    items = _apply_filters(
        db.session.query(SalesItem).join(DailySales, DailySales.id == SalesItem.sales_id),
        tenant_id=tenant_id, start=start, end=end,
    ).all()

    by_type: dict[int, dict] = {}
    by_company: dict[str, dict] = defaultdict(lambda: {"quantity_sold": 0, "revenue_cents": 0})
    for item in items:
        bucket = by_type.setdefault(item.cylinder_type_id, {
            "cylinder_type": item.cylinder_type.to_dict(),
            "quantity_sold": 0,
            "revenue_cents": 0,
        })
        bucket["quantity_sold"] += item.quantity_sold
        bucket["revenue_cents"] += item.subtotal_cents

        company = by_company[item.cylinder_type.company]
        company["quantity_sold"] += item.quantity_sold
        company["revenue_cents"] += item.subtotal_cents

    type_rows = sorted(by_type.values(), key=lambda r: r["revenue_cents"], reverse=True)
    return {
        "by_cylinder_type": type_rows,
        "by_company": sorted(
            ({"company": name, **data} for name, data in by_company.items()),
            key=lambda r: r["revenue_cents"],
            reverse=True,
        ),
        "average_prices": [
            {
                "cylinder_type": row["cylinder_type"],
                "average_price_cents": round(row["revenue_cents"] / row["quantity_sold"]),
                "total_quantity": row["quantity_sold"],
            }
            for row in type_rows
            if row["quantity_sold"]
        ],
    }
