# Overview: Service-layer operations for reporting; read-only aggregation over the ledgers.

"""
Reporting Engine

Pure reads. Every report is scoped to one tenant and, where it takes a
window, to an inclusive [start, end] date range validated up front.

Cost of goods sold for a sales item is the price paid on the most recent
order of the same cylinder type on or before the sale date (0 if there
was none), the same lookup used for inventory valuation.
"""

from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import date, timedelta

from sqlalchemy import func

from ..errors import ValidationError
from ..extensions import db
from ..models import DailySales, Distributor, Staff
from ..time_utils import to_iso_date, today as current_day
from ..validation import enforce_date_range
from .distributor_service import compute_financial_balance
from .inventory_service import collect_movements, get_low_stock, get_totals, get_valuation, latest_purchase_price_cents


TREND_PERIODS = ("daily", "weekly", "monthly", "yearly")


def _sales_in_range(tenant_id: int, start: date | None, end: date | None) -> list[DailySales]:
    query = db.session.query(DailySales).filter(DailySales.tenant_id == tenant_id)
    if start:
        query = query.filter(DailySales.sales_date >= start)
    if end:
        query = query.filter(DailySales.sales_date <= end)
    return query.order_by(DailySales.sales_date.asc(), DailySales.id.asc()).all()


def _period(start: date | None, end: date | None) -> dict:
    return {"start_date": to_iso_date(start), "end_date": to_iso_date(end)}


def dashboard(*, tenant_id: int, today: date | None = None) -> dict:
    today = today or current_day()

    sales = _sales_in_range(tenant_id, today, today)

    low_stock = get_low_stock(tenant_id=tenant_id)[:5]

    outstanding = []
    distributors = (
        db.session.query(Distributor)
        .filter(Distributor.tenant_id == tenant_id, Distributor.is_active.is_(True))
        .order_by(Distributor.distributor_name.asc())
        .all()
    )
    for distributor in distributors:
        balance = compute_financial_balance(tenant_id, distributor.id)["balance_cents"]
        if balance > 0:
            outstanding.append({
                "distributor_id": distributor.id,
                "distributor_name": distributor.distributor_name,
                "balance_cents": balance,
            })

    active_staff = db.session.query(func.count(Staff.id)).filter(
        Staff.tenant_id == tenant_id, Staff.is_active.is_(True)
    ).scalar()

    totals = get_totals(tenant_id=tenant_id)

    return {
        "today": {
            "date": to_iso_date(today),
            "revenue_cents": sum(s.total_revenue_cents for s in sales),
            "cylinders_sold": sum(s.total_cylinders_sold for s in sales),
            "sales_records": len(sales),
        },
        "low_stock": {
            "count": len(low_stock),
            "items": low_stock,
        },
        "outstanding_balances": {
            "count": len(outstanding),
            "total_cents": sum(b["balance_cents"] for b in outstanding),
            "items": outstanding,
        },
        "staff": {"active_count": int(active_staff)},
        "inventory": {
            "total_value_cents": get_valuation(tenant_id=tenant_id)["total_value_cents"],
            "total_full_cylinders": totals["total_full"],
            "total_empty_cylinders": totals["total_empty"],
        },
    }


def profit_loss(*, tenant_id: int, start: date, end: date) -> dict:
    """Revenue, cost and profit per sales item over the window."""
    enforce_date_range(start, end)

    details = []
    for sale in _sales_in_range(tenant_id, start, end):
        for item in sale.items:
            cost_price = latest_purchase_price_cents(
                tenant_id=tenant_id, cylinder_type_id=item.cylinder_type_id, as_of=sale.sales_date
            )
            revenue = item.subtotal_cents
            cost = item.quantity_sold * cost_price
            details.append({
                "sales_id": sale.id,
                "sales_date": to_iso_date(sale.sales_date),
                "cylinder_type": item.cylinder_type.to_dict(),
                "quantity_sold": item.quantity_sold,
                "selling_price_cents": item.selling_price_per_cylinder_cents,
                "cost_price_cents": cost_price,
                "revenue_cents": revenue,
                "cost_cents": cost,
                "profit_cents": revenue - cost,
            })

    total_revenue = sum(d["revenue_cents"] for d in details)
    total_cost = sum(d["cost_cents"] for d in details)
    total_profit = total_revenue - total_cost
    return {
        "period": _period(start, end),
        "summary": {
            "total_revenue_cents": total_revenue,
            "total_cost_cents": total_cost,
            "total_profit_cents": total_profit,
            "profit_margin": round(total_profit / total_revenue * 100, 2) if total_revenue else 0,
        },
        "details": details,
    }


def revenue_analysis(*, tenant_id: int, start: date, end: date) -> dict:
    enforce_date_range(start, end)

    by_type: dict[int, dict] = {}
    by_staff: dict[int, dict] = {}
    total = 0
    for sale in _sales_in_range(tenant_id, start, end):
        staff_bucket = by_staff.setdefault(sale.staff_id, {
            "staff_id": sale.staff_id,
            "staff_name": sale.staff.staff_name,
            "revenue_cents": 0,
        })
        for item in sale.items:
            total += item.subtotal_cents
            staff_bucket["revenue_cents"] += item.subtotal_cents
            type_bucket = by_type.setdefault(item.cylinder_type_id, {
                "cylinder_type": item.cylinder_type.to_dict(),
                "revenue_cents": 0,
            })
            type_bucket["revenue_cents"] += item.subtotal_cents

    return {
        "period": _period(start, end),
        "total_revenue_cents": total,
        "by_cylinder_type": sorted(by_type.values(), key=lambda r: r["revenue_cents"], reverse=True),
        "by_staff": sorted(by_staff.values(), key=lambda r: r["revenue_cents"], reverse=True),
    }


def sales_overview(*, tenant_id: int, start: date, end: date) -> dict:
    enforce_date_range(start, end)

    sales = _sales_in_range(tenant_id, start, end)
    revenue = sum(s.total_revenue_cents for s in sales)
    cylinders = sum(s.total_cylinders_sold for s in sales)
    records = len(sales)

    return {
        "period": _period(start, end),
        "summary": {
            "total_sales_records": records,
            "total_revenue_cents": revenue,
            "total_cylinders_sold": cylinders,
            "average_revenue_per_record_cents": round(revenue / records) if records else 0,
            "average_cylinders_per_record": round(cylinders / records, 2) if records else 0,
        },
        "sales": [
            {
                "sales_id": s.id,
                "date": to_iso_date(s.sales_date),
                "staff_name": s.staff.staff_name,
                "revenue_cents": s.total_revenue_cents,
                "cylinders_sold": s.total_cylinders_sold,
            }
            for s in sales
        ],
    }


def trend_key(sales_date: date, period: str) -> str:
    """Bucket label for a sale date; weeks start on Sunday."""
    if period == "daily":
        return sales_date.isoformat()
    if period == "weekly":
        # date.weekday(): Monday == 0 ... Sunday == 6
        week_start = sales_date - timedelta(days=(sales_date.weekday() + 1) % 7)
        return week_start.isoformat()
    if period == "monthly":
        return f"{sales_date.year:04d}-{sales_date.month:02d}"
    return f"{sales_date.year:04d}"


def sales_trends(*, tenant_id: int, period: str, start: date, end: date) -> dict:
    if period not in TREND_PERIODS:
        raise ValidationError(
            f"period must be one of: {', '.join(TREND_PERIODS)}",
            errors={"period": f"must be one of: {', '.join(TREND_PERIODS)}"},
        )
    enforce_date_range(start, end)

    buckets: dict[str, dict] = {}
    for sale in _sales_in_range(tenant_id, start, end):
        bucket = buckets.setdefault(trend_key(sale.sales_date, period), {
            "revenue_cents": 0,
            "cylinders_sold": 0,
            "sales_count": 0,
        })
        bucket["revenue_cents"] += sale.total_revenue_cents
        bucket["cylinders_sold"] += sale.total_cylinders_sold
        bucket["sales_count"] += 1

    return {
        "period_type": period,
        "date_range": _period(start, end),
        "trends": [{"period": key, **buckets[key]} for key in sorted(buckets)],
    }


def inventory_movement(*, tenant_id: int, start: date, end: date) -> dict:
    enforce_date_range(start, end)
    return {
        "period": _period(start, end),
        "movements": collect_movements(tenant_id=tenant_id, start=start, end=end, limit=None),
    }


def monthly_comparison(*, tenant_id: int, year: int) -> dict:
    if year < 1900 or year > 9999:
        raise ValidationError("year is out of range", errors={"year": "must be between 1900 and 9999"})

    months: OrderedDict[int, dict] = OrderedDict(
        (month, {
            "month": month,
            "month_name": calendar.month_name[month],
            "revenue_cents": 0,
            "cylinders_sold": 0,
            "sales_records": 0,
        })
        for month in range(1, 13)
    )
    for sale in _sales_in_range(tenant_id, date(year, 1, 1), date(year, 12, 31)):
        bucket = months[sale.sales_date.month]
        bucket["revenue_cents"] += sale.total_revenue_cents
        bucket["cylinders_sold"] += sale.total_cylinders_sold
        bucket["sales_records"] += 1

    return {"year": year, "months": list(months.values())}
