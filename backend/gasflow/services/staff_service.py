# Overview: Service-layer operations for staff; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy import func

from ..errors import ConflictError, InactiveError, NotFoundError, ValidationError
from ..extensions import db
from ..models import DailySales, SalesItem, Staff
from ..time_utils import to_iso_date
from ..validation import STAFF_POLICY, enforce_rules_staff, validate_payload
from .concurrency import unit_of_work


def _duplicate_mobile(tenant_id: int, mobile_number: str, *, exclude_id: int | None = None) -> bool:
    query = db.session.query(Staff.id).filter(
        Staff.tenant_id == tenant_id,
        Staff.mobile_number == mobile_number,
    )
    if exclude_id is not None:
        query = query.filter(Staff.id != exclude_id)
    return query.first() is not None


def create_staff(*, tenant_id: int, payload: dict) -> Staff:
    patch = validate_payload(model=Staff, payload=payload, policy=STAFF_POLICY, partial=False)
    enforce_rules_staff(patch)

    if _duplicate_mobile(tenant_id, patch["mobile_number"]):
        raise ConflictError("Staff member with this mobile number already exists")

    with unit_of_work() as session:
        staff = Staff(tenant_id=tenant_id, is_active=True, **patch)
        session.add(staff)
        session.flush()
    return staff


def get_staff(*, tenant_id: int, staff_id: int) -> Staff:
    staff = db.session.query(Staff).filter_by(id=staff_id, tenant_id=tenant_id).first()
    if staff is None:
        raise NotFoundError("Staff member not found")
    return staff


def require_active_staff(*, tenant_id: int, staff_id: int) -> Staff:
    staff = get_staff(tenant_id=tenant_id, staff_id=staff_id)
    if not staff.is_active:
        raise InactiveError("Staff member is deactivated")
    return staff


def list_staff(*, tenant_id: int, active_only: bool = False) -> list[Staff]:
    query = db.session.query(Staff).filter(Staff.tenant_id == tenant_id)
    if active_only:
        query = query.filter(Staff.is_active.is_(True))
        return query.order_by(Staff.staff_name.asc()).all()
    return query.order_by(Staff.created_at.desc(), Staff.id.desc()).all()


def list_all_staff() -> list[Staff]:
    """Admin view across every tenant."""
    return db.session.query(Staff).order_by(Staff.id.desc()).all()


def update_staff(*, tenant_id: int, staff_id: int, payload: dict) -> Staff:
    patch = validate_payload(model=Staff, payload=payload, policy=STAFF_POLICY, partial=True)
    enforce_rules_staff(patch)

    staff = get_staff(tenant_id=tenant_id, staff_id=staff_id)

    mobile = patch.get("mobile_number")
    if mobile and mobile != staff.mobile_number:
        if _duplicate_mobile(tenant_id, mobile, exclude_id=staff.id):
            raise ConflictError("Another staff member with this mobile number already exists")

    with unit_of_work():
        for key, value in patch.items():
            setattr(staff, key, value)
    return staff


def deactivate_staff(*, tenant_id: int, staff_id: int) -> Staff:
    staff = get_staff(tenant_id=tenant_id, staff_id=staff_id)
    if not staff.is_active:
        raise ValidationError("Staff member is already deactivated")
    with unit_of_work():
        staff.is_active = False
    return staff


def activate_staff(*, tenant_id: int, staff_id: int) -> Staff:
    staff = get_staff(tenant_id=tenant_id, staff_id=staff_id)
    if staff.is_active:
        raise ValidationError("Staff member is already active")
    with unit_of_work():
        staff.is_active = True
    return staff


def _performance(tenant_id: int, staff_id: int) -> dict:
    days, first_date, last_date = db.session.query(
        func.count(DailySales.id),
        func.min(DailySales.sales_date),
        func.max(DailySales.sales_date),
    ).filter(DailySales.tenant_id == tenant_id, DailySales.staff_id == staff_id).one()

    revenue, cylinders = db.session.query(
        func.coalesce(func.sum(SalesItem.quantity_sold * SalesItem.selling_price_per_cylinder_cents), 0),
        func.coalesce(func.sum(SalesItem.quantity_sold), 0),
    ).join(DailySales, DailySales.id == SalesItem.sales_id).filter(
        DailySales.tenant_id == tenant_id, DailySales.staff_id == staff_id
    ).one()

    revenue = int(revenue)
    return {
        "total_sales_days": int(days),
        "total_revenue_cents": revenue,
        "total_cylinders_sold": int(cylinders),
        "average_revenue_per_day_cents": round(revenue / days) if days else 0,
        "first_sale_date": to_iso_date(first_date),
        "last_sale_date": to_iso_date(last_date),
    }


def staff_performance(*, tenant_id: int, staff_id: int) -> dict:
    get_staff(tenant_id=tenant_id, staff_id=staff_id)
    return _performance(tenant_id, staff_id)


def staff_summary(*, tenant_id: int, staff_id: int) -> dict:
    staff = get_staff(tenant_id=tenant_id, staff_id=staff_id)
    return {"staff": staff.to_dict(), "performance": _performance(tenant_id, staff_id)}


def top_performers(*, tenant_id: int, limit: int = 5) -> list[dict]:
    """Active staff ranked by revenue, highest first."""
    performers = []
    for staff in list_staff(tenant_id=tenant_id, active_only=True):
        perf = _performance(tenant_id, staff.id)
        performers.append({
            "staff_id": staff.id,
            "staff_name": staff.staff_name,
            "total_revenue_cents": perf["total_revenue_cents"],
            "total_cylinders_sold": perf["total_cylinders_sold"],
            "total_sales_days": perf["total_sales_days"],
        })
    performers.sort(key=lambda p: p["total_revenue_cents"], reverse=True)
    return performers[:limit]
