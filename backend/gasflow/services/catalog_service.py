# Overview: Service-layer operations for the cylinder catalog (reference data).

from __future__ import annotations

from ..errors import NotFoundError
from ..extensions import db
from ..models import CylinderType, COMPANIES


# Every company carries the same four SKUs
CATALOG_SKUS = (
    ("Domestic", 5.0),
    ("Domestic", 14.2),
    ("Commercial", 19.0),
    ("Commercial", 5.0),
)


def seed_cylinder_types() -> int:
    """
    Insert any missing catalog rows. Idempotent.

    Returns the number of rows created.
    """
    existing = {
        (ct.company, ct.category, float(ct.weight_kg))
        for ct in db.session.query(CylinderType).all()
    }
    created = 0
    for company in COMPANIES:
        for category, weight in CATALOG_SKUS:
            if (company, category, weight) in existing:
                continue
            db.session.add(CylinderType(company=company, category=category, weight_kg=weight))
            created += 1
    db.session.commit()
    return created


def list_cylinder_types(*, company: str | None = None, category: str | None = None) -> list[CylinderType]:
    query = db.session.query(CylinderType)
    if company:
        query = query.filter(CylinderType.company == company)
    if category:
        query = query.filter(CylinderType.category == category)
    return query.order_by(CylinderType.company, CylinderType.category, CylinderType.weight_kg).all()


def get_cylinder_type(cylinder_type_id: int) -> CylinderType:
    cylinder_type = db.session.get(CylinderType, cylinder_type_id)
    if cylinder_type is None:
        raise NotFoundError("Cylinder type not found")
    return cylinder_type


def require_cylinder_types(cylinder_type_ids) -> dict[int, CylinderType]:
    """
    Batch existence check for every referenced cylinder type.

    Returns {id: CylinderType}. Raises NotFoundError naming the first
    missing id (in request order) if any are absent.
    """
    wanted = list(dict.fromkeys(cylinder_type_ids))
    if not wanted:
        return {}
    rows = db.session.query(CylinderType).filter(CylinderType.id.in_(wanted)).all()
    found = {row.id: row for row in rows}
    missing = [cid for cid in wanted if cid not in found]
    if missing:
        raise NotFoundError(
            "One or more cylinder types not found",
            errors={"cylinder_type_id": f"Cylinder type {missing[0]} not found"},
        )
    return found
