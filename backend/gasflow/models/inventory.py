from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date


class Inventory(db.Model):
    """
    Running full/empty counts per (tenant, cylinder type).

    Rows are created lazily the first time an adjustment, order or sale
    touches the pair. Both counts are >= 0: services check before writing
    and the CHECK constraints back that up.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "cylinder_type_id", name="uq_inventory_tenant_type"),
        db.CheckConstraint("full_cylinders >= 0", name="ck_inventory_full_non_negative"),
        db.CheckConstraint("empty_cylinders >= 0", name="ck_inventory_empty_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    cylinder_type_id = db.Column(db.Integer, db.ForeignKey("cylinder_types.id"), nullable=False, index=True)

    full_cylinders = db.Column(db.Integer, nullable=False, default=0)
    empty_cylinders = db.Column(db.Integer, nullable=False, default=0)

    last_updated = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    cylinder_type = db.relationship("CylinderType")

    def __repr__(self) -> str:
        return (
            f"<Inventory tenant_id={self.tenant_id} cylinder_type_id={self.cylinder_type_id} "
            f"full={self.full_cylinders} empty={self.empty_cylinders}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cylinder_type_id": self.cylinder_type_id,
            "cylinder_type": self.cylinder_type.to_dict() if self.cylinder_type else None,
            "full_cylinders": self.full_cylinders,
            "empty_cylinders": self.empty_cylinders,
            "total_cylinders": self.full_cylinders + self.empty_cylinders,
            "last_updated": to_utc_z(self.last_updated),
        }


class InventoryAdjustment(db.Model):
    """
    Append-only audit row for every inventory change that is not itself an
    order or a sale (manual adjustments and opening stock).
    """
    __tablename__ = "inventory_adjustments"
    __table_args__ = (
        db.Index("ix_inventory_adjustments_tenant_date", "tenant_id", "adjustment_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    cylinder_type_id = db.Column(db.Integer, db.ForeignKey("cylinder_types.id"), nullable=False, index=True)

    full_cylinder_change = db.Column(db.Integer, nullable=False, default=0)
    empty_cylinder_change = db.Column(db.Integer, nullable=False, default=0)
    reason = db.Column(db.String(500), nullable=False)
    adjustment_date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    cylinder_type = db.relationship("CylinderType")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cylinder_type_id": self.cylinder_type_id,
            "cylinder_type": self.cylinder_type.to_dict() if self.cylinder_type else None,
            "full_cylinder_change": self.full_cylinder_change,
            "empty_cylinder_change": self.empty_cylinder_change,
            "reason": self.reason,
            "adjustment_date": to_iso_date(self.adjustment_date),
            "created_at": to_utc_z(self.created_at),
        }
