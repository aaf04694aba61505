from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


COMPANIES = ("HPCL", "IOCL", "BPCL")
CATEGORIES = ("Domestic", "Commercial")


class CylinderType(db.Model):
    """
    Cylinder SKU reference data: company x category x weight.

    Rows are created once by the catalog seed and never mutated or deleted.
    Every inventory, order, sale and loan row points at one of these.
    """
    __tablename__ = "cylinder_types"
    __table_args__ = (
        db.UniqueConstraint("company", "category", "weight_kg", name="uq_cylinder_types_sku"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    company = db.Column(db.String(16), nullable=False, index=True)
    category = db.Column(db.String(16), nullable=False)
    weight_kg = db.Column(db.Numeric(4, 1, asdecimal=False), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def label(self) -> str:
        return f"{self.company} {self.category} {self.weight_kg:g}kg"

    def __repr__(self) -> str:
        return f"<CylinderType id={self.id} {self.label!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company": self.company,
            "category": self.category,
            "weight_kg": self.weight_kg,
            "label": self.label,
            "created_at": to_utc_z(self.created_at),
        }
