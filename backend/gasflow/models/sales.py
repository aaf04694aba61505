from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date


class DailySales(db.Model):
    """
    One recorded sales run by a staff member on a given day.

    Carries sold items (full cylinders out), empties received from
    customers (empties in) and any cylinders loaned to customers.
    """
    __tablename__ = "daily_sales"
    __table_args__ = (
        db.Index("ix_daily_sales_tenant_date", "tenant_id", "sales_date"),
        db.Index("ix_daily_sales_tenant_staff", "tenant_id", "staff_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False)

    sales_date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    staff = db.relationship("Staff", backref=db.backref("daily_sales", lazy=True))
    items = db.relationship("SalesItem", backref="sale", lazy=True, order_by="SalesItem.id")
    empties_received = db.relationship(
        "EmptyReceivedOnSale", backref="sale", lazy=True, order_by="EmptyReceivedOnSale.id"
    )

    @property
    def total_revenue_cents(self) -> int:
        return sum(item.subtotal_cents for item in self.items)

    @property
    def total_cylinders_sold(self) -> int:
        return sum(item.quantity_sold for item in self.items)

    @property
    def total_empties_received(self) -> int:
        return sum(e.quantity_received for e in self.empties_received)

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "staff_id": self.staff_id,
            "staff_name": self.staff.staff_name if self.staff else None,
            "sales_date": to_iso_date(self.sales_date),
            "total_revenue_cents": self.total_revenue_cents,
            "total_cylinders_sold": self.total_cylinders_sold,
            "total_empties_received": self.total_empties_received,
            "created_at": to_utc_z(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
            data["empties_received"] = [e.to_dict() for e in self.empties_received]
        return data


class SalesItem(db.Model):
    __tablename__ = "sales_items"
    __table_args__ = (
        db.CheckConstraint("quantity_sold > 0", name="ck_sales_items_quantity_positive"),
        db.CheckConstraint(
            "selling_price_per_cylinder_cents > 0", name="ck_sales_items_price_positive"
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sales_id = db.Column(db.Integer, db.ForeignKey("daily_sales.id"), nullable=False, index=True)
    cylinder_type_id = db.Column(db.Integer, db.ForeignKey("cylinder_types.id"), nullable=False, index=True)

    quantity_sold = db.Column(db.Integer, nullable=False)
    selling_price_per_cylinder_cents = db.Column(db.Integer, nullable=False)

    cylinder_type = db.relationship("CylinderType")

    @property
    def subtotal_cents(self) -> int:
        return self.quantity_sold * self.selling_price_per_cylinder_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cylinder_type_id": self.cylinder_type_id,
            "cylinder_type": self.cylinder_type.to_dict() if self.cylinder_type else None,
            "quantity_sold": self.quantity_sold,
            "selling_price_per_cylinder_cents": self.selling_price_per_cylinder_cents,
            "subtotal_cents": self.subtotal_cents,
        }


class EmptyReceivedOnSale(db.Model):
    __tablename__ = "empties_received_on_sale"
    __table_args__ = (
        db.CheckConstraint("quantity_received > 0", name="ck_empties_received_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sales_id = db.Column(db.Integer, db.ForeignKey("daily_sales.id"), nullable=False, index=True)
    cylinder_type_id = db.Column(db.Integer, db.ForeignKey("cylinder_types.id"), nullable=False, index=True)

    quantity_received = db.Column(db.Integer, nullable=False)

    cylinder_type = db.relationship("CylinderType")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cylinder_type_id": self.cylinder_type_id,
            "cylinder_type": self.cylinder_type.to_dict() if self.cylinder_type else None,
            "quantity_received": self.quantity_received,
        }
