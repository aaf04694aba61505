from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date


class Order(db.Model):
    """
    Purchase of full cylinders from a distributor.

    total_amount_cents is frozen at creation as sum(quantity * price).
    Orders are immutable: there is no update or delete path.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_tenant_date", "tenant_id", "order_date"),
        db.Index("ix_orders_tenant_distributor", "tenant_id", "distributor_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    distributor_id = db.Column(db.Integer, db.ForeignKey("distributors.id"), nullable=False)

    order_date = db.Column(db.Date, nullable=False)
    delivery_person = db.Column(db.String(255), nullable=False)
    total_amount_cents = db.Column(db.BigInteger, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    distributor = db.relationship("Distributor", backref=db.backref("orders", lazy=True))
    items = db.relationship("OrderItem", backref="order", lazy=True, order_by="OrderItem.id")
    returns = db.relationship("CylinderReturn", backref="order", lazy=True, order_by="CylinderReturn.id")

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "distributor_id": self.distributor_id,
            "distributor_name": self.distributor.distributor_name if self.distributor else None,
            "order_date": to_iso_date(self.order_date),
            "delivery_person": self.delivery_person,
            "total_amount_cents": self.total_amount_cents,
            "created_at": to_utc_z(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
            data["returns"] = [ret.to_dict() for ret in self.returns]
        return data


class OrderItem(db.Model):
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        db.CheckConstraint("price_per_cylinder_cents > 0", name="ck_order_items_price_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    cylinder_type_id = db.Column(db.Integer, db.ForeignKey("cylinder_types.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    price_per_cylinder_cents = db.Column(db.Integer, nullable=False)

    cylinder_type = db.relationship("CylinderType")

    @property
    def subtotal_cents(self) -> int:
        return self.quantity * self.price_per_cylinder_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cylinder_type_id": self.cylinder_type_id,
            "cylinder_type": self.cylinder_type.to_dict() if self.cylinder_type else None,
            "quantity": self.quantity,
            "price_per_cylinder_cents": self.price_per_cylinder_cents,
            "subtotal_cents": self.subtotal_cents,
        }


class CylinderReturn(db.Model):
    """Empty cylinders handed back to a distributor with an order."""
    __tablename__ = "cylinder_returns"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_cylinder_returns_quantity_positive"),
        db.Index("ix_cylinder_returns_tenant_distributor", "tenant_id", "distributor_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    distributor_id = db.Column(db.Integer, db.ForeignKey("distributors.id"), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)
    cylinder_type_id = db.Column(db.Integer, db.ForeignKey("cylinder_types.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    return_date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    cylinder_type = db.relationship("CylinderType")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "distributor_id": self.distributor_id,
            "order_id": self.order_id,
            "cylinder_type_id": self.cylinder_type_id,
            "cylinder_type": self.cylinder_type.to_dict() if self.cylinder_type else None,
            "quantity": self.quantity,
            "return_date": to_iso_date(self.return_date),
            "created_at": to_utc_z(self.created_at),
        }
