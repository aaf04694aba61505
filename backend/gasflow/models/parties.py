from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Distributor(db.Model):
    """
    Upstream supplier of full cylinders.

    Tenant-scoped, soft-deactivated only. Balances (money and cylinders) are
    derived from orders, payments and returns at read time.
    """
    __tablename__ = "distributors"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "distributor_name", name="uq_distributors_tenant_name"),
        db.Index("ix_distributors_tenant_active", "tenant_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    distributor_name = db.Column(db.String(255), nullable=False)
    contact_number = db.Column(db.String(15), nullable=False)
    address = db.Column(db.String(500), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Distributor id={self.id} name={self.distributor_name!r} tenant_id={self.tenant_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "distributor_name": self.distributor_name,
            "contact_number": self.contact_number,
            "address": self.address,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Staff(db.Model):
    """Delivery / counter staff who record daily sales."""
    __tablename__ = "staff"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "mobile_number", name="uq_staff_tenant_mobile"),
        db.Index("ix_staff_tenant_active", "tenant_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    staff_name = db.Column(db.String(255), nullable=False)
    mobile_number = db.Column(db.String(15), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "staff_name": self.staff_name,
            "mobile_number": self.mobile_number,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Customer(db.Model):
    """
    Retail customer. Only needed for cylinder loans; cash sales are anonymous.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "customer_name", "phone_number", name="uq_customers_tenant_name_phone"),
        db.Index("ix_customers_tenant_active", "tenant_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    customer_name = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(15), nullable=False)
    address = db.Column(db.String(500), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "customer_name": self.customer_name,
            "phone_number": self.phone_number,
            "address": self.address,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
