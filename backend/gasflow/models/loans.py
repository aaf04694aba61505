from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date


class CustomerCylinderLoan(db.Model):
    """
    Cylinders handed to a customer without an empty in exchange.

    Loans have no inventory effect: the cylinder left stock as a sale.
    Pending balance per (customer, type) is loaned minus returned.
    """
    __tablename__ = "customer_cylinder_loans"
    __table_args__ = (
        db.CheckConstraint("quantity_loaned > 0", name="ck_customer_loans_quantity_positive"),
        db.Index("ix_customer_loans_tenant_customer", "tenant_id", "customer_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    sales_id = db.Column(db.Integer, db.ForeignKey("daily_sales.id"), nullable=True, index=True)
    cylinder_type_id = db.Column(db.Integer, db.ForeignKey("cylinder_types.id"), nullable=False, index=True)

    quantity_loaned = db.Column(db.Integer, nullable=False)
    loan_date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("loans", lazy=True))
    sale = db.relationship("DailySales", backref=db.backref("customer_loans", lazy=True))
    cylinder_type = db.relationship("CylinderType")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "customer_name": self.customer.customer_name if self.customer else None,
            "sales_id": self.sales_id,
            "cylinder_type_id": self.cylinder_type_id,
            "cylinder_type": self.cylinder_type.to_dict() if self.cylinder_type else None,
            "quantity_loaned": self.quantity_loaned,
            "loan_date": to_iso_date(self.loan_date),
            "created_at": to_utc_z(self.created_at),
        }


class LoanCylinderReturn(db.Model):
    __tablename__ = "loan_cylinder_returns"
    __table_args__ = (
        db.CheckConstraint("quantity_returned > 0", name="ck_loan_returns_quantity_positive"),
        db.Index("ix_loan_returns_tenant_customer", "tenant_id", "customer_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    cylinder_type_id = db.Column(db.Integer, db.ForeignKey("cylinder_types.id"), nullable=False, index=True)

    quantity_returned = db.Column(db.Integer, nullable=False)
    return_date = db.Column(db.Date, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("loan_returns", lazy=True))
    cylinder_type = db.relationship("CylinderType")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "cylinder_type_id": self.cylinder_type_id,
            "cylinder_type": self.cylinder_type.to_dict() if self.cylinder_type else None,
            "quantity_returned": self.quantity_returned,
            "return_date": to_iso_date(self.return_date),
            "created_at": to_utc_z(self.created_at),
        }
