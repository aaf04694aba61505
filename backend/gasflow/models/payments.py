from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date


PAYMENT_METHODS = ("Cash", "UPI", "Card", "Cheque", "BankTransfer", "Other")


class Payment(db.Model):
    """
    Money paid to a distributor.

    Unlike orders, payments can be corrected or voided (update/delete).
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.CheckConstraint("amount_paid_cents > 0", name="ck_payments_amount_positive"),
        db.Index("ix_payments_tenant_date", "tenant_id", "payment_date"),
        db.Index("ix_payments_tenant_distributor", "tenant_id", "distributor_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    distributor_id = db.Column(db.Integer, db.ForeignKey("distributors.id"), nullable=False)

    amount_paid_cents = db.Column(db.BigInteger, nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    payment_method = db.Column(db.String(32), nullable=False)
    transaction_reference = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    distributor = db.relationship("Distributor", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "distributor_id": self.distributor_id,
            "distributor_name": self.distributor.distributor_name if self.distributor else None,
            "amount_paid_cents": self.amount_paid_cents,
            "payment_date": to_iso_date(self.payment_date),
            "payment_method": self.payment_method,
            "transaction_reference": self.transaction_reference,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
