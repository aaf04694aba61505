"""Initial GasFlow schema

Revision ID: 20260301_initial
Revises:
Create Date: 2026-03-01
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260301_initial"
down_revision = None
branch_labels = None
depends_on = None


NOW = sa.text("(CURRENT_TIMESTAMP)")


def _tenant_columns():
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("mobile_number", sa.String(15), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_role_active", "users", ["role", "is_active"], unique=False)

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(255), nullable=True),
        sa.Column("user_agent", sa.String(255), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("session_tokens", schema=None) as batch_op:
        batch_op.create_index("ix_session_tokens_user_id", ["user_id"], unique=False)
        batch_op.create_index("ix_session_tokens_token_hash", ["token_hash"], unique=True)
        batch_op.create_index("ix_session_tokens_user_revoked", ["user_id", "is_revoked"], unique=False)

    op.create_table(
        "cylinder_types",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company", sa.String(16), nullable=False),
        sa.Column("category", sa.String(16), nullable=False),
        sa.Column("weight_kg", sa.Numeric(4, 1), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company", "category", "weight_kg", name="uq_cylinder_types_sku"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_cylinder_types_company", "cylinder_types", ["company"], unique=False)

    op.create_table(
        "inventory",
        *_tenant_columns(),
        sa.Column("cylinder_type_id", sa.Integer(), nullable=False),
        sa.Column("full_cylinders", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("empty_cylinders", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["cylinder_type_id"], ["cylinder_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "cylinder_type_id", name="uq_inventory_tenant_type"),
        sa.CheckConstraint("full_cylinders >= 0", name="ck_inventory_full_non_negative"),
        sa.CheckConstraint("empty_cylinders >= 0", name="ck_inventory_empty_non_negative"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("inventory", schema=None) as batch_op:
        batch_op.create_index("ix_inventory_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_inventory_cylinder_type_id", ["cylinder_type_id"], unique=False)

    op.create_table(
        "inventory_adjustments",
        *_tenant_columns(),
        sa.Column("cylinder_type_id", sa.Integer(), nullable=False),
        sa.Column("full_cylinder_change", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("empty_cylinder_change", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("reason", sa.String(500), nullable=False),
        sa.Column("adjustment_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["cylinder_type_id"], ["cylinder_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("inventory_adjustments", schema=None) as batch_op:
        batch_op.create_index("ix_inventory_adjustments_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_inventory_adjustments_cylinder_type_id", ["cylinder_type_id"], unique=False)
        batch_op.create_index("ix_inventory_adjustments_tenant_date", ["tenant_id", "adjustment_date"], unique=False)

    op.create_table(
        "distributors",
        *_tenant_columns(),
        sa.Column("distributor_name", sa.String(255), nullable=False),
        sa.Column("contact_number", sa.String(15), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "distributor_name", name="uq_distributors_tenant_name"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("distributors", schema=None) as batch_op:
        batch_op.create_index("ix_distributors_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_distributors_tenant_active", ["tenant_id", "is_active"], unique=False)

    op.create_table(
        "staff",
        *_tenant_columns(),
        sa.Column("staff_name", sa.String(255), nullable=False),
        sa.Column("mobile_number", sa.String(15), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "mobile_number", name="uq_staff_tenant_mobile"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("staff", schema=None) as batch_op:
        batch_op.create_index("ix_staff_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_staff_tenant_active", ["tenant_id", "is_active"], unique=False)

    op.create_table(
        "customers",
        *_tenant_columns(),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(15), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "customer_name", "phone_number", name="uq_customers_tenant_name_phone"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("customers", schema=None) as batch_op:
        batch_op.create_index("ix_customers_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_customers_tenant_active", ["tenant_id", "is_active"], unique=False)

    op.create_table(
        "orders",
        *_tenant_columns(),
        sa.Column("distributor_id", sa.Integer(), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("delivery_person", sa.String(255), nullable=False),
        sa.Column("total_amount_cents", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["distributor_id"], ["distributors.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("orders", schema=None) as batch_op:
        batch_op.create_index("ix_orders_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_orders_tenant_date", ["tenant_id", "order_date"], unique=False)
        batch_op.create_index("ix_orders_tenant_distributor", ["tenant_id", "distributor_id"], unique=False)

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("cylinder_type_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price_per_cylinder_cents", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.ForeignKeyConstraint(["cylinder_type_id"], ["cylinder_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        sa.CheckConstraint("price_per_cylinder_cents > 0", name="ck_order_items_price_positive"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("order_items", schema=None) as batch_op:
        batch_op.create_index("ix_order_items_order_id", ["order_id"], unique=False)
        batch_op.create_index("ix_order_items_cylinder_type_id", ["cylinder_type_id"], unique=False)

    op.create_table(
        "cylinder_returns",
        *_tenant_columns(),
        sa.Column("distributor_id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=True),
        sa.Column("cylinder_type_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("return_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["distributor_id"], ["distributors.id"]),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.ForeignKeyConstraint(["cylinder_type_id"], ["cylinder_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity > 0", name="ck_cylinder_returns_quantity_positive"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("cylinder_returns", schema=None) as batch_op:
        batch_op.create_index("ix_cylinder_returns_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_cylinder_returns_order_id", ["order_id"], unique=False)
        batch_op.create_index("ix_cylinder_returns_cylinder_type_id", ["cylinder_type_id"], unique=False)
        batch_op.create_index("ix_cylinder_returns_tenant_distributor", ["tenant_id", "distributor_id"], unique=False)

    op.create_table(
        "payments",
        *_tenant_columns(),
        sa.Column("distributor_id", sa.Integer(), nullable=False),
        sa.Column("amount_paid_cents", sa.BigInteger(), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("payment_method", sa.String(32), nullable=False),
        sa.Column("transaction_reference", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["distributor_id"], ["distributors.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount_paid_cents > 0", name="ck_payments_amount_positive"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("payments", schema=None) as batch_op:
        batch_op.create_index("ix_payments_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_payments_tenant_date", ["tenant_id", "payment_date"], unique=False)
        batch_op.create_index("ix_payments_tenant_distributor", ["tenant_id", "distributor_id"], unique=False)

    op.create_table(
        "daily_sales",
        *_tenant_columns(),
        sa.Column("staff_id", sa.Integer(), nullable=False),
        sa.Column("sales_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["staff_id"], ["staff.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("daily_sales", schema=None) as batch_op:
        batch_op.create_index("ix_daily_sales_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_daily_sales_tenant_date", ["tenant_id", "sales_date"], unique=False)
        batch_op.create_index("ix_daily_sales_tenant_staff", ["tenant_id", "staff_id"], unique=False)

    op.create_table(
        "sales_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sales_id", sa.Integer(), nullable=False),
        sa.Column("cylinder_type_id", sa.Integer(), nullable=False),
        sa.Column("quantity_sold", sa.Integer(), nullable=False),
        sa.Column("selling_price_per_cylinder_cents", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["sales_id"], ["daily_sales.id"]),
        sa.ForeignKeyConstraint(["cylinder_type_id"], ["cylinder_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity_sold > 0", name="ck_sales_items_quantity_positive"),
        sa.CheckConstraint("selling_price_per_cylinder_cents > 0", name="ck_sales_items_price_positive"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("sales_items", schema=None) as batch_op:
        batch_op.create_index("ix_sales_items_sales_id", ["sales_id"], unique=False)
        batch_op.create_index("ix_sales_items_cylinder_type_id", ["cylinder_type_id"], unique=False)

    op.create_table(
        "empties_received_on_sale",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sales_id", sa.Integer(), nullable=False),
        sa.Column("cylinder_type_id", sa.Integer(), nullable=False),
        sa.Column("quantity_received", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["sales_id"], ["daily_sales.id"]),
        sa.ForeignKeyConstraint(["cylinder_type_id"], ["cylinder_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity_received > 0", name="ck_empties_received_quantity_positive"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("empties_received_on_sale", schema=None) as batch_op:
        batch_op.create_index("ix_empties_received_on_sale_sales_id", ["sales_id"], unique=False)
        batch_op.create_index("ix_empties_received_on_sale_cylinder_type_id", ["cylinder_type_id"], unique=False)

    op.create_table(
        "customer_cylinder_loans",
        *_tenant_columns(),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("sales_id", sa.Integer(), nullable=True),
        sa.Column("cylinder_type_id", sa.Integer(), nullable=False),
        sa.Column("quantity_loaned", sa.Integer(), nullable=False),
        sa.Column("loan_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.ForeignKeyConstraint(["sales_id"], ["daily_sales.id"]),
        sa.ForeignKeyConstraint(["cylinder_type_id"], ["cylinder_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity_loaned > 0", name="ck_customer_loans_quantity_positive"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("customer_cylinder_loans", schema=None) as batch_op:
        batch_op.create_index("ix_customer_cylinder_loans_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_customer_cylinder_loans_sales_id", ["sales_id"], unique=False)
        batch_op.create_index("ix_customer_cylinder_loans_cylinder_type_id", ["cylinder_type_id"], unique=False)
        batch_op.create_index("ix_customer_loans_tenant_customer", ["tenant_id", "customer_id"], unique=False)

    op.create_table(
        "loan_cylinder_returns",
        *_tenant_columns(),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("cylinder_type_id", sa.Integer(), nullable=False),
        sa.Column("quantity_returned", sa.Integer(), nullable=False),
        sa.Column("return_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"]),
        sa.ForeignKeyConstraint(["cylinder_type_id"], ["cylinder_types.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity_returned > 0", name="ck_loan_returns_quantity_positive"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("loan_cylinder_returns", schema=None) as batch_op:
        batch_op.create_index("ix_loan_cylinder_returns_tenant_id", ["tenant_id"], unique=False)
        batch_op.create_index("ix_loan_cylinder_returns_cylinder_type_id", ["cylinder_type_id"], unique=False)
        batch_op.create_index("ix_loan_returns_tenant_customer", ["tenant_id", "customer_id"], unique=False)


def downgrade():
    for table in (
        "loan_cylinder_returns",
        "customer_cylinder_loans",
        "empties_received_on_sale",
        "sales_items",
        "daily_sales",
        "payments",
        "cylinder_returns",
        "order_items",
        "orders",
        "customers",
        "staff",
        "distributors",
        "inventory_adjustments",
        "inventory",
        "cylinder_types",
        "session_tokens",
        "users",
    ):
        op.drop_table(table)
