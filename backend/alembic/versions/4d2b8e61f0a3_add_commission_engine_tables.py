"""add commission engine tables

Revision ID: 4d2b8e61f0a3
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "4d2b8e61f0a3"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # -----------------------------------------------------
    # 1) Catalog items with commission configuration
    # -----------------------------------------------------
    op.create_table(
        "catalog_items",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("sku", sa.String(length=128), nullable=True),
        sa.Column("price_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("commission_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("commission_type", sa.String(length=16), nullable=False, server_default="percentage"),
        sa.Column("commission_value", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("discount_limit_type", sa.String(length=16), nullable=False, server_default="percentage"),
        sa.Column("discount_limit_value", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # -----------------------------------------------------
    # 2) Commissions (one per eligible sale line)
    # -----------------------------------------------------
    op.create_table(
        "commissions",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("sale_id", sa.String(length=64), nullable=False),
        sa.Column("line_index", sa.Integer(), nullable=False),
        sa.Column("seller_id", sa.String(length=64), nullable=False),
        sa.Column("product_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("discount_value", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("discount_type", sa.String(length=16), nullable=False),
        sa.Column("net_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("commission_type", sa.String(length=16), nullable=False),
        sa.Column("commission_rate", sa.Numeric(12, 2), nullable=False),
        sa.Column("commission_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("period_reference", sa.String(length=7), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("payment_method", sa.String(length=50), nullable=True),
        sa.Column("payment_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index("ix_commissions_sale_id", "commissions", ["sale_id"])
    op.create_index("ix_commissions_seller_id", "commissions", ["seller_id"])
    op.create_index("ix_commissions_status", "commissions", ["status"])
    op.create_index("ix_commissions_period_reference", "commissions", ["period_reference"])
    op.create_index("ix_commissions_sale_line", "commissions", ["sale_id", "line_index"])
    op.create_index("ix_commissions_seller_period", "commissions", ["seller_id", "period_reference"])
    op.create_index("ix_commissions_period_status", "commissions", ["period_reference", "status"])

    # -----------------------------------------------------
    # 3) Append-only audit trail
    #    No FK to commissions: superseded rows are deleted,
    #    their history is not.
    # -----------------------------------------------------
    op.create_table(
        "commission_audit_logs",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("commission_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("action_type", sa.String(length=20), nullable=False),
        sa.Column("old_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("new_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("old_status", sa.String(length=20), nullable=True),
        sa.Column("new_status", sa.String(length=20), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("actor_id", sa.String(length=64), nullable=False),
        sa.Column("actor_name", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_index("ix_commission_audit_logs_action_type", "commission_audit_logs", ["action_type"])
    op.create_index(
        "ix_commission_audit_logs_commission_created",
        "commission_audit_logs",
        ["commission_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_commission_audit_logs_commission_created", table_name="commission_audit_logs")
    op.drop_index("ix_commission_audit_logs_action_type", table_name="commission_audit_logs")
    op.drop_table("commission_audit_logs")

    op.drop_index("ix_commissions_period_status", table_name="commissions")
    op.drop_index("ix_commissions_seller_period", table_name="commissions")
    op.drop_index("ix_commissions_sale_line", table_name="commissions")
    op.drop_index("ix_commissions_period_reference", table_name="commissions")
    op.drop_index("ix_commissions_status", table_name="commissions")
    op.drop_index("ix_commissions_seller_id", table_name="commissions")
    op.drop_index("ix_commissions_sale_id", table_name="commissions")
    op.drop_table("commissions")

    op.drop_table("catalog_items")
