"""initial schema: users, user_providers, stock_analyses, analyses_history

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("analysis_count", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("plan", sa.String(), nullable=False, server_default="free"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("analysis_count >= 0", name="ck_users_analysis_count_nonnegative"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_providers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("provider", sa.String(), nullable=False),
        sa.Column("provider_account_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("provider", "provider_account_id", name="uq_provider_account"),
    )
    op.create_index("ix_user_providers_user_id", "user_providers", ["user_id"])

    op.create_table(
        "stock_analyses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("market", sa.String(), nullable=False),
        sa.Column("symbol", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sector", sa.String(), nullable=True),
        sa.Column("report", sa.Text(), nullable=False),
        sa.Column("financial_table", sa.Text(), nullable=True),
        sa.Column("compare_periods", sa.JSON(), nullable=False),
        sa.Column("model", sa.String(), nullable=True),
        sa.Column("citations", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_stock_analyses_market", "stock_analyses", ["market"])
    op.create_index("ix_stock_analyses_symbol", "stock_analyses", ["symbol"])
    op.create_index("ix_stock_analyses_created_at", "stock_analyses", ["created_at"])

    op.create_table(
        "analyses_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "analysis_id",
            sa.Integer(),
            sa.ForeignKey("stock_analyses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_analyses_history_user_id", "analyses_history", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_analyses_history_user_id", table_name="analyses_history")
    op.drop_table("analyses_history")
    op.drop_index("ix_stock_analyses_created_at", table_name="stock_analyses")
    op.drop_index("ix_stock_analyses_symbol", table_name="stock_analyses")
    op.drop_index("ix_stock_analyses_market", table_name="stock_analyses")
    op.drop_table("stock_analyses")
    op.drop_index("ix_user_providers_user_id", table_name="user_providers")
    op.drop_table("user_providers")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
