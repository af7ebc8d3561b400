"""create app_user and laporan tables

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "app_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_app_user_username"),
        sa.CheckConstraint("role IN ('EM', 'USER', 'VENDOR')", name="ck_app_user_role"),
    )

    op.create_table(
        "laporan",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("request_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("request_name", sa.String(), nullable=True),
        sa.Column("company_code", sa.String(), nullable=True),
        sa.Column("request_objective", sa.Text(), nullable=True),
        sa.Column("request_background", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("department", sa.String(), nullable=True),
        sa.Column("buyer", sa.String(), nullable=True),
        sa.Column("currency", sa.String(length=8), nullable=True),
        sa.Column("po_type", sa.String(length=32), nullable=True),
        sa.Column("asset_type", sa.String(length=32), nullable=True),
        sa.Column(
            "total_amount_idr", sa.Numeric(18, 2), nullable=False, server_default=sa.text("0")
        ),
        sa.Column(
            "total_amount_original_currency",
            sa.Numeric(18, 2),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("request_date", sa.Date(), nullable=True),
        sa.Column("delivery_date", sa.Date(), nullable=True),
        sa.Column("assign_to", sa.String(), nullable=True),
        sa.Column(
            "need_approve_files", sa.JSON(), nullable=False, server_default=sa.text("'[]'")
        ),
        sa.Column(
            "no_need_approve_files", sa.JSON(), nullable=False, server_default=sa.text("'[]'")
        ),
        sa.Column(
            "status", sa.String(length=16), nullable=False, server_default=sa.text("'entry'")
        ),
        sa.Column("em_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("user_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "vendor_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("reject_reason", sa.Text(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by", sa.String(), nullable=True),
        sa.Column(
            "resubmission_count", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["assign_to"], ["app_user.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "status IN ('entry', 'submitted', 'approved', 'rejected', 'resubmitted')",
            name="ck_laporan_status",
        ),
        sa.CheckConstraint("resubmission_count >= 0", name="ck_laporan_resubmission_count"),
        sa.CheckConstraint(
            "status <> 'approved' OR (em_approved AND user_approved)",
            name="ck_laporan_approved_flags",
        ),
    )
    op.create_index("ix_laporan_assign_to", "laporan", ["assign_to"])
    op.create_index("ix_laporan_created_at", "laporan", ["created_at"])
    op.create_index("ix_laporan_status_created_at", "laporan", ["status", "created_at"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_laporan_status_created_at", table_name="laporan")
    op.drop_index("ix_laporan_created_at", table_name="laporan")
    op.drop_index("ix_laporan_assign_to", table_name="laporan")
    op.drop_table("laporan")
    op.drop_table("app_user")
