"""initial_lot_tables

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "lots",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Numeric(38, 18), nullable=False),
        sa.Column("remaining_quantity", sa.Numeric(38, 18), nullable=False),
        sa.Column("cost_basis_per_unit", sa.Numeric(28, 8), nullable=False),
        sa.Column("acquired_at", sa.DateTime(), nullable=False),
        sa.Column("version", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("remaining_quantity >= 0", name=op.f("ck_lots_remaining_non_negative")),
        sa.CheckConstraint("remaining_quantity <= quantity", name=op.f("ck_lots_remaining_le_quantity")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_lots")),
    )
    op.create_index(op.f("ix_lots_user_id"), "lots", ["user_id"])
    op.create_index("ix_lots_user_acquired", "lots", ["user_id", "acquired_at"])

    op.create_table(
        "disposals",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Numeric(38, 18), nullable=False),
        sa.Column("proceeds_per_unit", sa.Numeric(28, 8), nullable=False),
        sa.Column("disposed_at", sa.DateTime(), nullable=False),
        sa.Column("method", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_disposals")),
    )
    op.create_index(op.f("ix_disposals_user_id"), "disposals", ["user_id"])

    op.create_table(
        "realized_gains",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("lot_id", sa.Uuid(), sa.ForeignKey("lots.id", name=op.f("fk_realized_gains_lot_id_lots")), nullable=False),
        sa.Column(
            "disposal_id", sa.Uuid(),
            sa.ForeignKey("disposals.id", name=op.f("fk_realized_gains_disposal_id_disposals")),
            nullable=False,
        ),
        sa.Column("sequence", sa.BigInteger(), nullable=False),
        sa.Column("quantity_matched", sa.Numeric(38, 18), nullable=False),
        sa.Column("cost_basis", sa.Numeric(28, 8), nullable=False),
        sa.Column("proceeds", sa.Numeric(28, 8), nullable=False),
        sa.Column("gain", sa.Numeric(28, 8), nullable=False),
        sa.Column("holding_period_days", sa.BigInteger(), nullable=False),
        sa.Column("term", sa.String(10), nullable=False),
        sa.Column("acquired_at", sa.DateTime(), nullable=False),
        sa.Column("disposed_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_realized_gains")),
    )
    op.create_index(op.f("ix_realized_gains_user_id"), "realized_gains", ["user_id"])
    op.create_index(op.f("ix_realized_gains_lot_id"), "realized_gains", ["lot_id"])
    op.create_index(op.f("ix_realized_gains_disposal_id"), "realized_gains", ["disposal_id"])


def downgrade() -> None:
    op.drop_table("realized_gains")
    op.drop_table("disposals")
    op.drop_table("lots")
