"""Persisted acquisition lots."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from bitbasis.db.session import Base, TimestampMixin, UUIDPrimaryKey


class LotRecord(UUIDPrimaryKey, TimestampMixin, Base):
    """A BTC acquisition lot. Fully consumed lots are kept for the audit trail."""

    __tablename__ = "lots"
    __table_args__ = (
        CheckConstraint("remaining_quantity >= 0", name="remaining_non_negative"),
        CheckConstraint("remaining_quantity <= quantity", name="remaining_le_quantity"),
        Index("ix_lots_user_acquired", "user_id", "acquired_at"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(index=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(38, 18))
    remaining_quantity: Mapped[Decimal] = mapped_column(Numeric(38, 18))
    cost_basis_per_unit: Mapped[Decimal] = mapped_column(Numeric(28, 8))
    acquired_at: Mapped[datetime]
    # Optimistic concurrency token, bumped on every remaining_quantity change
    version: Mapped[int] = mapped_column(BigInteger, default=1)
