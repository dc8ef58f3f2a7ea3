"""Realized gain fragments: the tax-reporting audit trail."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from bitbasis.db.session import Base, TimestampMixin, UUIDPrimaryKey


class RealizedGainRecord(UUIDPrimaryKey, TimestampMixin, Base):
    """One disposal matched against one lot. Written once, never updated."""

    __tablename__ = "realized_gains"

    user_id: Mapped[uuid.UUID] = mapped_column(index=True)
    lot_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("lots.id"), index=True)
    disposal_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("disposals.id"), index=True)
    # Position of this fragment within its disposal's consumption order
    sequence: Mapped[int] = mapped_column(BigInteger, default=0)
    quantity_matched: Mapped[Decimal] = mapped_column(Numeric(38, 18))
    cost_basis: Mapped[Decimal] = mapped_column(Numeric(28, 8))
    proceeds: Mapped[Decimal] = mapped_column(Numeric(28, 8))
    gain: Mapped[Decimal] = mapped_column(Numeric(28, 8))
    holding_period_days: Mapped[int] = mapped_column(BigInteger, default=0)
    term: Mapped[str] = mapped_column(String(10))
    acquired_at: Mapped[datetime]
    disposed_at: Mapped[datetime]
