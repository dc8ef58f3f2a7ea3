import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from bitbasis.db.session import Base, TimestampMixin, UUIDPrimaryKey


class DisposalRecord(UUIDPrimaryKey, TimestampMixin, Base):
    """A sell/spend event and the method it was matched with."""

    __tablename__ = "disposals"

    user_id: Mapped[uuid.UUID] = mapped_column(index=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(38, 18))
    proceeds_per_unit: Mapped[Decimal] = mapped_column(Numeric(28, 8))
    disposed_at: Mapped[datetime]
    method: Mapped[str] = mapped_column(String(10))
