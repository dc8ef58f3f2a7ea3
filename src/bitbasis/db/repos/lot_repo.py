import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.db.models.lot import LotRecord
from bitbasis.domain.models.tax import Lot, to_naive_utc
from bitbasis.exceptions import LedgerConflict


def lot_from_record(record: LotRecord) -> Lot:
    return Lot(
        id=record.id,
        quantity=record.quantity,
        cost_basis_per_unit=record.cost_basis_per_unit,
        acquired_at=record.acquired_at,
        remaining_quantity=record.remaining_quantity,
    )


class LotRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, user_id: uuid.UUID, lot: Lot) -> LotRecord:
        record = LotRecord(
            id=lot.id,
            user_id=user_id,
            quantity=lot.quantity,
            remaining_quantity=lot.remaining_quantity,
            cost_basis_per_unit=lot.cost_basis_per_unit,
            acquired_at=lot.acquired_at,
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def get_by_id(self, lot_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Optional[LotRecord]:
        stmt = select(LotRecord).where(LotRecord.id == lot_id)
        if user_id is not None:
            stmt = stmt.where(LotRecord.user_id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def load_open_lots(self, user_id: uuid.UUID, as_of: Optional[datetime] = None) -> list[LotRecord]:
        """Lots with remaining quantity acquired on or before `as_of`, oldest first."""
        stmt = (
            select(LotRecord)
            .where(LotRecord.user_id == user_id, LotRecord.remaining_quantity > 0)
            .order_by(LotRecord.acquired_at.asc(), LotRecord.created_at.asc())
        )
        if as_of is not None:
            stmt = stmt.where(LotRecord.acquired_at <= to_naive_utc(as_of))
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self, user_id: uuid.UUID) -> list[LotRecord]:
        """Every lot for a user, including fully consumed ones."""
        result = await self._session.execute(
            select(LotRecord)
            .where(LotRecord.user_id == user_id)
            .order_by(LotRecord.acquired_at.asc())
        )
        return list(result.scalars().all())

    async def update_lot_remaining(
        self,
        lot_id: uuid.UUID,
        new_remaining: Decimal,
        expected_version: int,
    ) -> None:
        """Compare-and-set the remaining quantity; raises LedgerConflict if the row moved."""
        result = await self._session.execute(
            update(LotRecord)
            .where(LotRecord.id == lot_id, LotRecord.version == expected_version)
            .values(remaining_quantity=new_remaining, version=expected_version + 1)
        )
        if result.rowcount != 1:
            raise LedgerConflict(f"Lot {lot_id} changed concurrently (expected version {expected_version})")
