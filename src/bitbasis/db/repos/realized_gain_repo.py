import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.db.models.realized_gain import RealizedGainRecord
from bitbasis.domain.enums.tax import HoldingTerm
from bitbasis.domain.models.tax import RealizedGainFragment, to_naive_utc


def fragment_from_record(record: RealizedGainRecord) -> RealizedGainFragment:
    return RealizedGainFragment(
        lot_id=record.lot_id,
        disposal_id=record.disposal_id,
        quantity_matched=record.quantity_matched,
        cost_basis=record.cost_basis,
        proceeds=record.proceeds,
        gain=record.gain,
        holding_period_days=record.holding_period_days,
        term=HoldingTerm(record.term),
        acquired_at=record.acquired_at,
        disposed_at=record.disposed_at,
    )


class RealizedGainRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save_fragments(
        self,
        user_id: uuid.UUID,
        fragments: list[RealizedGainFragment],
    ) -> list[RealizedGainRecord]:
        records = [
            RealizedGainRecord(
                user_id=user_id,
                lot_id=f.lot_id,
                disposal_id=f.disposal_id,
                sequence=idx,
                quantity_matched=f.quantity_matched,
                cost_basis=f.cost_basis,
                proceeds=f.proceeds,
                gain=f.gain,
                holding_period_days=f.holding_period_days,
                term=f.term.value,
                acquired_at=f.acquired_at,
                disposed_at=f.disposed_at,
            )
            for idx, f in enumerate(fragments)
        ]
        self._session.add_all(records)
        await self._session.flush()
        return records

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        term: Optional[HoldingTerm] = None,
    ) -> list[RealizedGainRecord]:
        stmt = (
            select(RealizedGainRecord)
            .where(RealizedGainRecord.user_id == user_id)
            .order_by(RealizedGainRecord.disposed_at.asc(), RealizedGainRecord.sequence.asc())
        )
        if date_from is not None:
            stmt = stmt.where(RealizedGainRecord.disposed_at >= to_naive_utc(date_from))
        if date_to is not None:
            stmt = stmt.where(RealizedGainRecord.disposed_at <= to_naive_utc(date_to))
        if term is not None:
            stmt = stmt.where(RealizedGainRecord.term == HoldingTerm(term).value)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_disposal(self, disposal_id: uuid.UUID) -> list[RealizedGainRecord]:
        result = await self._session.execute(
            select(RealizedGainRecord)
            .where(RealizedGainRecord.disposal_id == disposal_id)
            .order_by(RealizedGainRecord.sequence.asc())
        )
        return list(result.scalars().all())
