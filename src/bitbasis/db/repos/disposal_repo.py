import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.db.models.disposal import DisposalRecord
from bitbasis.domain.enums.tax import TaxMethod
from bitbasis.domain.models.tax import Disposal


class DisposalRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, user_id: uuid.UUID, disposal: Disposal, method: TaxMethod) -> DisposalRecord:
        record = DisposalRecord(
            id=disposal.id,
            user_id=user_id,
            quantity=disposal.quantity,
            proceeds_per_unit=disposal.proceeds_per_unit,
            disposed_at=disposal.disposed_at,
            method=TaxMethod(method).value,
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def get_by_id(self, disposal_id: uuid.UUID) -> Optional[DisposalRecord]:
        result = await self._session.execute(select(DisposalRecord).where(DisposalRecord.id == disposal_id))
        return result.scalar_one_or_none()
