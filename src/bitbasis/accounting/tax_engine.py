"""TaxEngine: binds the pure lot accounting to the persistence layer.

Every mutating call runs inside the caller's AsyncSession transaction; the
caller commits on success and rolls back on any error.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.accounting.ledger import LotLedger, validate_lot
from bitbasis.accounting.liability import estimate, validate_rate
from bitbasis.accounting.matcher import match_disposal
from bitbasis.accounting.portfolio import summarize_portfolio
from bitbasis.db.repos.disposal_repo import DisposalRepo
from bitbasis.db.repos.lot_repo import LotRepo, lot_from_record
from bitbasis.db.repos.realized_gain_repo import RealizedGainRepo, fragment_from_record
from bitbasis.domain.enums.tax import HoldingTerm, TaxMethod
from bitbasis.domain.models.tax import (
    Disposal,
    Lot,
    PortfolioSummary,
    RealizedGainFragment,
    TaxLiability,
    to_naive_utc,
)
from bitbasis.exceptions import InvalidDisposal, InvalidLot

logger = logging.getLogger(__name__)


class TaxEngine:
    """Lot ledger, disposal matching and liability estimates for one user's store."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._lots = LotRepo(session)
        self._disposals = DisposalRepo(session)
        self._gains = RealizedGainRepo(session)

    async def add_lot(self, user_id: uuid.UUID, lot: Lot) -> Lot:
        validate_lot(lot)
        # ids are global, so another user's lot blocks reuse too
        if await self._lots.get_by_id(lot.id) is not None:
            raise InvalidLot(f"Lot {lot.id} already exists")
        await self._lots.add(user_id, lot)
        logger.info("Added lot %s for user %s: %s BTC @ %s", lot.id, user_id, lot.quantity, lot.cost_basis_per_unit)
        return lot

    async def list_open_lots(self, user_id: uuid.UUID, as_of: Optional[datetime] = None) -> list[Lot]:
        records = await self._lots.load_open_lots(user_id, as_of)
        return [lot_from_record(r) for r in records]

    async def list_lots(self, user_id: uuid.UUID) -> list[Lot]:
        records = await self._lots.list_all(user_id)
        return [lot_from_record(r) for r in records]

    async def dispose(
        self,
        user_id: uuid.UUID,
        disposal: Disposal,
        method: TaxMethod,
    ) -> list[RealizedGainFragment]:
        """Match a disposal against the user's open lots and stage the writes.

        Nothing is written if matching fails. Lot updates are version-checked,
        so a concurrent disposal for the same user raises LedgerConflict.
        """
        method = TaxMethod(method)
        if await self._disposals.get_by_id(disposal.id) is not None:
            raise InvalidDisposal(f"Disposal {disposal.id} already exists")
        records = await self._lots.load_open_lots(user_id, as_of=disposal.disposed_at)
        versions = {r.id: r.version for r in records}

        ledger = LotLedger([lot_from_record(r) for r in records])
        fragments = match_disposal(ledger, disposal, method)

        await self._disposals.add(user_id, disposal, method)
        for fragment in fragments:
            lot = ledger.get(fragment.lot_id)
            await self._lots.update_lot_remaining(lot.id, lot.remaining_quantity, versions[lot.id])
        await self._gains.save_fragments(user_id, fragments)

        logger.info(
            "Disposal %s for user %s: %s BTC matched %s, realized %s",
            disposal.id, user_id, disposal.quantity, method.value,
            sum((f.gain for f in fragments), Decimal(0)),
        )
        return fragments

    async def realized_gains(
        self,
        user_id: uuid.UUID,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        term: Optional[HoldingTerm] = None,
    ) -> list[RealizedGainFragment]:
        records = await self._gains.list_for_user(user_id, date_from=date_from, date_to=date_to, term=term)
        return [fragment_from_record(r) for r in records]

    async def fragments_for_disposal(self, disposal_id: uuid.UUID) -> list[RealizedGainFragment]:
        records = await self._gains.list_for_disposal(disposal_id)
        return [fragment_from_record(r) for r in records]

    async def estimate_liability(
        self,
        user_id: uuid.UUID,
        short_term_rate: Decimal,
        long_term_rate: Decimal,
        include_loss_offset: bool = False,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> TaxLiability:
        validate_rate(short_term_rate, "short_term_rate")
        validate_rate(long_term_rate, "long_term_rate")
        fragments = await self.realized_gains(user_id, date_from=date_from, date_to=date_to)
        return estimate(fragments, short_term_rate, long_term_rate, include_loss_offset)

    async def portfolio_summary(
        self,
        user_id: uuid.UUID,
        current_price: Decimal,
        as_of: datetime,
        short_term_rate: Decimal,
        long_term_rate: Decimal,
    ) -> PortfolioSummary:
        as_of = to_naive_utc(as_of)
        open_lots = await self.list_open_lots(user_id, as_of=as_of)
        return summarize_portfolio(open_lots, current_price, as_of, short_term_rate, long_term_rate)
