"""ReportDataCollector: gathers realized gains, open lots and liability for export."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.accounting.liability import estimate
from bitbasis.accounting.tax_engine import TaxEngine
from bitbasis.domain.models.tax import Lot, RealizedGainFragment, TaxLiability


@dataclass
class ReportData:
    """Row tuples for each sheet of the realized-gains workbook."""

    summary: list[tuple] = field(default_factory=list)
    realized_gains: list[tuple] = field(default_factory=list)
    open_lots: list[tuple] = field(default_factory=list)


def build_report_data(
    fragments: list[RealizedGainFragment],
    open_lots: list[Lot],
    liability: TaxLiability,
    short_term_rate: Decimal,
    long_term_rate: Decimal,
) -> ReportData:
    data = ReportData()

    for f in fragments:
        data.realized_gains.append((
            f.acquired_at,
            f.disposed_at,
            float(f.quantity_matched),
            float(f.proceeds),
            float(f.cost_basis),
            float(f.gain),
            f.holding_period_days,
            f.term.value.upper(),
        ))

    for lot in open_lots:
        data.open_lots.append((
            lot.acquired_at,
            float(lot.quantity),
            float(lot.remaining_quantity),
            float(lot.cost_basis_per_unit),
            float(lot.remaining_quantity * lot.cost_basis_per_unit),
        ))

    total_gain = sum((f.gain for f in fragments), Decimal(0))
    data.summary = [
        ("Disposal fragments", len(fragments)),
        ("Net realized gain (USD)", float(total_gain)),
        ("Short-term taxable gain (USD)", float(liability.short_term_gain)),
        ("Long-term taxable gain (USD)", float(liability.long_term_gain)),
        ("Short-term rate", float(short_term_rate)),
        ("Long-term rate", float(long_term_rate)),
        ("Short-term liability (USD)", float(liability.short_term_liability)),
        ("Long-term liability (USD)", float(liability.long_term_liability)),
        ("Total liability (USD)", float(liability.total_liability)),
        ("Open lots", len(open_lots)),
    ]
    return data


class ReportDataCollector:
    """Loads everything the workbook needs for one user and period."""

    def __init__(self, session: AsyncSession) -> None:
        self._engine = TaxEngine(session)

    async def collect(
        self,
        user_id: uuid.UUID,
        short_term_rate: Decimal,
        long_term_rate: Decimal,
        include_loss_offset: bool = False,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> ReportData:
        fragments = await self._engine.realized_gains(user_id, date_from=date_from, date_to=date_to)
        open_lots = await self._engine.list_open_lots(user_id)
        liability = estimate(fragments, short_term_rate, long_term_rate, include_loss_offset)
        return build_report_data(fragments, open_lots, liability, short_term_rate, long_term_rate)
