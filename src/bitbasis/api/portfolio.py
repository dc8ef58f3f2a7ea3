"""Portfolio API: cost basis and unrealized gain of the remaining holdings."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.accounting.tax_engine import TaxEngine
from bitbasis.api.deps import get_db, get_price_provider, get_user_id
from bitbasis.api.schemas.portfolio import PortfolioSummaryResponse
from bitbasis.config import settings
from bitbasis.infra.price.coingecko import CoinGeckoProvider

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
UserDep = Annotated[uuid.UUID, Depends(get_user_id)]


@router.get("/summary", response_model=PortfolioSummaryResponse)
async def get_portfolio_summary(
    db: DbDep,
    user_id: UserDep,
    price_provider: CoinGeckoProvider = Depends(get_price_provider),
    current_price: Optional[Decimal] = Query(None, gt=0, description="BTC price in USD; spot price if omitted"),
    as_of: Optional[datetime] = Query(None, description="Reference date for term classification; now if omitted"),
) -> PortfolioSummaryResponse:
    if current_price is None:
        current_price = await price_provider.get_spot_price()
    reference = as_of or datetime.now(timezone.utc)

    summary = await TaxEngine(db).portfolio_summary(
        user_id,
        current_price,
        reference,
        settings.short_term_rate,
        settings.long_term_rate,
    )
    return PortfolioSummaryResponse(as_of=reference, **summary.model_dump())
