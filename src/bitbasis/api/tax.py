"""Tax API: disposal matching, realized gains, liability and term badges."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.accounting.matcher import compare_methods
from bitbasis.accounting.tax_engine import TaxEngine
from bitbasis.accounting.term import classify, holding_period_days, is_short_term
from bitbasis.api.deps import get_db, get_user_id
from bitbasis.api.schemas.tax import (
    CompareRequest,
    CompareResponse,
    DisposalRequest,
    DisposalResponse,
    FragmentResponse,
    LiabilityRequest,
    LiabilityResponse,
    MethodResult,
    TermResponse,
)
from bitbasis.config import settings
from bitbasis.db.repos.disposal_repo import DisposalRepo
from bitbasis.domain.enums.tax import HoldingTerm

router = APIRouter(prefix="/api/tax", tags=["tax"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
UserDep = Annotated[uuid.UUID, Depends(get_user_id)]


@router.post("/disposals", response_model=DisposalResponse, status_code=201)
async def create_disposal(body: DisposalRequest, db: DbDep, user_id: UserDep) -> DisposalResponse:
    """Match a disposal with the requested method and commit it atomically."""
    disposal = body.disposal.to_disposal()
    method = body.method or settings.default_tax_method
    engine = TaxEngine(db)
    try:
        fragments = await engine.dispose(user_id, disposal, method)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    return DisposalResponse(
        disposal_id=disposal.id,
        method=method,
        total_gain=sum((f.gain for f in fragments), Decimal(0)),
        fragments=[FragmentResponse.model_validate(f) for f in fragments],
    )


@router.get("/disposals/{disposal_id}/fragments", response_model=list[FragmentResponse])
async def get_disposal_fragments(disposal_id: uuid.UUID, db: DbDep, user_id: UserDep) -> list[FragmentResponse]:
    record = await DisposalRepo(db).get_by_id(disposal_id)
    if record is None or record.user_id != user_id:
        raise HTTPException(status_code=404, detail="Disposal not found")
    fragments = await TaxEngine(db).fragments_for_disposal(disposal_id)
    return [FragmentResponse.model_validate(f) for f in fragments]


@router.get("/realized-gains", response_model=list[FragmentResponse])
async def get_realized_gains(
    db: DbDep,
    user_id: UserDep,
    date_from: Optional[datetime] = Query(None, description="Filter by disposal date from"),
    date_to: Optional[datetime] = Query(None, description="Filter by disposal date to"),
    term: Optional[HoldingTerm] = Query(None),
) -> list[FragmentResponse]:
    fragments = await TaxEngine(db).realized_gains(user_id, date_from=date_from, date_to=date_to, term=term)
    return [FragmentResponse.model_validate(f) for f in fragments]


@router.post("/liability", response_model=LiabilityResponse)
async def estimate_liability(body: LiabilityRequest, db: DbDep, user_id: UserDep) -> LiabilityResponse:
    """Estimate liability over persisted fragments; omitted rates fall back to settings."""
    short_rate = body.short_term_rate if body.short_term_rate is not None else settings.short_term_rate
    long_rate = body.long_term_rate if body.long_term_rate is not None else settings.long_term_rate
    loss_offset = body.include_loss_offset if body.include_loss_offset is not None else settings.include_loss_offset

    result = await TaxEngine(db).estimate_liability(
        user_id,
        short_rate,
        long_rate,
        include_loss_offset=loss_offset,
        date_from=body.date_from,
        date_to=body.date_to,
    )
    return LiabilityResponse(
        short_term_rate=short_rate,
        long_term_rate=long_rate,
        include_loss_offset=loss_offset,
        short_term_gain=result.short_term_gain,
        long_term_gain=result.long_term_gain,
        short_term_liability=result.short_term_liability,
        long_term_liability=result.long_term_liability,
        total_liability=result.total_liability,
    )


@router.get("/term", response_model=TermResponse)
async def get_term(
    acquired_at: datetime = Query(..., description="Acquisition date of the holding"),
    reference: datetime = Query(..., description="Date to classify as of, usually today"),
) -> TermResponse:
    try:
        days = holding_period_days(acquired_at, reference)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TermResponse(
        acquired_at=acquired_at,
        reference=reference,
        holding_period_days=days,
        term=classify(acquired_at, reference),
        is_short_term=is_short_term(acquired_at, reference),
    )


@router.post("/compare", response_model=CompareResponse)
async def compare(body: CompareRequest) -> CompareResponse:
    """Realized gain of a what-if history under each method and average cost. Nothing is persisted."""
    lots = [lot.to_lot() for lot in body.lots]
    disposals = [d.to_disposal() for d in body.disposals]
    totals = compare_methods(lots, disposals)
    return CompareResponse(
        results=[
            MethodResult(method=getattr(name, "value", name), realized_gain=gain)
            for name, gain in totals.items()
        ]
    )
