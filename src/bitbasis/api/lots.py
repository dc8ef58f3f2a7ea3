"""Lots API: record acquisitions and inspect the ledger."""

import uuid
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.accounting.tax_engine import TaxEngine
from bitbasis.api.deps import get_db, get_user_id
from bitbasis.api.schemas.lots import LotCreateRequest, LotResponse

router = APIRouter(prefix="/api/lots", tags=["lots"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
UserDep = Annotated[uuid.UUID, Depends(get_user_id)]


@router.post("", response_model=LotResponse, status_code=201)
async def add_lot(body: LotCreateRequest, db: DbDep, user_id: UserDep) -> LotResponse:
    engine = TaxEngine(db)
    lot = await engine.add_lot(user_id, body.to_lot())
    await db.commit()
    return LotResponse.model_validate(lot)


@router.get("", response_model=list[LotResponse])
async def list_lots(db: DbDep, user_id: UserDep) -> list[LotResponse]:
    """Every lot, fully consumed ones included."""
    lots = await TaxEngine(db).list_lots(user_id)
    return [LotResponse.model_validate(lot) for lot in lots]


@router.get("/open", response_model=list[LotResponse])
async def list_open_lots(
    db: DbDep,
    user_id: UserDep,
    as_of: Optional[datetime] = Query(None, description="Only lots acquired on or before this time"),
) -> list[LotResponse]:
    lots = await TaxEngine(db).list_open_lots(user_id, as_of=as_of)
    return [LotResponse.model_validate(lot) for lot in lots]
