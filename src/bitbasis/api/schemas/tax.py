"""Pydantic schemas for the tax API."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from bitbasis.api.schemas.lots import LotCreateRequest
from bitbasis.domain.enums.tax import HoldingTerm, TaxMethod
from bitbasis.domain.models.tax import Disposal
from bitbasis.exceptions import InvalidDisposal


class DisposalIn(BaseModel):
    id: uuid.UUID | None = None
    quantity: Decimal
    disposed_at: datetime
    # Either per-unit proceeds, or the total fiat received
    proceeds_per_unit: Decimal | None = None
    fiat_received: Decimal | None = None

    def to_disposal(self) -> Disposal:
        if self.proceeds_per_unit is not None:
            return Disposal(
                id=self.id or uuid.uuid4(),
                quantity=self.quantity,
                proceeds_per_unit=self.proceeds_per_unit,
                disposed_at=self.disposed_at,
            )
        if self.fiat_received is not None:
            return Disposal.from_sale(
                quantity=self.quantity,
                fiat_received=self.fiat_received,
                disposed_at=self.disposed_at,
                disposal_id=self.id,
            )
        raise InvalidDisposal("Either proceeds_per_unit or fiat_received is required")


class DisposalRequest(BaseModel):
    method: TaxMethod | None = None  # None = configured default
    disposal: DisposalIn


class FragmentResponse(BaseModel):
    lot_id: uuid.UUID
    disposal_id: uuid.UUID
    quantity_matched: Decimal
    cost_basis: Decimal
    proceeds: Decimal
    gain: Decimal
    holding_period_days: int
    term: HoldingTerm
    acquired_at: datetime
    disposed_at: datetime

    model_config = {"from_attributes": True}


class DisposalResponse(BaseModel):
    disposal_id: uuid.UUID
    method: TaxMethod
    total_gain: Decimal
    fragments: list[FragmentResponse]


class LiabilityRequest(BaseModel):
    short_term_rate: Decimal | None = None  # None = configured default
    long_term_rate: Decimal | None = None
    include_loss_offset: bool | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class LiabilityResponse(BaseModel):
    short_term_rate: Decimal
    long_term_rate: Decimal
    include_loss_offset: bool
    short_term_gain: Decimal
    long_term_gain: Decimal
    short_term_liability: Decimal
    long_term_liability: Decimal
    total_liability: Decimal


class TermResponse(BaseModel):
    acquired_at: datetime
    reference: datetime
    holding_period_days: int
    term: HoldingTerm
    is_short_term: bool


class CompareRequest(BaseModel):
    lots: list[LotCreateRequest]
    disposals: list[DisposalIn]


class MethodResult(BaseModel):
    method: str  # a TaxMethod value or "average_cost"
    realized_gain: Decimal


class CompareResponse(BaseModel):
    results: list[MethodResult]
