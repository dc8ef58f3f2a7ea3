"""Pydantic schemas for the lots API."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from bitbasis.domain.models.tax import Lot
from bitbasis.exceptions import InvalidLot


class LotCreateRequest(BaseModel):
    id: uuid.UUID | None = None
    quantity: Decimal
    acquired_at: datetime
    # Either a per-unit cost basis, or the fiat spent (plus optional USD fee)
    cost_basis_per_unit: Decimal | None = None
    fiat_spent: Decimal | None = None
    fee: Decimal = Decimal(0)

    def to_lot(self) -> Lot:
        if self.cost_basis_per_unit is not None:
            return Lot(
                id=self.id or uuid.uuid4(),
                quantity=self.quantity,
                cost_basis_per_unit=self.cost_basis_per_unit,
                acquired_at=self.acquired_at,
            )
        if self.fiat_spent is not None:
            return Lot.from_purchase(
                quantity=self.quantity,
                fiat_spent=self.fiat_spent,
                acquired_at=self.acquired_at,
                fee=self.fee,
                lot_id=self.id,
            )
        raise InvalidLot("Either cost_basis_per_unit or fiat_spent is required")


class LotResponse(BaseModel):
    id: uuid.UUID
    quantity: Decimal
    remaining_quantity: Decimal
    cost_basis_per_unit: Decimal
    acquired_at: datetime

    model_config = {"from_attributes": True}
