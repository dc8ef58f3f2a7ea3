"""Domain types for lot accounting, realized gains and tax liability."""

import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bitbasis.domain.enums.tax import HoldingTerm

# USD amounts are held to 8 places, quantities to 18; both match the column scales
MONEY_QUANTUM = Decimal("0.00000001")
QUANTITY_QUANTUM = Decimal("0.000000000000000001")


def quantize_money(value: Decimal) -> Decimal:
    """Round a USD amount to MONEY_QUANTUM. Non-finite values pass through for validation."""
    if not value.is_finite():
        return value
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_EVEN)


def fits_quantity_scale(value: Decimal) -> bool:
    return value.is_finite() and value.normalize().as_tuple().exponent >= QUANTITY_QUANTUM.as_tuple().exponent


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class Lot(BaseModel):
    """A discrete acquisition of BTC with its own cost basis and date."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    quantity: Decimal
    cost_basis_per_unit: Decimal  # USD per BTC, fees included
    acquired_at: datetime
    remaining_quantity: Decimal | None = None  # None = untouched, set to quantity

    def model_post_init(self, __context) -> None:
        if self.remaining_quantity is None:
            self.remaining_quantity = self.quantity

    @field_validator("cost_basis_per_unit")
    @classmethod
    def _quantize_cost_basis(cls, value: Decimal) -> Decimal:
        return quantize_money(value)

    @field_validator("acquired_at")
    @classmethod
    def _normalize_acquired_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @classmethod
    def from_purchase(
        cls,
        quantity: Decimal,
        fiat_spent: Decimal,
        acquired_at: datetime,
        fee: Decimal = Decimal(0),
        lot_id: uuid.UUID | None = None,
    ) -> "Lot":
        """Build a lot from a buy, capitalising the USD fee into the cost basis."""
        per_unit = (fiat_spent + fee) / quantity if quantity > 0 else Decimal(0)
        return cls(
            id=lot_id or uuid.uuid4(),
            quantity=quantity,
            cost_basis_per_unit=per_unit,
            acquired_at=acquired_at,
        )

    @property
    def consumed_quantity(self) -> Decimal:
        return self.quantity - self.remaining_quantity

    @property
    def is_open(self) -> bool:
        return self.remaining_quantity > 0


class Disposal(BaseModel):
    """A sell or spend event removing BTC from the ledger."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    quantity: Decimal
    proceeds_per_unit: Decimal
    disposed_at: datetime

    @field_validator("proceeds_per_unit")
    @classmethod
    def _quantize_proceeds(cls, value: Decimal) -> Decimal:
        return quantize_money(value)

    @field_validator("disposed_at")
    @classmethod
    def _normalize_disposed_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @classmethod
    def from_sale(
        cls,
        quantity: Decimal,
        fiat_received: Decimal,
        disposed_at: datetime,
        disposal_id: uuid.UUID | None = None,
    ) -> "Disposal":
        per_unit = fiat_received / quantity if quantity > 0 else Decimal(0)
        return cls(
            id=disposal_id or uuid.uuid4(),
            quantity=quantity,
            proceeds_per_unit=per_unit,
            disposed_at=disposed_at,
        )


class RealizedGainFragment(BaseModel):
    """One disposal matched against one lot. Immutable audit record."""

    model_config = ConfigDict(frozen=True)

    lot_id: uuid.UUID
    disposal_id: uuid.UUID
    quantity_matched: Decimal
    cost_basis: Decimal  # quantity_matched * lot.cost_basis_per_unit
    proceeds: Decimal  # quantity_matched * disposal.proceeds_per_unit
    gain: Decimal  # proceeds - cost_basis
    holding_period_days: int
    term: HoldingTerm
    acquired_at: datetime
    disposed_at: datetime


class TaxLiability(BaseModel):
    """Estimated liability per holding term."""

    short_term_gain: Decimal = Decimal(0)
    long_term_gain: Decimal = Decimal(0)
    short_term_liability: Decimal = Decimal(0)
    long_term_liability: Decimal = Decimal(0)

    @property
    def total_liability(self) -> Decimal:
        return self.short_term_liability + self.long_term_liability


class PortfolioSummary(BaseModel):
    """Cost-basis and unrealized-gain metrics for the remaining holdings."""

    remaining_quantity: Decimal = Decimal(0)
    total_cost_basis: Decimal = Decimal(0)
    average_cost: Decimal = Decimal(0)
    current_price: Decimal = Decimal(0)
    current_value: Decimal = Decimal(0)
    unrealized_gain: Decimal = Decimal(0)
    unrealized_gain_percent: Decimal = Decimal(0)
    short_term_quantity: Decimal = Decimal(0)
    long_term_quantity: Decimal = Decimal(0)
    potential_short_term_liability: Decimal = Decimal(0)
    potential_long_term_liability: Decimal = Decimal(0)
    weighted_hodl_days: int = 0  # remaining-quantity-weighted days held, as of the summary date
