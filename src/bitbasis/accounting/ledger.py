"""In-memory lot ledger for a single user.

The ledger is the only place a lot's remaining quantity changes. Consumed
lots stay in the ledger so realized-gain fragments can always be traced back
to their acquisition.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal

from bitbasis.domain.models.tax import QUANTITY_QUANTUM, Lot, fits_quantity_scale, to_naive_utc
from bitbasis.exceptions import InsufficientLotQuantity, InvalidLot, LotNotFound

logger = logging.getLogger(__name__)


def validate_lot(lot: Lot) -> None:
    """Reject a lot before it reaches any ledger or store."""
    if not lot.quantity.is_finite() or lot.quantity <= 0:
        raise InvalidLot(f"Lot quantity must be positive, got {lot.quantity}")
    if not fits_quantity_scale(lot.quantity):
        raise InvalidLot(f"Lot quantity {lot.quantity} is finer than {QUANTITY_QUANTUM} BTC")
    if not lot.cost_basis_per_unit.is_finite() or lot.cost_basis_per_unit <= 0:
        raise InvalidLot(f"Lot cost basis must be positive, got {lot.cost_basis_per_unit}")
    if not (0 <= lot.remaining_quantity <= lot.quantity):
        raise InvalidLot(
            f"Lot remaining quantity {lot.remaining_quantity} outside [0, {lot.quantity}]"
        )


class LotLedger:
    def __init__(self, lots: list[Lot] | None = None) -> None:
        self._lots: dict[uuid.UUID, Lot] = {}
        for lot in lots or []:
            self.add_lot(lot)

    @property
    def lots(self) -> list[Lot]:
        """All lots in insertion order, including fully consumed ones."""
        return list(self._lots.values())

    def get(self, lot_id: uuid.UUID) -> Lot:
        lot = self._lots.get(lot_id)
        if lot is None:
            raise LotNotFound(f"Lot {lot_id} not in ledger")
        return lot

    def add_lot(self, lot: Lot) -> Lot:
        validate_lot(lot)
        if lot.id in self._lots:
            raise InvalidLot(f"Duplicate lot id {lot.id}")

        self._lots[lot.id] = lot
        return lot

    def list_open_lots(self, as_of: datetime | None = None) -> list[Lot]:
        """Lots with remaining quantity acquired on or before `as_of`, oldest first."""
        cutoff = to_naive_utc(as_of) if as_of is not None else None
        open_lots = [
            lot for lot in self._lots.values()
            if lot.remaining_quantity > 0 and (cutoff is None or lot.acquired_at <= cutoff)
        ]
        # sorted() is stable, so insertion order breaks timestamp ties
        return sorted(open_lots, key=lambda lot: lot.acquired_at)

    def total_remaining(self, as_of: datetime | None = None) -> Decimal:
        return sum((lot.remaining_quantity for lot in self.list_open_lots(as_of)), Decimal(0))

    def apply_consumption(self, lot_id: uuid.UUID, quantity: Decimal) -> Lot:
        lot = self.get(lot_id)
        if quantity <= 0:
            raise InvalidLot(f"Consumption must be positive, got {quantity}")
        if quantity > lot.remaining_quantity:
            raise InsufficientLotQuantity(
                f"Lot {lot_id} has {lot.remaining_quantity} remaining, cannot consume {quantity}"
            )
        lot.remaining_quantity -= quantity
        logger.debug("Consumed %s from lot %s (%s left)", quantity, lot_id, lot.remaining_quantity)
        return lot
