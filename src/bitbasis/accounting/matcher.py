"""Disposal matching: FIFO, LIFO and HIFO lot selection.

Matching is all-or-nothing: the full plan is built against the open lots
before the ledger is touched, so an InsufficientBasis failure leaves every
lot exactly as it was.
"""

import logging
from decimal import Decimal

from bitbasis.accounting.ledger import LotLedger
from bitbasis.accounting.term import classify, holding_period_days
from bitbasis.domain.enums.tax import TaxMethod
from bitbasis.domain.models.tax import (
    QUANTITY_QUANTUM,
    Disposal,
    Lot,
    RealizedGainFragment,
    fits_quantity_scale,
    quantize_money,
)
from bitbasis.exceptions import InsufficientBasis, InvalidDisposal

logger = logging.getLogger(__name__)

AVERAGE_COST = "average_cost"


def order_candidates(lots: list[Lot], method: TaxMethod) -> list[Lot]:
    """Order open lots in the sequence `method` consumes them.

    Input is expected oldest-first (as returned by LotLedger.list_open_lots);
    all sorts are stable so equal keys keep that order.
    """
    method = TaxMethod(method)
    if method == TaxMethod.FIFO:
        return sorted(lots, key=lambda lot: lot.acquired_at)
    if method == TaxMethod.LIFO:
        return sorted(lots, key=lambda lot: lot.acquired_at, reverse=True)
    # HIFO: highest cost first, older lot wins a tie
    by_age = sorted(lots, key=lambda lot: lot.acquired_at)
    return sorted(by_age, key=lambda lot: lot.cost_basis_per_unit, reverse=True)


def _validate_disposal(disposal: Disposal) -> None:
    if disposal.quantity <= 0:
        raise InvalidDisposal(f"Disposal quantity must be positive, got {disposal.quantity}")
    if not fits_quantity_scale(disposal.quantity):
        raise InvalidDisposal(f"Disposal quantity {disposal.quantity} is finer than {QUANTITY_QUANTUM} BTC")
    if disposal.proceeds_per_unit < 0:
        raise InvalidDisposal(f"Disposal proceeds cannot be negative, got {disposal.proceeds_per_unit}")


def plan_disposal(
    candidates: list[Lot],
    disposal: Disposal,
    method: TaxMethod,
) -> list[RealizedGainFragment]:
    """Compute fragments for `disposal` without mutating any lot."""
    _validate_disposal(disposal)

    available = sum((lot.remaining_quantity for lot in candidates), Decimal(0))
    if available < disposal.quantity:
        raise InsufficientBasis(disposal.quantity, available)

    fragments: list[RealizedGainFragment] = []
    outstanding = disposal.quantity

    for lot in order_candidates(candidates, method):
        if outstanding <= 0:
            break
        match_qty = min(lot.remaining_quantity, outstanding)
        if match_qty <= 0:
            continue

        cost_basis = quantize_money(match_qty * lot.cost_basis_per_unit)
        proceeds = quantize_money(match_qty * disposal.proceeds_per_unit)

        fragments.append(RealizedGainFragment(
            lot_id=lot.id,
            disposal_id=disposal.id,
            quantity_matched=match_qty,
            cost_basis=cost_basis,
            proceeds=proceeds,
            gain=proceeds - cost_basis,
            holding_period_days=holding_period_days(lot.acquired_at, disposal.disposed_at),
            term=classify(lot.acquired_at, disposal.disposed_at),
            acquired_at=lot.acquired_at,
            disposed_at=disposal.disposed_at,
        ))
        outstanding -= match_qty

    return fragments


def match_disposal(
    ledger: LotLedger,
    disposal: Disposal,
    method: TaxMethod,
) -> list[RealizedGainFragment]:
    """Match a disposal against the ledger and commit the consumption.

    Returns fragments in consumption order.
    """
    candidates = ledger.list_open_lots(as_of=disposal.disposed_at)
    fragments = plan_disposal(candidates, disposal, method)

    for fragment in fragments:
        ledger.apply_consumption(fragment.lot_id, fragment.quantity_matched)

    logger.info(
        "Matched disposal %s (%s BTC, %s) across %d lots",
        disposal.id, disposal.quantity, TaxMethod(method).value, len(fragments),
    )
    return fragments


def replay_history(
    lots: list[Lot],
    disposals: list[Disposal],
    method: TaxMethod,
) -> tuple[list[RealizedGainFragment], LotLedger]:
    """Rebuild a ledger from a full history and match every disposal in date order.

    Input lots are copied; callers keep their originals untouched.
    """
    ledger = LotLedger([lot.model_copy() for lot in lots])
    fragments: list[RealizedGainFragment] = []
    for disposal in sorted(disposals, key=lambda d: d.disposed_at):
        fragments.extend(match_disposal(ledger, disposal, method))
    return fragments, ledger


def average_cost_gain(lots: list[Lot], disposals: list[Disposal]) -> Decimal:
    """Realized gain if every BTC sold cost the average of everything bought.

    Comparison-only: no lot is consumed, so there are no fragments.
    """
    for disposal in disposals:
        _validate_disposal(disposal)
    bought = sum((lot.quantity for lot in lots), Decimal(0))
    sold = sum((d.quantity for d in disposals), Decimal(0))
    if sold > bought:
        raise InsufficientBasis(sold, bought)
    if sold == 0:
        return Decimal(0)

    total_cost = sum((lot.quantity * lot.cost_basis_per_unit for lot in lots), Decimal(0))
    proceeds = sum((quantize_money(d.quantity * d.proceeds_per_unit) for d in disposals), Decimal(0))
    return proceeds - quantize_money(total_cost * sold / bought)


def compare_methods(lots: list[Lot], disposals: list[Disposal]) -> dict[str, Decimal]:
    """Total realized gain under each lot-selection method, plus average cost."""
    totals: dict[str, Decimal] = {}
    for method in TaxMethod:
        fragments, _ = replay_history(lots, disposals, method)
        totals[method] = sum((f.gain for f in fragments), Decimal(0))
    totals[AVERAGE_COST] = average_cost_gain(lots, disposals)
    return totals
