"""Portfolio metrics over the remaining (open) lots."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from bitbasis.accounting.liability import validate_rate
from bitbasis.accounting.term import classify, holding_period_days
from bitbasis.domain.enums.tax import HoldingTerm
from bitbasis.domain.models.tax import Lot, PortfolioSummary
from bitbasis.exceptions import InvalidPrice


def summarize_portfolio(
    open_lots: list[Lot],
    current_price: Decimal,
    as_of: datetime,
    short_term_rate: Decimal,
    long_term_rate: Decimal,
) -> PortfolioSummary:
    """Cost basis, unrealized gain, holding time and potential tax if every open lot were sold at `current_price`.

    Each lot is classified as of `as_of`; only lots sitting on a gain add to
    the potential liability.
    """
    if current_price is None or not current_price.is_finite() or current_price <= 0:
        raise InvalidPrice(f"Current price must be positive, got {current_price}")
    short_rate = validate_rate(short_term_rate, "short_term_rate")
    long_rate = validate_rate(long_term_rate, "long_term_rate")

    summary = PortfolioSummary(current_price=current_price)
    weighted_days = Decimal(0)

    for lot in open_lots:
        qty = lot.remaining_quantity
        if qty <= 0:
            continue
        cost = qty * lot.cost_basis_per_unit
        lot_gain = qty * current_price - cost
        term = classify(lot.acquired_at, as_of)
        weighted_days += qty * holding_period_days(lot.acquired_at, as_of)

        summary.remaining_quantity += qty
        summary.total_cost_basis += cost

        if term == HoldingTerm.LONG:
            summary.long_term_quantity += qty
            if lot_gain > 0:
                summary.potential_long_term_liability += lot_gain * long_rate
        else:
            summary.short_term_quantity += qty
            if lot_gain > 0:
                summary.potential_short_term_liability += lot_gain * short_rate

    summary.current_value = summary.remaining_quantity * current_price
    summary.unrealized_gain = summary.current_value - summary.total_cost_basis
    if summary.remaining_quantity > 0:
        summary.average_cost = summary.total_cost_basis / summary.remaining_quantity
        hodl = weighted_days / summary.remaining_quantity
        summary.weighted_hodl_days = int(hodl.to_integral_value(rounding=ROUND_HALF_UP))
    if summary.total_cost_basis > 0:
        summary.unrealized_gain_percent = summary.unrealized_gain / summary.total_cost_basis * 100
    return summary
