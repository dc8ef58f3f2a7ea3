"""Tax liability estimation over realized-gain fragments.

Stateless: every call recomputes from the fragments and rates it is given.
"""

from decimal import Decimal

from bitbasis.domain.enums.tax import HoldingTerm
from bitbasis.domain.models.tax import RealizedGainFragment, TaxLiability
from bitbasis.exceptions import InvalidRate


def validate_rate(rate: Decimal, name: str = "rate") -> Decimal:
    rate = Decimal(str(rate)) if not isinstance(rate, Decimal) else rate
    if not rate.is_finite():
        raise InvalidRate(f"{name} must be finite, got {rate}")
    if rate < 0:
        raise InvalidRate(f"{name} cannot be negative, got {rate}")
    return rate


def taxable_gain(gains: list[Decimal], include_loss_offset: bool = False) -> Decimal:
    """Taxable amount for one term bucket, never below zero."""
    if include_loss_offset:
        return max(sum(gains, Decimal(0)), Decimal(0))
    return sum((g for g in gains if g > 0), Decimal(0))


def estimate(
    fragments: list[RealizedGainFragment],
    short_term_rate: Decimal,
    long_term_rate: Decimal,
    include_loss_offset: bool = False,
) -> TaxLiability:
    """Estimate short- and long-term liability.

    Without loss offset, losing fragments are ignored. With it, losses net
    against gains inside the same term bucket only.
    """
    short_rate = validate_rate(short_term_rate, "short_term_rate")
    long_rate = validate_rate(long_term_rate, "long_term_rate")

    short_gains = [f.gain for f in fragments if f.term == HoldingTerm.SHORT]
    long_gains = [f.gain for f in fragments if f.term == HoldingTerm.LONG]

    short_taxable = taxable_gain(short_gains, include_loss_offset)
    long_taxable = taxable_gain(long_gains, include_loss_offset)

    return TaxLiability(
        short_term_gain=short_taxable,
        long_term_gain=long_taxable,
        short_term_liability=short_taxable * short_rate,
        long_term_liability=long_taxable * long_rate,
    )
