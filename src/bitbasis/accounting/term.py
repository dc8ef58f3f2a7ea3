"""Short/long-term holding classification: pure functions, no clock access."""

from datetime import datetime

from bitbasis.domain.enums.tax import HoldingTerm
from bitbasis.domain.models.tax import to_naive_utc

# Long-term requires strictly more than one year of whole days (366+).
LONG_TERM_THRESHOLD_DAYS = 365


def holding_period_days(acquired_at: datetime, disposed_at: datetime) -> int:
    """Whole days between acquisition and disposal."""
    acquired = to_naive_utc(acquired_at)
    disposed = to_naive_utc(disposed_at)
    if disposed < acquired:
        raise ValueError(f"Disposal at {disposed.isoformat()} precedes acquisition at {acquired.isoformat()}")
    return (disposed - acquired).days


def classify(acquired_at: datetime, disposed_at: datetime) -> HoldingTerm:
    if holding_period_days(acquired_at, disposed_at) > LONG_TERM_THRESHOLD_DAYS:
        return HoldingTerm.LONG
    return HoldingTerm.SHORT


def is_short_term(acquired_at: datetime, reference: datetime) -> bool:
    """Badge helper: is a holding acquired at `acquired_at` still short-term at `reference`?"""
    return classify(acquired_at, reference) == HoldingTerm.SHORT
