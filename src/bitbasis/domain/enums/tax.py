from enum import Enum


class TaxMethod(str, Enum):
    """Lot selection method used when matching a disposal."""

    FIFO = "fifo"
    LIFO = "lifo"
    HIFO = "hifo"


class HoldingTerm(str, Enum):
    """Capital-gains holding period classification."""

    SHORT = "short"
    LONG = "long"
