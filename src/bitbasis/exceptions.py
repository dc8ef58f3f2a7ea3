"""Domain error taxonomy for the tax-lot engine."""


class BitBasisError(Exception):
    """Base class for every error raised by the engine."""


class InvalidLot(BitBasisError):
    """A lot was rejected on insertion (non-positive quantity or cost basis)."""


class InvalidDisposal(BitBasisError):
    """A disposal has a non-positive quantity or negative proceeds."""


class InsufficientBasis(BitBasisError):
    """Open lots as of the disposal date cannot cover the disposal quantity."""

    def __init__(self, requested, available) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"Disposal of {requested} exceeds open quantity {available}")


class InsufficientLotQuantity(BitBasisError):
    """Direct consumption of more than a lot's remaining quantity.

    Signals a logic defect in the caller, never a user error.
    """


class LotNotFound(BitBasisError):
    pass


class LedgerConflict(BitBasisError):
    """A concurrent request changed a lot between read and write."""


class InvalidRate(BitBasisError):
    """A tax rate is negative or not finite."""


class InvalidPrice(BitBasisError):
    pass


class ExternalServiceError(BitBasisError):
    """An upstream HTTP provider failed in a retriable way."""
