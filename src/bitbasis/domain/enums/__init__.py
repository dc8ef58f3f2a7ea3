from bitbasis.domain.enums.tax import HoldingTerm, TaxMethod

__all__ = [
    "HoldingTerm",
    "TaxMethod",
]
