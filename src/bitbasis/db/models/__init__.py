from bitbasis.db.models.disposal import DisposalRecord
from bitbasis.db.models.lot import LotRecord
from bitbasis.db.models.realized_gain import RealizedGainRecord

__all__ = [
    "DisposalRecord",
    "LotRecord",
    "RealizedGainRecord",
]
