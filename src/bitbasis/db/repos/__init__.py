from bitbasis.db.repos.disposal_repo import DisposalRepo
from bitbasis.db.repos.lot_repo import LotRepo
from bitbasis.db.repos.realized_gain_repo import RealizedGainRepo

__all__ = ["DisposalRepo", "LotRepo", "RealizedGainRepo"]
