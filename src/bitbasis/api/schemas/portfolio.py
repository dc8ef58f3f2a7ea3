from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class PortfolioSummaryResponse(BaseModel):
    as_of: datetime
    remaining_quantity: Decimal
    total_cost_basis: Decimal
    average_cost: Decimal
    current_price: Decimal
    current_value: Decimal
    unrealized_gain: Decimal
    unrealized_gain_percent: Decimal
    short_term_quantity: Decimal
    long_term_quantity: Decimal
    potential_short_term_liability: Decimal
    potential_long_term_liability: Decimal
    weighted_hodl_days: int
