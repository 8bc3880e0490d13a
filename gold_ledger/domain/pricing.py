"""Daily gold price cycle rules"""

from datetime import datetime
from typing import Optional

from gold_ledger.domain.models import GoldQuote
from gold_ledger.utils.date_utils import cycle_start


def needs_refresh(cached: Optional[GoldQuote], now: datetime, anchor_hour: int) -> bool:
    """
    A cached quote is good for the whole cycle it was fetched in.

    Cycles run 24 hours starting at anchor_hour, so at most one fetch
    happens per cycle.
    """
    if cached is None:
        return True
    return cached.fetched_at < cycle_start(now, anchor_hour)
