"""Gold price HTTP client and daily-cycle cache"""

import logging
import httpx
from datetime import datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from gold_ledger.domain.models import GoldQuote
from gold_ledger.domain.exceptions import GoldPriceUnavailableError, InvalidAmountError
from gold_ledger.domain.pricing import needs_refresh
from gold_ledger.domain.units import validate_amount
from gold_ledger.infrastructure.database.repositories import GoldPriceRepository
from gold_ledger.infrastructure.observability.metrics import (
    gold_price_cache_hits_counter,
    gold_price_fetch_failures_counter,
)
from gold_ledger.config import settings


class GoldPriceClient:
    """Client for the external gold price API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.gold_price_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def fetch_price(self) -> GoldQuote:
        """
        Fetch the current 24K price per gram in EGP.

        Raises:
            GoldPriceUnavailableError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/gold/price")
                response.raise_for_status()
                data = response.json()

                return GoldQuote(
                    price=validate_amount(float(data["price"]), "gold price"),
                    source_url=data.get("source_url"),
                    fetched_at=datetime.now(timezone.utc),
                    is_from_cache=False,
                )

            except httpx.TimeoutException as e:
                raise GoldPriceUnavailableError(f"Gold price API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise GoldPriceUnavailableError(f"Gold price API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise GoldPriceUnavailableError(f"Gold price API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, InvalidAmountError) as e:
                raise GoldPriceUnavailableError(f"Invalid gold price data: {e}") from e


class GoldPriceService:
    """
    Serve the daily gold rate with at most one fetch per cycle.

    Flow:
    1. Cached quote fetched during the current cycle → serve it
    2. Otherwise fetch, cache and serve the fresh quote
    3. Fetch failed → serve the stale cached quote, or the configured
       default price when nothing was ever cached
    """

    def __init__(
        self,
        repository: GoldPriceRepository,
        client: GoldPriceClient | None = None,
        cycle_hour: int | None = None,
        tz: str | None = None,
        default_price: float | None = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.repository = repository
        self.client = client or GoldPriceClient()
        self.cycle_hour = settings.gold_price_cycle_hour if cycle_hour is None else cycle_hour
        self.tz = ZoneInfo(tz or settings.gold_price_timezone)
        self.default_price = default_price or settings.default_gold_price
        self.clock = clock or (lambda: datetime.now(self.tz))

    async def current_quote(self, force_refresh: bool = False) -> GoldQuote:
        now = self.clock().astimezone(self.tz)
        cached = self.repository.load()

        if cached is not None and not force_refresh and not needs_refresh(cached, now, self.cycle_hour):
            gold_price_cache_hits_counter.inc()
            return cached

        try:
            quote = await self.client.fetch_price()
        except GoldPriceUnavailableError as e:
            gold_price_fetch_failures_counter.inc()
            logging.warning(f"Gold price refresh failed, serving fallback: {e}")
            if cached is not None:
                return cached
            return GoldQuote(price=self.default_price, fetched_at=now, is_from_cache=True)

        self.repository.store(quote)
        return quote
