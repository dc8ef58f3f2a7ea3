"""CoinGecko spot price provider for BTC/USD."""

import logging
from decimal import Decimal

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from bitbasis.exceptions import ExternalServiceError
from bitbasis.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

BASE_URL = "https://api.coingecko.com"
BITCOIN_ID = "bitcoin"
VS_CURRENCY = "usd"


class TransientPriceError(ExternalServiceError):
    """Rate limit, server error or transport failure. The only errors that are retried."""


class CoinGeckoProvider:
    """Fetch the current BTC price, retrying rate limits and server errors."""

    def __init__(self, http_client: RateLimitedClient, api_key: str = "") -> None:
        self._http = http_client
        self._api_key = api_key

    @retry(
        retry=retry_if_exception_type(TransientPriceError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def get_spot_price(self) -> Decimal:
        params: dict[str, str] = {"ids": BITCOIN_ID, "vs_currencies": VS_CURRENCY}
        if self._api_key:
            params["x_cg_demo_api_key"] = self._api_key

        try:
            response = await self._http.get(f"{BASE_URL}/api/v3/simple/price", params=params)
        except httpx.HTTPError as exc:
            raise TransientPriceError(f"CoinGecko request failed: {exc}") from exc

        if response.status_code == 429 or response.status_code >= 500:
            logger.info("CoinGecko returned %d, retrying", response.status_code)
            raise TransientPriceError(f"CoinGecko returned {response.status_code}")

        if response.status_code != 200:
            logger.warning("CoinGecko returned %d for spot price", response.status_code)
            raise ExternalServiceError(f"CoinGecko returned {response.status_code}")

        price = response.json().get(BITCOIN_ID, {}).get(VS_CURRENCY)
        if price is None:
            raise ExternalServiceError("CoinGecko response missing bitcoin/usd price")
        return Decimal(str(price))
