"""
Async reference price client.

Looks up ``ASSET/USD`` last prices on a public REST venue for notional
value conversion, with an in-process TTL cache.

Features:
- Single session with connection pooling
- orjson for fast JSON parsing
- Stablecoins priced at 1 without a request
"""

import logging
import time
from decimal import Decimal
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from triarb.config.constants import (
    ENDPOINT_TICKER_PRICE,
    REFERENCE_FIAT,
    REFERENCE_PRICE_TIMEOUT_SECONDS,
    REFERENCE_PRICE_TTL_SECONDS,
    REFERENCE_PRICE_URL,
    REFERENCE_QUOTE,
    USD_STABLECOINS,
)
from triarb.exchange.models import SymbolPrice
from triarb.utils.math import ONE


logger = logging.getLogger(__name__)


class PriceSourceError(Exception):
    """Raised when a reference price cannot be fetched or parsed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ReferencePriceClient:
    """
    Reference USD prices from a Binance-compatible ticker endpoint.

    ``price("ETH/USD")`` requests ``ETHUSDT`` and treats USDT as USD.
    Failures are logged and reported as ``None`` so a missing price
    only drops the candidate that needed it.
    """

    def __init__(
        self,
        base_url: str = REFERENCE_PRICE_URL,
        ttl_seconds: float = REFERENCE_PRICE_TTL_SECONDS,
        timeout_seconds: float = REFERENCE_PRICE_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Venue base URL.
            ttl_seconds: How long a fetched price is reused.
            timeout_seconds: Total request timeout.
        """
        self._base_url = base_url.rstrip("/")
        self._ttl = ttl_seconds
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None
        self._cache: dict[str, tuple[Decimal, float]] = {}

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=20,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(connector=connector, timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def price(self, pair: str) -> Decimal | None:
        """
        Get the last USD price of an asset.

        Args:
            pair: ``ASSET/USD`` pair.

        Returns:
            Price, or None when it could not be obtained.
        """
        asset, _, fiat = pair.upper().partition("/")
        if fiat and fiat != REFERENCE_FIAT:
            logger.warning(f"Unsupported reference pair {pair}")
            return None

        if asset in USD_STABLECOINS:
            return ONE

        cached = self._cache.get(asset)
        now = time.monotonic()
        if cached is not None and cached[1] > now:
            return cached[0]

        try:
            value = await self._fetch_price(asset)
        except PriceSourceError as e:
            logger.warning(f"Reference price for {pair} unavailable: {e}")
            return None

        self._cache[asset] = (value, now + self._ttl)
        return value

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _fetch_price(self, asset: str) -> Decimal:
        """Fetch one asset's price against the reference quote."""
        data = await self._get_json(ENDPOINT_TICKER_PRICE, {"symbol": f"{asset}{REFERENCE_QUOTE}"})
        try:
            quote = SymbolPrice.model_validate(data)
        except ValidationError as e:
            raise PriceSourceError(f"Unexpected payload for {asset}: {e}") from e

        if quote.price <= 0:
            raise PriceSourceError(f"Non-positive price for {asset}: {quote.price}")
        return quote.price

    async def _get_json(self, endpoint: str, params: dict[str, str]) -> Any:
        """
        Make a GET request and parse the JSON body.

        Raises:
            PriceSourceError: On network, HTTP or decoding errors.
        """
        session = await self._get_session()
        url = f"{self._base_url}{endpoint}"

        try:
            async with session.get(url, params=params) as response:
                body = await response.read()
                status = response.status
        except (aiohttp.ClientError, TimeoutError) as e:
            raise PriceSourceError(f"Network error: {e}") from e

        if status >= 400:
            raise PriceSourceError(f"HTTP {status} from {endpoint}", status=status)

        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise PriceSourceError(f"Invalid JSON response: {e}") from e
