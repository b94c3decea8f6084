"""freeCodeCamp stock price proxy quote provider implementation."""
import httpx
from typing import Optional
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
import logging
from stock_checker.providers import QuoteProvider, QuoteLookupError
from stock_checker.providers.models import Quote
from stock_checker.core.config import settings


logger = logging.getLogger(__name__)


class FccProxyProvider(QuoteProvider):
    """Quote provider backed by the freeCodeCamp IEX proxy."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None
    ):
        self.base_url = (base_url or settings.quote_base_url).rstrip("/")
        self.max_attempts = settings.quote_max_attempts if max_attempts is None else max_attempts
        self.timeout = settings.quote_timeout_seconds if timeout is None else timeout
        self.client = httpx.AsyncClient(timeout=self.timeout)

    async def _make_request(self, url: str):
        """Make HTTP request, re-attempting transport failures only.

        With the default of a single attempt nothing is retried. HTTP
        errors (4xx, 5xx) are never retried.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        ):
            with attempt:
                response = await self.client.get(url)
                response.raise_for_status()
                return response.json()

    async def get_quote(self, symbol: str) -> Quote:
        """
        Fetch the latest price from the proxy.

        The proxy answers ``{"symbol": ..., "latestPrice": ...}`` for known
        tickers and a bare string such as ``"Unknown symbol"`` otherwise.
        """
        url = f"{self.base_url}/v1/stock/{symbol}/quote"

        try:
            data = await self._make_request(url)
            return self._parse_quote(symbol, data)
        except QuoteLookupError:
            raise
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise QuoteLookupError(
                    "Quote proxy rate limit exceeded (429). Please wait before making more requests."
                )
            raise QuoteLookupError(f"Quote proxy error: {str(e)}")
        except httpx.TimeoutException as e:
            raise QuoteLookupError(f"Quote proxy timeout: {str(e)}")
        except httpx.HTTPError as e:
            raise QuoteLookupError(f"Quote proxy connection error: {str(e)}")
        except ValueError as e:
            raise QuoteLookupError(f"Quote proxy returned invalid JSON: {str(e)}")

    def _parse_quote(self, symbol: str, data) -> Quote:
        """Turn a proxy payload into a Quote."""
        if not isinstance(data, dict):
            raise QuoteLookupError(f"No quote for {symbol}: {data!r}")

        latest_price = data.get("latestPrice")
        if latest_price is None:
            raise QuoteLookupError(f"No price data for {symbol}")

        try:
            price = float(latest_price)
        except (TypeError, ValueError):
            raise QuoteLookupError(f"Unparseable price for {symbol}: {latest_price!r}")

        return Quote(
            symbol=str(data.get("symbol") or symbol).upper(),
            price=price
        )

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
