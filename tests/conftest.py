"""Shared pytest fixtures for like-tracking tests."""
import asyncio
import pytest
from collections import defaultdict
from typing import Dict, List

from stock_checker.models import TickerRecord
from stock_checker.providers import QuoteProvider, QuoteLookupError
from stock_checker.providers.models import Quote
from stock_checker.services import TickerStore, LikeService, StockPriceService


class InMemoryTickerStore(TickerStore):
    """TickerStore fake guarding each symbol with its own asyncio lock.

    Every operation yields to the event loop so concurrent callers really
    interleave.
    """

    def __init__(self):
        self.rows: Dict[str, dict] = {}
        self.locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.calls: List[str] = []

    def _ensure(self, symbol: str) -> dict:
        return self.rows.setdefault(symbol, {"likes": 0, "ips": []})

    async def ensure_exists(self, symbol: str) -> None:
        self.calls.append("ensure_exists")
        await asyncio.sleep(0)
        self._ensure(symbol.upper())

    async def get_like_count(self, symbol: str) -> int:
        self.calls.append("get_like_count")
        await asyncio.sleep(0)
        return self._ensure(symbol.upper())["likes"]

    async def get_record(self, symbol: str) -> TickerRecord:
        self.calls.append("get_record")
        await asyncio.sleep(0)
        row = self._ensure(symbol.upper())
        return TickerRecord(symbol=symbol.upper(), likes=row["likes"], seen_ips=frozenset(row["ips"]))

    async def record_like_from_ip(self, symbol: str, ip: str) -> bool:
        self.calls.append("record_like_from_ip")
        symbol = symbol.upper()
        async with self.locks[symbol]:
            row = self._ensure(symbol)
            await asyncio.sleep(0)
            if ip in row["ips"]:
                return False
            row["likes"] += 1
            row["ips"].append(ip)
            return True

    async def ping(self) -> None:
        self.calls.append("ping")

    def seed(self, symbol: str, ips: List[str]):
        """Preload a record as if ``ips`` had each liked ``symbol``."""
        self.rows[symbol] = {"likes": len(ips), "ips": list(ips)}


class StubQuoteProvider(QuoteProvider):
    """QuoteProvider answering from a fixed price table."""

    def __init__(self, prices: Dict[str, float]):
        self.prices = prices
        self.requested: List[str] = []

    async def get_quote(self, symbol: str) -> Quote:
        self.requested.append(symbol)
        if symbol not in self.prices:
            raise QuoteLookupError(f"No quote for {symbol}: 'Unknown symbol'")
        return Quote(symbol=symbol, price=self.prices[symbol])


@pytest.fixture
def memory_store():
    """Fresh in-memory ticker store."""
    return InMemoryTickerStore()


@pytest.fixture
def quote_provider():
    """Quote provider with a few well-known tickers."""
    return StubQuoteProvider({"GOOG": 786.9, "MSFT": 62.3, "AAPL": 150.25})


@pytest.fixture
def like_service(memory_store):
    return LikeService(memory_store)


@pytest.fixture
def stock_price_service(like_service, memory_store, quote_provider):
    return StockPriceService(like_service, memory_store, quote_provider)
