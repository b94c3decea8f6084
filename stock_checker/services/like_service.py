"""Like coordinator: at most one counted like per (symbol, IP) pair."""
from typing import Dict, Iterable, Optional
import asyncio
import logging

from stock_checker.services.ticker_store import TickerStore, validate_symbol


logger = logging.getLogger(__name__)

# Shared identity for every client whose address cannot be determined
UNKNOWN_IP = "unknown"


def normalize_ip(ip: Optional[str]) -> str:
    """Return the stripped IP, or the unknown-client marker if there is none."""
    if ip is None:
        return UNKNOWN_IP
    ip = ip.strip()
    return ip or UNKNOWN_IP


class LikeService:
    """Service for recording ticker likes against a TickerStore."""

    def __init__(self, store: TickerStore):
        self.store = store

    async def record_like(
        self,
        symbol: str,
        ip: Optional[str],
        like_requested: bool
    ) -> bool:
        """
        Make sure the ticker has a record and count the like if it is new.

        Args:
            symbol: Ticker symbol (validated and uppercased before any store call)
            ip: Client IP; missing values collapse into ``UNKNOWN_IP``
            like_requested: Whether the client asked to like the ticker

        Returns:
            True if this call incremented the like counter

        Raises:
            InvalidSymbolError: If the symbol is malformed
            StorageError: If the store fails
        """
        symbol = validate_symbol(symbol)
        ip = normalize_ip(ip)

        await self.store.ensure_exists(symbol)

        if not like_requested:
            return False

        record = await self.store.get_record(symbol)
        if record.has_liked(ip):
            logger.debug(f"{ip} already liked {symbol}")
            return False

        # The store re-checks membership atomically; a concurrent request
        # from the same IP may still win here.
        return await self.store.record_like_from_ip(symbol, ip)

    async def record_likes(
        self,
        symbols: Iterable[str],
        ip: Optional[str],
        like_requested: bool
    ) -> Dict[str, bool]:
        """Apply ``record_like`` independently to each symbol with the same IP."""
        symbols = [validate_symbol(symbol) for symbol in symbols]
        # Let every symbol finish before surfacing a failure
        results = await asyncio.gather(
            *(self.record_like(symbol, ip, like_requested) for symbol in symbols),
            return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        counted: Dict[str, bool] = {}
        for symbol, result in zip(symbols, results):
            # The same ticker may be passed twice
            counted[symbol] = counted.get(symbol, False) or result
        return counted
