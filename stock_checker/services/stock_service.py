"""Stock price lookups combined with like counts."""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union
import asyncio
import logging

from stock_checker.providers import QuoteProvider
from stock_checker.services.errors import InvalidSymbolError
from stock_checker.services.like_service import LikeService
from stock_checker.services.ticker_store import TickerStore, validate_symbol


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OneSymbol:
    """Query for a single ticker."""
    symbol: str


@dataclass(frozen=True)
class TwoSymbols:
    """Query comparing two tickers."""
    first: str
    second: str


SymbolQuery = Union[OneSymbol, TwoSymbols]


def resolve_symbols(values: Optional[Sequence[str]]) -> SymbolQuery:
    """
    Turn the raw ``stock`` query values into a validated SymbolQuery.

    Values past the second are ignored.

    Raises:
        InvalidSymbolError: If no symbol is given or one is malformed
    """
    values = [value for value in (values or []) if value is not None]
    if not values:
        raise InvalidSymbolError("stock query param required")

    if len(values) == 1:
        return OneSymbol(validate_symbol(values[0]))

    if len(values) > 2:
        logger.debug(f"Ignoring extra stock values: {values[2:]}")

    return TwoSymbols(validate_symbol(values[0]), validate_symbol(values[1]))


class StockPriceService:
    """Service that records likes and shapes stock price responses."""

    def __init__(
        self,
        like_service: LikeService,
        store: TickerStore,
        quotes: QuoteProvider
    ):
        self.like_service = like_service
        self.store = store
        self.quotes = quotes

    async def get_stock_data(self, query: SymbolQuery, ip: Optional[str], like: bool):
        """Dispatch on the query shape."""
        if isinstance(query, TwoSymbols):
            return await self.get_pair(query.first, query.second, ip, like)
        return await self.get_single(query.symbol, ip, like)

    async def get_single(self, symbol: str, ip: Optional[str], like: bool) -> dict:
        """
        Return ``{"stock", "price", "likes"}`` for one ticker.

        The like is recorded before the quote is fetched; a failed quote
        lookup does not undo it.
        """
        symbol = validate_symbol(symbol)
        await self.like_service.record_like(symbol, ip, like)

        quote, likes = await asyncio.gather(
            self.quotes.get_quote(symbol),
            self.store.get_like_count(symbol)
        )

        return {
            "stock": quote.symbol,
            "price": quote.price,
            "likes": likes
        }

    async def get_pair(self, first: str, second: str, ip: Optional[str], like: bool) -> List[dict]:
        """
        Return two ``{"stock", "price", "rel_likes"}`` entries.

        ``rel_likes`` of the first entry is its likes minus the second's;
        the second entry carries the negation.
        """
        first = validate_symbol(first)
        second = validate_symbol(second)
        await self.like_service.record_likes([first, second], ip, like)

        quote_a, quote_b, likes_a, likes_b = await asyncio.gather(
            self.quotes.get_quote(first),
            self.quotes.get_quote(second),
            self.store.get_like_count(first),
            self.store.get_like_count(second)
        )

        rel_likes = likes_a - likes_b

        return [
            {"stock": quote_a.symbol, "price": quote_a.price, "rel_likes": rel_likes},
            {"stock": quote_b.symbol, "price": quote_b.price, "rel_likes": -rel_likes}
        ]
