"""Services package initialization."""
from stock_checker.services.errors import StorageError, InvalidSymbolError
from stock_checker.services.ticker_store import TickerStore, SqlTickerStore, validate_symbol
from stock_checker.services.like_service import LikeService, UNKNOWN_IP
from stock_checker.services.stock_service import (
    StockPriceService,
    OneSymbol,
    TwoSymbols,
    resolve_symbols
)

__all__ = [
    "StorageError",
    "InvalidSymbolError",
    "TickerStore",
    "SqlTickerStore",
    "validate_symbol",
    "LikeService",
    "UNKNOWN_IP",
    "StockPriceService",
    "OneSymbol",
    "TwoSymbols",
    "resolve_symbols"
]
