"""Models package initialization."""
from stock_checker.models.stock_like import StockLike, TickerRecord

__all__ = [
    "StockLike",
    "TickerRecord"
]
