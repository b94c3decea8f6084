"""Data models for price quotes."""
from dataclasses import dataclass


@dataclass
class Quote:
    """Latest price for a ticker."""
    symbol: str
    price: float
