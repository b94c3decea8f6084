"""API routes package initialization."""
from stock_checker.api.routes import health, stock_prices

__all__ = ["health", "stock_prices"]
