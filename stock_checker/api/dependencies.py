"""FastAPI dependencies resolving the collaborators built at startup."""
from fastapi import Request

from stock_checker.core.config import settings
from stock_checker.services import StockPriceService, TickerStore, UNKNOWN_IP


def get_ticker_store(request: Request) -> TickerStore:
    """Ticker store created by the startup hook."""
    return request.app.state.ticker_store


def get_stock_price_service(request: Request) -> StockPriceService:
    """Stock price service created by the startup hook."""
    return request.app.state.stock_price_service


def get_client_ip(request: Request) -> str:
    """
    Determine the client IP used for like deduplication.
    
    Takes the first X-Forwarded-For entry when proxies are trusted, then the
    socket peer, and falls back to the shared unknown-client marker.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    
    if request.client and request.client.host:
        return request.client.host
    
    return UNKNOWN_IP
