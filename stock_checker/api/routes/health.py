"""Health check endpoint for liveness probes."""
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
import logging

from stock_checker.api.dependencies import get_ticker_store
from stock_checker.services import TickerStore, StorageError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
async def health_check(store: TickerStore = Depends(get_ticker_store)):
    """Round-trip to the database; ``ok`` or 500 ``db error``."""
    try:
        await store.ping()
    except StorageError as e:
        logger.error(f"Database health check failed: {e}")
        return PlainTextResponse("db error", status_code=500)
    
    return PlainTextResponse("ok")
