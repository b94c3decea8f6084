"""Stock price and like API routes."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
import logging

from stock_checker.api.dependencies import get_client_ip, get_stock_price_service
from stock_checker.services import StockPriceService, InvalidSymbolError, resolve_symbols

router = APIRouter(prefix="/api", tags=["stock-prices"])
logger = logging.getLogger(__name__)


def parse_like_flag(like: Optional[str]) -> bool:
    """Only an explicit ``true`` (or ``1``) asks for a like."""
    if like is None:
        return False
    return like.strip().lower() in ("true", "1")


@router.get("/stock-prices")
async def get_stock_prices(
    stock: Optional[List[str]] = Query(None),
    like: Optional[str] = None,
    client_ip: str = Depends(get_client_ip),
    service: StockPriceService = Depends(get_stock_price_service)
):
    """
    Get price and likes for one ticker, or prices and relative likes for two.
    
    ?stock=GOOG              -> {"stockData": {"stock", "price", "likes"}}
    ?stock=GOOG&like=true
    ?stock=GOOG&stock=MSFT   -> {"stockData": [{"stock", "price", "rel_likes"}, ...]}
    
    With like=true the like applies to both tickers.
    """
    try:
        query = resolve_symbols(stock)
    except InvalidSymbolError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    stock_data = await service.get_stock_data(query, client_ip, parse_like_flag(like))
    
    return {"stockData": stock_data}
