"""FastAPI application for stock prices and likes."""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from stock_checker.core.config import settings
from stock_checker.core.database import create_engine
from stock_checker.providers import QuoteLookupError
from stock_checker.providers.fcc_proxy import FccProxyProvider
from stock_checker.services import (
    SqlTickerStore,
    LikeService,
    StockPriceService,
    StorageError
)
from stock_checker.api.headers import (
    NO_CACHE_HEADERS,
    SECURITY_HEADERS,
    add_response_headers,
    internal_error_response
)
import logging
import time
import sys

# Import routers
from stock_checker.api.routes import health, stock_prices

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Stock Price Checker API", version="1.0.0")


@app.on_event("startup")
async def startup_event():
    """Build the database pool, quote client and services."""
    logger.info("Application starting up...")
    
    store = SqlTickerStore(create_engine(settings))
    
    if settings.auto_create_schema:
        try:
            await store.init_schema()
        except StorageError as e:
            # Keep serving; /health reports the database as down
            logger.error(f"✗ Failed to initialize schema: {e}", exc_info=True)
    
    quotes = FccProxyProvider()
    
    app.state.ticker_store = store
    app.state.quote_provider = quotes
    app.state.stock_price_service = StockPriceService(LikeService(store), store, quotes)
    
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Close the quote client and dispose of the database pool."""
    logger.info("Application shutting down...")
    
    quotes = getattr(app.state, "quote_provider", None)
    if quotes is not None:
        await quotes.close()
    
    store = getattr(app.state, "ticker_store", None)
    if store is not None:
        await store.close()


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests and responses."""
    start_time = time.time()
    
    # Log request
    logger.info(f"→ {request.method} {request.url.path}")
    logger.debug(f"  Query params: {dict(request.query_params)}")
    
    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        
        # Log response
        logger.info(f"← {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.3f}s")
        
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"← {request.method} {request.url.path} - ERROR after {process_time:.3f}s: {str(e)}")
        raise


app.middleware("http")(add_response_headers)


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    """Database failures surface as a generic server error."""
    logger.error(f"Storage error in {request.method} {request.url.path}: {exc}")
    
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.exception_handler(QuoteLookupError)
async def quote_exception_handler(request: Request, exc: QuoteLookupError):
    """Quote source failures; any like already counted stays counted."""
    logger.error(f"Quote lookup failed in {request.method} {request.url.path}: {exc}")
    
    return JSONResponse(
        status_code=502,
        content={"detail": "external source error"}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle exceptions raised outside the header middleware."""
    logger.error(f"Unhandled exception in {request.method} {request.url.path}")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Exception message: {str(exc)}", exc_info=True)
    
    response = internal_error_response(exc)
    response.headers.update({**SECURITY_HEADERS, **NO_CACHE_HEADERS})
    return response


# Configure CORS
logger.info(f"Configuring CORS with origins: {settings.cors_origins_list}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Include routers
app.include_router(health.router)
app.include_router(stock_prices.router)


@app.get("/")
async def root():
    """Service banner."""
    return {"status": "ok", "service": "stock-price-checker"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
