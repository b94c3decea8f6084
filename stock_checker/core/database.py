"""Database setup with async SQLAlchemy for PostgreSQL."""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from stock_checker.core.config import Settings
import logging
import re

logger = logging.getLogger(__name__)


# Mask password in database URL for logging
def mask_db_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:****@', url)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the process-wide async engine and its connection pool.
    
    The engine is owned by whoever calls this (the API startup hook or a
    script) and must be disposed by the same owner.
    """
    logger.info(f"Connecting to database: {mask_db_url(settings.database_url)}")
    logger.debug(f"Database URL scheme: {settings.database_url.split(':')[0]}")
    
    engine_args = {
        "echo": settings.log_level == "DEBUG",  # Log all SQL if DEBUG
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
    }
    
    if settings.database_url.startswith("postgresql+asyncpg"):
        # Bound connect and per-statement time on the server side as well
        engine_args["connect_args"] = {
            "timeout": settings.store_timeout_seconds,
            "command_timeout": settings.store_timeout_seconds,
        }
    
    logger.info(
        f"Configuring connection pool: pool_size={settings.db_pool_size}, "
        f"max_overflow={settings.db_max_overflow}, "
        f"pool_timeout={settings.db_pool_timeout}s, pool_recycle={settings.db_pool_recycle}s"
    )
    
    engine = create_async_engine(settings.database_url, **engine_args)
    
    logger.info("Database engine created with connection pooling enabled")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )


async def init_db(engine: AsyncEngine):
    """Initialize database tables."""
    # Models register themselves on Base.metadata when imported
    import stock_checker.models  # noqa: F401
    
    logger.info("Initializing database tables...")
    
    try:
        async with engine.begin() as conn:
            logger.debug("Connection acquired, creating tables...")
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✓ Database tables initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database tables: {str(e)}", exc_info=True)
        logger.debug(f"Database URL (masked): {engine.url.render_as_string(hide_password=True)}")
        raise
