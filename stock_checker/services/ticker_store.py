"""Persistent ticker like store.

Each ticker symbol owns one ``stock_likes`` row holding its like counter and
the array of client IPs that already liked it. The counter and the array are
only ever changed together, by a single conditional ``UPDATE``, so
``likes == cardinality(ips)`` holds after any interleaving of writers.
"""
from abc import ABC, abstractmethod
from typing import Optional
import asyncio
import logging
import re

import sqlalchemy as sa
from sqlalchemy import select, update, func, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from stock_checker.core.config import settings
from stock_checker.core.database import create_session_factory, init_db
from stock_checker.models import StockLike, TickerRecord
from stock_checker.services.errors import StorageError, InvalidSymbolError


logger = logging.getLogger(__name__)

# Letters first, then letters, digits, dots or dashes (BRK.B, RDS-A)
SYMBOL_PATTERN = re.compile(r'^[A-Z][A-Z0-9.\-]{0,9}$')


def validate_symbol(symbol: Optional[str]) -> str:
    """
    Validate and normalize a ticker symbol.

    Args:
        symbol: Ticker symbol to validate

    Returns:
        Normalized (uppercase) ticker symbol

    Raises:
        InvalidSymbolError: If the symbol is missing or malformed
    """
    if symbol is None or not str(symbol).strip():
        raise InvalidSymbolError("Ticker symbol cannot be empty")

    normalized = str(symbol).strip().upper()

    if not SYMBOL_PATTERN.match(normalized):
        raise InvalidSymbolError(
            f"Invalid ticker format: '{symbol}'. "
            "Ticker must start with a letter and contain at most 10 letters, digits, '.' or '-'."
        )

    return normalized


class TickerStore(ABC):
    """Abstract store of per-ticker like state."""

    @abstractmethod
    async def ensure_exists(self, symbol: str) -> None:
        """Create an empty record for ``symbol`` unless one already exists."""
        pass

    @abstractmethod
    async def get_like_count(self, symbol: str) -> int:
        """Return the like count, creating an empty record first if needed."""
        pass

    @abstractmethod
    async def get_record(self, symbol: str) -> TickerRecord:
        """Return likes and seen IPs, creating an empty record first if needed."""
        pass

    @abstractmethod
    async def record_like_from_ip(self, symbol: str, ip: str) -> bool:
        """
        Atomically count a like from ``ip`` unless it was already counted.

        Returns:
            True if the counter was incremented, False if ``ip`` had
            already liked ``symbol``
        """
        pass

    @abstractmethod
    async def ping(self) -> None:
        """Round-trip to the backend; raise StorageError if unreachable."""
        pass

    async def init_schema(self) -> None:
        """Create backing tables if the backend needs them."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        pass


class SqlTickerStore(TickerStore):
    """PostgreSQL implementation of the ticker store."""

    def __init__(self, engine: AsyncEngine, timeout: Optional[float] = None):
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        self.timeout = settings.store_timeout_seconds if timeout is None else timeout

    async def _run(self, operation: str, work):
        """
        Run ``work(session)`` in one transaction bounded by the store timeout.

        The transaction commits when ``work`` returns and rolls back on any
        error or cancellation, so a timed-out call leaves no partial update.
        """
        async def transaction():
            async with self.session_factory.begin() as session:
                return await work(session)

        try:
            return await asyncio.wait_for(transaction(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Store operation '{operation}' timed out after {self.timeout}s")
            raise StorageError(f"{operation} timed out after {self.timeout}s") from e
        except SQLAlchemyError as e:
            logger.error(f"Store operation '{operation}' failed: {str(e)}", exc_info=True)
            raise StorageError(f"{operation} failed: {str(e)}") from e
        except OSError as e:
            # Driver-level connection failures that SQLAlchemy did not wrap
            logger.error(f"Store operation '{operation}' could not reach database: {str(e)}")
            raise StorageError(f"{operation} failed: database unreachable") from e

    @staticmethod
    def _ensure_stmt(symbol: str):
        """INSERT an empty row, leaving an existing row untouched."""
        return (
            pg_insert(StockLike)
            .values(symbol=symbol, likes=0, ips=[])
            .on_conflict_do_nothing(index_elements=["symbol"])
        )

    @staticmethod
    def _like_stmt(symbol: str, ip: str):
        """Increment and append in one statement, only if ``ip`` is absent.

        A concurrent writer blocked on the row lock re-evaluates the WHERE
        clause against the committed row, so a racing duplicate matches zero
        rows.
        """
        return (
            update(StockLike)
            .where(StockLike.symbol == symbol)
            .where(func.array_position(StockLike.ips, sa.literal(ip, sa.String)).is_(None))
            .values(
                likes=StockLike.likes + 1,
                ips=func.array_append(StockLike.ips, sa.literal(ip, sa.String))
            )
            .execution_options(synchronize_session=False)
        )

    async def ensure_exists(self, symbol: str) -> None:
        symbol = symbol.upper()

        async def work(session: AsyncSession):
            await session.execute(self._ensure_stmt(symbol))

        await self._run("ensure_exists", work)

    async def get_like_count(self, symbol: str) -> int:
        symbol = symbol.upper()

        async def work(session: AsyncSession):
            await session.execute(self._ensure_stmt(symbol))
            result = await session.execute(
                select(StockLike.likes).where(StockLike.symbol == symbol)
            )
            return result.scalar_one()

        return await self._run("get_like_count", work)

    async def get_record(self, symbol: str) -> TickerRecord:
        symbol = symbol.upper()

        async def work(session: AsyncSession):
            await session.execute(self._ensure_stmt(symbol))
            result = await session.execute(
                select(StockLike.likes, StockLike.ips).where(StockLike.symbol == symbol)
            )
            row = result.one()
            return TickerRecord(
                symbol=symbol,
                likes=row.likes,
                seen_ips=frozenset(row.ips or [])
            )

        return await self._run("get_record", work)

    async def record_like_from_ip(self, symbol: str, ip: str) -> bool:
        symbol = symbol.upper()

        async def work(session: AsyncSession):
            await session.execute(self._ensure_stmt(symbol))
            result = await session.execute(self._like_stmt(symbol, ip))
            return result.rowcount == 1

        counted = await self._run("record_like_from_ip", work)

        if counted:
            logger.info(f"Counted like for {symbol} from {ip}")
        else:
            logger.debug(f"Like for {symbol} from {ip} already counted")

        return counted

    async def ping(self) -> None:
        async def work(session: AsyncSession):
            await session.execute(text("SELECT 1"))

        await self._run("ping", work)

    async def init_schema(self) -> None:
        try:
            await init_db(self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"init_schema failed: {str(e)}") from e
        except OSError as e:
            raise StorageError("init_schema failed: database unreachable") from e

    async def close(self) -> None:
        logger.info("Disposing database engine")
        await self.engine.dispose()
