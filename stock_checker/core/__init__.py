"""Core package initialization."""
from stock_checker.core.config import settings, Settings
from stock_checker.core.database import Base, create_engine, create_session_factory, init_db

__all__ = ["settings", "Settings", "Base", "create_engine", "create_session_factory", "init_db"]
