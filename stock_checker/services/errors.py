"""Exceptions raised by the like-tracking services."""


class StorageError(Exception):
    """Exception raised when the ticker store cannot complete an operation."""
    pass


class InvalidSymbolError(ValueError):
    """Exception raised for a missing or malformed ticker symbol."""
    pass
