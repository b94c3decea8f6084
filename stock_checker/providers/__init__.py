"""Abstract interface for stock quote providers."""
from abc import ABC, abstractmethod
from stock_checker.providers.models import Quote


class QuoteProvider(ABC):
    """Abstract base class for stock quote providers."""
    
    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """
        Fetch the latest price for a ticker.
        
        Args:
            symbol: Normalized (uppercase) ticker symbol
            
        Returns:
            Quote with symbol and price
            
        Raises:
            QuoteLookupError: If the quote source fails or returns unusable data
        """
        pass
    
    async def close(self):
        """Release provider resources."""
        pass


class QuoteLookupError(Exception):
    """Exception raised when a price quote cannot be obtained."""
    pass
