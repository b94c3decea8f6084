"""Per-ticker like counter with the set of IPs that already liked it."""
from dataclasses import dataclass, field
from typing import FrozenSet
from sqlalchemy import Column, String, Integer, CheckConstraint, text
from sqlalchemy.dialects.postgresql import ARRAY
from stock_checker.core.database import Base


class StockLike(Base):
    """Like counter row keyed by normalized ticker symbol."""
    
    __tablename__ = "stock_likes"
    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_stock_likes_non_negative"),
    )
    
    symbol = Column(String, primary_key=True)
    likes = Column(Integer, default=0, server_default=text("0"), nullable=False)
    ips = Column(ARRAY(String), default=list, server_default=text("'{}'"), nullable=False)


@dataclass(frozen=True)
class TickerRecord:
    """Snapshot of a ticker's like state."""
    symbol: str
    likes: int = 0
    seen_ips: FrozenSet[str] = field(default_factory=frozenset)
    
    def has_liked(self, ip: str) -> bool:
        return ip in self.seen_ips
