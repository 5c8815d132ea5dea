"""
Cross-venue arbitrage detection.

Computes locked arbitrage on matched market pairs and keeps prices current
from order-book and last-trade updates.
"""

from .calculator import confidence_band, detect_arbitrage, detect_arbitrage_with_guardrails
from .price_book import (
    BestPrices,
    OrderbookDelta,
    OrderbookManager,
    OrderbookSnapshot,
    PriceBook,
    PriceUpdate,
)

__all__ = [
    "confidence_band",
    "detect_arbitrage",
    "detect_arbitrage_with_guardrails",
    "BestPrices",
    "OrderbookDelta",
    "OrderbookManager",
    "OrderbookSnapshot",
    "PriceBook",
    "PriceUpdate",
]
