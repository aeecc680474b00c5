"""
Order-book driven quantity refill for candidate cycles.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any

from triarb.core.types import Cycle, Edge, ExchangeClient, OrderSide
from triarb.utils.math import to_decimal


logger = logging.getLogger(__name__)


class QuantityRefiller:
    """
    Fills missing edge quantities from top-of-book depth.

    BUY edges take the best ask size, SELL edges the best bid size.
    """

    def __init__(self, client: ExchangeClient, depth: int = 1) -> None:
        """
        Initialize refiller.

        Args:
            client: Exchange client used for order-book reads.
            depth: Order-book depth to request.
        """
        self._client = client
        self._depth = depth

    async def refill(self, cycle: Cycle) -> bool:
        """
        Ensure every edge of the cycle carries a quantity.

        The three books are fetched concurrently. Transport errors
        propagate to the caller.

        Args:
            cycle: Cycle to complete in place.

        Returns:
            True if the cycle has quantities, False if a book side was empty.
        """
        if cycle.has_quantities:
            return True

        books = await asyncio.gather(
            *(self._client.fetch_order_book(edge.pair, self._depth) for edge in cycle.edges)
        )

        sizes = []
        for edge, book in zip(cycle.edges, books, strict=True):
            size = self._top_size(edge, book)
            if size is None:
                logger.debug(f"Empty book level for {edge.pair}, skipping {cycle.id}")
                return False
            sizes.append(size)

        for edge, size in zip(cycle.edges, sizes, strict=True):
            edge.quantity = size

        return True

    @staticmethod
    def _top_size(edge: Edge, book: dict[str, Any]) -> Decimal | None:
        """Size at the best level of both book sides, None when either is empty."""
        asks = book.get("asks") or []
        bids = book.get("bids") or []
        if not asks or not bids:
            return None

        level = asks[0] if edge.side == OrderSide.BUY else bids[0]
        return to_decimal(level[1])
