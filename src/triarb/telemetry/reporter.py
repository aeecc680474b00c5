"""
Rank sinks.

Receive the rank list of each scan: one writes the top entries to the
log, the other appends every rank to a JSON-lines file.
"""

import asyncio
import logging
from pathlib import Path

import orjson

from triarb.config.constants import RANK_LOG_LIMIT
from triarb.core.types import Rank
from triarb.utils.math import format_rate


logger = logging.getLogger(__name__)


class LogRankReporter:
    """Logs the best ranks of every scan."""

    def __init__(self, limit: int = RANK_LOG_LIMIT) -> None:
        self._limit = limit

    async def update_ranks(self, ranks: list[Rank]) -> None:
        for rank in ranks[: self._limit]:
            cycle = rank.triangle
            logger.info(
                f"Path: {cycle.id:<15} rate: {format_rate(rank.rate)} "
                f"profit: {format_rate(rank.profit_rate[0])} "
                f"amount (USD): {cycle.min_amount_in_usd}"
            )


class JsonlRankWriter:
    """
    Appends ranks to a JSON-lines file.

    Each line is one rank; writes run in a worker thread so the event
    loop is not blocked by disk I/O.
    """

    def __init__(self, path: Path) -> None:
        """
        Initialize writer.

        Args:
            path: Output file, created with its parent directory on first write.
        """
        self._path = path
        self._written = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def written(self) -> int:
        """Number of ranks written so far."""
        return self._written

    async def update_ranks(self, ranks: list[Rank]) -> None:
        if not ranks:
            return
        payload = b"".join(orjson.dumps(rank.to_dict()) + b"\n" for rank in ranks)
        await asyncio.to_thread(self._append, payload)
        self._written += len(ranks)

    def _append(self, payload: bytes) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("ab") as f:
            f.write(payload)
