"""
Main arbitrage engine orchestrator.

Coordinates the scan pipeline: balance snapshot, candidates, ranking,
rank sinks and the trader, on a fixed interval, on each ticker push
or on demand.
"""

import asyncio
import logging
import signal
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from triarb.config.constants import ORDER_BOOK_DEPTH
from triarb.config.settings import Settings
from triarb.core.types import (
    BalanceSnapshot,
    CandidateSource,
    Cycle,
    ExchangeClient,
    PriceSource,
    Rank,
    RankSink,
)
from triarb.exchange.client import create_exchange
from triarb.exchange.reference import ReferencePriceClient
from triarb.execution.driver import ExecutionDriver, RetryPolicy
from triarb.execution.trader import TriangleTrader
from triarb.market.candidates import TickerCandidateSource
from triarb.market.catalog import MarketCatalog
from triarb.market.stream import TickerStream
from triarb.simulation.simulator import FeasibilitySimulator
from triarb.strategy.graph import TriangleDiscovery
from triarb.strategy.ranker import CandidateRanker, RankerConfig
from triarb.strategy.refill import QuantityRefiller
from triarb.telemetry.logger import AsyncLogger
from triarb.telemetry.metrics import MetricsCollector
from triarb.telemetry.reporter import JsonlRankWriter, LogRankReporter
from triarb.utils.math import format_rate
from triarb.utils.time import LatencyTimer, format_duration_us


logger = logging.getLogger(__name__)


class ArbitrageEngine:
    """
    Main scan orchestrator.

    Manages the complete lifecycle of:
    - Exchange connectivity and market metadata
    - Periodic and on-demand scans
    - Rank notification and trade hand-off
    - Shutdown of clients and logging
    """

    def __init__(
        self,
        settings: Settings,
        client: ExchangeClient | None = None,
        price_source: PriceSource | None = None,
        candidate_source: CandidateSource | None = None,
        sinks: Sequence[RankSink] | None = None,
        async_logger: AsyncLogger | None = None,
    ) -> None:
        """
        Initialize the engine.

        Collaborators left as None are built from settings in ``setup``.

        Args:
            settings: Application settings.
            client: Exchange client.
            price_source: Reference USD price source.
            candidate_source: Producer of priced cycles.
            sinks: Receivers of each scan's ranks.
            async_logger: Logger to stop on shutdown.
        """
        self._settings = settings
        self._client = client
        self._prices = price_source
        self._candidates = candidate_source
        self._sinks: list[RankSink] = list(sinks) if sinks is not None else []
        self._build_sinks = sinks is None
        self._async_logger = async_logger

        self._catalog: MarketCatalog | None = None
        self._ranker: CandidateRanker | None = None
        self._trader: TriangleTrader | None = None
        self._stream: TickerStream | None = None

        self._metrics = MetricsCollector()
        self._running = False
        self._shutdown_event = asyncio.Event()
        self._active_scans = 0
        self._tasks: set[asyncio.Task[list[Rank]]] = set()
        self._closed = False

    async def setup(self) -> None:
        """Initialize all components."""
        settings = self._settings
        logger.info("Initializing arbitrage engine...")

        if self._client is None:
            self._client = create_exchange(settings)

        self._catalog = await MarketCatalog.from_exchange(self._client)

        if self._candidates is None:
            discovery = TriangleDiscovery(self._catalog)
            triangles = discovery.discover(settings.base_coins, settings.max_triangles)
            logger.info(f"Monitoring {len(triangles)} triangles from {settings.base_coins}")
            self._candidates = TickerCandidateSource(self._client, triangles)

        if self._prices is None:
            self._prices = ReferencePriceClient(
                base_url=settings.reference_price_url,
                ttl_seconds=settings.reference_price_ttl,
            )

        self._ranker = CandidateRanker(
            refiller=QuantityRefiller(self._client, ORDER_BOOK_DEPTH),
            price_source=self._prices,
            config=RankerConfig(
                min_rate_profit=settings.min_rate_profit,
                min_profit_in_usd=settings.min_profit_in_usd,
                profiles=dict(settings.exchanges),
            ),
        )

        driver = ExecutionDriver(
            client=self._client,
            policy=RetryPolicy(
                max_checks=settings.order_retry_max_checks,
                delay_seconds=settings.order_retry_delay,
            ),
            principal_fee_exchanges=settings.principal_fee_exchanges,
        )
        self._trader = TriangleTrader(
            simulator=FeasibilitySimulator(self._catalog, settings.exchange_id),
            driver=driver,
            dry_run=not settings.is_live,
            order_type=settings.order_type,
        )

        if self._build_sinks:
            self._sinks = [LogRankReporter()]
            if settings.tick_rank:
                self._sinks.append(JsonlRankWriter(settings.rank_file))

        if settings.scan_trigger == "push":
            self._setup_stream()

        if not settings.has_credentials:
            logger.warning("No API credentials, balances are empty and no order will be placed")

        logger.info("Engine initialization complete")

    def _setup_stream(self) -> None:
        url = self._settings.stream_url
        if url is None:
            logger.warning(
                f"No ticker stream for {self._settings.exchange_id}, set MARKET_STREAM_URL; "
                f"scanning every {self._settings.scan_interval}s instead"
            )
            return
        self._stream = TickerStream(url, self._on_market_push)

    # =========================================================================
    # Scanning
    # =========================================================================

    def trigger_scan(self) -> asyncio.Task[list[Rank]]:
        """
        Start a scan in the background.

        Used by the interval loop and by market-data push handlers.

        Returns:
            Task resolving to the scan's ranks.
        """
        task = asyncio.create_task(self.scan())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _on_market_push(self, payload: Any) -> None:
        """Start a scan for each ticker push."""
        self._metrics.increment_counter("market_pushes")
        self.trigger_scan()

    async def scan(self) -> list[Rank]:
        """
        Run one scan.

        Any exception ends the scan and is logged; the next trigger
        starts a fresh one.

        Returns:
            Ranks produced, empty when skipped or failed.
        """
        if self._settings.single_scan and self._active_scans > 0:
            logger.debug("Previous scan still running, skipping trigger")
            self._metrics.record_skipped_scan()
            return []

        self._active_scans += 1
        try:
            with LatencyTimer() as timer:
                ranks = await self._scan_once()
            self._metrics.record_latency("scan", timer.latency_us)
            logger.debug(f"Scan finished in {format_duration_us(timer.latency_us)}")
            return ranks
        except Exception as e:
            self._metrics.record_failed_scan()
            logger.error(f"Scan failed: {e}", exc_info=True)
            return []
        finally:
            self._active_scans -= 1

    async def _scan_once(self) -> list[Rank]:
        """Snapshot, rank, notify and hand the best cycle to the trader."""
        if self._candidates is None or self._ranker is None or self._trader is None:
            raise RuntimeError("Engine not set up")

        snapshot = await self._fetch_snapshot()

        candidates = await self._candidates.get_candidates()
        if not candidates:
            self._metrics.record_scan(0, 0)
            return []

        candidates = sorted(candidates, key=lambda cycle: cycle.rate, reverse=True)
        self._log_candidates(candidates)

        ranks = await self._ranker.rank(snapshot, candidates, self._settings.exchange_id)
        self._metrics.record_scan(
            len(candidates), len(ranks), ranks[0].rate if ranks else None
        )

        if not ranks:
            logger.debug("No rank available this scan")
            return ranks

        await self._notify_sinks(ranks)

        best = ranks[0]
        logger.info(
            f"Best cycle {best.triangle.id}, profit rate after fees "
            f"{format_rate(best.profit_rate[0])}"
        )
        report = await self._trader.place(best.triangle, snapshot)
        self._metrics.record_trade(
            profitable=bool(report.simulation and report.simulation.is_profitable),
            executed=report.executed,
        )
        return ranks

    async def _fetch_snapshot(self) -> BalanceSnapshot:
        """Fetch the balance snapshot used for the whole scan."""
        if not self._settings.has_credentials or self._client is None:
            return BalanceSnapshot({})
        return BalanceSnapshot.from_exchange(await self._client.fetch_balance())

    async def _notify_sinks(self, ranks: list[Rank]) -> None:
        for sink in self._sinks:
            try:
                await sink.update_ranks(ranks)
            except Exception as e:
                logger.error(f"Rank sink {type(sink).__name__} failed: {e}", exc_info=True)

    @staticmethod
    def _log_candidates(candidates: list[Cycle], limit: int = 5) -> None:
        for cycle in candidates[:limit]:
            logger.info(f"Candidate: {cycle.id:<15} rate: {format_rate(cycle.rate)}")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def run(self) -> None:
        """Scan every ``scan_interval`` seconds until shutdown."""
        self._running = True

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._handle_shutdown)

        try:
            if self._stream is not None:
                logger.info("Scanning on every ticker push")
                self._stream.start()
                await self._shutdown_event.wait()
                return

            logger.info(f"Scanning every {self._settings.scan_interval}s")
            while not self._shutdown_event.is_set():
                self.trigger_scan()
                try:
                    await asyncio.wait_for(
                        self._shutdown_event.wait(), timeout=self._settings.scan_interval
                    )
                except TimeoutError:
                    pass
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            await self.shutdown()

    def _handle_shutdown(self) -> None:
        """Handle shutdown signal."""
        logger.info("Shutdown signal received")
        self.stop()

    def stop(self) -> None:
        """Ask the interval loop to exit."""
        self._running = False
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """Wait for running scans, then release clients and logging."""
        if self._closed:
            return
        self._closed = True
        logger.info("Shutting down engine...")
        self._running = False

        if self._stream is not None:
            await self._stream.stop()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        close_prices = getattr(self._prices, "close", None)
        if close_prices is not None:
            await close_prices()

        if self._client is not None:
            await self._client.close()

        logger.info(f"Engine shutdown complete, stats: {self.get_stats()}")

        if self._async_logger:
            self._async_logger.stop()

    def get_stats(self) -> dict[str, Any]:
        """Scan metrics with the ranker's skip counters and the trader's totals."""
        stats: dict[str, Any] = self._metrics.to_dict()
        if self._ranker is not None:
            stats["ranker"] = asdict(self._ranker.stats)
        if self._trader is not None:
            stats["trader"] = self._trader.get_stats()
        return stats

    @property
    def is_running(self) -> bool:
        """Check if engine is running."""
        return self._running

    @property
    def metrics(self) -> MetricsCollector:
        """Get metrics collector."""
        return self._metrics

    @property
    def catalog(self) -> MarketCatalog | None:
        return self._catalog


@asynccontextmanager
async def create_engine(
    settings: Settings,
    async_logger: AsyncLogger | None = None,
) -> AsyncIterator[ArbitrageEngine]:
    """
    Create and manage engine lifecycle.

    Usage:
        async with create_engine(settings) as engine:
            await engine.run()
    """
    engine = ArbitrageEngine(settings, async_logger=async_logger)

    try:
        await engine.setup()
        yield engine
    finally:
        await engine.shutdown()
