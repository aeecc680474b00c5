"""
Triangle trader.

Receives the best-ranked cycle of a scan, re-checks it through the
feasibility simulator and, outside dry-run, places the three legs in
order through the execution driver.
"""

import logging

from triarb.config.constants import ORDER_TYPE_LIMIT
from triarb.core.types import (
    BalanceSnapshot,
    Cycle,
    ExecutionReport,
    OrderRequest,
    TradeEdge,
)
from triarb.execution.driver import ExecutionDriver
from triarb.simulation.simulator import FeasibilitySimulator, SimulationFailure


logger = logging.getLogger(__name__)


class TriangleTrader:
    """
    Simulate-then-execute handler for a chosen cycle.

    Legs are sent sequentially; a leg that is not placed stops the
    chain so no later leg trades an asset that was never acquired.
    """

    def __init__(
        self,
        simulator: FeasibilitySimulator,
        driver: ExecutionDriver,
        dry_run: bool = True,
        order_type: str = ORDER_TYPE_LIMIT,
    ) -> None:
        """
        Initialize trader.

        Args:
            simulator: Feasibility simulator.
            driver: Execution driver for real orders.
            dry_run: Stop after simulation when True.
            order_type: ccxt order type for every leg.
        """
        self._simulator = simulator
        self._driver = driver
        self._dry_run = dry_run
        self._order_type = order_type

        self._total_attempts = 0
        self._total_executed = 0

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def get_stats(self) -> dict[str, int]:
        """Get trader statistics."""
        return {
            "attempts": self._total_attempts,
            "executed": self._total_executed,
        }

    async def place(self, cycle: Cycle, snapshot: BalanceSnapshot) -> ExecutionReport:
        """
        Handle one chosen cycle.

        Args:
            cycle: Best-ranked cycle of the scan.
            snapshot: Balance snapshot of the scan.

        Returns:
            ExecutionReport describing what was simulated and placed.
        """
        self._total_attempts += 1
        report = ExecutionReport(triangle=cycle, dry_run=self._dry_run)

        try:
            simulation = self._simulator.simulate(cycle, snapshot)
        except SimulationFailure as e:
            logger.info(f"Cycle {cycle.id} not evaluable: {e.reason}")
            report.error_message = e.reason
            return report

        report.simulation = simulation
        if not simulation.is_profitable:
            report.error_message = "not profitable"
            return report

        if self._dry_run:
            logger.info(f"Dry run, not placing {cycle.id} ({simulation.rate})")
            return report

        for edge in simulation.edges:
            outcome = await self._driver.create_order(self._order_request(edge))
            report.orders.append(outcome)

            if not outcome.is_placed:
                report.error_message = f"leg {edge.pair} failed: {outcome.error_message}"
                logger.error(f"Stopping {cycle.id}, {report.error_message}")
                return report

            order_id = (outcome.order or {}).get("id")
            if order_id:
                status = await self._driver.query_order_status(str(order_id), edge.pair)
                logger.info(f"Leg {edge.pair} order {order_id} status: {status or 'unknown'}")

        self._total_executed += 1
        logger.info(f"Executed {cycle.id}, expected profit {simulation.profit} {simulation.coin}")
        return report

    def _order_request(self, edge: TradeEdge) -> OrderRequest:
        return OrderRequest(
            symbol=edge.pair,
            side=edge.side,
            amount=edge.order_amount,
            price=edge.price,
            type=self._order_type,
        )
