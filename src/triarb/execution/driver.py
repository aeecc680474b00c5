"""
Order execution driver.

Submits one order at a time after verifying the free balance, waiting
out short transient shortfalls and degrading to a reduced order when
the balance never catches up.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from triarb.config.constants import (
    DEFAULT_PRINCIPAL_FEE_EXCHANGES,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_CHECKS,
    ORDER_TYPE_MARKET,
    PRINCIPAL_FEE_HAIRCUT,
)
from triarb.core.types import (
    BalanceSnapshot,
    ExchangeClient,
    OrderOutcome,
    OrderOutcomeStatus,
    OrderRequest,
    OrderSide,
)


logger = logging.getLogger(__name__)


SleepFunc = Callable[[float], Awaitable[Any]]


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Balance check ceiling and the wait between checks."""

    max_checks: int = DEFAULT_RETRY_MAX_CHECKS
    delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS

    def __post_init__(self) -> None:
        if self.max_checks < 1:
            raise ValueError("max_checks must be at least 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")


class ExecutionDriver:
    """
    Balance-checked order submission.

    Per request:
    CHECK_BALANCE -> SUBMIT when funds suffice, otherwise wait and
    re-check; on the last check submit whatever is available. Retry
    state lives in the call, so concurrent requests never share it.
    """

    def __init__(
        self,
        client: ExchangeClient,
        policy: RetryPolicy | None = None,
        principal_fee_exchanges: Iterable[str] = DEFAULT_PRINCIPAL_FEE_EXCHANGES,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """
        Initialize driver.

        Args:
            client: Exchange client.
            policy: Retry ceiling and delay.
            principal_fee_exchanges: Exchanges whose orders are shaved first.
            sleep: Awaitable delay, replaceable in tests.
        """
        self._client = client
        self._policy = policy or RetryPolicy()
        self._principal_fee_exchanges = frozenset(principal_fee_exchanges)
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def create_order(self, order: OrderRequest) -> OrderOutcome:
        """
        Submit an order once the free balance covers it.

        Args:
            order: Order to place.

        Returns:
            SUBMITTED with the original amount, REDUCED with the amount
            available after the last check, or FAILED when the exchange
            call raised.
        """
        if self._client.id in self._principal_fee_exchanges:
            order = replace(order, amount=order.amount * PRINCIPAL_FEE_HAIRCUT)

        asset = order.quote_asset if order.side == OrderSide.BUY else order.base_asset
        required = order.amount * order.price if order.side == OrderSide.BUY else order.amount

        delays = 0
        free = Decimal(0)
        for check in range(1, self._policy.max_checks + 1):
            try:
                free = await self._free_balance(asset)
            except Exception as e:
                logger.error(f"Balance check for {order.symbol} failed: {e}", exc_info=True)
                return OrderOutcome(
                    status=OrderOutcomeStatus.FAILED,
                    request=order,
                    balance_checks=check,
                    delays=delays,
                    error_message=str(e),
                )

            if free >= required:
                return await self._submit(
                    order, order.amount, OrderOutcomeStatus.SUBMITTED, check, delays
                )

            if check < self._policy.max_checks:
                logger.info(
                    f"Free {asset} {free} < required {required} for {order.symbol}, "
                    f"check {check}/{self._policy.max_checks}"
                )
                await self._sleep(self._policy.delay_seconds)
                delays += 1

        reduced = free / order.price if order.side == OrderSide.BUY else free
        logger.warning(
            f"Balance still short after {self._policy.max_checks} checks, "
            f"reducing {order.symbol} {order.side.value} from {order.amount} to {reduced}"
        )
        if reduced <= 0:
            return OrderOutcome(
                status=OrderOutcomeStatus.FAILED,
                request=order,
                balance_checks=self._policy.max_checks,
                delays=delays,
                error_message=f"No free {asset}",
            )
        return await self._submit(
            order, reduced, OrderOutcomeStatus.REDUCED, self._policy.max_checks, delays
        )

    async def _free_balance(self, asset: str) -> Decimal:
        """Fetch the current free amount of an asset."""
        snapshot = BalanceSnapshot.from_exchange(await self._client.fetch_balance())
        return snapshot.free(asset)

    async def _submit(
        self,
        order: OrderRequest,
        amount: Decimal,
        status: OrderOutcomeStatus,
        checks: int,
        delays: int,
    ) -> OrderOutcome:
        """Place the order, turning transport errors into a FAILED outcome."""
        price = None if order.type == ORDER_TYPE_MARKET else float(order.price)
        try:
            placed = await self._client.create_order(
                order.symbol,
                order.type,
                order.side.value,
                float(amount),
                price,
            )
        except Exception as e:
            logger.error(
                f"Order {order.symbol} {order.side.value} {amount} failed: {e}", exc_info=True
            )
            return OrderOutcome(
                status=OrderOutcomeStatus.FAILED,
                request=order,
                submitted_amount=amount,
                balance_checks=checks,
                delays=delays,
                error_message=str(e),
            )

        logger.info(
            f"Placed {order.symbol} {order.side.value} {amount} @ {order.price} "
            f"({status.value}, id={placed.get('id')})"
        )
        return OrderOutcome(
            status=status,
            request=order,
            submitted_amount=amount,
            order=placed,
            balance_checks=checks,
            delays=delays,
        )

    async def query_order(self, order_id: str, symbol: str) -> dict[str, Any] | None:
        """
        Fetch an order.

        Returns:
            Order dict, or None when the status is unknown.
        """
        try:
            return await self._client.fetch_order(order_id, symbol)
        except Exception as e:
            logger.error(f"Query of order {order_id} on {symbol} failed: {e}", exc_info=True)
            return None

    async def query_order_status(self, order_id: str, symbol: str) -> str | None:
        """
        Fetch an order's status string.

        Returns:
            Status, or None when it is unknown.
        """
        try:
            return await self._client.fetch_order_status(order_id, symbol)
        except Exception as e:
            logger.error(f"Status query of order {order_id} on {symbol} failed: {e}", exc_info=True)
            return None
