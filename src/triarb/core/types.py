"""
Type definitions for the arbitrage engine.

This module contains all dataclasses, enums and Protocol definitions used
throughout the application. Money values are ``Decimal`` end to end so
chained divisions and multiplications across three legs do not drift.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Protocol

from triarb.utils.math import ZERO, to_decimal, truncate, truncate_to_step


# =============================================================================
# Enums
# =============================================================================


class OrderSide(str, Enum):
    """Order side enumeration (ccxt spelling)."""

    BUY = "buy"
    SELL = "sell"


class OrderOutcomeStatus(str, Enum):
    """Result of one order submission through the execution driver."""

    SUBMITTED = "SUBMITTED"  # original amount sent
    REDUCED = "REDUCED"  # balance stayed short, sent what was available
    FAILED = "FAILED"  # exchange rejected or transport error


# =============================================================================
# Market Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class PairInfo:
    """
    Trading metadata of one pair.

    Precision is normalized to decimal places whatever the exchange's
    precision mode; tick-size exchanges also keep the tick itself in
    ``amount_step``/``price_step``. Limits are ``None`` when the exchange
    does not publish them.
    """

    symbol: str
    base: str
    quote: str
    amount_places: int
    price_places: int
    min_amount: Decimal | None = None
    min_price: Decimal | None = None
    min_cost: Decimal | None = None
    maker: Decimal | None = None
    amount_step: Decimal | None = None
    price_step: Decimal | None = None

    def truncate_source(self, side: OrderSide, amount: Decimal) -> Decimal:
        """
        Truncate the amount an edge spends to what the exchange accepts.

        BUY edges spend the quote asset and use the price precision, SELL
        edges spend the base asset and use the amount precision. With a
        tick size the result is also a multiple of the tick.
        """
        if side == OrderSide.BUY:
            places, step = self.price_places, self.price_step
        else:
            places, step = self.amount_places, self.amount_step
        if step is not None:
            amount = truncate_to_step(amount, step)
        return truncate(amount, places)

    def min_order_cost(self, price: Decimal) -> Decimal | None:
        """
        Minimum order cost in the quote asset.

        Falls back to the minimum price, then to the minimum amount
        valued at ``price``.
        """
        if self.min_cost:
            return self.min_cost
        if self.min_price:
            return self.min_price
        if self.min_amount:
            return self.min_amount * price
        return None


@dataclass(slots=True, frozen=True)
class TriangleLeg:
    """Unpriced leg of a discovered triangle."""

    symbol: str
    side: OrderSide
    from_asset: str
    to_asset: str


@dataclass(slots=True, frozen=True)
class TrianglePath:
    """Unpriced triangle: base -> mid1 -> mid2 -> base."""

    id: str
    base_asset: str
    legs: tuple[TriangleLeg, TriangleLeg, TriangleLeg]

    @property
    def symbols(self) -> tuple[str, str, str]:
        return (self.legs[0].symbol, self.legs[1].symbol, self.legs[2].symbol)


# =============================================================================
# Cycle Types
# =============================================================================


@dataclass(slots=True)
class Edge:
    """
    Single leg of a triangular cycle.

    ``quantity`` is the top-of-book size in pair base units and stays
    ``None`` until the refiller samples the order book.
    """

    pair: str
    side: OrderSide
    price: Decimal
    coin_from: str
    coin_to: str
    quantity: Decimal | None = None
    amount_in_usd: Decimal | None = None

    @property
    def quote_asset(self) -> str:
        """Asset in which ``quantity * price`` is denominated."""
        return self.coin_from if self.side == OrderSide.BUY else self.coin_to

    def __repr__(self) -> str:
        return f"{self.coin_from}->{self.coin_to}({self.pair}:{self.side.value}@{self.price})"


@dataclass(slots=True)
class Cycle:
    """
    Triangular arbitrage cycle A -> B -> C -> A.

    The three edges always chain head to tail and return to the
    starting asset.
    """

    id: str
    a: Edge
    b: Edge
    c: Edge
    rate: Decimal = ZERO
    ts: int = 0
    min_amount_in_usd: Decimal | None = None

    def __post_init__(self) -> None:
        """Reject edges that do not close the loop."""
        if (
            self.a.coin_to != self.b.coin_from
            or self.b.coin_to != self.c.coin_from
            or self.c.coin_to != self.a.coin_from
        ):
            raise ValueError(f"Edges of {self.id} do not form a closed cycle")

    @property
    def edges(self) -> tuple[Edge, Edge, Edge]:
        """Edges in trading order."""
        return (self.a, self.b, self.c)

    @property
    def base_coin(self) -> str:
        """Asset the cycle starts and ends in."""
        return self.a.coin_from

    @property
    def pairs(self) -> tuple[str, str, str]:
        """Trading pairs in trading order."""
        return (self.a.pair, self.b.pair, self.c.pair)

    @property
    def has_quantities(self) -> bool:
        """Check whether all three edges carry a quantity."""
        return all(edge.quantity for edge in self.edges)


@dataclass(slots=True)
class Rank:
    """A cycle that passed every ranking filter, with its scores."""

    triangle: Cycle
    step_a: str
    step_b: str
    step_c: str
    rate: Decimal
    fee: tuple[Decimal, ...]
    profit_rate: tuple[Decimal, ...]
    ts: int

    def to_dict(self) -> dict[str, Any]:
        """Serializable representation for rank sinks."""
        return {
            "id": self.triangle.id,
            "stepA": self.step_a,
            "stepB": self.step_b,
            "stepC": self.step_c,
            "rate": str(self.rate),
            "fee": [str(f) for f in self.fee],
            "profitRate": [str(p) for p in self.profit_rate],
            "minAmountInUSD": (
                str(self.triangle.min_amount_in_usd)
                if self.triangle.min_amount_in_usd is not None
                else None
            ),
            "ts": self.ts,
        }


# =============================================================================
# Balance Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class AssetBalance:
    """Free and total holdings of one asset."""

    free: Decimal
    total: Decimal


class BalanceSnapshot(Mapping[str, AssetBalance]):
    """
    Immutable balance view fetched once per scan.

    Only assets present in the exchange payload are keys; a missing key
    means "no holdings" and is distinct from a zero balance.
    """

    __slots__ = ("_balances",)

    def __init__(self, balances: Mapping[str, AssetBalance]) -> None:
        self._balances = MappingProxyType(dict(balances))

    @classmethod
    def from_exchange(cls, payload: Mapping[str, Any]) -> "BalanceSnapshot":
        """
        Build a snapshot from a ccxt ``fetch_balance()`` payload.

        Args:
            payload: Unified balance structure.

        Returns:
            BalanceSnapshot with every asset carrying a ``free`` entry.
        """
        balances: dict[str, AssetBalance] = {}
        for asset, entry in payload.items():
            if not isinstance(entry, Mapping) or "free" not in entry:
                continue
            free = to_decimal(entry.get("free"), ZERO)
            total = to_decimal(entry.get("total"), free)
            balances[asset] = AssetBalance(free=free, total=total)  # type: ignore[arg-type]
        return cls(balances)

    def __getitem__(self, asset: str) -> AssetBalance:
        return self._balances[asset]

    def __iter__(self) -> Iterator[str]:
        return iter(self._balances)

    def __len__(self) -> int:
        return len(self._balances)

    def free(self, asset: str) -> Decimal:
        """Free amount of an asset, zero when not held."""
        entry = self._balances.get(asset)
        return entry.free if entry else ZERO

    def __repr__(self) -> str:
        return f"BalanceSnapshot({dict(self._balances)!r})"


# =============================================================================
# Simulation Types
# =============================================================================


@dataclass(slots=True)
class TradeEdge:
    """
    Simulated trade on one edge.

    ``amount`` is the source-asset amount spent on this edge.
    """

    pair: str
    side: OrderSide
    price: Decimal
    amount: Decimal
    fee: Decimal
    fee_asset: str
    elapsed_us: int = 0

    @property
    def output(self) -> Decimal:
        """Destination-asset amount received, before fees."""
        if self.side == OrderSide.SELL:
            return self.amount * self.price
        return self.amount / self.price

    @property
    def order_amount(self) -> Decimal:
        """Order size in pair base units, as the exchange expects it."""
        return self.output if self.side == OrderSide.BUY else self.amount


@dataclass(slots=True)
class TradeTriangle:
    """Record of a simulated (and possibly executed) cycle."""

    coin: str
    exchange: str
    a: TradeEdge | None = None
    b: TradeEdge | None = None
    c: TradeEdge | None = None
    before: Decimal = ZERO
    after: Decimal = ZERO
    profit: Decimal = ZERO
    rate: str = ""
    ts: int = 0
    id: str = ""

    @property
    def is_profitable(self) -> bool:
        """Check whether the simulated chain ends with more than it started."""
        return self.profit > 0

    @property
    def edges(self) -> tuple[TradeEdge, ...]:
        """Simulated edges present so far."""
        return tuple(e for e in (self.a, self.b, self.c) if e is not None)


# =============================================================================
# Execution Types
# =============================================================================


@dataclass(slots=True)
class OrderRequest:
    """Order to submit through the execution driver."""

    symbol: str
    side: OrderSide
    amount: Decimal
    price: Decimal
    type: str = "limit"

    @property
    def base_asset(self) -> str:
        return self.symbol.split("/")[0]

    @property
    def quote_asset(self) -> str:
        return self.symbol.split("/")[1]


@dataclass(slots=True)
class OrderOutcome:
    """Tagged result of one driver submission."""

    status: OrderOutcomeStatus
    request: OrderRequest
    submitted_amount: Decimal = ZERO
    order: dict[str, Any] | None = None
    balance_checks: int = 0
    delays: int = 0
    error_message: str = ""

    @property
    def is_placed(self) -> bool:
        """Check if the exchange accepted an order."""
        return self.order is not None


@dataclass(slots=True)
class ExecutionReport:
    """Outcome of handing one cycle to the trader."""

    triangle: Cycle
    simulation: TradeTriangle | None = None
    orders: list[OrderOutcome] = field(default_factory=list)
    dry_run: bool = True
    error_message: str = ""

    @property
    def executed(self) -> bool:
        """Check if every leg was placed on the exchange."""
        return len(self.orders) == 3 and all(o.is_placed for o in self.orders)


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class ExchangeClient(Protocol):
    """
    Async unified exchange client.

    ``ccxt.async_support`` exchange instances satisfy this protocol.
    """

    id: str

    async def load_markets(self, reload: bool = False) -> dict[str, Any]:
        """Load per-pair market metadata."""
        ...

    async def fetch_balance(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Fetch account balances."""
        ...

    async def fetch_tickers(self, symbols: list[str] | None = None) -> dict[str, Any]:
        """Fetch tickers for all (or the given) pairs."""
        ...

    async def fetch_order_book(self, symbol: str, limit: int | None = None) -> dict[str, Any]:
        """Fetch an order book."""
        ...

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: float | None = None,
    ) -> dict[str, Any]:
        """Place an order."""
        ...

    async def fetch_order(self, id: str, symbol: str | None = None) -> dict[str, Any]:
        """Fetch an order by id."""
        ...

    async def fetch_order_status(self, id: str, symbol: str | None = None) -> str:
        """Fetch an order's status string."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class PriceSource(Protocol):
    """Reference fiat price lookup."""

    async def price(self, pair: str) -> Decimal | None:
        """Get last price of ``ASSET/USD``, None when unavailable."""
        ...


class CandidateSource(Protocol):
    """Producer of raw arbitrage cycles."""

    async def get_candidates(self) -> list[Cycle]:
        """Get priced cycles for the current market state."""
        ...


class RankSink(Protocol):
    """Consumer of per-scan rank lists."""

    async def update_ranks(self, ranks: list[Rank]) -> None:
        """Receive the ranks produced by one scan."""
        ...
