"""
Mock ccxt exchange for testing.

Provides an in-memory exchange with the subset of the
``ccxt.async_support`` interface the engine uses, without network calls.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from ccxt.base.decimal_to_precision import DECIMAL_PLACES
from ccxt.base.errors import ExchangeError, InsufficientFunds

from triarb.utils.math import to_decimal


class MockExchange:
    """
    Mock ccxt exchange for testing.

    Markets, tickers and order books are served as given. Balances can
    be a fixed mapping or a sequence of payloads returned one per
    ``fetch_balance`` call (the last one repeats).
    """

    precisionMode = DECIMAL_PLACES

    def __init__(
        self,
        exchange_id: str = "binance",
        markets: dict[str, dict[str, Any]] | None = None,
        tickers: dict[str, dict[str, Any]] | None = None,
        order_books: dict[str, dict[str, Any]] | None = None,
        balances: dict[str, Any] | None = None,
        balance_sequence: Iterable[dict[str, Any]] | None = None,
        fill_orders: bool = True,
        reject_symbols: Iterable[str] = (),
    ) -> None:
        """
        Initialize mock exchange.

        Args:
            exchange_id: Value of the ``id`` attribute.
            markets: ``load_markets`` payload.
            tickers: ``fetch_tickers`` payload.
            order_books: Order books by symbol.
            balances: Free balances by asset.
            balance_sequence: Free balances per successive call.
            fill_orders: Whether placed orders move balances.
            reject_symbols: Symbols on which ``create_order`` raises.
        """
        self.id = exchange_id
        self._markets = markets or {}
        self._tickers = tickers or {}
        self._order_books = order_books or {}
        self._balances = {k: to_decimal(v) for k, v in (balances or {}).items()}
        self._balance_sequence = list(balance_sequence or [])
        self._fill_orders = fill_orders
        self._reject_symbols = set(reject_symbols)

        self._order_id = 0
        self.orders: list[dict[str, Any]] = []
        self.book_requests: list[str] = []
        self.ticker_requests: list[list[str] | None] = []
        self.balance_requests = 0
        self.closed = False

        self.fail_balance = False
        self.fail_queries = False

    async def load_markets(self, reload: bool = False) -> dict[str, Any]:
        return self._markets

    async def fetch_balance(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Mock balance in ccxt's unified structure."""
        self.balance_requests += 1
        if self.fail_balance:
            raise ExchangeError("balance unavailable")

        if self._balance_sequence:
            step = self._balance_sequence[0]
            if len(self._balance_sequence) > 1:
                self._balance_sequence.pop(0)
            free = {k: to_decimal(v) for k, v in step.items()}
        else:
            free = dict(self._balances)

        payload: dict[str, Any] = {"info": {}, "free": dict(free), "total": dict(free)}
        for asset, amount in free.items():
            payload[asset] = {"free": amount, "used": Decimal(0), "total": amount}
        return payload

    async def fetch_tickers(self, symbols: list[str] | None = None) -> dict[str, Any]:
        self.ticker_requests.append(symbols)
        if symbols is None:
            return dict(self._tickers)
        return {s: t for s, t in self._tickers.items() if s in symbols}

    async def fetch_order_book(self, symbol: str, limit: int | None = None) -> dict[str, Any]:
        self.book_requests.append(symbol)
        book = self._order_books.get(symbol, {"asks": [], "bids": []})
        if limit is None:
            return book
        return {"asks": book["asks"][:limit], "bids": book["bids"][:limit]}

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: float | None = None,
    ) -> dict[str, Any]:
        """Record the order and optionally settle it against balances."""
        if symbol in self._reject_symbols:
            raise InsufficientFunds(f"{symbol} rejected")

        self._order_id += 1
        order = {
            "id": str(self._order_id),
            "symbol": symbol,
            "type": type,
            "side": side,
            "amount": amount,
            "price": price,
            "status": "closed" if self._fill_orders else "open",
        }
        self.orders.append(order)

        if self._fill_orders and price is not None:
            self._settle(symbol, side, to_decimal(amount), to_decimal(price))

        return order

    def _settle(self, symbol: str, side: str, amount: Decimal, price: Decimal) -> None:
        """Move balances as if the order filled at its price."""
        base, quote = symbol.split("/")
        zero = Decimal(0)
        if side == "buy":
            self._balances[base] = self._balances.get(base, zero) + amount
            self._balances[quote] = self._balances.get(quote, zero) - amount * price
        else:
            self._balances[base] = self._balances.get(base, zero) - amount
            self._balances[quote] = self._balances.get(quote, zero) + amount * price

    async def fetch_order(self, id: str, symbol: str | None = None) -> dict[str, Any]:
        if self.fail_queries:
            raise ExchangeError("order lookup failed")
        for order in self.orders:
            if order["id"] == id:
                return order
        raise ExchangeError(f"order {id} not found")

    async def fetch_order_status(self, id: str, symbol: str | None = None) -> str:
        order = await self.fetch_order(id, symbol)
        return str(order["status"])

    async def close(self) -> None:
        self.closed = True

    @property
    def balances(self) -> dict[str, Decimal]:
        """Get current balances."""
        return self._balances
