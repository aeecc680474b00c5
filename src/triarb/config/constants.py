"""
Trading constants and configuration values.

This module contains all hardcoded values used throughout the engine.
Values are organized by category for easy maintenance and auditing.
"""

from decimal import Decimal
from typing import Final


# =============================================================================
# Exchange
# =============================================================================

DEFAULT_EXCHANGE_ID: Final[str] = "binance"

# Exchanges that deduct fees from the order principal; orders there are
# shaved by PRINCIPAL_FEE_HAIRCUT before submission
DEFAULT_PRINCIPAL_FEE_EXCHANGES: Final[tuple[str, ...]] = ("hitbtc2",)
PRINCIPAL_FEE_HAIRCUT: Final[Decimal] = Decimal("0.95")

ORDER_TYPE_LIMIT: Final[str] = "limit"
ORDER_TYPE_MARKET: Final[str] = "market"

# Order-book depth sampled when refilling quantities
ORDER_BOOK_DEPTH: Final[int] = 1


# =============================================================================
# Market-Data Push
# =============================================================================

BINANCE_WS_URL: Final[str] = "wss://stream.binance.com:9443"
BINANCE_WS_TESTNET_URL: Final[str] = "wss://testnet.binance.vision"
ALL_TICKERS_STREAM: Final[str] = "/ws/!ticker@arr"

MIN_RECONNECT_DELAY: Final[float] = 1.0  # seconds
MAX_RECONNECT_DELAY: Final[float] = 30.0  # seconds
RECONNECT_MULTIPLIER: Final[float] = 2.0
WS_PING_INTERVAL: Final[float] = 20.0  # seconds
WS_RECEIVE_TIMEOUT: Final[float] = 30.0  # seconds
WS_MAX_MESSAGE_SIZE: Final[int] = 10 * 1024 * 1024  # 10MB
WS_CLOSE_TIMEOUT: Final[float] = 5.0  # seconds


# =============================================================================
# Ranking
# =============================================================================

# Percentage rate after fees below which a cycle is dropped
DEFAULT_MIN_RATE_PROFIT: Final[float] = 0.1

# Minimum notional of the thinnest edge, in USD
DEFAULT_MIN_PROFIT_IN_USD: Final[float] = 10.0

# Fee tiers used when an exchange has no profile
DEFAULT_FEE_TIERS: Final[tuple[Decimal, Decimal]] = (Decimal(0), Decimal(0))

DEFAULT_EXCHANGE_PROFILES: Final[dict[str, dict[str, list[object]]]] = {
    "binance": {"fee_tiers": ["0.1", "0.05"], "blacklist": []},
    "hitbtc2": {"fee_tiers": [], "blacklist": ["BCH", "GUSD"]},
}

# Reference fiat unit for notional values
REFERENCE_FIAT: Final[str] = "USD"


# =============================================================================
# Simulation
# =============================================================================

# Maker fee used when the exchange does not publish one
DEFAULT_MAKER_FEE: Final[Decimal] = Decimal("0.0002")

# Headroom over the exchange minimum cost for the first leg
MIN_COST_HEADROOM: Final[Decimal] = Decimal("1.1")

# Decimal places used when a pair reports no amount precision
DEFAULT_AMOUNT_PRECISION: Final[int] = 8

RATE_PLACES: Final[int] = 3


# =============================================================================
# Execution
# =============================================================================

DEFAULT_RETRY_MAX_CHECKS: Final[int] = 5
DEFAULT_RETRY_DELAY_SECONDS: Final[float] = 1.0


# =============================================================================
# Scanning
# =============================================================================

DEFAULT_SCAN_INTERVAL_SECONDS: Final[float] = 10.0
DEFAULT_BASE_COINS: Final[tuple[str, ...]] = ("BTC", "ETH", "USDT")
DEFAULT_MAX_TRIANGLES: Final[int] = 200

# Number of ranks written to the log after each scan
RANK_LOG_LIMIT: Final[int] = 5


# =============================================================================
# Reference Prices
# =============================================================================

REFERENCE_PRICE_URL: Final[str] = "https://api.binance.com"
ENDPOINT_TICKER_PRICE: Final[str] = "/api/v3/ticker/price"
REFERENCE_PRICE_TTL_SECONDS: Final[float] = 300.0
REFERENCE_PRICE_TIMEOUT_SECONDS: Final[float] = 10.0

# Assets pegged to the reference fiat; their price is 1 without a lookup
USD_STABLECOINS: Final[frozenset[str]] = frozenset(
    {
        "USD",
        "USDT",
        "USDC",
        "BUSD",
        "TUSD",
        "DAI",
    }
)

# Quote asset used on the reference venue for USD prices
REFERENCE_QUOTE: Final[str] = "USDT"


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000
