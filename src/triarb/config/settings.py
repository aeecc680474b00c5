"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation. Complex values such as
``EXCHANGES`` are read from the environment as JSON.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from triarb.config.constants import (
    ALL_TICKERS_STREAM,
    BINANCE_WS_TESTNET_URL,
    BINANCE_WS_URL,
    DEFAULT_BASE_COINS,
    DEFAULT_EXCHANGE_ID,
    DEFAULT_EXCHANGE_PROFILES,
    DEFAULT_FEE_TIERS,
    DEFAULT_MAX_TRIANGLES,
    DEFAULT_MIN_PROFIT_IN_USD,
    DEFAULT_MIN_RATE_PROFIT,
    DEFAULT_PRINCIPAL_FEE_EXCHANGES,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_CHECKS,
    DEFAULT_SCAN_INTERVAL_SECONDS,
    ORDER_TYPE_LIMIT,
    REFERENCE_PRICE_TTL_SECONDS,
    REFERENCE_PRICE_URL,
)


class ExchangeProfile(BaseModel):
    """
    Per-exchange ranking parameters.

    ``fee_tiers`` are fractions of the cycle rate charged at each fee
    schedule the exchange offers; ``blacklist`` lists asset symbols that
    must never be traded there.
    """

    fee_tiers: list[Decimal] = Field(default_factory=lambda: list(DEFAULT_FEE_TIERS))
    blacklist: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("fee_tiers", mode="before")
    @classmethod
    def tiers_from_text(cls, v: object) -> object:
        """Floats go through ``str`` so 0.1 stays 0.1."""
        if isinstance(v, (list, tuple)):
            return [str(t) if isinstance(t, float) else t for t in v]
        return v

    @field_validator("fee_tiers", mode="after")
    @classmethod
    def default_tiers(cls, v: list[Decimal]) -> list[Decimal]:
        """Empty tier lists fall back to zero fees."""
        return v or list(DEFAULT_FEE_TIERS)

    @field_validator("blacklist", mode="before")
    @classmethod
    def upper_symbols(cls, v: object) -> object:
        """Asset symbols are compared upper-case."""
        if isinstance(v, (list, tuple, set, frozenset)):
            return frozenset(str(s).upper() for s in v)
        return v


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Sensitive values use SecretStr for safe handling.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Exchange
    # =========================================================================

    exchange_id: str = Field(
        default=DEFAULT_EXCHANGE_ID,
        description="ccxt identifier of the exchange to scan",
    )
    exchange_api_key: SecretStr | None = Field(
        default=None,
        description="API key; without credentials only dry runs are possible",
    )
    exchange_api_secret: SecretStr | None = Field(
        default=None,
        description="API secret for signing requests",
    )
    exchange_password: SecretStr | None = Field(
        default=None,
        description="API passphrase for exchanges that require one",
    )
    use_testnet: bool = Field(
        default=False,
        description="Use the exchange sandbox instead of production",
    )
    request_timeout_ms: int = Field(
        default=15000,
        ge=1000,
        le=60000,
        description="Exchange request timeout in milliseconds",
    )

    # =========================================================================
    # Scanning
    # =========================================================================

    scan_interval: float = Field(
        default=DEFAULT_SCAN_INTERVAL_SECONDS,
        gt=0.0,
        description="Seconds between scans",
    )
    scan_trigger: Literal["interval", "push"] = Field(
        default="interval",
        description="Scan every scan_interval, or on each all-tickers push",
    )
    market_stream_url: str | None = Field(
        default=None,
        description="All-tickers WebSocket URL; Binance's stream when unset",
    )
    single_scan: bool = Field(
        default=True,
        description="Skip a trigger while the previous scan is still running",
    )
    base_coins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BASE_COINS),
        description="Assets cycles may start and end in",
    )
    max_triangles: int = Field(
        default=DEFAULT_MAX_TRIANGLES,
        ge=1,
        le=5000,
        description="Maximum number of triangles to monitor per base coin",
    )

    # =========================================================================
    # Ranking
    # =========================================================================

    min_rate_profit: Decimal = Field(
        default=Decimal(str(DEFAULT_MIN_RATE_PROFIT)),
        description="Minimum rate after fees, in percent",
    )
    min_profit_in_usd: Decimal = Field(
        default=Decimal(str(DEFAULT_MIN_PROFIT_IN_USD)),
        ge=0,
        description="Minimum USD notional of the thinnest edge",
    )
    exchanges: dict[str, ExchangeProfile] = Field(
        default_factory=lambda: {
            exchange_id: ExchangeProfile.model_validate(profile)
            for exchange_id, profile in DEFAULT_EXCHANGE_PROFILES.items()
        },
        description="Fee tiers and blacklist per exchange id",
    )

    # =========================================================================
    # Execution
    # =========================================================================

    dry_run: bool = Field(
        default=True,
        description="Simulate trades without sending real orders",
    )
    order_type: Literal["limit", "market"] = Field(
        default=ORDER_TYPE_LIMIT,
        description="Order type used for every leg",
    )
    principal_fee_exchanges: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PRINCIPAL_FEE_EXCHANGES),
        description="Exchanges whose orders are shaved to leave room for fees",
    )
    order_retry_max_checks: int = Field(
        default=DEFAULT_RETRY_MAX_CHECKS,
        ge=1,
        le=50,
        description="Balance checks before submitting a reduced order",
    )
    order_retry_delay: float = Field(
        default=DEFAULT_RETRY_DELAY_SECONDS,
        ge=0.0,
        le=60.0,
        description="Seconds to wait between balance checks",
    )

    # =========================================================================
    # Reference Prices
    # =========================================================================

    reference_price_url: str = Field(
        default=REFERENCE_PRICE_URL,
        description="REST venue used for USD reference prices",
    )
    reference_price_ttl: float = Field(
        default=REFERENCE_PRICE_TTL_SECONDS,
        ge=0.0,
        description="Seconds a reference price stays cached",
    )

    # =========================================================================
    # Storage & Logging
    # =========================================================================

    tick_rank: bool = Field(
        default=False,
        description="Persist every scan's ranks",
    )
    rank_file: Path = Field(
        default=Path("data/ranks.jsonl"),
        description="JSON-lines file receiving ranks when tick_rank is on",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("exchange_id", mode="after")
    @classmethod
    def lower_exchange_id(cls, v: str) -> str:
        """ccxt identifiers are lower-case."""
        return v.strip().lower()

    @field_validator("base_coins", mode="after")
    @classmethod
    def upper_base_coins(cls, v: list[str]) -> list[str]:
        """Ensure at least one base coin, upper-cased."""
        coins = [c.strip().upper() for c in v if c.strip()]
        if not coins:
            raise ValueError("At least one base coin is required")
        return coins

    @field_validator("principal_fee_exchanges", mode="after")
    @classmethod
    def lower_exchange_ids(cls, v: list[str]) -> list[str]:
        return [e.strip().lower() for e in v]

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def has_credentials(self) -> bool:
        """Check if private endpoints can be used."""
        return bool(
            self.exchange_api_key
            and self.exchange_api_secret
            and self.exchange_api_key.get_secret_value()
            and self.exchange_api_secret.get_secret_value()
        )

    @property
    def is_live(self) -> bool:
        """Check if real orders will be sent."""
        return not self.dry_run and self.has_credentials

    @property
    def stream_url(self) -> str | None:
        """
        All-tickers WebSocket stream used when scans are pushed.

        Binance's stream is the built-in default; other exchanges need
        ``market_stream_url``.
        """
        if self.market_stream_url:
            return self.market_stream_url
        if self.exchange_id != "binance":
            return None
        base = BINANCE_WS_TESTNET_URL if self.use_testnet else BINANCE_WS_URL
        return f"{base}{ALL_TICKERS_STREAM}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
