"""
Pydantic models for unified exchange responses.

ccxt returns plain dicts; these models give type-safe access to the
parts of ``load_markets()`` and ``fetch_tickers()`` the engine uses.
Numbers are parsed to ``Decimal`` through ``str`` so float noise from
the exchange JSON is not carried into the arithmetic.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from triarb.utils.math import to_decimal


def _decimal_or_none(v: Any) -> Decimal | None:
    return to_decimal(v)


class MinMax(BaseModel):
    """Lower and upper bound of one market limit."""

    min: Decimal | None = None
    max: Decimal | None = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def parse_bound(cls, v: Any) -> Decimal | None:
        return _decimal_or_none(v)


class MarketLimits(BaseModel):
    """Amount, price and cost limits of a market."""

    amount: MinMax = Field(default_factory=MinMax)
    price: MinMax = Field(default_factory=MinMax)
    cost: MinMax = Field(default_factory=MinMax)

    @field_validator("amount", "price", "cost", mode="before")
    @classmethod
    def missing_limit(cls, v: Any) -> Any:
        """Some exchanges send ``None`` for an unknown limit."""
        return v if v is not None else {}


class MarketPrecision(BaseModel):
    """Raw precision values, places or tick sizes depending on the exchange."""

    amount: Decimal | None = None
    price: Decimal | None = None

    @field_validator("amount", "price", mode="before")
    @classmethod
    def parse_number(cls, v: Any) -> Decimal | None:
        return _decimal_or_none(v)


class MarketData(BaseModel):
    """Single entry of ``load_markets()``."""

    symbol: str
    base: str
    quote: str
    active: bool | None = True
    spot: bool | None = True
    precision: MarketPrecision = Field(default_factory=MarketPrecision)
    limits: MarketLimits = Field(default_factory=MarketLimits)
    maker: Decimal | None = None
    taker: Decimal | None = None

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("precision", "limits", mode="before")
    @classmethod
    def missing_section(cls, v: Any) -> Any:
        return v if v is not None else {}

    @field_validator("maker", "taker", mode="before")
    @classmethod
    def parse_fee(cls, v: Any) -> Decimal | None:
        return _decimal_or_none(v)

    @property
    def is_tradeable(self) -> bool:
        """Check if the market is an active spot market."""
        return self.active is not False and self.spot is not False


class TickerData(BaseModel):
    """Single entry of ``fetch_tickers()``."""

    symbol: str
    ask: Decimal | None = None
    ask_volume: Decimal | None = Field(default=None, alias="askVolume")
    bid: Decimal | None = None
    bid_volume: Decimal | None = Field(default=None, alias="bidVolume")
    timestamp: int | None = None

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("ask", "ask_volume", "bid", "bid_volume", mode="before")
    @classmethod
    def parse_number(cls, v: Any) -> Decimal | None:
        return _decimal_or_none(v)

    @property
    def has_quotes(self) -> bool:
        """Check if both sides carry a positive price."""
        return bool(self.ask and self.bid and self.ask > 0 and self.bid > 0)


class SymbolPrice(BaseModel):
    """Last price entry of the reference venue's ticker endpoint."""

    symbol: str
    price: Decimal

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> Any:
        parsed = to_decimal(v)
        return parsed if parsed is not None else v
