"""Configuration module for the arbitrage engine."""

from triarb.config.constants import (
    DEFAULT_MAKER_FEE,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_CHECKS,
)
from triarb.config.settings import ExchangeProfile, Settings, get_settings


__all__ = [
    "DEFAULT_MAKER_FEE",
    "DEFAULT_RETRY_DELAY_SECONDS",
    "DEFAULT_RETRY_MAX_CHECKS",
    "ExchangeProfile",
    "Settings",
    "get_settings",
]
