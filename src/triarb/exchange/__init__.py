"""Exchange connectivity: ccxt client factory, response models and reference prices."""

from triarb.exchange.client import ExchangeConfigError, create_exchange
from triarb.exchange.reference import PriceSourceError, ReferencePriceClient


__all__ = [
    "ExchangeConfigError",
    "PriceSourceError",
    "ReferencePriceClient",
    "create_exchange",
]
