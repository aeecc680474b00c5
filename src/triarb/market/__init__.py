"""Market metadata, candidate production and the ticker push stream."""

from triarb.market.catalog import MarketCatalog
from triarb.market.candidates import TickerCandidateSource
from triarb.market.stream import ConnectionState, TickerStream


__all__ = ["ConnectionState", "MarketCatalog", "TickerCandidateSource", "TickerStream"]
