"""Cycle rating, ranking and sizing."""

from triarb.strategy.graph import TriangleDiscovery
from triarb.strategy.ranker import CandidateRanker, RankerConfig, RankerStats
from triarb.strategy.rate import convert, convert_amount, triangle_rate
from triarb.strategy.refill import QuantityRefiller
from triarb.strategy.sizer import base_trade_amount, min_trade_amount


__all__ = [
    "CandidateRanker",
    "QuantityRefiller",
    "RankerConfig",
    "RankerStats",
    "TriangleDiscovery",
    "base_trade_amount",
    "convert",
    "convert_amount",
    "min_trade_amount",
    "triangle_rate",
]
