"""Core module containing the engine orchestrator and type definitions."""

from triarb.core.types import (
    AssetBalance,
    BalanceSnapshot,
    Cycle,
    Edge,
    ExecutionReport,
    OrderOutcome,
    OrderOutcomeStatus,
    OrderRequest,
    OrderSide,
    PairInfo,
    Rank,
    TradeEdge,
    TradeTriangle,
    TriangleLeg,
    TrianglePath,
)


__all__ = [
    "AssetBalance",
    "BalanceSnapshot",
    "Cycle",
    "Edge",
    "ExecutionReport",
    "OrderOutcome",
    "OrderOutcomeStatus",
    "OrderRequest",
    "OrderSide",
    "PairInfo",
    "Rank",
    "TradeEdge",
    "TradeTriangle",
    "TriangleLeg",
    "TrianglePath",
]
