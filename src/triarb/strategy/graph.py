"""
Triangle path discovery using graph analysis.

Uses NetworkX to build a directed asset graph from the market catalog
and enumerate the three-hop loops that start and end in a base coin.
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import networkx as nx

from triarb.core.types import OrderSide, TriangleLeg, TrianglePath


if TYPE_CHECKING:
    from triarb.market.catalog import MarketCatalog


logger = logging.getLogger(__name__)


class TriangleDiscovery:
    """
    Discovers valid triangular arbitrage paths.

    Uses a directed graph where:
    - Nodes are assets (BTC, ETH, USDT, etc.)
    - Edges are trading pairs with direction

    Both directions of a loop are kept since they are distinct trades.
    """

    def __init__(self, catalog: "MarketCatalog") -> None:
        """
        Initialize triangle discovery.

        Args:
            catalog: Catalog with loaded pair metadata.
        """
        self._catalog = catalog
        self._graph: nx.DiGraph = nx.DiGraph()
        self._triangles: list[TrianglePath] = []

    def build_graph(self) -> int:
        """
        Build directed graph from available trading pairs.

        Returns:
            Number of edges added.
        """
        self._graph.clear()

        for symbol, info in self._catalog.get_all().items():
            # quote -> base buys the base, base -> quote sells it
            self._graph.add_edge(info.quote, info.base, symbol=symbol, side=OrderSide.BUY)
            self._graph.add_edge(info.base, info.quote, symbol=symbol, side=OrderSide.SELL)

        logger.info(
            f"Built graph with {self._graph.number_of_nodes()} assets, "
            f"{self._graph.number_of_edges()} edges"
        )

        return int(self._graph.number_of_edges())

    def find_triangles(self, base_asset: str, max_triangles: int = 100) -> list[TrianglePath]:
        """
        Find triangular paths starting and ending in a base asset.

        Args:
            base_asset: Starting/ending asset.
            max_triangles: Maximum triangles to return.

        Returns:
            List of TrianglePath objects.
        """
        if base_asset not in self._graph:
            logger.warning(f"Base asset {base_asset} not in graph")
            return []

        triangles: list[TrianglePath] = []

        for first_hop in self._graph.successors(base_asset):
            for second_hop in self._graph.successors(first_hop):
                if second_hop in (base_asset, first_hop):
                    continue
                if not self._graph.has_edge(second_hop, base_asset):
                    continue

                triangles.append(self._build_triangle(base_asset, first_hop, second_hop))
                if len(triangles) >= max_triangles:
                    logger.info(f"Triangle limit {max_triangles} reached for {base_asset}")
                    return triangles

        logger.info(f"Found {len(triangles)} triangular paths from {base_asset}")
        return triangles

    def discover(self, base_assets: Iterable[str], max_triangles: int = 100) -> list[TrianglePath]:
        """
        Build the graph and find triangles for every base asset.

        Args:
            base_assets: Assets cycles may start in.
            max_triangles: Limit per base asset.

        Returns:
            All discovered triangles.
        """
        self.build_graph()
        self._triangles = [
            triangle
            for base in base_assets
            for triangle in self.find_triangles(base, max_triangles)
        ]
        return self._triangles

    def _build_triangle(self, base: str, mid1: str, mid2: str) -> TrianglePath:
        """Build a TrianglePath from three assets."""
        hops = ((base, mid1), (mid1, mid2), (mid2, base))
        legs = tuple(
            TriangleLeg(
                symbol=self._graph.edges[src, dst]["symbol"],
                side=self._graph.edges[src, dst]["side"],
                from_asset=src,
                to_asset=dst,
            )
            for src, dst in hops
        )
        # One pair per asset couple, so the asset order names the three pairs
        return TrianglePath(
            id=f"{base}-{mid1}-{mid2}",
            base_asset=base,
            legs=legs,  # type: ignore[arg-type]
        )

    def get_triangles(self) -> list[TrianglePath]:
        """Get discovered triangles."""
        return self._triangles

    def get_all_symbols(self) -> set[str]:
        """Get all symbols involved in triangles."""
        symbols: set[str] = set()
        for triangle in self._triangles:
            symbols.update(triangle.symbols)
        return symbols

    @property
    def graph(self) -> nx.DiGraph:
        """Get the underlying NetworkX graph."""
        return self._graph

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Convert triangles to serializable format."""
        return {
            "triangles": [
                {
                    "id": t.id,
                    "base_asset": t.base_asset,
                    "legs": [
                        {
                            "symbol": leg.symbol,
                            "side": leg.side.value,
                            "from": leg.from_asset,
                            "to": leg.to_asset,
                        }
                        for leg in t.legs
                    ],
                }
                for t in self._triangles
            ]
        }
