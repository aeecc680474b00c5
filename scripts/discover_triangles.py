#!/usr/bin/env python3
"""
Triangle Discovery Script.

Loads the configured venue's markets and lists every closed
three-pair cycle from the base coins, without trading.
"""

import asyncio
import sys
from pathlib import Path

import orjson

from triarb.config.settings import get_settings
from triarb.exchange.client import create_exchange
from triarb.market.catalog import MarketCatalog
from triarb.strategy.graph import TriangleDiscovery


async def main() -> int:
    """Discover and display triangles."""
    print("=" * 60)
    print("  TRIANGLE DISCOVERY")
    print("=" * 60)
    print()

    try:
        settings = get_settings()
    except Exception as e:
        print(f"Error loading settings: {e}")
        return 1

    client = create_exchange(settings)
    try:
        print(f"Loading {settings.exchange_id} markets...")
        catalog = await MarketCatalog.from_exchange(client)
        print(f"Loaded {len(catalog)} active pairs")
        print()

        print(f"Discovering triangles from {', '.join(settings.base_coins)}...")
        discovery = TriangleDiscovery(catalog)
        triangles = discovery.discover(settings.base_coins, settings.max_triangles)
        print(f"Found {len(triangles)} triangles")
        print()

        for i, triangle in enumerate(triangles, 1):
            legs_str = " -> ".join(
                f"{leg.from_asset}({leg.symbol}:{leg.side.value})" for leg in triangle.legs
            )
            print(f"{i:3}. {triangle.id}")
            print(f"     {legs_str} -> {triangle.base_asset}")
            print()

        print("=" * 60)
        print(f"Total triangles: {len(triangles)}")
        print(f"Unique pairs:    {len(discovery.get_all_symbols())}")
        print()

        export_path = Path("triangles.json")
        export_path.write_bytes(orjson.dumps(discovery.to_dict(), option=orjson.OPT_INDENT_2))
        print(f"Exported to: {export_path}")
    finally:
        await client.close()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
