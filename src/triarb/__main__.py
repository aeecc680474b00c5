"""
Entry point for the arbitrage engine.

Usage:
    python -m triarb
    triarb  # if installed via pip
"""

import asyncio
import sys


# Try to use uvloop for better performance
try:
    import uvloop

    uvloop.install()
    UVLOOP_ENABLED = True
except ImportError:
    UVLOOP_ENABLED = False


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from pydantic import ValidationError

    from triarb import __version__
    from triarb.config.settings import get_settings
    from triarb.core.engine import ArbitrageEngine
    from triarb.exchange.client import ExchangeConfigError
    from triarb.telemetry.logger import setup_logging

    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║     TRIANGULAR ARBITRAGE ENGINE v{__version__:<23}      ║
║                                                               ║
║     Cycle ranking, sizing and execution                       ║
╚═══════════════════════════════════════════════════════════════╝
    """
    )

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}")
        print("\nCheck your .env file, for example:")
        print("  EXCHANGE_ID=binance")
        print("  EXCHANGE_API_KEY=your_api_key")
        print("  EXCHANGE_API_SECRET=your_api_secret")
        return 1

    dry_run = not settings.is_live
    print("Configuration:")
    print(f"  Exchange:       {settings.exchange_id} ({'Testnet' if settings.use_testnet else 'Production'})")
    print(f"  Mode:           {'DRY RUN' if dry_run else 'LIVE TRADING'}")
    print(f"  Base coins:     {', '.join(settings.base_coins)}")
    print(f"  Min rate:       {settings.min_rate_profit}%")
    print(f"  Min notional:   {settings.min_profit_in_usd} USD")
    if settings.scan_trigger == "push":
        print(f"  Scan trigger:   ticker push ({settings.stream_url or 'no stream, interval'})")
    print(f"  Scan interval:  {settings.scan_interval}s")
    print(f"  Max triangles:  {settings.max_triangles}")
    print(f"  uvloop:         {'Enabled' if UVLOOP_ENABLED else 'Disabled'}")
    print()

    if not dry_run:
        print("⚠️  WARNING: Live trading mode enabled!")
        print("    Real orders will be placed on the exchange.")
        print()

    async def run_engine() -> int:
        async_logger = setup_logging(level=settings.log_level, log_file=settings.log_file)
        engine = ArbitrageEngine(settings, async_logger=async_logger)

        try:
            await engine.setup()
            await engine.run()
            return 0

        except ExchangeConfigError as e:
            print(f"\nExchange error: {e}")
            return 1

        except Exception as e:
            print(f"\nFatal error: {e}")
            import traceback

            traceback.print_exc()
            return 1

        finally:
            await engine.shutdown()

    try:
        return asyncio.run(run_engine())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
