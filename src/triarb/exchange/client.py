"""
Exchange client factory.

Creates a ``ccxt.async_support`` exchange instance from settings. The
instance is used directly as the engine's ``ExchangeClient``.
"""

import logging
from typing import Any

import ccxt.async_support as ccxt

from triarb.config.settings import Settings


logger = logging.getLogger(__name__)


class ExchangeConfigError(Exception):
    """Raised when an exchange client cannot be created."""

    pass


def client_options(settings: Settings) -> dict[str, Any]:
    """
    Build the ccxt constructor options.

    Args:
        settings: Application settings.

    Returns:
        Options dict; credentials are only included when configured.
    """
    options: dict[str, Any] = {
        "timeout": settings.request_timeout_ms,
        "enableRateLimit": True,
        "options": {"defaultType": "spot"},
    }
    if settings.exchange_api_key and settings.exchange_api_secret:
        options["apiKey"] = settings.exchange_api_key.get_secret_value()
        options["secret"] = settings.exchange_api_secret.get_secret_value()
    if settings.exchange_password:
        options["password"] = settings.exchange_password.get_secret_value()
    return options


def create_exchange(settings: Settings) -> ccxt.Exchange:
    """
    Create the async exchange client.

    Args:
        settings: Application settings.

    Returns:
        Unconnected ccxt exchange instance.

    Raises:
        ExchangeConfigError: If ccxt has no exchange with that id.
    """
    exchange_class = getattr(ccxt, settings.exchange_id, None)
    if exchange_class is None:
        raise ExchangeConfigError(f"Unknown exchange id: {settings.exchange_id}")

    client = exchange_class(client_options(settings))

    if settings.use_testnet:
        client.set_sandbox_mode(True)

    mode = "private" if settings.has_credentials else "public"
    logger.info(f"Created {settings.exchange_id} client ({mode}, testnet={settings.use_testnet})")
    return client
