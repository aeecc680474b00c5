"""
Market-data push stream.

Keeps one WebSocket subscription to an all-tickers stream open and
hands every update to a handler, which the engine uses to trigger a
scan. Reconnects with exponential backoff.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from enum import Enum, auto
from typing import Any

import aiohttp
import orjson

from triarb.config.constants import (
    MAX_RECONNECT_DELAY,
    MIN_RECONNECT_DELAY,
    RECONNECT_MULTIPLIER,
    WS_CLOSE_TIMEOUT,
    WS_MAX_MESSAGE_SIZE,
    WS_PING_INTERVAL,
    WS_RECEIVE_TIMEOUT,
)


logger = logging.getLogger(__name__)


# Receives the decoded payload of one push
TickerHandler = Callable[[Any], Coroutine[Any, Any, None]]


class ConnectionState(Enum):
    """WebSocket connection state."""

    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    RECONNECTING = auto()
    CLOSED = auto()


class TickerStream:
    """
    Push source for ticker updates.

    Binance's ``!ticker@arr`` stream sends the whole market's 24h
    tickers about once a second; each message is one handler call.
    """

    def __init__(
        self,
        url: str,
        handler: TickerHandler,
        min_reconnect_delay: float = MIN_RECONNECT_DELAY,
        max_reconnect_delay: float = MAX_RECONNECT_DELAY,
    ) -> None:
        """
        Initialize the stream.

        Args:
            url: Full WebSocket URL of the stream.
            handler: Async callback for each decoded message.
            min_reconnect_delay: First reconnect delay in seconds.
            max_reconnect_delay: Backoff ceiling in seconds.
        """
        self._url = url
        self._handler = handler
        self._min_delay = min_reconnect_delay
        self._max_delay = max_reconnect_delay

        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._session: aiohttp.ClientSession | None = None
        self._state = ConnectionState.DISCONNECTED
        self._reconnect_delay = min_reconnect_delay
        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._message_count = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def message_count(self) -> int:
        """Messages received since start."""
        return self._message_count

    async def connect(self) -> bool:
        """
        Open the WebSocket.

        Returns:
            True if connected.
        """
        if self._state == ConnectionState.CONNECTED:
            return True

        self._state = ConnectionState.CONNECTING
        try:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession()

            self._ws = await self._session.ws_connect(
                self._url,
                heartbeat=WS_PING_INTERVAL,
                receive_timeout=WS_RECEIVE_TIMEOUT,
                max_msg_size=WS_MAX_MESSAGE_SIZE,
            )
        except (aiohttp.ClientError, OSError, TimeoutError) as e:
            logger.error(f"Ticker stream connection failed: {e}")
            self._state = ConnectionState.DISCONNECTED
            return False

        self._state = ConnectionState.CONNECTED
        self._reconnect_delay = self._min_delay
        logger.info(f"Ticker stream connected to {self._url}")
        return True

    async def disconnect(self) -> None:
        """Close the WebSocket and its session."""
        self._running = False
        self._state = ConnectionState.CLOSED

        if self._ws and not self._ws.closed:
            await self._ws.close()
        if self._session and not self._session.closed:
            await self._session.close()

        self._ws = None
        self._session = None

    async def _reconnect(self) -> None:
        """Reconnect with exponential backoff until connected or stopped."""
        self._state = ConnectionState.RECONNECTING

        while self._running and self._state != ConnectionState.CONNECTED:
            logger.info(f"Ticker stream reconnecting in {self._reconnect_delay:.1f}s")
            await asyncio.sleep(self._reconnect_delay)

            if await self.connect():
                break

            self._reconnect_delay = min(
                self._reconnect_delay * RECONNECT_MULTIPLIER,
                self._max_delay,
            )

    async def _handle_message(self, msg: aiohttp.WSMessage) -> bool:
        """
        Decode one message and pass it to the handler.

        Returns:
            False if the connection should be dropped.
        """
        if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
            try:
                data = orjson.loads(msg.data)
            except orjson.JSONDecodeError as e:
                logger.warning(f"Ticker stream sent invalid JSON: {e}")
                return True

            self._message_count += 1
            # Combined streams wrap the payload: {"stream": "...", "data": ...}
            if isinstance(data, dict) and "data" in data:
                data = data["data"]

            try:
                await self._handler(data)
            except Exception as e:
                logger.error(f"Ticker handler failed: {e}", exc_info=True)
            return True

        if msg.type == aiohttp.WSMsgType.ERROR:
            logger.error(f"Ticker stream error: {msg.data}")
            return False

        if msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED):
            logger.warning("Ticker stream closed by server")
            return False

        return True

    async def run(self) -> None:
        """Message loop with auto-reconnection."""
        self._running = True

        while self._running:
            if self._state != ConnectionState.CONNECTED:
                if not await self.connect():
                    await self._reconnect()
                    continue

            if self._ws is None:
                await self._reconnect()
                continue

            try:
                async for msg in self._ws:
                    if not self._running or not await self._handle_message(msg):
                        break
            except asyncio.CancelledError:
                break
            except (aiohttp.ClientError, TimeoutError) as e:
                logger.error(f"Ticker stream receive failed: {e}")

            if self._running:
                self._state = ConnectionState.DISCONNECTED
                await self._reconnect()

    def start(self) -> asyncio.Task[None]:
        """Run the message loop as a task."""
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Stop the message loop and disconnect."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await asyncio.wait_for(self._task, timeout=WS_CLOSE_TIMEOUT)
            except (TimeoutError, asyncio.CancelledError):
                pass
            self._task = None

        await self.disconnect()
