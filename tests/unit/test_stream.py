"""
Unit tests for the ticker push stream.
"""

import asyncio
from typing import Any

import pytest

from tests.mocks import TickerPushServer
from triarb.market.stream import ConnectionState, TickerStream


class RecordingHandler:
    """Collects pushed payloads; optionally fails on the first one."""

    def __init__(self, fail_first: bool = False) -> None:
        self.received: list[Any] = []
        self._fail_first = fail_first
        self._calls = 0

    async def __call__(self, payload: Any) -> None:
        self._calls += 1
        if self._fail_first and self._calls == 1:
            raise RuntimeError("handler broke")
        self.received.append(payload)

    async def wait_for(self, count: int, timeout: float = 5.0) -> None:
        async def reached() -> None:
            while len(self.received) < count:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(reached(), timeout=timeout)


class TestTickerStream:
    """Tests for TickerStream against a local push server."""

    @pytest.mark.asyncio
    async def test_delivers_decoded_payload(self) -> None:
        handler = RecordingHandler()
        async with TickerPushServer() as server:
            stream = TickerStream(server.url, handler)
            stream.start()
            await server.wait_connections(1)

            server.push([{"s": "BTCUSDT", "c": "30000.00"}])
            await handler.wait_for(1)

            assert handler.received == [[{"s": "BTCUSDT", "c": "30000.00"}]]
            assert stream.message_count == 1
            assert stream.state == ConnectionState.CONNECTED

            await stream.stop()
            assert stream.state == ConnectionState.CLOSED

    @pytest.mark.asyncio
    async def test_unwraps_combined_stream(self) -> None:
        handler = RecordingHandler()
        async with TickerPushServer() as server:
            stream = TickerStream(server.url, handler)
            stream.start()
            await server.wait_connections(1)

            server.push({"stream": "!ticker@arr", "data": [{"s": "ETHBTC"}]})
            await handler.wait_for(1)

            assert handler.received == [[{"s": "ETHBTC"}]]
            await stream.stop()

    @pytest.mark.asyncio
    async def test_invalid_json_is_skipped(self) -> None:
        handler = RecordingHandler()
        async with TickerPushServer() as server:
            stream = TickerStream(server.url, handler)
            stream.start()
            await server.wait_connections(1)

            server.push_raw("{not json")
            server.push([{"s": "ETHUSDT"}])
            await handler.wait_for(1)

            assert handler.received == [[{"s": "ETHUSDT"}]]
            assert stream.message_count == 1
            await stream.stop()

    @pytest.mark.asyncio
    async def test_handler_error_keeps_stream_open(self) -> None:
        handler = RecordingHandler(fail_first=True)
        async with TickerPushServer() as server:
            stream = TickerStream(server.url, handler)
            stream.start()
            await server.wait_connections(1)

            server.push([{"s": "BTCUSDT"}])
            server.push([{"s": "ETHUSDT"}])
            await handler.wait_for(1)

            assert handler.received == [[{"s": "ETHUSDT"}]]
            assert server.connections == 1
            await stream.stop()

    @pytest.mark.asyncio
    async def test_reconnects_after_server_close(self) -> None:
        handler = RecordingHandler()
        async with TickerPushServer() as server:
            stream = TickerStream(server.url, handler, min_reconnect_delay=0.01)
            stream.start()
            await server.wait_connections(1)

            server.drop()
            await server.wait_connections(2)
            server.push([{"s": "BTCUSDT"}])
            await handler.wait_for(1)

            assert handler.received == [[{"s": "BTCUSDT"}]]
            await stream.stop()

    @pytest.mark.asyncio
    async def test_connect_failure(self) -> None:
        stream = TickerStream("ws://127.0.0.1:1/ws/tickers", RecordingHandler())

        assert not await stream.connect()
        assert stream.state == ConnectionState.DISCONNECTED

        await stream.disconnect()
        assert stream.state == ConnectionState.CLOSED
