# noderpc/clients/ws.py

import asyncio
from typing import Any, Dict, Mapping, Optional

import msgspec
import websockets

from ..types import TransportError
from .interfaces import AsyncTransport

DEFAULT_WEBSOCKET = "wss://steemd.steemit.com"


class WsTransport(AsyncTransport):
    """
    JSON-RPC over a single WebSocket connection.

    Requests are correlated to responses by id. The connection is opened on
    first use; a reader task resolves pending requests as responses arrive and
    fails all of them when the socket closes.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        super().__init__(options)
        self._connection = None
        self._connecting: Optional[asyncio.Future] = None
        self._reader: Optional[asyncio.Task] = None
        self._pending: Dict[int, asyncio.Future] = {}

    @property
    def websocket_url(self) -> str:
        return self.options.get("websocket") or DEFAULT_WEBSOCKET

    def start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Connect lazily on the first request instead.
            return
        self._connecting = loop.create_task(self._open())
        self._connecting.add_done_callback(self._discard_connect_error)

    @staticmethod
    def _discard_connect_error(future: asyncio.Future) -> None:
        # Surfaced again by the first request that awaits the connection.
        if not future.cancelled():
            future.exception()

    async def _open(self):
        self.log_info("Opening WebSocket connection", transport=self.websocket_url)
        try:
            connection = await websockets.connect(self.websocket_url, open_timeout=self.timeout)
        except (OSError, asyncio.TimeoutError, websockets.WebSocketException) as e:
            raise TransportError(f"Cannot connect to {self.websocket_url}: {e}") from e

        self._connection = connection
        self._reader = asyncio.get_running_loop().create_task(self._read_loop(connection))
        return connection

    async def _ensure_connection(self):
        if self._connection is not None:
            return self._connection

        if self._connecting is None or self._connecting.done():
            self._connecting = asyncio.get_running_loop().create_task(self._open())

        connecting = self._connecting
        try:
            return await asyncio.shield(connecting)
        finally:
            if connecting.done() and self._connecting is connecting:
                self._connecting = None

    async def _read_loop(self, connection) -> None:
        try:
            async for raw in connection:
                try:
                    message = msgspec.json.decode(raw)
                except msgspec.DecodeError as e:
                    self.log_warning("Discarding undecodable frame", error=str(e))
                    continue

                future = self._pending.get(message.get("id")) if isinstance(message, dict) else None
                if future is not None and not future.done():
                    future.set_result(message)
        except websockets.ConnectionClosed as e:
            self.log_warning("WebSocket connection closed", transport=self.websocket_url, error=str(e))
        finally:
            if self._connection is connection:
                self._connection = None
            self._fail_pending(TransportError("WebSocket connection closed"))

    def _fail_pending(self, error: TransportError) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(error)

    async def call(self, api: str, data: Dict[str, Any]) -> Any:
        connection = await self._ensure_connection()
        request = self.build_request(api, data)
        request_id = request["id"]

        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        self.log_debug("WebSocket request", api=api, method=data.get("method"))

        try:
            try:
                await connection.send(self.encode(request).decode())
            except websockets.ConnectionClosed as e:
                raise TransportError(f"WebSocket connection closed: {e}") from e

            try:
                body = await asyncio.wait_for(future, self.timeout)
            except asyncio.TimeoutError as e:
                raise TransportError("Request timed out") from e
        finally:
            self._pending.pop(request_id, None)

        return self.parse_response(body)

    async def close(self) -> None:
        connection, self._connection = self._connection, None
        self.stop()
        if connection is not None:
            await connection.close()

    def stop(self) -> None:
        connection, self._connection = self._connection, None
        if self._connecting is not None:
            self._connecting.cancel()
            self._connecting = None
        if self._reader is not None:
            self._reader.cancel()
            self._reader = None

        self._fail_pending(TransportError("Transport stopped"))
        self.cancel_pending()

        if connection is not None:
            self.log_info("Closing WebSocket connection", transport=self.websocket_url)
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return
            self.run_in_background(loop, connection.close())

    def set_options(self, options: Mapping[str, Any]) -> None:
        previous = self.websocket_url
        super().set_options(options)
        if self.websocket_url != previous:
            self.stop()
