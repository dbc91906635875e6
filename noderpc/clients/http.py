# noderpc/clients/http.py

import asyncio
from typing import Any, Dict, Mapping, Optional

import aiohttp
import msgspec

from ..types import TransportError
from .interfaces import AsyncTransport

DEFAULT_URI = "https://api.steemit.com"


class HttpTransport(AsyncTransport):
    """
    JSON-RPC over HTTP POST.

    Every request is a standalone ``call`` envelope posted to ``uri``. A single
    aiohttp session is opened on first use and closed by ``stop()``.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        super().__init__(options)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def uri(self) -> str:
        return self.options.get("uri") or DEFAULT_URI

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._session

    async def call(self, api: str, data: Dict[str, Any]) -> Any:
        request = self.build_request(api, data)
        self.log_debug("HTTP request", api=api, method=data.get("method"), transport=self.uri)

        try:
            async with self._get_session().post(self.uri, data=self.encode(request)) as response:
                if response.status != 200:
                    raise TransportError(f"HTTP error: {response.status}")
                raw = await response.read()
        except asyncio.TimeoutError as e:
            raise TransportError("Request timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Connection error: {e}") from e

        try:
            body = msgspec.json.decode(raw)
        except msgspec.DecodeError as e:
            raise TransportError(f"Invalid JSON response: {e}") from e

        return self.parse_response(body)

    async def close(self) -> None:
        session, self._session = self._session, None
        if session is not None and not session.closed:
            await session.close()

    def stop(self) -> None:
        self.cancel_pending()
        if self._session is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Loop already gone; the session died with it.
            self._session = None
            return
        self.run_in_background(loop, self.close())

    def set_options(self, options: Mapping[str, Any]) -> None:
        previous = (self.uri, self.timeout)
        super().set_options(options)
        if (self.uri, self.timeout) != previous:
            self.stop()
