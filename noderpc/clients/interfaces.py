# noderpc/clients/interfaces.py
"""
Interfaces for node transports.

A transport carries one JSON-RPC ``call`` to the node and reports the outcome
through an error-first callback. The client never looks inside it: any object
with ``start``, ``stop``, ``send`` and ``set_options`` is accepted.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Set

import msgspec

from ..core.logging import LoggingMixin
from ..types import RPCError, TransportError

Callback = Callable[[Optional[BaseException], Any], None]


class Transport(ABC):
    """Interface for transport implementations."""

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        self.options: Dict[str, Any] = dict(options or {})

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def send(self, api: str, data: Dict[str, Any], callback: Callback) -> Any:
        """
        Send one request to the node.

        Args:
            api: Endpoint (remote API namespace)
            data: ``{"method": str, "params": list}``
            callback: Called once with ``(error, None)`` or ``(None, result)``
        """
        pass

    def set_options(self, options: Mapping[str, Any]) -> None:
        self.options.update(options)


class AsyncTransport(Transport, LoggingMixin):
    """
    Base for coroutine-backed transports.

    Subclasses implement ``call``; ``send`` runs it as a task on the running
    event loop and reports the outcome through the callback.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        super().__init__(options)
        self._request_id = 0
        self._tasks: Set[asyncio.Task] = set()
        self._background: Set[asyncio.Task] = set()

    @property
    def timeout(self) -> Optional[float]:
        timeout = self.options.get("timeout")
        return float(timeout) if timeout else None

    @abstractmethod
    async def call(self, api: str, data: Dict[str, Any]) -> Any:
        pass

    def start(self) -> None:
        pass

    def send(self, api: str, data: Dict[str, Any], callback: Callback) -> asyncio.Task:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self.call(api, data))
        self._tasks.add(task)

        def complete(done: asyncio.Task) -> None:
            self._tasks.discard(done)
            if done.cancelled():
                callback(TransportError(f"Request {api}.{data.get('method')} cancelled"), None)
            elif done.exception() is not None:
                callback(done.exception(), None)
            else:
                callback(None, done.result())

        task.add_done_callback(complete)
        return task

    def run_in_background(self, loop: asyncio.AbstractEventLoop, coro) -> asyncio.Task:
        """Schedule housekeeping (connection shutdown) and hold it until done."""
        task = loop.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def build_request(self, api: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": self.next_request_id(),
            "jsonrpc": "2.0",
            "method": "call",
            "params": [api, data["method"], data.get("params", [])],
        }

    def encode(self, request: Dict[str, Any]) -> bytes:
        return msgspec.json.encode(request)

    def parse_response(self, body: Any) -> Any:
        if not isinstance(body, dict):
            raise TransportError(f"Invalid JSON-RPC response: {body!r}")
        if body.get("error") is not None:
            raise RPCError.from_response(body["error"])
        return body.get("result")

    def cancel_pending(self) -> None:
        for task in list(self._tasks):
            task.cancel()
