# tests/conftest.py
"""
pytest configuration and fixtures for the node RPC client
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from noderpc import Client, MethodRegistry
from noderpc.clients import Transport
from noderpc.core.logging import NodeRpcLogger


class FakeTransport(Transport):
    """
    Scripted in-memory transport.

    ``script(method, *responses)`` queues responses for a remote method; the
    last one repeats once the queue is drained. A response that is an
    exception is reported as the error, a callable is called with the params.
    ``delay(method, fn)`` makes the reply arrive ``fn(params)`` seconds later.
    """

    def __init__(self, options=None):
        super().__init__(options)
        self.calls: List[tuple] = []
        self.started = False
        self.stopped = False
        self._scripts: Dict[str, List[Any]] = {}
        self._delays: Dict[str, Callable[[list], float]] = {}

    def script(self, method: str, *responses) -> 'FakeTransport':
        self._scripts[method] = list(responses)
        return self

    def delay(self, method: str, fn: Callable[[list], float]) -> 'FakeTransport':
        self._delays[method] = fn
        return self

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def calls_to(self, method: str) -> List[list]:
        return [params for _, name, params in self.calls if name == method]

    def _next_response(self, method: str, params: list):
        queue = self._scripts.get(method)
        if not queue:
            return None
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(response) and not isinstance(response, BaseException):
            response = response(params)
        return response

    def send(self, api, data, callback):
        method = data["method"]
        params = list(data["params"])
        self.calls.append((api, method, params))

        def reply():
            response = self._next_response(method, params)
            if isinstance(response, BaseException):
                callback(response, None)
            else:
                callback(None, response)

        if method in self._delays:
            asyncio.get_running_loop().call_later(self._delays[method](params), reply)
        else:
            reply()


def props(head: int, irreversible: Optional[int] = None) -> dict:
    return {
        "head_block_number": head,
        "last_irreversible_block_num": head - 20 if irreversible is None else irreversible,
        "time": "2018-01-01T00:00:00",
    }


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture(autouse=True)
def reset_logging():
    """Each test configures logging from scratch"""
    yield
    NodeRpcLogger.reset()


@pytest.fixture(scope="session")
def registry():
    """Default method catalog"""
    return MethodRegistry.load()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport, registry):
    """Client wired to the scripted transport"""
    return Client({"transport": transport}, registry=registry)
