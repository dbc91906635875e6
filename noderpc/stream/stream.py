# noderpc/stream/stream.py
"""
Polling stream layers.

Everything is derived from one primitive, the node's dynamic global
properties:

    BlockNumberStream -> BlockStream -> TransactionStream -> OperationStream

Each layer subscribes to the one below with a callback, transforms or filters
what it receives, and returns a ``StreamHandle``. Delivery inside a stream is
strictly ordered.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional

import msgspec

from ..core.logging import LoggingMixin
from ..types import DynamicGlobalProperties, StreamMode
from .interfaces import (
    DEFAULT_INTERVAL,
    StreamCallback,
    StreamHandle,
    StreamState,
)


class BaseStream(LoggingMixin, ABC):
    """Shared lifecycle: idle -> polling -> cancelled | errored."""

    name = "stream"

    def __init__(self, client, mode: StreamMode, callback: StreamCallback, interval: int = DEFAULT_INTERVAL):
        self.client = client
        self.interval = interval
        self.state = StreamState(mode=mode)
        self.handle = StreamHandle(self.name, self._cancel)
        self._callback = callback
        self._upstream: Optional[StreamHandle] = None

    @property
    def mode(self) -> StreamMode:
        return self.state.mode

    @abstractmethod
    def start(self) -> StreamHandle:
        """Subscribe upstream (or begin polling) and return this layer's handle."""
        pass

    def _cancel(self) -> None:
        self.state.cancelled = True
        if self._upstream is not None:
            self._upstream()
        self.on_cancel()
        self.log_debug("Stream cancelled", stream=self.name, mode=self.mode)

    def on_cancel(self) -> None:
        pass

    def deliver(self, value: Any) -> None:
        if self.state.cancelled:
            return
        try:
            self._callback(None, value)
        except Exception as e:
            self.log_error("Error in stream callback", stream=self.name, error=repr(e))

    def fail(self, err: BaseException) -> None:
        """Cancel upstream and self, then report the error exactly once."""
        if self.state.cancelled or self.state.errored:
            return
        self.state.errored = True
        self.log_error("Stream failed", stream=self.name, mode=self.mode, error=str(err))
        self.handle()
        try:
            self._callback(err, None)
        except Exception as e:
            self.log_error("Error in stream callback", stream=self.name, error=repr(e))


class BlockNumberStream(BaseStream):
    """
    Polls the node head (or last irreversible block) every ``interval`` ms.

    The first poll delivers the observed number. Afterwards every number in
    ``(current, observed]`` is delivered in order, so a slow poll never skips
    a block.
    """

    name = "block_number"

    def __init__(self, client, mode: StreamMode, callback: StreamCallback, interval: int = DEFAULT_INTERVAL):
        super().__init__(client, mode, callback, interval)
        self._wakeup = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    def start(self) -> StreamHandle:
        loop = asyncio.get_running_loop()
        self.log_debug("Starting block number stream", mode=self.mode, interval=self.interval)
        self._task = loop.create_task(self._poll())
        return self.handle

    def on_cancel(self) -> None:
        self._wakeup.set()

    async def _poll(self) -> None:
        while not self.state.cancelled:
            try:
                result = await self.client.get_dynamic_global_properties_async()
                properties = msgspec.convert(result, type=DynamicGlobalProperties)
            except Exception as err:
                self.fail(err)
                return

            if self.state.cancelled:
                return

            self.advance(properties.block_number(self.mode))
            await self._sleep()

    async def _sleep(self) -> None:
        if self.state.cancelled:
            return
        try:
            await asyncio.wait_for(self._wakeup.wait(), self.interval / 1000)
        except asyncio.TimeoutError:
            pass

    def advance(self, observed: int) -> None:
        current = self.state.current

        if current is None:
            self.state.current = observed
            self.deliver(observed)
            return

        if observed == current:
            return

        if observed < current:
            self.log_warning("Node reported a lower block number, ignoring",
                             mode=self.mode, observed=observed, current=current)
            return

        if observed - current > 1:
            self.log_debug("Recovering skipped block numbers",
                           mode=self.mode, observed=observed, current=current)

        for number in range(current + 1, observed + 1):
            if self.state.cancelled:
                return
            self.state.current = number
            self.deliver(number)


class BlockStream(BaseStream):
    """
    Fetches the block for every number the number stream delivers.

    Fetches run one at a time through a queue, so blocks come out in number
    order. A number equal to the last one queued is dropped.
    """

    name = "block"

    def __init__(self, client, mode: StreamMode, callback: StreamCallback, interval: int = DEFAULT_INTERVAL):
        super().__init__(client, mode, callback, interval)
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    def start(self) -> StreamHandle:
        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._worker = loop.create_task(self._fetch_blocks())
        self._upstream = BlockNumberStream(self.client, self.mode, self.on_block_number, self.interval).start()
        return self.handle

    def on_cancel(self) -> None:
        if self._queue is not None:
            self._queue.put_nowait(None)

    def on_block_number(self, err: Optional[BaseException], number: Optional[int]) -> None:
        if err is not None:
            self.fail(err)
            return
        if self.state.cancelled or number == self.state.current:
            return
        self.state.current = number
        self._queue.put_nowait(number)

    async def _fetch_blocks(self) -> None:
        while not self.state.cancelled:
            number = await self._queue.get()
            if number is None or self.state.cancelled:
                return

            try:
                block = await self.client.get_block_async(number)
            except Exception as err:
                self.fail(err)
                return

            self.deliver(block)


class TransactionStream(BaseStream):
    """Splits each block into its transactions, in block order."""

    name = "transaction"

    def start(self) -> StreamHandle:
        self._upstream = BlockStream(self.client, self.mode, self.on_block, self.interval).start()
        return self.handle

    def on_block(self, err: Optional[BaseException], block: Any) -> None:
        if err is not None:
            self.fail(err)
            return
        if not block:
            return
        for transaction in block.get("transactions") or []:
            if self.state.cancelled:
                return
            self.deliver(transaction)


class OperationStream(BaseStream):
    """Splits each transaction into its operations, in transaction order."""

    name = "operation"

    def start(self) -> StreamHandle:
        self._upstream = TransactionStream(self.client, self.mode, self.on_transaction, self.interval).start()
        return self.handle

    def on_transaction(self, err: Optional[BaseException], transaction: Any) -> None:
        if err is not None:
            self.fail(err)
            return
        for operation in transaction.get("operations") or []:
            if self.state.cancelled:
                return
            self.deliver(operation)
