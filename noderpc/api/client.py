# noderpc/api/client.py

"""
Node client.

Owns the active transport, the generated method table and the stream
entry points. Every catalog method is reachable as an attribute:

    client.get_block(1000, callback)
    client.get_block_with({"block_num": 1000}, callback)
    await client.get_block_async(1000)
    await client.get_block_with_async({"block_num": 1000})
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..clients import TRANSPORTS
from ..core.config import ClientConfig
from ..core.logging import LoggingMixin
from ..stream.interfaces import StreamHandle, resolve_stream_args
from ..stream.stream import BlockNumberStream, BlockStream, OperationStream, TransactionStream
from ..types import ConfigurationError
from .broadcast import BROADCAST_SYNCHRONOUS, BroadcastErrorEnricher, TransactionSerializer
from .dispatcher import Callback, Dispatcher, MethodTable
from .interfaces import ClientListener
from .registry import MethodRegistry


class Client(LoggingMixin):

    def __init__(self,
                 options: Optional[Union[Mapping[str, Any], ClientConfig]] = None,
                 registry: Optional[MethodRegistry] = None,
                 serializer: Optional[TransactionSerializer] = None):
        if isinstance(options, ClientConfig):
            options = options.to_options()
        self.options: Dict[str, Any] = dict(options or {})

        self.transport = None
        self._transport_type = None
        self._listeners: List[ClientListener] = []
        self._set_transport(self.options)

        self.registry = registry or MethodRegistry.load()
        self.dispatcher = Dispatcher(self.send, {
            BROADCAST_SYNCHRONOUS: BroadcastErrorEnricher(serializer),
        })
        self.methods: MethodTable = self.dispatcher.bind(self.registry)

    # === Generated methods ===

    def apply_catalog(self, registry: MethodRegistry) -> None:
        """Replace the catalog and regenerate every method binding."""
        self.registry = registry
        self.methods = self.dispatcher.bind(registry)

    def __getattr__(self, name: str) -> Callable:
        methods = self.__dict__.get("methods")
        if methods is not None and name in methods.attributes:
            return methods.attributes[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __dir__(self):
        names = set(super().__dir__())
        methods = self.__dict__.get("methods")
        if methods is not None:
            names.update(methods.attributes)
        return sorted(names)

    # === Transport ===

    def _set_transport(self, options: Mapping[str, Any]) -> None:
        transport_type = options.get("transport") or "ws"

        if self.transport is not None and transport_type == self._transport_type:
            return

        if isinstance(transport_type, str):
            if transport_type not in TRANSPORTS:
                raise ConfigurationError(
                    f"Invalid `transport` {transport_type!r}, valid values are "
                    f"{', '.join(repr(name) for name in TRANSPORTS)} or a class"
                )
            transport = TRANSPORTS[transport_type](options)
        elif isinstance(transport_type, type):
            transport = transport_type(options)
        elif all(hasattr(transport_type, attr) for attr in ("start", "stop", "send", "set_options")):
            transport = transport_type
        else:
            raise ConfigurationError(
                f"Invalid `transport` {transport_type!r}, expected a name, a class or a transport instance"
            )

        previous = self.transport
        if previous is not None:
            previous.stop()

        self.transport = transport
        self._transport_type = transport_type
        self.log_debug("Transport selected", transport=type(transport).__name__)
        if previous is not None:
            self._notify("on_transport_changed", previous, transport)

    def start(self) -> Any:
        result = self.transport.start()
        self._notify("on_start", self.transport)
        return result

    def stop(self) -> Any:
        result = self.transport.stop()
        self._notify("on_stop", self.transport)
        return result

    def send(self, api: str, data: Dict[str, Any], callback: Callback) -> Any:
        return self.transport.send(api, data, callback)

    def set_options(self, options: Optional[Mapping[str, Any]] = None, **kwargs) -> None:
        # Only commit the merged options once the transport accepted them.
        merged = {**self.options, **(options or {}), **kwargs}
        self._set_transport(merged)
        self.options = merged
        self.transport.set_options(self.options)

    def set_websocket(self, url: str) -> None:
        self.set_options(websocket=url)

    def set_uri(self, url: str) -> None:
        self.set_options(uri=url)

    async def close(self) -> None:
        """Stop the transport, waiting for it to release its connection."""
        closer = getattr(self.transport, "close", None)
        if closer is not None:
            await closer()
        self.stop()

    async def __aenter__(self) -> 'Client':
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # === Lifecycle listeners ===

    def register_listener(self, listener: ClientListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unregister_listener(self, listener: ClientListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str, *args) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, event)(*args)
            except Exception as e:
                self.log_error(f"Error in client listener {event}", error=repr(e))

    # === Streams ===

    def stream_block_number(self, mode: Any = "head", callback: Optional[Callback] = None,
                            interval: Optional[int] = None) -> StreamHandle:
        mode, callback, interval = resolve_stream_args(mode, callback, interval)
        return BlockNumberStream(self, mode, callback, interval).start()

    def stream_block(self, mode: Any = "head", callback: Optional[Callback] = None,
                     interval: Optional[int] = None) -> StreamHandle:
        mode, callback, interval = resolve_stream_args(mode, callback, interval)
        return BlockStream(self, mode, callback, interval).start()

    def stream_transactions(self, mode: Any = "head", callback: Optional[Callback] = None,
                            interval: Optional[int] = None) -> StreamHandle:
        mode, callback, interval = resolve_stream_args(mode, callback, interval)
        return TransactionStream(self, mode, callback, interval).start()

    def stream_operations(self, mode: Any = "head", callback: Optional[Callback] = None,
                          interval: Optional[int] = None) -> StreamHandle:
        mode, callback, interval = resolve_stream_args(mode, callback, interval)
        return OperationStream(self, mode, callback, interval).start()
