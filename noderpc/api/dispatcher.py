# noderpc/api/dispatcher.py

"""
Dynamic RPC binding.

Every catalog entry becomes a ``GeneratedMethod`` exposing four entry points
on the client:

    <name>(*args, callback)          positional arguments, error-first callback
    <name>_with(options, callback)   options mapping keyed by parameter name
    <name>_async(*args)              awaitable form of <name>
    <name>_with_async(options)       awaitable form of <name>_with

All four end in a single ``send(api, request, callback)`` call.
"""

import asyncio
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..core.logging import LoggingMixin
from ..types import MethodDescriptor, RPCError
from .registry import MethodRegistry

Callback = Callable[[Optional[BaseException], Any], None]
SendFunction = Callable[[str, dict, Callback], Any]
ErrorHook = Callable[[BaseException, Mapping[str, Any]], BaseException]

WITH_SUFFIX = "_with"
ASYNC_SUFFIX = "_async"


def as_exception(err: Any) -> BaseException:
    if isinstance(err, BaseException):
        return err
    return RPCError.from_response(err)


def _settle(future: asyncio.Future, err: Any, result: Any) -> None:
    if future.done():
        return
    if err is not None:
        future.set_exception(as_exception(err))
    else:
        future.set_result(result)


class GeneratedMethod:
    """Callable bindings for one ``MethodDescriptor``."""

    def __init__(self,
                 name: str,
                 descriptor: MethodDescriptor,
                 send: SendFunction,
                 on_error: Optional[ErrorHook] = None):
        self.name = name
        self.descriptor = descriptor
        self._send = send
        self._on_error = on_error

    @property
    def params(self) -> tuple:
        return self.descriptor.params

    def params_from_options(self, options: Optional[Mapping[str, Any]]) -> List[Any]:
        options = options or {}
        return [options.get(param) for param in self.descriptor.params]

    def options_from_args(self, args: tuple) -> Dict[str, Any]:
        return {
            param: args[i] if i < len(args) else None
            for i, param in enumerate(self.descriptor.params)
        }

    def split_callback(self, args: tuple, callback: Optional[Callback]) -> tuple:
        """Separate the trailing callback from the positional arguments.

        The callback sits immediately after the expected parameter count.
        """
        count = len(self.descriptor.params)
        if len(args) > count + 1:
            raise TypeError(
                f"{self.name}() takes {count} arguments and a callback, got {len(args)} positional values"
            )
        if len(args) == count + 1:
            if callback is not None:
                raise TypeError(f"{self.name}() got the callback both positionally and by keyword")
            callback = args[count]
            args = args[:count]
        return args, callback

    def call_with(self, options: Optional[Mapping[str, Any]], callback: Callback) -> Any:
        if not callable(callback):
            raise TypeError(
                f"{self.name}{WITH_SUFFIX}() requires a callback, use {self.name}{WITH_SUFFIX}{ASYNC_SUFFIX}() to await"
            )

        request = {
            "method": self.descriptor.method,
            "params": self.params_from_options(options),
        }

        if self._on_error is None:
            return self._send(self.descriptor.api, request, callback)

        def handle(err, result):
            if err is not None:
                err = self._on_error(as_exception(err), options or {})
                callback(err, None)
            else:
                callback(None, result)

        return self._send(self.descriptor.api, request, handle)

    def call(self, *args, callback: Optional[Callback] = None) -> Any:
        args, callback = self.split_callback(args, callback)
        if not callable(callback):
            raise TypeError(
                f"{self.name}() requires a callback, use {self.name}{ASYNC_SUFFIX}() to await"
            )
        return self.call_with(self.options_from_args(args), callback)

    async def call_with_async(self, options: Optional[Mapping[str, Any]] = None) -> Any:
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def resolve(err, result):
            loop.call_soon_threadsafe(_settle, future, err, result)

        self.call_with(options, resolve)
        return await future

    async def call_async(self, *args) -> Any:
        if len(args) > len(self.descriptor.params):
            raise TypeError(
                f"{self.name}{ASYNC_SUFFIX}() takes {len(self.descriptor.params)} arguments, got {len(args)}"
            )
        return await self.call_with_async(self.options_from_args(args))

    def entry_points(self) -> Dict[str, Callable]:
        """The four client-facing attributes for this method."""
        return {
            self.name: self.call,
            f"{self.name}{WITH_SUFFIX}": self.call_with,
            f"{self.name}{ASYNC_SUFFIX}": self.call_async,
            f"{self.name}{WITH_SUFFIX}{ASYNC_SUFFIX}": self.call_with_async,
        }

    def __repr__(self) -> str:
        params = ", ".join(self.descriptor.params)
        return f"<GeneratedMethod {self.name}({params}) -> {self.descriptor.api}.{self.descriptor.method}>"


class MethodTable:
    """Name -> GeneratedMethod, plus the flattened attribute view used by the client."""

    def __init__(self, methods: Dict[str, GeneratedMethod]):
        self.methods = methods
        self.attributes: Dict[str, Callable] = {}
        for method in methods.values():
            self.attributes.update(method.entry_points())

    def __getitem__(self, name: str) -> GeneratedMethod:
        return self.methods[name]

    def __contains__(self, name: str) -> bool:
        return name in self.methods

    def __len__(self) -> int:
        return len(self.methods)


class Dispatcher(LoggingMixin):
    """Binds a registry into a ``MethodTable`` against a send function."""

    def __init__(self, send: SendFunction, error_hooks: Optional[Dict[str, ErrorHook]] = None):
        self._send = send
        self.error_hooks = dict(error_hooks or {})

    def send(self, api: str, request: dict, callback: Callback) -> Any:
        self.log_debug("Dispatching RPC call", api=api, method=request.get("method"))
        return self._send(api, request, callback)

    def bind(self, registry: MethodRegistry) -> MethodTable:
        methods = {
            name: GeneratedMethod(name, descriptor, self.send, self.error_hooks.get(name))
            for name, descriptor in registry.items()
        }
        self.log_debug("Method table generated", method_count=len(methods))
        return MethodTable(methods)
