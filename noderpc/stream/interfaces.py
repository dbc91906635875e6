# noderpc/stream/interfaces.py
"""
Building blocks shared by the stream layers.

Every layer owns a ``StreamState`` (cursor and cancelled flag) and hands out a
``StreamHandle``. Calling the handle cancels the layer and, through it, every
layer underneath.
"""
from typing import Any, Callable, Optional, get_args

from msgspec import Struct

from ..types import StreamMode

STREAM_MODES = get_args(StreamMode)
DEFAULT_MODE = "head"
DEFAULT_INTERVAL = 200  # milliseconds

StreamCallback = Callable[[Optional[BaseException], Any], None]


class StreamState(Struct):
    mode: StreamMode
    current: Optional[int] = None
    cancelled: bool = False
    errored: bool = False


class StreamHandle:
    """Idempotent cancellation token returned by every stream."""

    def __init__(self, name: str, on_cancel: Callable[[], None]):
        self.name = name
        self._on_cancel = on_cancel
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __call__(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._on_cancel()

    cancel = __call__

    def __repr__(self) -> str:
        status = "cancelled" if self._cancelled else "running"
        return f"<StreamHandle {self.name} {status}>"


def resolve_stream_args(mode: Any, callback: Any, interval: Any) -> tuple:
    """Allow ``stream(callback)`` and ``stream(callback, interval)`` as well as
    ``stream(mode, callback, interval)``."""
    if callable(mode):
        if callback is not None:
            interval = callback
        mode, callback = DEFAULT_MODE, mode

    if mode not in STREAM_MODES:
        raise ValueError(f"Invalid stream mode {mode!r}, valid values are {', '.join(STREAM_MODES)}")
    if not callable(callback):
        raise TypeError("A stream requires a callback")
    if interval is None:
        interval = DEFAULT_INTERVAL
    return mode, callback, interval
