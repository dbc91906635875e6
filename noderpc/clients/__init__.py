# noderpc/clients/__init__.py

from .interfaces import Transport, AsyncTransport
from .http import HttpTransport
from .ws import WsTransport

TRANSPORTS = {
    "http": HttpTransport,
    "ws": WsTransport,
}

__all__ = [
    'Transport',
    'AsyncTransport',
    'HttpTransport',
    'WsTransport',
    'TRANSPORTS',
]
