# noderpc/types/__init__.py

from .methods import MethodDescriptor, MethodCatalog
from .chain import DynamicGlobalProperties, StreamMode
from .errors import (
    NodeRpcError,
    ConfigurationError,
    TransportError,
    RPCError,
)

__all__ = [
    'MethodDescriptor',
    'MethodCatalog',
    'DynamicGlobalProperties',
    'StreamMode',
    'NodeRpcError',
    'ConfigurationError',
    'TransportError',
    'RPCError',
]
