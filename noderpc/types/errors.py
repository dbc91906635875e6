# noderpc/types/errors.py

from typing import Any, Optional


class NodeRpcError(Exception):
    """Base class for errors raised by this package."""
    pass


class ConfigurationError(NodeRpcError, TypeError):
    """Invalid client configuration, raised synchronously."""
    pass


class TransportError(NodeRpcError):
    """Connection-level failure reported by a bundled transport."""
    pass


class RPCError(NodeRpcError):
    """Error object returned by the node for a JSON-RPC call."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"[{code}] {message}")

    @classmethod
    def from_response(cls, error: Any) -> 'RPCError':
        if isinstance(error, dict):
            return cls(
                error.get('code', -1),
                error.get('message', 'Unknown error'),
                error.get('data'),
            )
        return cls(-1, str(error))
