# noderpc/cli/context.py

"""
CLI context: builds the client lazily from the global command-line options.
"""

from typing import Any, Dict, Optional

from .. import create_client
from ..api.client import Client


class CLIContext:

    def __init__(self, overrides: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        self.overrides = {key: value for key, value in (overrides or {}).items() if value is not None}
        self.config_path = config_path
        self._client: Optional[Client] = None

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = create_client(config_path=self.config_path, **self.overrides)
        return self._client
