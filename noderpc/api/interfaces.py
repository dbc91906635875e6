# noderpc/api/interfaces.py

from abc import ABC
from typing import Any, Optional


class ClientListener(ABC):
    """Observer for client transport lifecycle. Override what you need."""

    def on_start(self, transport: Any) -> None:
        pass

    def on_stop(self, transport: Any) -> None:
        pass

    def on_transport_changed(self, previous: Optional[Any], current: Any) -> None:
        pass
