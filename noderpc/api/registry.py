# noderpc/api/registry.py

"""
Method registry.

Loads the declarative remote method catalog (``methods.yaml``) into immutable
``MethodDescriptor`` records. The registry holds no behavior of its own beyond
validation: binding the descriptors into callables is the dispatcher's job.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

import msgspec
import yaml

from ..core.logging import NodeRpcLogger, log_with_context
from ..types import ConfigurationError, MethodCatalog, MethodDescriptor
from ..utils.naming import snake_case

DEFAULT_CATALOG_PATH = Path(__file__).parent / "methods.yaml"

# Entries the node no longer accepts. Dropped before binding.
UNSUPPORTED_METHODS = frozenset({
    "broadcast_transaction",
    "broadcast_transaction_with_callback",
})


def local_name(descriptor: MethodDescriptor) -> str:
    return descriptor.method_name or snake_case(descriptor.method)


class MethodRegistry:
    """Ordered, name-indexed collection of method descriptors."""

    def __init__(self, descriptors: Iterable[MethodDescriptor], exclude: Iterable[str] = ()):
        self.logger = NodeRpcLogger.get_logger('api.registry')
        excluded = set(exclude)
        self._descriptors: Dict[str, MethodDescriptor] = {}

        for descriptor in descriptors:
            name = local_name(descriptor)
            if name in excluded or descriptor.method in excluded:
                log_with_context(self.logger, logging.DEBUG, "Excluding catalog entry",
                                 api=descriptor.api, method=descriptor.method)
                continue
            if name in self._descriptors:
                existing = self._descriptors[name]
                raise ConfigurationError(
                    f"Method name collision on {name!r}: "
                    f"{existing.api}.{existing.method} and {descriptor.api}.{descriptor.method}"
                )
            self._descriptors[name] = descriptor

    @classmethod
    def load(cls,
             path: Optional[Union[str, Path]] = None,
             exclude: Iterable[str] = UNSUPPORTED_METHODS) -> 'MethodRegistry':
        """Load a catalog file (YAML, or JSON which YAML also parses)."""
        path = Path(path) if path else DEFAULT_CATALOG_PATH
        with open(path, 'r') as f:
            raw = yaml.safe_load(f) or {}

        # A bare list of entries is accepted as well as {methods: [...]}
        if isinstance(raw, list):
            raw = {"methods": raw}

        try:
            catalog = msgspec.convert(raw, type=MethodCatalog)
        except msgspec.ValidationError as e:
            raise ConfigurationError(f"Invalid method catalog {path}: {e}") from e

        registry = cls(catalog.methods, exclude=exclude)
        log_with_context(registry.logger, logging.DEBUG, "Method catalog loaded",
                         catalog=str(path), method_count=len(registry))
        return registry

    @classmethod
    def from_entries(cls, entries: List[dict], exclude: Iterable[str] = ()) -> 'MethodRegistry':
        catalog = msgspec.convert({"methods": entries}, type=MethodCatalog)
        return cls(catalog.methods, exclude=exclude)

    def get(self, name: str) -> Optional[MethodDescriptor]:
        return self._descriptors.get(name)

    def names(self) -> List[str]:
        return list(self._descriptors)

    def items(self):
        return self._descriptors.items()

    def __contains__(self, name: str) -> bool:
        return name in self._descriptors

    def __iter__(self) -> Iterator[MethodDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)
