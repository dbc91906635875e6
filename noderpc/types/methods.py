# noderpc/types/methods.py

from typing import Optional, Tuple

from msgspec import Struct, field


class MethodDescriptor(Struct, frozen=True):
    """One entry of the remote method catalog.

    ``params`` order is both the positional argument order and the key set of
    the options mapping accepted by the ``*_with`` form.
    """
    api: str
    method: str
    params: Tuple[str, ...] = ()
    method_name: Optional[str] = None


class MethodCatalog(Struct):
    methods: list[MethodDescriptor] = field(default_factory=list)
