# noderpc/utils/naming.py

import re

_FIRST_CAP = re.compile(r'(.)([A-Z][a-z]+)')
_ALL_CAP = re.compile(r'([a-z0-9])([A-Z])')


def snake_case(name: str) -> str:
    """getDynamicGlobalProperties / get-block -> get_dynamic_global_properties / get_block"""
    name = name.replace('-', '_').replace('.', '_')
    name = _FIRST_CAP.sub(r'\1_\2', name)
    return _ALL_CAP.sub(r'\1_\2', name).lower()
