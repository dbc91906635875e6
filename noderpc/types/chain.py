# noderpc/types/chain.py

from typing import Literal

from msgspec import Struct

StreamMode = Literal["head", "irreversible"]


class DynamicGlobalProperties(Struct):
    """The two cursors the streams care about. Other fields are ignored."""
    head_block_number: int
    last_irreversible_block_num: int

    def block_number(self, mode: StreamMode) -> int:
        if mode == "irreversible":
            return self.last_irreversible_block_num
        return self.head_block_number
