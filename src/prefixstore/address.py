from __future__ import annotations
from typing import Tuple

from .config import ADDRESS_SEPARATOR
from .errors import MalformedAddress


def _is_canonical_id(s: str) -> bool:
    """ASCII digits only, no leading zeros (except "0" itself)."""
    if not s or not s.isascii() or not s.isdigit():
        return False
    return s == "0" or s[0] != "0"


class AddressCodec:
    """
    Address <-> (bucket key, id).

    Format: ``<key><sep><id>``, e.g. ``ba_1``. Decoding splits on the LAST
    separator; ids are plain decimals, so keys may themselves contain the
    separator without making the address ambiguous.
    """

    def __init__(self, sep: str = ADDRESS_SEPARATOR) -> None:
        if not sep or sep.isdigit():
            raise ValueError(f"invalid address separator: {sep!r}")
        self.sep = sep

    def encode(self, key: str, sid: int) -> str:
        return f"{key}{self.sep}{int(sid)}"

    def decode(self, address: str) -> Tuple[str, int]:
        if not isinstance(address, str):
            raise MalformedAddress(f"address must be a string, got {type(address).__name__}")
        key, sep, tail = address.rpartition(self.sep)
        if not sep:
            raise MalformedAddress(f"missing {self.sep!r} separator in {address!r}")
        if not _is_canonical_id(tail):
            raise MalformedAddress(f"bad identifier {tail!r} in {address!r}")
        return key, int(tail)
