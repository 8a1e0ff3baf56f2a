from __future__ import annotations
from typing import Dict, Mapping, Optional

from .config import FIRST_ID


class IdAllocator:
    """
    Monotonic id counter memoized by text.

    The same text always gets the same id for the lifetime of the allocator,
    even after the record holding it was edited or deleted. Ids are never
    handed to a different text.
    """

    def __init__(self, first_id: int = FIRST_ID) -> None:
        self._first = int(first_id)
        self._next = self._first
        self._by_text: Dict[str, int] = {}

    def allocate(self, text: str) -> int:
        sid = self._by_text.get(text)
        if sid is None:
            sid = self._next
            self._next += 1
            self._by_text[text] = sid
        return sid

    def lookup(self, text: str) -> Optional[int]:
        return self._by_text.get(text)

    @property
    def first_id(self) -> int:
        return self._first

    @property
    def next_id(self) -> int:
        return self._next

    def __len__(self) -> int:
        return len(self._by_text)

    def reset(self) -> None:
        self._by_text.clear()
        self._next = self._first

    # ---- snapshot support ----
    def state(self) -> Dict[str, object]:
        return {"next_id": self._next, "text_to_id": dict(self._by_text)}

    def load_state(self, next_id: int, text_to_id: Mapping[str, int]) -> None:
        # caller (snapshot validation) has already checked the values
        self._by_text = dict(text_to_id)
        self._next = int(next_id)
