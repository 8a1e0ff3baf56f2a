from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

from .. import config as CFG
from ..config import PREFIX_WIDTH
from ..errors import InvalidKey
from ..models import Bucket


class BucketIndex(Protocol):
    """
    word -> bucket key -> ordered record list.

    Two implementations share this surface:
      * FlatIndex: key = word[:width], one dict entry per key
      * TrieIndex: key = the whole word, one node per character
    """
    descriptor: str

    def key_of(self, word: str) -> str: ...
    # write path: create the bucket (or node chain) if missing
    def locate(self, key: str) -> Bucket: ...
    # read path: never creates structure
    def find(self, key: str) -> Optional[Bucket]: ...
    def buckets(self) -> Iterator[Tuple[str, Bucket]]: ...
    def clear(self) -> None: ...


class FlatIndex(BucketIndex):
    """Hash map over fixed-width prefixes. ``""`` is a valid (global) bucket."""

    def __init__(self, width: int = PREFIX_WIDTH) -> None:
        width = int(width)
        if width < 0:
            raise ValueError(f"prefix width must be >= 0, got {width}")
        self.width = width
        self._buckets: Dict[str, Bucket] = {}

    @property
    def descriptor(self) -> str:
        return f"flat:{self.width}"

    def key_of(self, word: str) -> str:
        return word[:self.width]

    def locate(self, key: str) -> Bucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = []
        return bucket

    def find(self, key: str) -> Optional[Bucket]:
        return self._buckets.get(key)

    def buckets(self) -> Iterator[Tuple[str, Bucket]]:
        for key, bucket in self._buckets.items():
            if bucket:
                yield key, bucket

    def clear(self) -> None:
        self._buckets.clear()


class TrieNode:
    __slots__ = ("children", "records")

    def __init__(self) -> None:
        self.children: Optional[Dict[str, TrieNode]] = None  # lazy, like records
        self.records: Optional[Bucket] = None


class TrieIndex(BucketIndex):
    """Character trie; the node at the end of the key owns the bucket."""

    descriptor = "trie"

    def __init__(self) -> None:
        self.root = TrieNode()

    def key_of(self, word: str) -> str:
        return word

    def locate(self, key: str) -> Bucket:
        if not key:
            raise InvalidKey("empty key cannot be placed in a trie")
        node = self.root
        for ch in key:
            children = node.children
            nxt = None if children is None else children.get(ch)
            if nxt is None:
                nxt = TrieNode()
                if children is None:
                    node.children = {ch: nxt}
                else:
                    children[ch] = nxt
            node = nxt
        if node.records is None:
            node.records = []
        return node.records

    def find(self, key: str) -> Optional[Bucket]:
        if not key:
            raise InvalidKey("empty key cannot be looked up in a trie")
        node = self.root
        for ch in key:
            if not node.children:
                return None
            node = node.children.get(ch)
            if node is None:
                return None
        return node.records

    def buckets(self) -> Iterator[Tuple[str, Bucket]]:
        # iterative DFS, children visited in insertion order
        stack: List[Tuple[str, TrieNode]] = [("", self.root)]
        while stack:
            prefix, node = stack.pop()
            if node.records:
                yield prefix, node.records
            if node.children:
                for ch, child in reversed(list(node.children.items())):
                    stack.append((prefix + ch, child))

    def node_count(self) -> int:
        n = 0
        stack = [self.root]
        while stack:
            node = stack.pop()
            n += 1
            if node.children:
                stack.extend(node.children.values())
        return n

    def clear(self) -> None:
        self.root = TrieNode()


def make_index(descriptor: Optional[str] = None, *, width: Optional[int] = None) -> BucketIndex:
    """
    Factory:
      - "flat"       -> FlatIndex(width or PREFIX_WIDTH)
      - "flat:<n>"   -> FlatIndex(n)
      - "trie"       -> TrieIndex()
    """
    spec = (descriptor or CFG.STRATEGY).strip().lower()
    name, _, arg = spec.partition(":")
    if name == "trie" and not arg:
        return TrieIndex()
    if name == "flat":
        if arg:
            try:
                n = int(arg)
            except ValueError:
                raise ValueError(f"bad prefix width in strategy {descriptor!r}") from None
        else:
            n = CFG.PREFIX_WIDTH if width is None else int(width)
        return FlatIndex(n)
    raise ValueError(f"Unsupported bucketing strategy: {descriptor!r}")
