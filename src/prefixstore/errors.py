from __future__ import annotations


class PrefixStoreError(Exception):
    """Base class for every error the store reports to its caller."""


class InvalidInput(PrefixStoreError, ValueError):
    """Empty (or non-string) text given to insert/update."""


class InvalidKey(PrefixStoreError, ValueError):
    """Bucket key the index cannot address (empty key under the trie strategy)."""


class MalformedAddress(PrefixStoreError, ValueError):
    """Address string that does not decode into (key, id)."""


class NotFound(PrefixStoreError, LookupError):
    """Well-formed address that does not resolve to a live record."""

    def __init__(self, address: str) -> None:
        super().__init__(f"no record at {address!r}")
        self.address = address


class CorruptSnapshot(PrefixStoreError, ValueError):
    """Snapshot rejected by restore(); nothing was applied."""


class StorageError(PrefixStoreError):
    """A persistence medium holds data that cannot be read back."""
