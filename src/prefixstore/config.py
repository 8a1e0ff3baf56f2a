import os

# Bucketing strategy: "flat" (fixed-width prefix) or "trie" (full word, one node per char)
STRATEGY: str = "flat"
PREFIX_WIDTH: int = 2

# Address = <bucket key><separator><id>
ADDRESS_SEPARATOR: str = "_"
FIRST_ID: int = 1

SNAPSHOT_VERSION: int = 1

# /* ~~~ persistence ~~~ */
DEFAULT_DSN: str = "json:///prefixstore.json"
SQLITE_TABLE: str = "kv"
KV_PREFIX: str = "prefixstore"

# Progress logging (set PREFIXSTORE_VERBOSE=1 to enable)
VERBOSE = os.environ.get("PREFIXSTORE_VERBOSE") == "1"
