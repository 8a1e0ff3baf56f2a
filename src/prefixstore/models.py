from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List

@dataclass
class Record:
    id: int
    text: str               # mutated in place by update(); id never changes

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

# One bucket = ordered list of records sharing a bucket key
Bucket = List[Record]
