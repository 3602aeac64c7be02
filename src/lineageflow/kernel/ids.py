"""Id allocation for new tables, columns and lineage edges.

Ids are prefixed by entity kind ("T", "C", "E") so a raw id is readable in a
saved document. Allocation is the job of whichever component constructs the
entity; the graph model never invents ids.

Collision properties:
- UuidIdAllocator: UUID-v4 (122 random bits). Collision probability across
  n allocations is about n**2 / 2**123, independent of timing, so rapid
  back-to-back creation cannot collide.
- CounterIdAllocator: monotonic per allocator instance, never collides with
  its own earlier output. Callers that load an existing document must seed it
  past the ids already present (see seed_from).
"""

import itertools
import re
import uuid
from typing import Iterable, Literal, Protocol


EntityKind = Literal["table", "column", "edge"]

ID_PREFIXES: dict[str, str] = {
    "table": "T",
    "column": "C",
    "edge": "E",
}


class IdAllocator(Protocol):
    """Anything that hands out fresh ids for a given entity kind."""

    def allocate(self, kind: EntityKind) -> str:
        ...


class UuidIdAllocator:
    """Default allocator: prefix + UUID-v4 hex."""

    def allocate(self, kind: EntityKind) -> str:
        return f"{ID_PREFIXES[kind]}{uuid.uuid4().hex}"


class CounterIdAllocator:
    """Deterministic allocator: prefix + a single monotonic counter shared by all kinds."""

    _NUMERIC_ID = re.compile(r"^[TCE](\d+)$")

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def allocate(self, kind: EntityKind) -> str:
        return f"{ID_PREFIXES[kind]}{next(self._counter)}"

    def seed_from(self, existing_ids: Iterable[str]) -> None:
        """Move the counter past any counter-shaped id already in use."""
        highest = 0
        for existing in existing_ids:
            match = self._NUMERIC_ID.match(existing)
            if match:
                highest = max(highest, int(match.group(1)))
        current = next(self._counter)
        self._counter = itertools.count(max(current, highest + 1))
