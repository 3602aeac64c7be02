"""Bounded linear undo/redo history over a live GraphDocument.

Every logical user-visible mutation is recorded exactly once, after it has
been applied to the live document. Entries hold structural snapshots
(GraphDocument.clone()); the live document and history never alias, at
record time or at restore time.

State:
- entries: oldest first, at most max_entries long (oldest evicted first).
- current_index: -1 only before the first record(); afterwards it always
  points at a valid entry.

Recording while not at the tip truncates the redo branch.
"""

import time
from typing import Callable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .model import GraphDocument


DEFAULT_MAX_ENTRIES = 50


class HistoryEntry(BaseModel):
    """One timestamped snapshot of the full document.

    Frozen, and the manager only hands out copies (see HistoryManager.entries),
    so the audit trail cannot be rewritten in place.
    """
    data: GraphDocument
    timestamp: float = Field(..., description="Seconds since the epoch when the entry was recorded")
    description: str

    model_config = ConfigDict(frozen=True)


class HistoryManager:
    """Owns the live document and its undo/redo log."""

    def __init__(
        self,
        document: Optional[GraphDocument] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.document = document if document is not None else GraphDocument()
        self.max_entries = max_entries
        self._clock = clock
        self._entries: list[HistoryEntry] = []
        self.current_index = -1

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        """Copies of the recorded entries (mutating one never reaches history)."""
        return tuple(e.model_copy(update={"data": e.data.clone()}) for e in self._entries)

    @property
    def current_entry(self) -> HistoryEntry | None:
        if self.current_index < 0:
            return None
        return self._entries[self.current_index]

    def record(self, description: str) -> HistoryEntry:
        """Snapshot the live document as the new tip of history."""
        entry = HistoryEntry(
            data=self.document.clone(),
            timestamp=self._clock(),
            description=description,
        )
        # Drop the redo branch
        del self._entries[self.current_index + 1:]
        self._entries.append(entry)
        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            del self._entries[:overflow]
        self.current_index = len(self._entries) - 1
        return entry

    def can_undo(self) -> bool:
        return self.current_index > 0

    def can_redo(self) -> bool:
        return 0 <= self.current_index < len(self._entries) - 1

    def undo(self) -> bool:
        """Step back one entry. Returns False (no-op) at the oldest entry."""
        if not self.can_undo():
            return False
        self.current_index -= 1
        self.document = self._entries[self.current_index].data.clone()
        return True

    def redo(self) -> bool:
        """Step forward one entry. Returns False (no-op) at the tip."""
        if not self.can_redo():
            return False
        self.current_index += 1
        self.document = self._entries[self.current_index].data.clone()
        return True

    def reset(self, document: GraphDocument) -> None:
        """Replace the live document and forget all history (pristine state)."""
        self.document = document
        self._entries.clear()
        self.current_index = -1
