"""Public result models for lineageflow."""

from typing import Optional

from pydantic import BaseModel

from .codes import OutcomeCode


class IntentOutcome(BaseModel):
    """Result of handing one intent to the synchronization controller."""
    code: OutcomeCode
    message: Optional[str] = None  # User-facing text when something was surfaced
    history_description: Optional[str] = None  # Set when a history entry was recorded

    @property
    def applied(self) -> bool:
        return self.code == OutcomeCode.APPLIED


class ImportSummary(BaseModel):
    """What a CSV import added to the document."""
    table_ids: list[str]
    column_count: int
    skipped_rows: int
