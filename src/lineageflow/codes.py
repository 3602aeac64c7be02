"""Outcome code constants for synchronization intents.

These constants prevent stringly-typed outcome codes and let host code branch
on what happened to an intent without parsing messages.
"""

from enum import Enum


class OutcomeCode(str, Enum):
    """What the controller did with an intent."""

    # Committed (one history entry, full view pushed)
    APPLIED = "APPLIED"

    # Succeeded without a new history entry (export, save, open, undo, redo)
    COMPLETED = "COMPLETED"

    # Nothing to do (no mutation, no history entry)
    NO_OP = "NO_OP"
    UNKNOWN_REFERENCE = "UNKNOWN_REFERENCE"
    PROMPT_DISMISSED = "PROMPT_DISMISSED"
    NOTHING_IMPORTED = "NOTHING_IMPORTED"

    # Validation failures (surfaced to the user, no mutation)
    BLANK_LABEL = "BLANK_LABEL"
    INVALID_EDGE_ENDPOINT = "INVALID_EDGE_ENDPOINT"
    INVALID_MESSAGE = "INVALID_MESSAGE"

    # I/O failures (surfaced to the user, nothing committed)
    IO_ERROR = "IO_ERROR"
