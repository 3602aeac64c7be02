"""Centralized canonical JSON serialization.

One byte-stable rendering of a document, used for the content digest behind
dirty tracking and for stable snapshots in tests. Persisted documents are
written human-readable by io/document.py instead.
"""

import hashlib
import json
from typing import Any

from lineageflow.kernel.model import GraphDocument


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization.

    Rules:
    - UTF-8 (no ASCII escaping)
    - Sorted keys
    - Stable separators (",", ":")
    - Lists keep their order (document order is meaningful)
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    )


def document_digest(document: GraphDocument) -> str:
    """sha256 hex digest of the canonical JSON form of a document."""
    canonical = canonical_dumps(document.to_json_dict())
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
