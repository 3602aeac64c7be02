"""Lineage document I/O helpers (internal)."""

import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from lineageflow.errors import DocumentIOError
from lineageflow.kernel.model import GraphDocument


logger = logging.getLogger(__name__)


def parse_document(data: dict) -> GraphDocument:
    """Validate a decoded JSON object as a GraphDocument."""
    try:
        return GraphDocument(**data)
    except (ValidationError, TypeError) as e:
        raise DocumentIOError(f"Invalid lineage document: {e}") from e


def load_document_from_path(path: Union[str, Path]) -> GraphDocument:
    """Load a lineage document from a JSON file path."""
    document_path = Path(path)
    try:
        with open(document_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DocumentIOError(f"Could not read lineage document {document_path}: {e}") from e
    if not isinstance(data, dict):
        raise DocumentIOError(f"Invalid lineage document {document_path}: top level must be an object")
    document = parse_document(data)
    logger.debug(
        "Loaded %s (%d tables, %d edges)", document_path, len(document.tables), len(document.lineage)
    )
    return document


def save_document_to_path(document: GraphDocument, path: Union[str, Path]) -> Path:
    """Write a lineage document as indented JSON.

    The file is written to a sibling temp file first and moved into place, so
    a failed write leaves any previous file intact.
    """
    document_path = Path(path)
    payload = json.dumps(document.to_json_dict(), indent=2, ensure_ascii=False) + "\n"
    tmp_path = document_path.with_name(document_path.name + ".tmp")
    try:
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(document_path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise DocumentIOError(f"Could not write lineage document {document_path}: {e}") from e
    logger.debug("Saved %s", document_path)
    return document_path
