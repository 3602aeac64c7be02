"""Public API for the lineageflow package.

Synchronous, file-oriented functions for embedders and the CLI. Interactive
sessions (renderer events, prompts, undo/redo) go through
lineageflow.sync.SyncController instead.
"""

import os
from pathlib import Path
from typing import Iterable, Optional, Union

from lineageflow._internal.io.document import load_document_from_path, save_document_to_path
from lineageflow._internal.io.image import write_image
from lineageflow.config import EngineConfig
from lineageflow.contracts import ImportSummary
from lineageflow.kernel.csv_import import (
    ImportBatch,
    RecordLike,
    coerce_records,
    merge_import,
    read_import_csv,
)
from lineageflow.kernel.ids import IdAllocator, UuidIdAllocator
from lineageflow.kernel.model import GraphDocument, LayoutConfig
from lineageflow.kernel.projection import ViewModel, project


PathLike = Union[str, os.PathLike, Path]


def _normalize_path(path: PathLike) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def new_document(config: Optional[EngineConfig] = None) -> GraphDocument:
    """An empty document stamped with the configured layout_version."""
    config = config or EngineConfig()
    return GraphDocument(config=LayoutConfig(layout_version=config.layout_version))


def load_document(path: PathLike) -> GraphDocument:
    """Load a lineage document (raises DocumentIOError)."""
    return load_document_from_path(_normalize_path(path))


def save_document(document: GraphDocument, path: PathLike) -> Path:
    """Write a lineage document as indented JSON (raises DocumentIOError)."""
    return save_document_to_path(document, _normalize_path(path))


def project_document(
    document: Union[GraphDocument, PathLike],
    config: Optional[EngineConfig] = None,
) -> ViewModel:
    """Project a document (or a document file) into the renderer view model."""
    config = config or EngineConfig()
    if not isinstance(document, GraphDocument):
        document = load_document(document)
    return project(document, column_spacing=config.column_spacing)


def _apply_batch(
    document: GraphDocument,
    batch: ImportBatch,
    config: Optional[EngineConfig],
    ids: Optional[IdAllocator],
) -> ImportSummary:
    config = config or EngineConfig()
    tables = merge_import(document, batch.records, ids or UuidIdAllocator(), config.table_spacing)
    return ImportSummary(
        table_ids=[t.id for t in tables],
        column_count=sum(len(t.columns) for t in tables),
        skipped_rows=batch.skipped_rows,
    )


def import_csv(
    document: GraphDocument,
    csv_path: PathLike,
    config: Optional[EngineConfig] = None,
    ids: Optional[IdAllocator] = None,
) -> ImportSummary:
    """Merge a table_name,column_name CSV file into document (in place).

    Raises CsvImportError before touching the document if the file cannot be
    read or parsed.
    """
    batch = read_import_csv(_normalize_path(csv_path))
    return _apply_batch(document, batch, config, ids)


def import_records(
    document: GraphDocument,
    records: Iterable[RecordLike],
    config: Optional[EngineConfig] = None,
    ids: Optional[IdAllocator] = None,
) -> ImportSummary:
    """Merge (table_name, column_name) records into document (in place)."""
    return _apply_batch(document, coerce_records(records), config, ids)


def export_image(image_data: str, path: PathLike) -> Path:
    """Write a renderer image data URI to path (raises ImageExportError)."""
    return write_image(image_data, _normalize_path(path))
