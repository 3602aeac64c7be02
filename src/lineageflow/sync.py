"""Synchronization controller: the single writer of the live lineage document.

Edit intents arrive from the renderer (protocol messages) and from the host
(commands such as CSV import, undo, save). Each intent is validated, applied
to the document owned by the HistoryManager, recorded as exactly one history
entry, and answered with a full view replacement.

Intents are serialized with an asyncio lock: an intent that is waiting on a
host prompt holds the lock, so a second intent delivered meanwhile starts only
after the first one has finished, history entry included.

Failure handling at the dispatch seam:
- IntentRejected: surfaced once through host.show_error, nothing mutated.
- LineageIOError: surfaced once through host.show_error, nothing committed.
- Unknown ids: silent no-op (stale renderer state is expected).
- Malformed messages: the full view is re-sent; a malformed edgeAdded is also
  surfaced, since the renderer already drew its provisional edge.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, Optional, Union

from pydantic import ValidationError

from lineageflow._internal.canonical_json import document_digest
from lineageflow._internal.io.document import load_document_from_path, save_document_to_path
from lineageflow._internal.io.image import write_image
from lineageflow.codes import OutcomeCode
from lineageflow.config import EngineConfig
from lineageflow.contracts import IntentOutcome
from lineageflow.errors import IntentRejected, LineageIOError
from lineageflow.host import Host, Renderer
from lineageflow.kernel.csv_import import (
    ImportBatch,
    RecordLike,
    coerce_records,
    merge_import,
    read_import_csv,
)
from lineageflow.kernel.history import HistoryManager
from lineageflow.kernel.ids import IdAllocator, UuidIdAllocator
from lineageflow.kernel.model import (
    ColumnRef,
    GraphDocument,
    LayoutConfig,
    LineageEdge,
    Position,
    Table,
    TableRef,
)
from lineageflow.kernel.projection import ViewModel, project
from lineageflow.kernel.protocol import (
    EdgeAdded,
    EdgeDeleted,
    EdgeUpdated,
    EditNodeLabel,
    ExportImage,
    ExportImageRequest,
    InboundMessage,
    LabelUpdatedMessage,
    NodePositionChanged,
    UpdateDataMessage,
    parse_inbound_message,
)


logger = logging.getLogger(__name__)

BASELINE_DESCRIPTION = "Open document"
IMPORT_DESCRIPTION = "Import CSV data"
IMAGE_FORMATS = ["PNG", "SVG"]


class SyncController:
    """Owns one lineage session: live document, history, id allocation, renderer link."""

    def __init__(
        self,
        host: Host,
        renderer: Renderer,
        document: Optional[GraphDocument] = None,
        *,
        config: Optional[EngineConfig] = None,
        ids: Optional[IdAllocator] = None,
        file_path: Optional[Path] = None,
    ):
        self.host = host
        self.renderer = renderer
        self.config = config or EngineConfig()
        self.ids = ids or UuidIdAllocator()
        self.file_path = file_path
        self._pending_export_path: Optional[Path] = None
        if document is None:
            document = GraphDocument(config=LayoutConfig(layout_version=self.config.layout_version))
        self.history = HistoryManager(document, max_entries=self.config.history_limit)
        self._lock = asyncio.Lock()
        self._take_ownership(document)

    @property
    def document(self) -> GraphDocument:
        """The live document (replaced wholesale by undo/redo/open)."""
        return self.history.document

    @property
    def is_dirty(self) -> bool:
        """True when the live document differs from the last loaded/saved state."""
        return document_digest(self.document) != self._saved_digest

    def view(self) -> ViewModel:
        return project(self.document, column_spacing=self.config.column_spacing)

    # Host commands

    async def open_viewer(self) -> IntentOutcome:
        """Send the current full view to a (re)opened renderer."""
        async with self._lock:
            self._push_view()
            return IntentOutcome(code=OutcomeCode.COMPLETED)

    async def handle_message(self, message: Union[dict, InboundMessage]) -> IntentOutcome:
        """Apply one renderer message."""
        async with self._lock:
            if isinstance(message, dict):
                try:
                    message = parse_inbound_message(message)
                except ValidationError as e:
                    return self._reject_malformed(message, e)
            return await self._guarded(self._dispatch, message)

    async def import_csv(self, path: Optional[Path] = None) -> IntentOutcome:
        """Import table/column definitions from a CSV file (asks the host for a file if path is None)."""
        async with self._lock:
            return await self._guarded(self._import_csv_file, path)

    async def import_records(self, records: Iterable[RecordLike]) -> IntentOutcome:
        """Merge already-parsed (table_name, column_name) records."""
        async with self._lock:
            batch = coerce_records(records)
            return await self._guarded(self._merge_import, batch)

    async def request_image_export(self) -> IntentOutcome:
        """Ask for a format and a target path, then request a capture from the renderer."""
        async with self._lock:
            return await self._guarded(self._request_image_export)

    async def delete_table(self, table_id: str) -> IntentOutcome:
        """Remove a table and its columns. Lineage edges that reference them are kept."""
        async with self._lock:
            return await self._guarded(self._delete_table, table_id)

    async def undo(self) -> IntentOutcome:
        async with self._lock:
            if not self.history.undo():
                logger.debug("Nothing to undo")
                return IntentOutcome(code=OutcomeCode.NO_OP)
            self._push_view()
            return IntentOutcome(code=OutcomeCode.COMPLETED)

    async def redo(self) -> IntentOutcome:
        async with self._lock:
            if not self.history.redo():
                logger.debug("Nothing to redo")
                return IntentOutcome(code=OutcomeCode.NO_OP)
            self._push_view()
            return IntentOutcome(code=OutcomeCode.COMPLETED)

    async def save_document(self, path: Optional[Path] = None) -> IntentOutcome:
        """Persist the live document (asks the host for a path if none is known)."""
        async with self._lock:
            return await self._guarded(self._save_document, path)

    async def open_document(self, path: Optional[Path] = None) -> IntentOutcome:
        """Replace the live document with a persisted one and start a fresh history."""
        async with self._lock:
            return await self._guarded(self._open_document, path)

    # Dispatch

    def _reject_malformed(self, raw: dict, error: ValidationError) -> IntentOutcome:
        logger.warning("Ignoring malformed renderer message %r: %s", raw.get("type"), error)
        # The renderer may already show an optimistic change for this message
        self._push_view()
        if raw.get("type") == "edgeAdded":
            text = "Lineage edges can only connect two columns."
            self.host.show_error(text)
            return IntentOutcome(code=OutcomeCode.INVALID_EDGE_ENDPOINT, message=text)
        return IntentOutcome(code=OutcomeCode.INVALID_MESSAGE, message=str(error))

    async def _guarded(self, action: Callable[..., Awaitable[IntentOutcome]], *args) -> IntentOutcome:
        try:
            return await action(*args)
        except IntentRejected as e:
            logger.warning("Rejected intent (%s): %s", e.code.value, e.message)
            self.host.show_error(e.message)
            return IntentOutcome(code=e.code, message=e.message)
        except LineageIOError as e:
            logger.error("%s", e)
            self.host.show_error(str(e))
            return IntentOutcome(code=OutcomeCode.IO_ERROR, message=str(e))

    async def _dispatch(self, message: InboundMessage) -> IntentOutcome:
        if isinstance(message, NodePositionChanged):
            return self._move_nodes(message.positions)
        if isinstance(message, EditNodeLabel):
            return await self._edit_label(message)
        if isinstance(message, EdgeAdded):
            return self._add_edge(message)
        if isinstance(message, EdgeDeleted):
            return self._delete_edge(message.edge.id)
        if isinstance(message, EdgeUpdated):
            return self._update_edge(message)
        if isinstance(message, ExportImage):
            return await self._write_image(message)
        raise TypeError(f"Unhandled message type: {type(message).__name__}")

    def _commit(self, description: str, message: Optional[str] = None) -> IntentOutcome:
        self.history.record(description)
        self._push_view()
        logger.info("%s (history %d/%d)", description, self.history.current_index + 1, len(self.history.entries))
        return IntentOutcome(code=OutcomeCode.APPLIED, message=message, history_description=description)

    def _push_view(self) -> None:
        self.renderer.post_message(UpdateDataMessage(view=self.view()).to_payload())

    def _take_ownership(self, document: GraphDocument) -> None:
        """Start a fresh history with a baseline entry so the first edit is undoable."""
        self.history.reset(document)
        self.history.record(BASELINE_DESCRIPTION)
        self._saved_digest = document_digest(document)
        seed_from = getattr(self.ids, "seed_from", None)
        if seed_from is not None:
            seed_from(
                [t.id for t in document.tables]
                + list(document.get_column_ids())
                + [e.id for e in document.lineage]
            )

    # Renderer intents

    def _move_nodes(self, positions: Dict[str, Position]) -> IntentOutcome:
        document = self.document
        moved = 0
        for node_id, position in positions.items():
            ref = document.resolve_node(node_id)
            if ref is None:
                logger.debug("Ignoring move of unknown node %s", node_id)
                continue
            if isinstance(ref, TableRef):
                self._move_table(ref.table, position, reported=positions)
            else:
                ref.column.position = position.clone()
            moved += 1

        if not moved:
            return IntentOutcome(code=OutcomeCode.UNKNOWN_REFERENCE)
        return self._commit("Move nodes")

    def _move_table(self, table: Table, position: Position, reported: Dict[str, Position]) -> None:
        # Explicitly placed columns keep their offset from the table, unless the
        # gesture reported their own final position. A table without a stored
        # position has no baseline: its first reported position becomes the
        # baseline and its placed columns stay where they are.
        if table.position is not None:
            dx = position.x - table.position.x
            dy = position.y - table.position.y
            for column in table.columns:
                if column.position is not None and column.id not in reported:
                    column.position = column.position.shifted(dx, dy)
        table.position = position.clone()

    async def _edit_label(self, message: EditNodeLabel) -> IntentOutcome:
        ref = self.document.resolve_node(message.node_id)
        if ref is None:
            logger.debug("Ignoring label edit of unknown node %s", message.node_id)
            return IntentOutcome(code=OutcomeCode.UNKNOWN_REFERENCE)
        kind = "table" if isinstance(ref, TableRef) else "column"
        if kind != message.group:
            logger.debug("Node %s reported as %s, resolved as %s", message.node_id, message.group, kind)

        answer = await self.host.prompt_text(f"Enter new name for {kind}", ref.name)
        if answer is None:
            return IntentOutcome(code=OutcomeCode.PROMPT_DISMISSED)
        new_name = answer.strip()
        if not new_name:
            raise IntentRejected(OutcomeCode.BLANK_LABEL, f"The {kind} name cannot be empty.")
        if new_name == ref.name:
            return IntentOutcome(code=OutcomeCode.NO_OP)

        if isinstance(ref, TableRef):
            self.document.rename_table(ref.table.id, new_name)
        else:
            self.document.rename_column(ref.table.id, ref.column.id, new_name)
        self.renderer.post_message(
            LabelUpdatedMessage(node_id=message.node_id, new_label=new_name).to_payload()
        )
        return self._commit(f"Rename {kind}")

    def _add_edge(self, message: EdgeAdded) -> IntentOutcome:
        payload = message.edge
        source = self.document.resolve_node(payload.from_)
        target = self.document.resolve_node(payload.to)
        if not isinstance(source, ColumnRef) or not isinstance(target, ColumnRef):
            # Drop the renderer's provisional edge before reporting.
            self._push_view()
            raise IntentRejected(
                OutcomeCode.INVALID_EDGE_ENDPOINT,
                "Lineage edges can only connect two columns.",
            )
        edge = LineageEdge(
            id=self.ids.allocate("edge"),
            source=source.column.id,
            target=target.column.id,
            description=payload.label or None,
            color=payload.color,
            style=payload.style or "solid",
            arrows=payload.arrows or self.config.default_arrows,
        )
        self.document.add_edge(edge)
        return self._commit("Add lineage edge")

    def _delete_edge(self, edge_id: str) -> IntentOutcome:
        if not self.document.remove_edge(edge_id):
            logger.debug("Ignoring delete of unknown edge %s", edge_id)
            return IntentOutcome(code=OutcomeCode.UNKNOWN_REFERENCE)
        return self._commit("Delete lineage edge")

    def _update_edge(self, message: EdgeUpdated) -> IntentOutcome:
        props = message.edge
        updated = self.document.update_edge_properties(
            props.id,
            description=props.label,
            color=props.color,
            style=props.style,
            arrows=props.arrows,
        )
        if not updated:
            logger.debug("Ignoring update of unknown edge %s", props.id)
            return IntentOutcome(code=OutcomeCode.UNKNOWN_REFERENCE)
        return self._commit("Update lineage edge")

    async def _write_image(self, message: ExportImage) -> IntentOutcome:
        # Only write where the host chose, for the capture this session asked for
        expected = self._pending_export_path
        if expected is None or Path(message.path) != expected:
            logger.warning("Ignoring image export to unrequested path %s", message.path)
            return IntentOutcome(code=OutcomeCode.UNKNOWN_REFERENCE)
        self._pending_export_path = None
        written = await asyncio.to_thread(write_image, message.image_data, message.path)
        text = f"Diagram exported to {written}"
        self.host.show_info(text)
        return IntentOutcome(code=OutcomeCode.COMPLETED, message=text)

    # Host command bodies

    async def _import_csv_file(self, path: Optional[Path]) -> IntentOutcome:
        if path is None:
            path = await self.host.pick_open_path(
                "Select CSV file with table and column definitions",
                {"CSV files": ["csv"]},
            )
            if path is None:
                return IntentOutcome(code=OutcomeCode.PROMPT_DISMISSED)
        batch = await asyncio.to_thread(read_import_csv, path)
        return await self._merge_import(batch)

    async def _merge_import(self, batch: ImportBatch) -> IntentOutcome:
        if not batch.records:
            text = "Nothing imported: no rows with both table_name and column_name."
            self.host.show_info(text)
            return IntentOutcome(code=OutcomeCode.NOTHING_IMPORTED, message=text)

        tables = merge_import(self.document, batch.records, self.ids, self.config.table_spacing)

        column_count = sum(len(t.columns) for t in tables)
        text = f"Imported {len(tables)} tables with {column_count} columns."
        if batch.skipped_rows:
            text += f" Skipped {batch.skipped_rows} incomplete rows."
        self.host.show_info(text)
        return self._commit(IMPORT_DESCRIPTION, message=text)

    async def _request_image_export(self) -> IntentOutcome:
        choice = await self.host.pick_choice("Select export format", IMAGE_FORMATS)
        if choice is None:
            return IntentOutcome(code=OutcomeCode.PROMPT_DISMISSED)
        image_format = choice.lower()
        path = await self.host.pick_save_path("Export Lineage Diagram", {"Image files": [image_format]})
        if path is None:
            return IntentOutcome(code=OutcomeCode.PROMPT_DISMISSED)
        self._pending_export_path = Path(path)
        self.renderer.post_message(ExportImageRequest(format=image_format, path=str(path)).to_payload())
        return IntentOutcome(code=OutcomeCode.COMPLETED)

    async def _delete_table(self, table_id: str) -> IntentOutcome:
        if not self.document.remove_table(table_id):
            logger.debug("Ignoring delete of unknown table %s", table_id)
            return IntentOutcome(code=OutcomeCode.UNKNOWN_REFERENCE)
        return self._commit("Delete table")

    async def _save_document(self, path: Optional[Path]) -> IntentOutcome:
        target = path or self.file_path
        if target is None:
            target = await self.host.pick_save_path("Save Lineage Data", {"JSON files": ["json"]})
            if target is None:
                return IntentOutcome(code=OutcomeCode.PROMPT_DISMISSED)
        snapshot = self.document.clone()
        await asyncio.to_thread(save_document_to_path, snapshot, target)
        self.file_path = Path(target)
        self._saved_digest = document_digest(snapshot)
        logger.info("Saved lineage document to %s", self.file_path)
        return IntentOutcome(code=OutcomeCode.COMPLETED)

    async def _open_document(self, path: Optional[Path]) -> IntentOutcome:
        if path is None:
            path = await self.host.pick_open_path("Load Lineage Data", {"JSON files": ["json"]})
            if path is None:
                return IntentOutcome(code=OutcomeCode.PROMPT_DISMISSED)
        document = await asyncio.to_thread(load_document_from_path, path)
        self._take_ownership(document)
        self.file_path = Path(path)
        self._push_view()
        logger.info("Opened lineage document %s", self.file_path)
        return IntentOutcome(code=OutcomeCode.COMPLETED)
