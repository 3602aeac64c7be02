"""CSV import: table/column definitions from a two-column CSV file.

Format: a header row containing table_name and column_name (exact,
case-sensitive names; other columns are ignored), then one row per column.
Values are whitespace-trimmed. Rows where either value is empty are skipped
and counted, they do not fail the import.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Tuple, Union

from pydantic import BaseModel, ConfigDict

from ..errors import CsvImportError
from .ids import IdAllocator
from .model import Column, GraphDocument, Position, Table


logger = logging.getLogger(__name__)

REQUIRED_HEADERS = ("table_name", "column_name")


class ImportRecord(BaseModel):
    """One (table_name, column_name) row."""
    table_name: str
    column_name: str

    model_config = ConfigDict(frozen=True, extra="forbid")


@dataclass
class ImportBatch:
    """Parsed CSV content: the usable records plus how many rows were skipped."""
    records: List[ImportRecord] = field(default_factory=list)
    skipped_rows: int = 0


RecordLike = Union[ImportRecord, Tuple[str, str]]


def coerce_records(records: Iterable[RecordLike]) -> ImportBatch:
    """Normalize records given as ImportRecord or (table, column) pairs.

    Values are trimmed; pairs with an empty side are skipped.
    """
    batch = ImportBatch()
    for record in records:
        if isinstance(record, ImportRecord):
            table_name, column_name = record.table_name, record.column_name
        else:
            table_name, column_name = record
        table_name = (table_name or "").strip()
        column_name = (column_name or "").strip()
        if not table_name or not column_name:
            batch.skipped_rows += 1
            continue
        batch.records.append(ImportRecord(table_name=table_name, column_name=column_name))
    return batch


def parse_import_csv(text: str) -> ImportBatch:
    """Parse CSV text into an ImportBatch (raises CsvImportError on a bad header).

    Empty or whitespace-only text has no header at all and parses to an empty
    batch, the same as a header with no rows.
    """
    if not text.strip():
        return ImportBatch()
    reader = csv.DictReader(io.StringIO(text))
    try:
        fieldnames = [name.strip() for name in (reader.fieldnames or [])]
    except csv.Error as e:
        raise CsvImportError(f"Could not parse CSV header: {e}") from e

    missing = [h for h in REQUIRED_HEADERS if h not in fieldnames]
    if missing:
        raise CsvImportError(
            f"CSV header must contain {', '.join(REQUIRED_HEADERS)}; missing: {', '.join(missing)}"
        )
    reader.fieldnames = fieldnames

    pairs: List[Tuple[str, str]] = []
    try:
        for row in reader:
            pairs.append((row.get("table_name") or "", row.get("column_name") or ""))
    except csv.Error as e:
        raise CsvImportError(f"Could not parse CSV line {reader.line_num}: {e}") from e

    batch = coerce_records(pairs)
    logger.debug("Parsed %d CSV records (%d skipped)", len(batch.records), batch.skipped_rows)
    return batch


def read_import_csv(path: Union[str, Path]) -> ImportBatch:
    """Read and parse a CSV import file."""
    csv_path = Path(path)
    try:
        # utf-8-sig drops a spreadsheet BOM in front of the header
        text = csv_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise CsvImportError(f"Could not read CSV file {csv_path}: {e}") from e
    return parse_import_csv(text)


def group_records(records: Iterable[ImportRecord]) -> Dict[str, List[str]]:
    """Group column names by table name, preserving first-seen table order and row order."""
    grouped: Dict[str, List[str]] = {}
    for record in records:
        grouped.setdefault(record.table_name, []).append(record.column_name)
    return grouped


def next_import_x(document: GraphDocument, spacing: float) -> float:
    """x coordinate for the first table of a new import.

    0 for a document without placed tables, otherwise one spacing to the right
    of the rightmost placed table.
    """
    placed = [t.position.x for t in document.tables if t.position is not None]
    if not placed:
        return 0.0
    return max(placed) + spacing


def build_tables(
    records: Iterable[ImportRecord],
    ids: IdAllocator,
    start_x: float,
    spacing: float,
) -> List[Table]:
    """Create one new Table per distinct table name, columns in row order.

    Tables are laid out left to right from start_x, one spacing apart.
    """
    tables: List[Table] = []
    x = start_x
    for table_name, column_names in group_records(records).items():
        table_id = ids.allocate("table")
        columns = [Column(id=ids.allocate("column"), name=name) for name in column_names]
        tables.append(Table(
            id=table_id,
            name=table_name,
            position=Position(x=x, y=0.0),
            columns=columns,
        ))
        x += spacing
    return tables


def merge_import(
    document: GraphDocument,
    records: Iterable[ImportRecord],
    ids: IdAllocator,
    spacing: float,
) -> List[Table]:
    """Append freshly built tables for records to the document, right of existing ones.

    All tables are built before the first append, so a failure leaves the
    document untouched.
    """
    tables = build_tables(records, ids, next_import_x(document, spacing), spacing)
    for table in tables:
        document.add_table(table)
    return tables
