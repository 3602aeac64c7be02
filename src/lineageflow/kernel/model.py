"""Pydantic models for the canonical lineage graph document.

The GraphDocument is the single source of truth: tables own their columns,
lineage edges connect column ids, and the layout config is carried through
without interpretation. Everything a renderer draws is derived from it.

Mutation primitives apply in place and never raise on a miss: lookups return
None and removals/updates return False so callers decide whether a miss is an
error. None of them validate uniqueness of caller-supplied ids; whoever builds
a new entity allocates its id (see ids.py).
"""

from dataclasses import dataclass
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


EdgeStyle = Literal["solid", "dashed", "dotted"]
LayoutDirection = Literal["LR", "RL", "UD", "DU"]

DEFAULT_ARROWS = "to"
SCHEMA_LAYOUT_VERSION = "1.0"


class Position(BaseModel):
    """A point on the canvas."""
    x: float
    y: float

    model_config = ConfigDict(extra="forbid")

    def clone(self) -> "Position":
        return Position(x=self.x, y=self.y)

    def shifted(self, dx: float, dy: float) -> "Position":
        return Position(x=self.x + dx, y=self.y + dy)


class Column(BaseModel):
    """A column owned by exactly one table.

    Column ids are unique across the whole document, not just within the
    owning table. Re-parenting is not supported.
    """
    id: str
    name: str = Field(..., min_length=1)
    position: Optional[Position] = None

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    def clone(self) -> "Column":
        return Column(
            id=self.id,
            name=self.name,
            position=self.position.clone() if self.position else None,
        )


class Table(BaseModel):
    """A table and its ordered columns.

    position is None while the renderer owns placement (before the first
    explicit move or import placement).
    """
    id: str
    name: str = Field(..., min_length=1)
    position: Optional[Position] = None
    columns: List[Column] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    def clone(self) -> "Table":
        return Table(
            id=self.id,
            name=self.name,
            position=self.position.clone() if self.position else None,
            columns=[c.clone() for c in self.columns],
        )

    def get_column_by_id(self, id: str) -> Column | None:
        """Get owned column by ID."""
        for c in self.columns:
            if c.id == id:
                return c
        return None


class LineageEdge(BaseModel):
    """A directed lineage edge from a source column to a target column."""
    id: str
    source: str  # column id
    target: str  # column id
    description: Optional[str] = None
    color: Optional[str] = None
    style: EdgeStyle = "solid"
    arrows: str = DEFAULT_ARROWS

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    def clone(self) -> "LineageEdge":
        return LineageEdge(
            id=self.id,
            source=self.source,
            target=self.target,
            description=self.description,
            color=self.color,
            style=self.style,
            arrows=self.arrows,
        )


class LayoutSettings(BaseModel):
    """Renderer layout hints. Persisted, never interpreted."""
    direction: LayoutDirection = "LR"
    node_spacing: float = Field(150.0, alias="nodeSpacing")
    level_spacing: float = Field(200.0, alias="levelSpacing")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class LayoutConfig(BaseModel):
    """Document-level configuration.

    layout_version is a forward-compatibility tag only; there is no
    migration logic behind it. Unknown keys survive a load/save cycle.
    """
    layout_version: str = SCHEMA_LAYOUT_VERSION
    theme: Optional[Literal["light", "dark"]] = None
    layout: LayoutSettings = Field(default_factory=LayoutSettings)

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def clone(self) -> "LayoutConfig":
        # Opaque payload (extra keys included), so a deep model copy is the clone.
        return self.model_copy(deep=True)


@dataclass(frozen=True)
class TableRef:
    """A node id that resolved to a table."""
    table: Table

    @property
    def name(self) -> str:
        return self.table.name


@dataclass(frozen=True)
class ColumnRef:
    """A node id that resolved to a column, with its owning table."""
    table: Table
    column: Column

    @property
    def name(self) -> str:
        return self.column.name


NodeRef = Union[TableRef, ColumnRef]


class GraphDocument(BaseModel):
    """The canonical lineage document: tables, lineage edges and config."""
    tables: List[Table] = Field(default_factory=list)
    lineage: List[LineageEdge] = Field(default_factory=list)
    config: LayoutConfig = Field(default_factory=LayoutConfig)

    model_config = ConfigDict(extra="forbid")

    def clone(self) -> "GraphDocument":
        """Structural snapshot. The result shares no mutable state with self."""
        return GraphDocument(
            tables=[t.clone() for t in self.tables],
            lineage=[e.clone() for e in self.lineage],
            config=self.config.clone(),
        )

    def to_json_dict(self) -> dict:
        """Persisted form: top-level tables, lineage, config (config keys by alias)."""
        return self.model_dump(mode="json", by_alias=True)

    # Lookups

    def find_table(self, id: str) -> Table | None:
        """Get table by ID."""
        for t in self.tables:
            if t.id == id:
                return t
        return None

    def find_column(self, table_id: str, id: str) -> Column | None:
        """Get a column by ID within the given table."""
        table = self.find_table(table_id)
        if table is None:
            return None
        return table.get_column_by_id(id)

    def find_column_owner(self, column_id: str) -> Table | None:
        """Get the table that owns a column ID, searching every table."""
        for t in self.tables:
            if t.get_column_by_id(column_id) is not None:
                return t
        return None

    def resolve_node(self, node_id: str) -> NodeRef | None:
        """Resolve a renderer node id to a table or a column."""
        for t in self.tables:
            if t.id == node_id:
                return TableRef(table=t)
            column = t.get_column_by_id(node_id)
            if column is not None:
                return ColumnRef(table=t, column=column)
        return None

    def find_edge(self, id: str) -> LineageEdge | None:
        """Get lineage edge by ID."""
        for e in self.lineage:
            if e.id == id:
                return e
        return None

    def get_table_ids(self) -> set[str]:
        """Get set of all table IDs."""
        return {t.id for t in self.tables}

    def get_column_ids(self) -> set[str]:
        """Get set of all column IDs across every table."""
        return {c.id for t in self.tables for c in t.columns}

    # Mutation primitives

    def add_table(self, table: Table) -> None:
        self.tables.append(table)

    def remove_table(self, id: str) -> bool:
        """Remove a table and its columns. Lineage edges are left untouched."""
        for i, t in enumerate(self.tables):
            if t.id == id:
                del self.tables[i]
                return True
        return False

    def add_column(self, table_id: str, column: Column) -> bool:
        table = self.find_table(table_id)
        if table is None:
            return False
        table.columns.append(column)
        return True

    def remove_column(self, table_id: str, id: str) -> bool:
        """Remove a column from its table. Lineage edges are left untouched."""
        table = self.find_table(table_id)
        if table is None:
            return False
        for i, c in enumerate(table.columns):
            if c.id == id:
                del table.columns[i]
                return True
        return False

    def add_edge(self, edge: LineageEdge) -> None:
        self.lineage.append(edge)

    def remove_edge(self, id: str) -> bool:
        for i, e in enumerate(self.lineage):
            if e.id == id:
                del self.lineage[i]
                return True
        return False

    def update_table_position(self, id: str, position: Position) -> bool:
        table = self.find_table(id)
        if table is None:
            return False
        table.position = position
        return True

    def update_column_position(self, table_id: str, id: str, position: Position) -> bool:
        column = self.find_column(table_id, id)
        if column is None:
            return False
        column.position = position
        return True

    def rename_table(self, id: str, name: str) -> bool:
        table = self.find_table(id)
        if table is None:
            return False
        table.name = name
        return True

    def rename_column(self, table_id: str, id: str, name: str) -> bool:
        column = self.find_column(table_id, id)
        if column is None:
            return False
        column.name = name
        return True

    def update_edge_properties(
        self,
        id: str,
        *,
        description: Optional[str] = None,
        color: Optional[str] = None,
        style: Optional[EdgeStyle] = None,
        arrows: Optional[str] = None,
    ) -> bool:
        """Update the given edge fields; None leaves a field as it is."""
        edge = self.find_edge(id)
        if edge is None:
            return False
        if description is not None:
            edge.description = description
        if color is not None:
            edge.color = color
        if style is not None:
            edge.style = style
        if arrows is not None:
            edge.arrows = arrows
        return True
