"""Project a GraphDocument into the renderer's node/edge view model.

project() is a pure function of the document: no state, no side effects, and
two calls on an unchanged document return equal view models.

Ordering: tables in insertion order, each followed by its columns in
insertion order, then edges in insertion order.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .model import DEFAULT_ARROWS, EdgeStyle, GraphDocument, Position, Table


DEFAULT_COLUMN_SPACING = 40.0


class FixedAxes(BaseModel):
    x: bool
    y: bool

    model_config = ConfigDict(extra="forbid")


class TableViewNode(BaseModel):
    """A table node. Auto-layout (physics) applies."""
    id: str
    label: str
    group: Literal["table"] = "table"
    physics: bool = True
    fixed: FixedAxes = Field(default_factory=lambda: FixedAxes(x=False, y=False))
    position: Optional[Position] = None

    model_config = ConfigDict(extra="forbid")


class ColumnViewNode(BaseModel):
    """A column node pinned in place, carrying its owning table id."""
    id: str
    label: str
    group: Literal["column"] = "column"
    parent: str
    physics: bool = False
    fixed: FixedAxes = Field(default_factory=lambda: FixedAxes(x=True, y=True))
    position: Optional[Position] = None

    model_config = ConfigDict(extra="forbid")


ViewNode = Annotated[Union[TableViewNode, ColumnViewNode], Field(discriminator="group")]


class ViewEdge(BaseModel):
    id: str
    from_: str = Field(..., alias="from")
    to: str
    label: Optional[str] = None
    color: Optional[str] = None
    style: EdgeStyle = "solid"
    arrows: str = DEFAULT_ARROWS

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ViewModel(BaseModel):
    nodes: List[ViewNode] = Field(default_factory=list)
    edges: List[ViewEdge] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict:
        """Wire form for the renderer (aliases applied, unset optionals dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def get_node(self, id: str) -> TableViewNode | ColumnViewNode | None:
        for node in self.nodes:
            if node.id == id:
                return node
        return None


def derived_column_position(table: Table, index: int, column_spacing: float) -> Position | None:
    """Where a column without an explicit position sits: stacked under its table."""
    if table.position is None:
        return None
    return Position(x=table.position.x, y=table.position.y + (index + 1) * column_spacing)


def project(document: GraphDocument, column_spacing: float = DEFAULT_COLUMN_SPACING) -> ViewModel:
    """Derive the full renderer view model from the document.

    Edges whose source or target column is not in the document (dangling
    edges) stay in document.lineage but are not projected.
    """
    nodes: List[TableViewNode | ColumnViewNode] = []
    column_ids: set[str] = set()

    for table in document.tables:
        nodes.append(TableViewNode(
            id=table.id,
            label=table.name,
            position=table.position.clone() if table.position else None,
        ))
        for index, column in enumerate(table.columns):
            column_ids.add(column.id)
            if column.position is not None:
                position = column.position.clone()
            else:
                position = derived_column_position(table, index, column_spacing)
            nodes.append(ColumnViewNode(
                id=column.id,
                label=column.name,
                parent=table.id,
                position=position,
            ))

    edges: List[ViewEdge] = []
    for edge in document.lineage:
        if edge.source not in column_ids or edge.target not in column_ids:
            continue
        edges.append(ViewEdge(
            id=edge.id,
            from_=edge.source,
            to=edge.target,
            label=edge.description,
            color=edge.color,
            style=edge.style,
            arrows=edge.arrows or DEFAULT_ARROWS,
        ))

    return ViewModel(nodes=nodes, edges=edges)
