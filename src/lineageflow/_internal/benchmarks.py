"""Performance sentinel budgets and synthetic documents (gated perf tests)."""

from __future__ import annotations

import os

from lineageflow.kernel.ids import CounterIdAllocator
from lineageflow.kernel.model import Column, GraphDocument, LineageEdge, Position, Table


def _budget_from_env(var_name: str, default_ms: float) -> float:
    raw = os.getenv(var_name)
    if not raw:
        return default_ms
    try:
        return float(raw)
    except ValueError:
        return default_ms


MAX_PROJECT_LARGE_MS = _budget_from_env("LINEAGEFLOW_MAX_PROJECT_LARGE_MS", 500.0)
MAX_RECORD_LARGE_MS = _budget_from_env("LINEAGEFLOW_MAX_RECORD_LARGE_MS", 500.0)


def build_synthetic_document(tables: int, columns_per_table: int, edges: int) -> GraphDocument:
    """A tool-scale-upper-bound document: tables in a row, edges chaining neighbouring tables."""
    ids = CounterIdAllocator()
    document = GraphDocument()
    for t in range(tables):
        document.add_table(Table(
            id=ids.allocate("table"),
            name=f"table_{t}",
            position=Position(x=t * 300.0, y=0.0),
            columns=[Column(id=ids.allocate("column"), name=f"col_{c}") for c in range(columns_per_table)],
        ))
    for e in range(edges):
        source_table = document.tables[e % tables]
        target_table = document.tables[(e + 1) % tables]
        document.add_edge(LineageEdge(
            id=ids.allocate("edge"),
            source=source_table.columns[e % columns_per_table].id,
            target=target_table.columns[(e + 1) % columns_per_table].id,
        ))
    return document
