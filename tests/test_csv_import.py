"""Tests for CSV import parsing and merging."""

import pytest

from lineageflow.errors import CsvImportError
from lineageflow.kernel.csv_import import (
    ImportRecord,
    coerce_records,
    group_records,
    merge_import,
    next_import_x,
    parse_import_csv,
    read_import_csv,
)
from lineageflow.kernel.ids import CounterIdAllocator
from lineageflow.kernel.model import GraphDocument, Position, Table


def test_parse_basic_csv():
    batch = parse_import_csv("table_name,column_name\norders,id\norders,total\ncustomers,id\n")
    assert [(r.table_name, r.column_name) for r in batch.records] == [
        ("orders", "id"),
        ("orders", "total"),
        ("customers", "id"),
    ]
    assert batch.skipped_rows == 0


def test_extra_columns_and_header_order_are_ignored():
    batch = parse_import_csv("column_name,comment,table_name\nid,pk,orders\n")
    assert batch.records == [ImportRecord(table_name="orders", column_name="id")]


def test_rows_with_empty_values_are_skipped_and_counted():
    text = "table_name,column_name\norders,id\n,orphan\norders,\n  ,  \norders,total\n"
    batch = parse_import_csv(text)
    assert [r.column_name for r in batch.records] == ["id", "total"]
    assert batch.skipped_rows == 3


def test_values_and_header_names_are_trimmed():
    batch = parse_import_csv(" table_name , column_name \n  orders  ,  id \n")
    assert batch.records == [ImportRecord(table_name="orders", column_name="id")]


def test_short_rows_are_skipped():
    batch = parse_import_csv("table_name,column_name\norders\norders,id\n")
    assert len(batch.records) == 1
    assert batch.skipped_rows == 1


@pytest.mark.parametrize("text", [
    "table,column\norders,id\n",
    "Table_Name,Column_Name\norders,id\n",
    "table_name\norders\n",
])
def test_missing_required_header_is_an_error(text):
    with pytest.raises(CsvImportError):
        parse_import_csv(text)


@pytest.mark.parametrize("text", ["", "  ", "\n\n", " \r\n"])
def test_text_without_header_is_an_empty_batch(text):
    batch = parse_import_csv(text)
    assert batch.records == []
    assert batch.skipped_rows == 0


def test_quoted_values_keep_commas():
    batch = parse_import_csv('table_name,column_name\n"sales, eu","amount, net"\n')
    assert batch.records == [ImportRecord(table_name="sales, eu", column_name="amount, net")]


def test_read_import_csv_drops_bom(tmp_path):
    path = tmp_path / "defs.csv"
    path.write_text("\ufefftable_name,column_name\norders,id\n", encoding="utf-8")
    batch = read_import_csv(path)
    assert batch.records == [ImportRecord(table_name="orders", column_name="id")]


def test_read_import_csv_missing_file(tmp_path):
    with pytest.raises(CsvImportError):
        read_import_csv(tmp_path / "missing.csv")


def test_coerce_records_accepts_pairs_and_records():
    batch = coerce_records([
        ("orders", " id "),
        ImportRecord(table_name="orders", column_name="total"),
        ("", "x"),
    ])
    assert [r.column_name for r in batch.records] == ["id", "total"]
    assert batch.skipped_rows == 1


def test_group_records_preserves_first_seen_order():
    records = coerce_records([("b", "1"), ("a", "2"), ("b", "3")]).records
    assert group_records(records) == {"b": ["1", "3"], "a": ["2"]}


def test_next_import_x():
    document = GraphDocument()
    assert next_import_x(document, 300) == 0

    document.add_table(Table(id="T1", name="a", position=Position(x=100, y=50)))
    document.add_table(Table(id="T2", name="b", position=Position(x=-400, y=0)))
    document.add_table(Table(id="T3", name="c"))
    assert next_import_x(document, 300) == 400


def test_merge_into_empty_document():
    document = GraphDocument()
    batch = parse_import_csv("table_name,column_name\norders,id\norders,total\ncustomers,id\n")
    tables = merge_import(document, batch.records, CounterIdAllocator(), 300)

    assert [t.name for t in document.tables] == ["orders", "customers"]
    assert [t.id for t in tables] == ["T1", "T4"]
    assert [c.id for c in tables[0].columns] == ["C2", "C3"]
    assert [c.name for c in tables[0].columns] == ["id", "total"]
    assert tables[0].position == Position(x=0, y=0)
    assert tables[1].position == Position(x=300, y=0)
    assert all(c.position is None for t in tables for c in t.columns)


def test_merge_adds_new_tables_even_for_existing_names(sample_document):
    """Import is additive: a name that already exists gets a second table with a new id."""
    batch = parse_import_csv("table_name,column_name\nOrders,discount\n")
    tables = merge_import(sample_document, batch.records, CounterIdAllocator(start=100), 300)

    orders = [t for t in sample_document.tables if t.name == "Orders"]
    assert len(orders) == 2
    assert tables[0].id not in {"T1", "T4"}
    assert tables[0].position == Position(x=600, y=0)
    # Existing entities are untouched
    assert [c.name for c in sample_document.find_table("T1").columns] == ["id", "total"]
    assert [e.id for e in sample_document.lineage] == ["E6"]


def test_merge_ids_are_unique_across_the_document(sample_document):
    batch = parse_import_csv("table_name,column_name\nx,a\nx,b\ny,c\n")
    merge_import(sample_document, batch.records, CounterIdAllocator(start=100), 300)

    table_ids = [t.id for t in sample_document.tables]
    column_ids = [c.id for t in sample_document.tables for c in t.columns]
    assert len(set(table_ids)) == len(table_ids)
    assert len(set(column_ids)) == len(column_ids)
