"""CLI tests for lineageflow subcommands."""

import json
from pathlib import Path
import sys

import pytest

from lineageflow import cli
from lineageflow.api import load_document, save_document


def _run_cli(args, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["lineageflow"] + args)
    return cli.main()


def _write_csv(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_no_command_prints_help_and_fails(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli([], monkeypatch)
    assert excinfo.value.code == 1
    assert "usage:" in capsys.readouterr().out


def test_new_creates_empty_document(monkeypatch, capsys, tmp_path):
    doc = tmp_path / "lineage.json"
    _run_cli(["new", str(doc)], monkeypatch)

    assert "[OK] Created" in capsys.readouterr().out
    document = load_document(doc)
    assert document.tables == []
    assert document.config.layout_version == "1.0"


def test_new_refuses_to_overwrite(monkeypatch, capsys, tmp_path):
    doc = tmp_path / "lineage.json"
    doc.write_text("{}", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["new", str(doc)], monkeypatch)
    assert excinfo.value.code == 1
    assert "already exists" in capsys.readouterr().err

    _run_cli(["new", str(doc), "--force", "--quiet"], monkeypatch)
    assert capsys.readouterr().out == ""
    assert load_document(doc).tables == []


def test_view_prints_update_data(monkeypatch, capsys, tmp_path, sample_document):
    doc = tmp_path / "lineage.json"
    save_document(sample_document, doc)

    _run_cli(["view", str(doc), "--column-spacing", "25"], monkeypatch)

    payload = json.loads(capsys.readouterr().out)
    assert payload["type"] == "updateData"
    assert [n["id"] for n in payload["nodes"]] == ["T1", "C2", "C3", "T4", "C5"]
    assert payload["nodes"][1]["position"] == {"x": 0.0, "y": 25.0}
    assert payload["edges"][0]["from"] == "C5"


def test_view_writes_file(monkeypatch, capsys, tmp_path, sample_document):
    doc = tmp_path / "lineage.json"
    out = tmp_path / "view.json"
    save_document(sample_document, doc)

    _run_cli(["view", str(doc), "--out", str(out)], monkeypatch)

    assert "[OK] View model written" in capsys.readouterr().out
    assert json.loads(out.read_text(encoding="utf-8"))["type"] == "updateData"


def test_view_missing_document_fails(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["view", str(tmp_path / "missing.json")], monkeypatch)
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("Error: ")


def test_import_csv_creates_document(monkeypatch, capsys, tmp_path):
    csv_path = _write_csv(tmp_path / "defs.csv", "table_name,column_name\norders,id\norders,total\n,x\n")
    doc = tmp_path / "lineage.json"

    _run_cli(["import-csv", str(csv_path), "--document", str(doc)], monkeypatch)

    out = capsys.readouterr().out
    assert "[OK] Import complete" in out
    assert "Tables: 1" in out
    assert "Columns: 2" in out
    assert "Skipped rows: 1" in out
    document = load_document(doc)
    assert [t.name for t in document.tables] == ["orders"]


def test_import_csv_merges_into_existing(monkeypatch, capsys, tmp_path, sample_document):
    csv_path = _write_csv(tmp_path / "defs.csv", "table_name,column_name\nrefunds,id\n")
    doc = tmp_path / "lineage.json"
    out_doc = tmp_path / "merged.json"
    save_document(sample_document, doc)

    _run_cli(
        ["import-csv", str(csv_path), "--document", str(doc), "--out", str(out_doc), "--table-spacing", "100"],
        monkeypatch,
    )

    merged = load_document(out_doc)
    assert [t.name for t in merged.tables] == ["Orders", "Customers", "refunds"]
    assert merged.tables[-1].position.x == 400
    # The input document is left alone when --out is given
    assert len(load_document(doc).tables) == 2


def test_import_csv_nothing_to_import(monkeypatch, capsys, tmp_path):
    csv_path = _write_csv(tmp_path / "defs.csv", "table_name,column_name\n,\n")
    doc = tmp_path / "lineage.json"

    _run_cli(["import-csv", str(csv_path), "--document", str(doc)], monkeypatch)

    assert "Nothing imported" in capsys.readouterr().out
    assert not doc.exists()


def test_import_csv_bad_header_fails(monkeypatch, capsys, tmp_path):
    csv_path = _write_csv(tmp_path / "defs.csv", "table,column\norders,id\n")

    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["import-csv", str(csv_path), "--document", str(tmp_path / "d.json")], monkeypatch)
    assert excinfo.value.code == 1
    assert "table_name" in capsys.readouterr().err


def test_export_image(monkeypatch, capsys, tmp_path):
    data_file = tmp_path / "capture.txt"
    data_file.write_text("data:image/png;base64,iVBORw0KGgo=\n", encoding="utf-8")
    target = tmp_path / "diagram.png"

    _run_cli(["export-image", str(data_file), "--out", str(target)], monkeypatch)

    assert target.read_bytes() == b"\x89PNG\r\n\x1a\n"
    assert "[OK] Image written" in capsys.readouterr().out


def test_export_image_invalid_payload(monkeypatch, capsys, tmp_path):
    data_file = tmp_path / "capture.txt"
    data_file.write_text("data:image/png;base64,???", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["export-image", str(data_file), "--out", str(tmp_path / "x.png")], monkeypatch)
    assert excinfo.value.code == 1
