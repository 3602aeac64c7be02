"""Generate JSON schemas from Pydantic models and save to schemas/ directory.

Run against an installed (or editable-installed) lineageflow package.
"""

import json
from pathlib import Path

from pydantic import TypeAdapter

from lineageflow.kernel.model import GraphDocument
from lineageflow.kernel.projection import ViewModel
from lineageflow.kernel.protocol import InboundMessage


def _write(schema: dict, path: Path) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    print(f"Generated: {path}")


def generate_schemas():
    """Generate JSON schemas for the document and renderer protocol models."""
    schemas_dir = Path(__file__).parent.parent / "schemas"
    schemas_dir.mkdir(exist_ok=True)

    _write(GraphDocument.model_json_schema(by_alias=True), schemas_dir / "lineage_document.schema.json")
    _write(ViewModel.model_json_schema(by_alias=True), schemas_dir / "view_model.schema.json")
    _write(
        TypeAdapter(InboundMessage).json_schema(by_alias=True),
        schemas_dir / "renderer_inbound.schema.json",
    )

    print("\nSchema generation complete!")


if __name__ == "__main__":
    generate_schemas()
