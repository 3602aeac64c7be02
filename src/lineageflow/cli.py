"""lineageflow CLI: document-centric commands for the lineage engine."""

import argparse
import json
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def _configure_logging(args) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main():
    """Main CLI entry point for lineageflow commands."""
    try:
        lineageflow_version = get_version("lineageflow")
    except PackageNotFoundError:
        lineageflow_version = "dev"

    parser = argparse.ArgumentParser(
        prog="lineageflow",
        description="lineageflow: table/column lineage documents and renderer view models"
    )
    parser.add_argument("--version", action="version", version=f"lineageflow {lineageflow_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # new command
    new_parser = subparsers.add_parser(
        "new",
        help="Create an empty lineage document",
        parents=[parent_parser]
    )
    new_parser.add_argument(
        "document",
        type=Path,
        help="Path of the document to create"
    )
    new_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing file"
    )

    # view command
    view_parser = subparsers.add_parser(
        "view",
        help="Print the renderer view model (updateData message) for a document",
        parents=[parent_parser]
    )
    view_parser.add_argument(
        "document",
        type=Path,
        help="Path to lineage document JSON"
    )
    view_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write the view model to this file instead of stdout"
    )
    view_parser.add_argument(
        "--column-spacing",
        type=float,
        default=None,
        help="Vertical offset of derived column positions"
    )

    # import-csv command
    import_parser = subparsers.add_parser(
        "import-csv",
        help="Merge table_name,column_name CSV rows into a document",
        parents=[parent_parser]
    )
    import_parser.add_argument(
        "csv_path",
        type=Path,
        help="Path to CSV file with table_name and column_name headers"
    )
    import_parser.add_argument(
        "--document",
        type=Path,
        required=True,
        help="Lineage document to merge into (created if it does not exist)"
    )
    import_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write the merged document here (defaults to --document)"
    )
    import_parser.add_argument(
        "--table-spacing",
        type=float,
        default=None,
        help="Horizontal distance between imported tables"
    )

    # export-image command
    export_parser = subparsers.add_parser(
        "export-image",
        help="Decode a captured renderer image (data URI) and write it to a file",
        parents=[parent_parser]
    )
    export_parser.add_argument(
        "data_uri",
        type=Path,
        help="File containing the data URI ('-' reads stdin)"
    )
    export_parser.add_argument(
        "--out",
        type=Path,
        required=True,
        help="Target image path"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args)

    # Lazy import: only load the engine once a command is known
    from .api import (
        export_image,
        import_csv,
        load_document,
        new_document,
        project_document,
        save_document,
    )
    from .config import EngineConfig
    from .errors import LineageError
    from .kernel.protocol import UpdateDataMessage

    try:
        if args.command == "new":
            if args.document.exists() and not args.force:
                print(f"Error: {args.document} already exists (use --force to overwrite)", file=sys.stderr)
                sys.exit(1)
            save_document(new_document(), args.document)
            if not args.quiet:
                print(f"[OK] Created {args.document}")

        elif args.command == "view":
            overrides = {}
            if args.column_spacing is not None:
                overrides["column_spacing"] = args.column_spacing
            config = EngineConfig(**overrides)
            view = project_document(args.document.resolve(), config=config)
            content = json.dumps(UpdateDataMessage(view=view).to_payload(), indent=2, ensure_ascii=False)
            if args.out is not None:
                args.out.write_text(content + "\n", encoding="utf-8")
                if not args.quiet:
                    print(f"[OK] View model written to {args.out}")
            else:
                print(content)

        elif args.command == "import-csv":
            overrides = {}
            if args.table_spacing is not None:
                overrides["table_spacing"] = args.table_spacing
            config = EngineConfig(**overrides)
            document_path = args.document.resolve()
            if document_path.exists():
                document = load_document(document_path)
            else:
                document = new_document(config)
            summary = import_csv(document, args.csv_path.resolve(), config=config)
            if not summary.table_ids:
                if not args.quiet:
                    print("[OK] Nothing imported: no rows with both table_name and column_name")
                return
            out_path = save_document(document, args.out or document_path)
            if not args.quiet:
                print("[OK] Import complete")
                print(f"  Tables: {len(summary.table_ids)}")
                print(f"  Columns: {summary.column_count}")
                print(f"  Skipped rows: {summary.skipped_rows}")
                print(f"  Document: {out_path}")

        elif args.command == "export-image":
            if str(args.data_uri) == "-":
                image_data = sys.stdin.read().strip()
            else:
                try:
                    image_data = args.data_uri.read_text(encoding="utf-8").strip()
                except OSError as e:
                    print(f"Error: could not read {args.data_uri}: {e}", file=sys.stderr)
                    sys.exit(1)
            written = export_image(image_data, args.out)
            if not args.quiet:
                print(f"[OK] Image written to {written}")

    except LineageError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
