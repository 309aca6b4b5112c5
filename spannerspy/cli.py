"""``spannerspy``: render an ER diagram from a Spanner schema.

Exactly one schema source is used: the built-in sample, one or more JSON
schema documents, or one or more DDL files.

Usage::

    spannerspy --sample
    spannerspy --ddl schema.sql --format json --output diagram.json
    spannerspy exported.json other.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from spannerspy import models
from spannerspy.config import get_config
from spannerspy.diagram import DiagramModel, build_diagram
from spannerspy.loader import load_schema_from_ddl_paths, load_schema_from_json_paths
from spannerspy.mermaid import render_mermaid
from spannerspy.output import dump_json, save_text
from spannerspy.sample import sample_schema

logger = logging.getLogger(__name__)

FORMAT_ALIASES: dict[str, str] = {
    "mermaid": "mermaid",
    "mmd": "mermaid",
    "json": "json",
}


def _format(value: str) -> str:
    normalized = FORMAT_ALIASES.get(value.lower())
    if normalized is None:
        raise argparse.ArgumentTypeError(f"Unsupported format: {value}")
    return normalized


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="spannerspy",
        description="Generate ER diagrams from Cloud Spanner schemas.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=[],
        help="JSON schema files (same as --input)",
    )
    parser.add_argument(
        "-i", "--input",
        dest="input_paths",
        action="append",
        default=[],
        help="JSON schema exported from Cloud Spanner (repeatable)",
    )
    parser.add_argument(
        "-d", "--ddl",
        dest="ddl_paths",
        action="append",
        default=[],
        help="Cloud Spanner DDL file (repeatable; consumed in order)",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Use the built-in sample schema",
    )
    parser.add_argument(
        "-f", "--format",
        type=_format,
        default=None,
        help="Output format: mermaid (default), mmd or json",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the diagram to a file instead of stdout",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    args = parser.parse_intermixed_args(argv)
    args.input_paths = [*args.input_paths, *args.paths]
    return args


def resolve_schema(args: argparse.Namespace) -> models.Schema:
    """Load the schema from the one source the arguments name."""
    chosen = int(args.sample) + int(bool(args.input_paths)) + int(bool(args.ddl_paths))
    if chosen == 0:
        raise ValueError(
            "No schema input provided. Use --sample, --input path/to/schema.json, "
            "or --ddl path/to/schema.sql."
        )
    if chosen > 1:
        raise ValueError("Use only one schema source: --sample, --input, or --ddl.")

    if args.sample:
        return sample_schema()
    if args.ddl_paths:
        return load_schema_from_ddl_paths(args.ddl_paths)
    return load_schema_from_json_paths(args.input_paths)


def format_diagram(model: DiagramModel, fmt: str, indent: int = 2) -> str:
    if fmt == "json":
        return dump_json(model.to_dict(), pretty=True, indent=indent)
    return render_mermaid(model)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = get_config()
    level = "DEBUG" if args.verbose else config.logging.level
    logging.basicConfig(level=getattr(logging, level), format="%(message)s")

    try:
        schema = resolve_schema(args)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    model = build_diagram(schema)
    fmt = _format(args.format or config.diagram.format)
    text = format_diagram(model, fmt, config.output.indent)

    if args.output:
        written = save_text(args.output, text)
        logger.info("Wrote %s", written)
        print(f"Diagram written to {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
