"""``spannerspy-ddl``: convert Cloud Spanner DDL into the schema JSON document.

Usage::

    spannerspy-ddl schema.sql --pretty
    cat schema.sql | spannerspy-ddl
"""

from __future__ import annotations

import argparse
import logging
import sys

from spannerspy.config import get_config
from spannerspy.errors import SchemaError
from spannerspy.loader import load_schema_from_ddl
from spannerspy.output import dump_json

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="spannerspy-ddl",
        description="Parse Cloud Spanner DDL and print the relational schema as JSON.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        help="DDL file to read; '-' or omitted reads stdin",
    )
    parser.add_argument(
        "--input",
        dest="input_path",
        help="DDL file to read (same as the positional argument)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        default=None,
        help="Indent the JSON output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    args = parser.parse_args(argv)
    if args.path and args.input_path and args.path != args.input_path:
        parser.error("give the DDL file either positionally or with --input, not both")
    return args


def read_input(path: str | None) -> tuple[str, str]:
    """Return ``(text, source_name)``.

    Raises OSError when the file cannot be opened and UnicodeDecodeError when
    the file or stdin is not valid UTF-8.
    """
    if not path or path == "-":
        return sys.stdin.read(), "<stdin>"
    with open(path, encoding="utf-8") as f:
        return f.read(), path


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = get_config()
    level = "DEBUG" if args.verbose else config.logging.level
    logging.basicConfig(level=getattr(logging, level), format="%(message)s")

    path = args.input_path or args.path
    try:
        text, source = read_input(path)
    except (OSError, UnicodeDecodeError) as exc:
        reason = getattr(exc, "strerror", None) or exc
        print(f"error: cannot read {path or '<stdin>'}: {reason}", file=sys.stderr)
        return 1

    try:
        schema = load_schema_from_ddl(text, source)
    except SchemaError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    pretty = config.output.pretty if args.pretty is None else args.pretty
    print(dump_json(schema.to_dict(), pretty=pretty, indent=config.output.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
