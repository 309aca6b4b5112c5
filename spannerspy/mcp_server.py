"""SpannerSpy MCP Server - schema and ER diagram tools for AI coding assistants.

This MCP server provides tools for:
- Rendering Mermaid ER diagrams (or JSON diagram models) from Spanner schemas
- Converting Cloud Spanner DDL into the relational schema JSON document

Usage (Claude Code):
    Add to ~/.claude/mcp.json:
    {
        "servers": {
            "spannerspy": {
                "command": "spannerspy-mcp"
            }
        }
    }

Usage (standalone for testing):
    spannerspy-mcp --transport=sse --port=8083
"""

from __future__ import annotations

import sys
from typing import Any

from fastmcp import FastMCP

from spannerspy import __version__, models
from spannerspy.cli import format_diagram
from spannerspy.diagram import build_diagram
from spannerspy.loader import (
    load_schema_from_ddl,
    load_schema_from_ddl_paths,
    load_schema_from_json,
    load_schema_from_json_paths,
    load_schema_from_json_strings,
)
from spannerspy.sample import sample_schema

mcp = FastMCP(
    name="spannerspy",
    version=__version__,
    instructions="Cloud Spanner schema tools: DDL to schema JSON, and schema to ER diagram",
)


# =============================================================================
# Plain functions behind the tools
# =============================================================================


def resolve_schema_source(
    sample: bool = False,
    schema_json: str | None = None,
    schema_jsons: list[str] | None = None,
    schema_paths: list[str] | None = None,
    ddl: str | None = None,
    ddl_paths: list[str] | None = None,
) -> models.Schema:
    """Load a schema from exactly one of the given sources."""
    sources = [
        name
        for name, value in (
            ("sample", sample),
            ("schema_json", schema_json),
            ("schema_jsons", schema_jsons),
            ("schema_paths", schema_paths),
            ("ddl", ddl),
            ("ddl_paths", ddl_paths),
        )
        if value
    ]
    if not sources:
        raise ValueError(
            "Provide one schema source: sample, schema_json, schema_jsons, "
            "schema_paths, ddl, or ddl_paths."
        )
    if len(sources) > 1:
        raise ValueError(f"Use exactly one schema source at a time (got {', '.join(sources)}).")

    if sample:
        return sample_schema()
    if schema_json:
        return load_schema_from_json(schema_json, "schema_json")
    if schema_jsons:
        return load_schema_from_json_strings(schema_jsons)
    if schema_paths:
        return load_schema_from_json_paths(schema_paths)
    if ddl:
        return load_schema_from_ddl(ddl, "<ddl>")
    return load_schema_from_ddl_paths(ddl_paths or [])


def render_diagram_payload(fmt: str = "mermaid", **sources: Any) -> str:
    if fmt not in ("mermaid", "mmd", "json"):
        raise ValueError(f"Unsupported format: {fmt}")
    model = build_diagram(resolve_schema_source(**sources))
    return format_diagram(model, "json" if fmt == "json" else "mermaid")


def parse_ddl_payload(ddl: str) -> dict[str, Any]:
    return load_schema_from_ddl(ddl, "<ddl>").to_dict()


# =============================================================================
# MCP TOOLS
# =============================================================================


@mcp.tool()
def render_diagram(
    format: str = "mermaid",
    sample: bool = False,
    schema_json: str | None = None,
    schema_jsons: list[str] | None = None,
    schema_paths: list[str] | None = None,
    ddl: str | None = None,
    ddl_paths: list[str] | None = None,
) -> str:
    """
    Convert a Cloud Spanner schema (JSON or DDL) into an ER diagram.

    Give exactly one schema source.

    Args:
        format: 'mermaid' (default) for erDiagram text, or 'json' for the diagram model
        sample: Use the built-in Singers/Albums sample schema
        schema_json: One schema JSON document as a string
        schema_jsons: Several schema JSON documents, merged in order
        schema_paths: Paths to schema JSON files, merged in order
        ddl: Cloud Spanner DDL text
        ddl_paths: Paths to DDL files, consumed in order

    Returns:
        The diagram as Mermaid text or pretty-printed JSON
    """
    return render_diagram_payload(
        format,
        sample=sample,
        schema_json=schema_json,
        schema_jsons=schema_jsons,
        schema_paths=schema_paths,
        ddl=ddl,
        ddl_paths=ddl_paths,
    )


@mcp.tool()
def parse_ddl(ddl: str) -> dict[str, Any]:
    """
    Parse Cloud Spanner DDL into the relational schema document.

    Args:
        ddl: CREATE TABLE / ALTER TABLE / CREATE INDEX statements separated by ';'

    Returns:
        tables, and foreignKeys / indexes when present
    """
    return parse_ddl_payload(ddl)


def main() -> None:
    """Entry point for the MCP server."""
    # Default to stdio transport (for Claude Code integration)
    transport = "stdio"
    port = 8083

    for arg in sys.argv[1:]:
        if arg.startswith("--transport="):
            transport = arg.split("=")[1]
        elif arg.startswith("--port="):
            port = int(arg.split("=")[1])

    if transport == "sse":
        mcp.run(transport="sse", port=port)
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
