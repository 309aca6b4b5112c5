"""Render a diagram model as a Mermaid ``erDiagram``."""

from __future__ import annotations

import re

from spannerspy.diagram import DiagramModel

_UNSAFE_ID = re.compile(r"[^A-Za-z0-9_]")


def mermaid_id(value: str) -> str:
    return _UNSAFE_ID.sub("_", value)


def render_mermaid(model: DiagramModel) -> str:
    lines = ["erDiagram"]

    for node in model.nodes:
        lines.append(f"  {mermaid_id(node.id)} {{")
        lines.extend(f"    {f}" for f in node.fields)
        lines.append("  }")

    for edge in model.edges:
        label = f" : {edge.label}" if edge.label else ""
        lines.append(f"  {mermaid_id(edge.source)} }}o--|| {mermaid_id(edge.target)}{label}")

    return "\n".join(lines)
