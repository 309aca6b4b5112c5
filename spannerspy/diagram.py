"""Diagram model: tables as nodes, foreign keys and interleaving as edges."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from spannerspy import models

INTERLEAVE_LABEL = "INTERLEAVED IN"


@dataclass
class DiagramNode:
    id: str
    label: str
    fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "fields": list(self.fields)}


@dataclass
class DiagramEdge:
    source: str
    target: str
    label: str = ""

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"from": self.source, "to": self.target}
        if self.label:
            d["label"] = self.label
        return d


@dataclass
class DiagramModel:
    nodes: list[DiagramNode] = field(default_factory=list)
    edges: list[DiagramEdge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


def format_field(column: models.Column, *, primary_key: bool) -> str:
    """``*Id: INT64!`` style label for one column."""
    type_text = f"{column.type}[]" if column.is_array else column.type
    nullable = "!" if column.is_nullable is False else "?"
    prefix = "*" if primary_key else ""
    return f"{prefix}{column.name}: {type_text}{nullable}"


def build_diagram(schema: models.Schema) -> DiagramModel:
    """One node per table, then one edge per foreign key and per interleaved table."""
    model = DiagramModel()
    for table in schema.tables:
        keys = set(table.primary_key)
        model.nodes.append(DiagramNode(
            id=table.name,
            label=table.name,
            fields=[format_field(c, primary_key=c.name in keys) for c in table.columns],
        ))

    for fk in schema.foreign_keys:
        model.edges.append(DiagramEdge(fk.referencing_table, fk.referenced_table, fk.name))

    for table in schema.tables:
        if table.interleaved_in:
            model.edges.append(DiagramEdge(table.name, table.interleaved_in, INTERLEAVE_LABEL))

    return model
