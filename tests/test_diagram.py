"""Tests for the diagram model and Mermaid renderer."""

from __future__ import annotations

from spannerspy.diagram import DiagramEdge, DiagramModel, DiagramNode, build_diagram, format_field
from spannerspy.loader import load_schema_from_ddl
from spannerspy.mermaid import mermaid_id, render_mermaid
from spannerspy.models import Column
from spannerspy.sample import sample_schema


class TestFormatField:
    def test_primary_key_not_null(self) -> None:
        assert format_field(Column("Id", "INT64", is_nullable=False), primary_key=True) == "*Id: INT64!"

    def test_nullable_array(self) -> None:
        assert format_field(Column("Tags", "STRING(64)", is_array=True), primary_key=False) == "Tags: STRING(64)[]?"


class TestBuildDiagram:
    def test_sample(self) -> None:
        model = build_diagram(sample_schema())
        assert [n.id for n in model.nodes] == ["Singers", "Albums"]
        assert model.nodes[0].fields[0] == "*SingerId: INT64!"
        assert model.nodes[0].fields[1] == "FirstName: STRING?"
        assert [e.to_dict() for e in model.edges] == [
            {"from": "Albums", "to": "Singers", "label": "fk_albums_singers"},
            {"from": "Albums", "to": "Singers", "label": "INTERLEAVED IN"},
        ]

    def test_complex_pipeline(self, complex_ddl: str) -> None:
        model = build_diagram(load_schema_from_ddl(complex_ddl))
        all_types = next(n for n in model.nodes if n.id == "AllTypes")
        assert "*TenantId: INT64!" in all_types.fields
        assert "*TypeId: INT64!" in all_types.fields
        assert "StringArray: STRING(64)[]?" in all_types.fields

        auto_named = next(e for e in model.edges if e.label == "Orders_TenantId_TypeId_fk")
        assert (auto_named.source, auto_named.target) == ("Orders", "AllTypes")

        interleaved = {(e.source, e.target) for e in model.edges if e.label == "INTERLEAVED IN"}
        assert interleaved == {("AllTypes", "Tenants"), ("Orders", "Tenants")}

    def test_to_dict(self) -> None:
        d = build_diagram(sample_schema()).to_dict()
        assert set(d) == {"nodes", "edges"}
        assert d["nodes"][1] == {
            "id": "Albums",
            "label": "Albums",
            "fields": ["*SingerId: INT64!", "*AlbumId: INT64!", "AlbumTitle: STRING?", "ReleaseDate: DATE?"],
        }


class TestSampleSchema:
    def test_each_call_is_independent(self) -> None:
        first = sample_schema()
        first.tables[0].columns.clear()
        first.foreign_keys.clear()
        second = sample_schema()
        assert len(second.tables[0].columns) == 4
        assert second.foreign_keys[0].name == "fk_albums_singers"


class TestMermaid:
    def test_id_sanitized(self) -> None:
        assert mermaid_id("analytics.Events-2024") == "analytics_Events_2024"

    def test_render_sample(self) -> None:
        text = render_mermaid(build_diagram(sample_schema()))
        lines = text.splitlines()
        assert lines[0] == "erDiagram"
        assert lines[1:7] == [
            "  Singers {",
            "    *SingerId: INT64!",
            "    FirstName: STRING?",
            "    LastName: STRING!",
            "    CreatedAt: TIMESTAMP!",
            "  }",
        ]
        assert "  Albums }o--|| Singers : fk_albums_singers" in lines
        assert "  Albums }o--|| Singers : INTERLEAVED IN" in lines
        assert not text.endswith("\n")

    def test_edge_without_label(self) -> None:
        model = DiagramModel(
            nodes=[DiagramNode("a.b", "a.b")],
            edges=[DiagramEdge("a.b", "c")],
        )
        assert render_mermaid(model).splitlines() == ["erDiagram", "  a_b {", "  }", "  a_b }o--|| c"]

    def test_complex(self, complex_ddl: str) -> None:
        text = render_mermaid(build_diagram(load_schema_from_ddl(complex_ddl)))
        assert "AllTypes }o--|| Tenants : INTERLEAVED IN" in text
        assert "Orders }o--|| AllTypes : Orders_TenantId_TypeId_fk" in text
