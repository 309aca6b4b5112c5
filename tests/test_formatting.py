"""Tests for identifier and type formatting helpers."""

from __future__ import annotations

import pytest

from spannerspy.formatting import (
    convert_column,
    convert_index_keys,
    convert_row_deletion_policy,
    format_int_value,
    format_schema_type,
    ident_list,
    ident_name,
    path_to_string,
)
from spannerspy.nodes import (
    ArraySchemaType,
    CastIntValue,
    ColumnDef,
    Direction,
    Ident,
    IndexKey,
    IntLiteral,
    NamedType,
    Param,
    Path,
    RowDeletionPolicy,
    ScalarSchemaType,
    SchemaType,
    SizedSchemaType,
)


def path(*names: str) -> Path:
    return Path(tuple(Ident(n) for n in names))


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


class TestNames:
    def test_ident_name_missing(self) -> None:
        assert ident_name(None) == ""

    def test_path_single(self) -> None:
        assert path_to_string(path("Users")) == "Users"

    def test_path_dotted(self) -> None:
        assert path_to_string(path("analytics", "Events")) == "analytics.Events"

    def test_path_missing(self) -> None:
        assert path_to_string(None) == ""

    def test_ident_list_skips_empty(self) -> None:
        assert ident_list([Ident("A"), None, Ident(""), Ident("B")]) == ["A", "B"]


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class TestFormatIntValue:
    def test_literal(self) -> None:
        assert format_int_value(IntLiteral("36")) == "36"

    def test_param(self) -> None:
        assert format_int_value(Param("size")) == "@size"

    def test_cast_unwraps(self) -> None:
        assert format_int_value(CastIntValue(CastIntValue(IntLiteral("7")))) == "7"

    def test_missing(self) -> None:
        assert format_int_value(None) == ""


class TestFormatSchemaType:
    def test_scalar(self) -> None:
        assert format_schema_type(ScalarSchemaType("INT64")) == ("INT64", False)

    def test_sized(self) -> None:
        assert format_schema_type(SizedSchemaType("STRING", size=IntLiteral("36"))) == ("STRING(36)", False)

    def test_sized_max(self) -> None:
        assert format_schema_type(SizedSchemaType("BYTES", max=True)) == ("BYTES(MAX)", False)

    def test_sized_param(self) -> None:
        assert format_schema_type(SizedSchemaType("STRING", size=Param("n"))) == ("STRING(@n)", False)

    def test_array_of_sized(self) -> None:
        t = ArraySchemaType(SizedSchemaType("STRING", size=IntLiteral("64")))
        assert format_schema_type(t) == ("STRING(64)", True)

    def test_nested_array_collapses(self) -> None:
        t = ArraySchemaType(ArraySchemaType(ScalarSchemaType("INT64")))
        assert format_schema_type(t) == ("INT64", True)

    def test_named_type(self) -> None:
        t = NamedType((Ident("examples"), Ident("music"), Ident("Genre")))
        assert format_schema_type(t) == ("examples.music.Genre", False)

    def test_unknown_type_uses_sql(self) -> None:
        class Tokens(SchemaType):
            def sql(self) -> str:
                return "TOKENLIST"

        assert format_schema_type(Tokens()) == ("TOKENLIST", False)

    def test_missing_type_raises(self) -> None:
        with pytest.raises(ValueError, match="no type"):
            format_schema_type(None)


# ---------------------------------------------------------------------------
# Node conversion
# ---------------------------------------------------------------------------


class TestConvertColumn:
    def test_nullable_by_default(self) -> None:
        col = convert_column(ColumnDef(Ident("Name"), ScalarSchemaType("STRING")))
        assert col.is_nullable is None
        assert col.to_dict() == {"name": "Name", "type": "STRING"}

    def test_not_null(self) -> None:
        col = convert_column(ColumnDef(Ident("Id"), ScalarSchemaType("INT64"), not_null=True))
        assert col.is_nullable is False

    def test_inline_primary_key_is_not_null(self) -> None:
        col = convert_column(ColumnDef(Ident("Id"), ScalarSchemaType("INT64"), primary_key=True))
        assert col.to_dict() == {"name": "Id", "type": "INT64", "isNullable": False}

    def test_array(self) -> None:
        col = convert_column(ColumnDef(Ident("Tags"), ArraySchemaType(ScalarSchemaType("STRING"))))
        assert col.to_dict() == {"name": "Tags", "type": "STRING", "isArray": True}


class TestConvertIndexKeys:
    def test_directions(self) -> None:
        keys = convert_index_keys([
            IndexKey(Ident("A")),
            IndexKey(Ident("B"), Direction.DESC),
            None,
            IndexKey(Ident("C"), Direction.ASC),
        ])
        assert [k.to_dict() for k in keys] == [
            {"name": "A"},
            {"name": "B", "direction": "DESC"},
            {"name": "C", "direction": "ASC"},
        ]

    def test_direction_compares_as_its_keyword(self) -> None:
        assert Direction("DESC") is Direction.DESC
        assert Direction.ASC == "ASC"
        assert convert_index_keys([IndexKey(Ident("A"), Direction.DESC)])[0].direction == "DESC"


class TestConvertRowDeletionPolicy:
    def test_policy(self) -> None:
        policy = convert_row_deletion_policy(RowDeletionPolicy(Ident("CreatedAt"), IntLiteral("30")))
        assert policy is not None
        assert policy.to_dict() == {"columnName": "CreatedAt", "numDays": "30"}

    def test_missing_column_name(self) -> None:
        assert convert_row_deletion_policy(RowDeletionPolicy(None, IntLiteral("30"))) is None

    def test_missing_policy(self) -> None:
        assert convert_row_deletion_policy(None) is None
