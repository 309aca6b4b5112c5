"""Identifier and type formatting helpers.

Pure functions that turn statement nodes into the canonical strings stored in
the schema model.  Nothing here keeps state.
"""

from __future__ import annotations

from collections.abc import Iterable

from spannerspy import models
from spannerspy.nodes import (
    ArraySchemaType,
    CastIntValue,
    ColumnDef,
    Ident,
    IndexKey,
    IntLiteral,
    IntValue,
    NamedType,
    Param,
    Path,
    RowDeletionPolicy,
    ScalarSchemaType,
    SchemaType,
    SizedSchemaType,
)

# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


def ident_name(ident: Ident | None) -> str:
    """Return the identifier text, or an empty string for a missing name."""
    if ident is None:
        return ""
    return ident.name


def join_idents(idents: Iterable[Ident | None]) -> str:
    return ".".join(ident_name(i) for i in idents)


def path_to_string(path: Path | None) -> str:
    if path is None:
        return ""
    return join_idents(path.idents)


def ident_list(idents: Iterable[Ident | None]) -> list[str]:
    """Names of *idents* in order, skipping empty ones."""
    return [name for name in (ident_name(i) for i in idents) if name]


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def format_int_value(value: IntValue | None) -> str:
    """Render a size or day count: ``36``, ``@size``, or the inner value of a CAST."""
    if isinstance(value, IntLiteral):
        return value.value
    if isinstance(value, Param):
        return f"@{value.name}"
    if isinstance(value, CastIntValue):
        return format_int_value(value.expr)
    return ""


def format_schema_type(schema_type: SchemaType | None) -> tuple[str, bool]:
    """Return ``(type_name, is_array)`` for a declared column type.

    Arrays report their element's rendering with ``is_array`` set.  Nested
    arrays collapse to a single flag.  Types without an explicit mapping fall
    back to their own ``sql()`` text.
    """
    if schema_type is None:
        raise ValueError("column has no type")

    if isinstance(schema_type, ScalarSchemaType):
        return schema_type.name, False
    if isinstance(schema_type, SizedSchemaType):
        size = "MAX" if schema_type.max else format_int_value(schema_type.size)
        return f"{schema_type.name}({size})", False
    if isinstance(schema_type, ArraySchemaType):
        inner, _ = format_schema_type(schema_type.item)
        return inner, True
    if isinstance(schema_type, NamedType):
        return join_idents(schema_type.path), False
    return schema_type.sql(), False


# ---------------------------------------------------------------------------
# Node conversion
# ---------------------------------------------------------------------------


def convert_column(col_def: ColumnDef) -> models.Column:
    """Convert a column definition.  Raises when the type cannot be formatted."""
    type_name, is_array = format_schema_type(col_def.type)
    column = models.Column(name=ident_name(col_def.name), type=type_name, is_array=is_array)
    if col_def.primary_key or col_def.not_null:
        column.is_nullable = False
    return column


def convert_index_keys(keys: Iterable[IndexKey | None]) -> list[models.IndexKey]:
    result: list[models.IndexKey] = []
    for key in keys:
        if key is None:
            continue
        direction = key.dir.value if key.dir is not None else ""
        result.append(models.IndexKey(name=ident_name(key.name), direction=direction))
    return result


def convert_row_deletion_policy(node: RowDeletionPolicy | None) -> models.RowDeletionPolicy | None:
    """Return the policy model, or None when the policy names no column."""
    if node is None:
        return None
    name = ident_name(node.column_name)
    if not name:
        return None
    return models.RowDeletionPolicy(column_name=name, num_days=format_int_value(node.num_days))
