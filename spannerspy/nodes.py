"""Statement nodes consumed by the schema builder.

These frozen dataclasses are the minimal shape of a parsed Cloud Spanner DDL
statement.  The parser in :mod:`spannerspy.parser` produces them, but any
other statement source can construct them directly.  The builder only reads
them and never keeps a reference past a single ``consume`` call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    """Sort direction of a key column."""

    ASC = "ASC"
    DESC = "DESC"


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ident:
    name: str

    def sql(self) -> str:
        return self.name


@dataclass(frozen=True)
class Path:
    """A dotted name such as ``Users`` or ``analytics.Events``."""

    idents: tuple[Ident, ...] = ()

    def sql(self) -> str:
        return ".".join(i.sql() for i in self.idents)


# ---------------------------------------------------------------------------
# Integer values (type sizes, row deletion policy days)
# ---------------------------------------------------------------------------


class IntValue:
    def sql(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class IntLiteral(IntValue):
    value: str

    def sql(self) -> str:
        return self.value


@dataclass(frozen=True)
class Param(IntValue):
    name: str

    def sql(self) -> str:
        return f"@{self.name}"


@dataclass(frozen=True)
class CastIntValue(IntValue):
    expr: IntValue

    def sql(self) -> str:
        return f"CAST({self.expr.sql()} AS INT64)"


# ---------------------------------------------------------------------------
# Column types
# ---------------------------------------------------------------------------


class SchemaType:
    """Base class for declared column types."""

    def sql(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class ScalarSchemaType(SchemaType):
    name: str

    def sql(self) -> str:
        return self.name


@dataclass(frozen=True)
class SizedSchemaType(SchemaType):
    """``STRING(36)``, ``BYTES(MAX)`` and friends."""

    name: str
    max: bool = False
    size: IntValue | None = None

    def sql(self) -> str:
        size = "MAX" if self.max or self.size is None else self.size.sql()
        return f"{self.name}({size})"


@dataclass(frozen=True)
class ArraySchemaType(SchemaType):
    item: SchemaType
    vector_length: IntValue | None = None

    def sql(self) -> str:
        text = f"ARRAY<{self.item.sql()}>"
        if self.vector_length is not None:
            text += f"(vector_length=>{self.vector_length.sql()})"
        return text


@dataclass(frozen=True)
class NamedType(SchemaType):
    """A proto or enum type referenced by its dotted path."""

    path: tuple[Ident, ...] = ()

    def sql(self) -> str:
        return ".".join(i.sql() for i in self.path)


# ---------------------------------------------------------------------------
# Table pieces
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnDef:
    name: Ident
    type: SchemaType
    not_null: bool = False
    primary_key: bool = False
    hidden: bool = False
    default_sql: str = ""
    generated_sql: str = ""


@dataclass(frozen=True)
class IndexKey:
    name: Ident
    dir: Direction | None = None


class Constraint:
    """Base class for table constraint bodies."""


@dataclass(frozen=True)
class ForeignKey(Constraint):
    columns: tuple[Ident, ...]
    reference_table: Path
    reference_columns: tuple[Ident, ...] = ()
    on_delete: str = ""


@dataclass(frozen=True)
class Check(Constraint):
    expr_sql: str = ""


@dataclass(frozen=True)
class TableConstraint:
    constraint: Constraint
    name: Ident | None = None


@dataclass(frozen=True)
class Cluster:
    """``INTERLEAVE IN [PARENT] table [ON DELETE ...]``."""

    table_name: Path | None
    on_delete: str = ""
    enforced: bool = True


@dataclass(frozen=True)
class RowDeletionPolicy:
    """``OLDER_THAN(column, INTERVAL n DAY)``."""

    column_name: Ident | None
    num_days: IntValue | None = None


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


class Statement:
    """Base class for top-level DDL statements."""


@dataclass(frozen=True)
class CreateTable(Statement):
    name: Path | None
    columns: tuple[ColumnDef, ...] = ()
    primary_keys: tuple[IndexKey, ...] = ()
    table_constraints: tuple[TableConstraint, ...] = ()
    cluster: Cluster | None = None
    row_deletion_policy: RowDeletionPolicy | None = None
    if_not_exists: bool = False


@dataclass(frozen=True)
class Storing:
    columns: tuple[Ident, ...] = ()


@dataclass(frozen=True)
class InterleaveIn:
    table_name: Ident | None


@dataclass(frozen=True)
class CreateIndex(Statement):
    name: Path | None
    table_name: Path | None
    keys: tuple[IndexKey, ...] = ()
    storing: Storing | None = None
    interleave_in: InterleaveIn | None = None
    unique: bool = False
    null_filtered: bool = False
    if_not_exists: bool = False


@dataclass(frozen=True)
class OtherStatement(Statement):
    """Any statement that does not affect the relational model."""

    keyword: str
    text: str = ""


# ---------------------------------------------------------------------------
# ALTER TABLE
# ---------------------------------------------------------------------------


class TableAlteration:
    """Base class for the single alteration carried by ``ALTER TABLE``."""


@dataclass(frozen=True)
class AddColumn(TableAlteration):
    column: ColumnDef
    if_not_exists: bool = False


@dataclass(frozen=True)
class AddTableConstraint(TableAlteration):
    table_constraint: TableConstraint


@dataclass(frozen=True)
class DropColumn(TableAlteration):
    name: Ident | None


@dataclass(frozen=True)
class DropConstraint(TableAlteration):
    name: Ident | None


@dataclass(frozen=True)
class SetInterleaveIn(TableAlteration):
    table_name: Path | None
    on_delete: str = ""


@dataclass(frozen=True)
class AddRowDeletionPolicy(TableAlteration):
    row_deletion_policy: RowDeletionPolicy


@dataclass(frozen=True)
class ReplaceRowDeletionPolicy(TableAlteration):
    row_deletion_policy: RowDeletionPolicy


@dataclass(frozen=True)
class DropRowDeletionPolicy(TableAlteration):
    pass


@dataclass(frozen=True)
class AlterColumn(TableAlteration):
    name: Ident
    text: str = ""


@dataclass(frozen=True)
class SetOnDelete(TableAlteration):
    on_delete: str = ""


@dataclass(frozen=True)
class SetOptions(TableAlteration):
    text: str = ""


@dataclass(frozen=True)
class OtherAlteration(TableAlteration):
    """An alteration that does not affect the relational model."""

    text: str = ""


@dataclass(frozen=True)
class AlterTable(Statement):
    name: Path | None
    alteration: TableAlteration
