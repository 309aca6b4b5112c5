"""Incremental schema builder.

Folds an ordered stream of DDL statement nodes into a relational schema.
Each statement either mutates the in-progress model or raises a
:class:`~spannerspy.errors.BuildError`; the first error ends the build.

Usage::

    builder = SchemaBuilder()
    for stmt in parse_ddl(text):
        builder.consume(stmt)
    schema = builder.snapshot()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace

from spannerspy import models
from spannerspy.errors import (
    ColumnTypeError,
    DuplicateTableError,
    MissingNameError,
    UnknownTableError,
)
from spannerspy.formatting import (
    convert_column,
    convert_index_keys,
    convert_row_deletion_policy,
    ident_list,
    ident_name,
    path_to_string,
)
from spannerspy.nodes import (
    AddColumn,
    AddRowDeletionPolicy,
    AddTableConstraint,
    AlterTable,
    CreateIndex,
    CreateTable,
    DropColumn,
    DropConstraint,
    DropRowDeletionPolicy,
    ForeignKey,
    ReplaceRowDeletionPolicy,
    SetInterleaveIn,
    Statement,
    TableAlteration,
    TableConstraint,
)

logger = logging.getLogger(__name__)


def collect_primary_keys(stmt: CreateTable) -> list[str]:
    """Explicit PRIMARY KEY clause first, then inline primary-key columns.

    Explicit order is kept and names are deduplicated, first occurrence wins.
    """
    keys: dict[str, None] = {}
    for key in stmt.primary_keys:
        name = ident_name(key.name)
        if name:
            keys.setdefault(name, None)
    for col in stmt.columns:
        if col.primary_key:
            name = ident_name(col.name)
            if name:
                keys.setdefault(name, None)
    return list(keys)


def table_constraint_to_foreign_key(owner: str, constraint: TableConstraint) -> models.ForeignKey | None:
    """Return the foreign key described by *constraint*, or None for other constraints."""
    fk = constraint.constraint
    if not isinstance(fk, ForeignKey):
        return None
    return models.ForeignKey(
        name=ident_name(constraint.name),
        referencing_table=owner,
        referencing_columns=ident_list(fk.columns),
        referenced_table=path_to_string(fk.reference_table),
        referenced_columns=ident_list(fk.reference_columns),
    )


class SchemaBuilder:
    """Stateful fold over DDL statements.

    A builder owns its table index, foreign keys, indexes and the counter used
    to name anonymous foreign keys.  Builders share nothing, so independent
    builds may run side by side.
    """

    def __init__(self) -> None:
        self.tables: list[models.Table] = []
        self._index: dict[str, models.Table] = {}
        self.foreign_keys: list[models.ForeignKey] = []
        self.indexes: list[models.Index] = []
        self._fk_counter = 0

    # -- public API ---------------------------------------------------------

    def consume(self, stmt: Statement) -> None:
        """Apply one statement.  Statements that do not shape the model are ignored."""
        handlers: dict[type, Callable[[Statement], None]] = {
            CreateTable: self._handle_create_table,
            AlterTable: self._handle_alter_table,
            CreateIndex: self._handle_create_index,
        }
        handler = handlers.get(type(stmt))
        if handler is None:
            logger.debug("Ignoring %s statement", type(stmt).__name__)
            return
        handler(stmt)

    def consume_all(self, statements: Iterable[Statement]) -> SchemaBuilder:
        for stmt in statements:
            self.consume(stmt)
        return self

    def snapshot(self) -> models.Schema:
        """Copy the current state into a schema that shares no lists with the builder."""
        tables = []
        for tbl in self.tables:
            policy = tbl.row_deletion_policy
            tables.append(models.Table(
                name=tbl.name,
                columns=[replace(c) for c in tbl.columns],
                primary_key=list(tbl.primary_key),
                interleaved_in=tbl.interleaved_in,
                comment=tbl.comment,
                row_deletion_policy=replace(policy) if policy is not None else None,
            ))

        foreign_keys = [
            replace(
                fk,
                referencing_columns=list(fk.referencing_columns),
                referenced_columns=list(fk.referenced_columns),
            )
            for fk in self.foreign_keys
        ]

        indexes = [
            replace(
                idx,
                columns=[replace(k) for k in idx.columns],
                storing=list(idx.storing),
            )
            for idx in self.indexes
        ]

        return models.Schema(tables=tables, foreign_keys=foreign_keys, indexes=indexes)

    # -- CREATE TABLE -------------------------------------------------------

    def _handle_create_table(self, stmt: CreateTable) -> None:
        name = path_to_string(stmt.name)
        if not name:
            raise MissingNameError("CREATE TABLE is missing a name")
        if name in self._index:
            raise DuplicateTableError(name)

        table = models.Table(name=name)
        for col_def in stmt.columns:
            try:
                table.columns.append(convert_column(col_def))
            except (ValueError, TypeError, NotImplementedError) as exc:
                raise ColumnTypeError(name, ident_name(col_def.name), exc) from exc

        table.primary_key = collect_primary_keys(stmt)

        if stmt.row_deletion_policy is not None:
            table.row_deletion_policy = convert_row_deletion_policy(stmt.row_deletion_policy)

        if stmt.cluster is not None and stmt.cluster.table_name is not None:
            table.interleaved_in = path_to_string(stmt.cluster.table_name)

        for constraint in stmt.table_constraints:
            fk = table_constraint_to_foreign_key(name, constraint)
            if fk is not None:
                self._add_foreign_key(fk)

        self.tables.append(table)
        self._index[name] = table
        logger.debug("Created table %s with %d column(s)", name, len(table.columns))

    # -- ALTER TABLE --------------------------------------------------------

    def _handle_alter_table(self, stmt: AlterTable) -> None:
        name = path_to_string(stmt.name)
        table = self._index.get(name)
        if table is None:
            raise UnknownTableError(name)

        alt: TableAlteration = stmt.alteration
        if isinstance(alt, AddColumn):
            try:
                table.columns.append(convert_column(alt.column))
            except (ValueError, TypeError, NotImplementedError) as exc:
                col_name = ident_name(alt.column.name)
                raise ColumnTypeError(
                    name, col_name, exc, context=f"ALTER TABLE {name} ADD COLUMN {col_name}",
                ) from exc
        elif isinstance(alt, AddTableConstraint):
            fk = table_constraint_to_foreign_key(name, alt.table_constraint)
            if fk is not None:
                self._add_foreign_key(fk)
        elif isinstance(alt, DropColumn):
            drop_name = ident_name(alt.name)
            if drop_name:
                table.columns = [c for c in table.columns if c.name != drop_name]
                table.primary_key = [k for k in table.primary_key if k != drop_name]
        elif isinstance(alt, DropConstraint):
            self._drop_foreign_key(ident_name(alt.name))
        elif isinstance(alt, SetInterleaveIn):
            table.interleaved_in = path_to_string(alt.table_name)
        elif isinstance(alt, (AddRowDeletionPolicy, ReplaceRowDeletionPolicy)):
            table.row_deletion_policy = convert_row_deletion_policy(alt.row_deletion_policy)
        elif isinstance(alt, DropRowDeletionPolicy):
            table.row_deletion_policy = None
        else:
            logger.debug("Ignoring %s on table %s", type(alt).__name__, name)

    # -- CREATE INDEX -------------------------------------------------------

    def _handle_create_index(self, stmt: CreateIndex) -> None:
        name = path_to_string(stmt.name)
        if not name:
            raise MissingNameError("CREATE INDEX is missing a name")

        table_name = path_to_string(stmt.table_name)
        if not table_name:
            raise MissingNameError(f"CREATE INDEX {name} is missing a table name")

        index = models.Index(
            name=name,
            table=table_name,
            columns=convert_index_keys(stmt.keys),
            is_unique=stmt.unique,
            is_null_filtered=stmt.null_filtered,
        )
        if stmt.storing is not None:
            index.storing = ident_list(stmt.storing.columns)
        if stmt.interleave_in is not None and stmt.interleave_in.table_name is not None:
            index.interleaved_in = ident_name(stmt.interleave_in.table_name)

        self.indexes.append(index)

    # -- foreign keys -------------------------------------------------------

    def _add_foreign_key(self, fk: models.ForeignKey) -> None:
        if not fk.name:
            fk.name = self._generate_foreign_key_name(fk)
        self.foreign_keys.append(fk)

    def _generate_foreign_key_name(self, fk: models.ForeignKey) -> str:
        suffix = "_".join(fk.referencing_columns)
        if not suffix:
            suffix = f"ref_{self._fk_counter}"
        self._fk_counter += 1
        return f"{fk.referencing_table}_{suffix}_fk"

    def _drop_foreign_key(self, name: str) -> None:
        if not name:
            return
        self.foreign_keys = [fk for fk in self.foreign_keys if fk.name != name]


def build_schema(statements: Iterable[Statement]) -> models.Schema:
    """Fold *statements* into a fresh builder and return its snapshot."""
    return SchemaBuilder().consume_all(statements).snapshot()
