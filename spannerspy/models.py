"""Output schema model and its JSON wire layout.

Field names follow the camelCase layout consumed by the diagram tooling:
optional fields are omitted instead of being written as ``null``/``false``/
``[]``, and ``isNullable`` only ever appears as ``false``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Column:
    name: str
    type: str
    is_array: bool = False
    # None means "nullable or unknown"; only False is ever recorded.
    is_nullable: bool | None = None
    comment: str = ""

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.is_array:
            d["isArray"] = True
        if self.is_nullable is False:
            d["isNullable"] = False
        if self.comment:
            d["comment"] = self.comment
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Column:
        return cls(
            name=str(raw["name"]),
            type=str(raw["type"]),
            is_array=raw.get("isArray") is True,
            is_nullable=False if raw.get("isNullable") is False else None,
            comment=str(raw.get("comment") or ""),
        )


@dataclass
class RowDeletionPolicy:
    column_name: str
    num_days: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"columnName": self.column_name, "numDays": self.num_days}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> RowDeletionPolicy:
        return cls(
            column_name=str(raw["columnName"]),
            num_days=str(raw.get("numDays", "")),
        )


@dataclass
class Table:
    name: str
    columns: list[Column] = field(default_factory=list)
    primary_key: list[str] = field(default_factory=list)
    interleaved_in: str = ""
    comment: str = ""
    row_deletion_policy: RowDeletionPolicy | None = None

    def column(self, name: str) -> Column | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "primaryKey": list(self.primary_key),
        }
        if self.interleaved_in:
            d["interleavedIn"] = self.interleaved_in
        if self.comment:
            d["comment"] = self.comment
        if self.row_deletion_policy is not None:
            d["rowDeletionPolicy"] = self.row_deletion_policy.to_dict()
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Table:
        policy = raw.get("rowDeletionPolicy")
        return cls(
            name=str(raw["name"]),
            columns=[Column.from_dict(c) for c in raw.get("columns") or []],
            primary_key=[str(k) for k in raw.get("primaryKey") or []],
            interleaved_in=str(raw.get("interleavedIn") or ""),
            comment=str(raw.get("comment") or ""),
            row_deletion_policy=RowDeletionPolicy.from_dict(policy) if policy else None,
        )


@dataclass
class ForeignKey:
    name: str
    referencing_table: str
    referencing_columns: list[str] = field(default_factory=list)
    referenced_table: str = ""
    referenced_columns: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "referencingTable": self.referencing_table,
            "referencingColumns": list(self.referencing_columns),
            "referencedTable": self.referenced_table,
            "referencedColumns": list(self.referenced_columns),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ForeignKey:
        return cls(
            name=str(raw.get("name") or ""),
            referencing_table=str(raw["referencingTable"]),
            referencing_columns=[str(c) for c in raw.get("referencingColumns") or []],
            referenced_table=str(raw["referencedTable"]),
            referenced_columns=[str(c) for c in raw.get("referencedColumns") or []],
        )


@dataclass
class IndexKey:
    name: str
    direction: str = ""

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name}
        if self.direction:
            d["direction"] = self.direction
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> IndexKey:
        return cls(name=str(raw["name"]), direction=str(raw.get("direction") or ""))


@dataclass
class Index:
    name: str
    table: str
    columns: list[IndexKey] = field(default_factory=list)
    storing: list[str] = field(default_factory=list)
    interleaved_in: str = ""
    is_unique: bool = False
    is_null_filtered: bool = False

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "table": self.table,
            "columns": [k.to_dict() for k in self.columns],
        }
        if self.storing:
            d["storing"] = list(self.storing)
        if self.interleaved_in:
            d["interleavedIn"] = self.interleaved_in
        if self.is_unique:
            d["isUnique"] = True
        if self.is_null_filtered:
            d["isNullFiltered"] = True
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Index:
        return cls(
            name=str(raw["name"]),
            table=str(raw["table"]),
            columns=[IndexKey.from_dict(k) for k in raw.get("columns") or []],
            storing=[str(c) for c in raw.get("storing") or []],
            interleaved_in=str(raw.get("interleavedIn") or ""),
            is_unique=raw.get("isUnique") is True,
            is_null_filtered=raw.get("isNullFiltered") is True,
        )


@dataclass
class Schema:
    """A complete relational snapshot of a Spanner database."""

    tables: list[Table] = field(default_factory=list)
    foreign_keys: list[ForeignKey] = field(default_factory=list)
    indexes: list[Index] = field(default_factory=list)

    def table(self, name: str) -> Table | None:
        for t in self.tables:
            if t.name == name:
                return t
        return None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"tables": [t.to_dict() for t in self.tables]}
        if self.foreign_keys:
            d["foreignKeys"] = [fk.to_dict() for fk in self.foreign_keys]
        if self.indexes:
            d["indexes"] = [idx.to_dict() for idx in self.indexes]
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Schema:
        """Build a schema from its JSON layout without validating it.

        See :func:`spannerspy.validation.validate_schema_document` for the
        structural checks the loaders run first.
        """
        return cls(
            tables=[Table.from_dict(t) for t in raw.get("tables") or []],
            foreign_keys=[ForeignKey.from_dict(fk) for fk in raw.get("foreignKeys") or []],
            indexes=[Index.from_dict(i) for i in raw.get("indexes") or []],
        )
