"""Tests for the incremental schema builder."""

from __future__ import annotations

import pytest

from spannerspy.builder import SchemaBuilder, build_schema, collect_primary_keys
from spannerspy.errors import (
    ColumnTypeError,
    DuplicateTableError,
    MissingNameError,
    UnknownTableError,
)
from spannerspy.nodes import (
    AddColumn,
    AddRowDeletionPolicy,
    AddTableConstraint,
    AlterColumn,
    AlterTable,
    ArraySchemaType,
    Check,
    Cluster,
    ColumnDef,
    CreateIndex,
    CreateTable,
    Direction,
    DropColumn,
    DropConstraint,
    DropRowDeletionPolicy,
    ForeignKey,
    Ident,
    IndexKey,
    InterleaveIn,
    IntLiteral,
    OtherAlteration,
    OtherStatement,
    Path,
    ReplaceRowDeletionPolicy,
    RowDeletionPolicy,
    ScalarSchemaType,
    SetInterleaveIn,
    SetOptions,
    SizedSchemaType,
    Storing,
    TableConstraint,
)
from spannerspy.parser import parse_ddl


def p(*names: str) -> Path:
    return Path(tuple(Ident(n) for n in names))


def col(name: str, type_name: str = "INT64", **kwargs) -> ColumnDef:
    return ColumnDef(Ident(name), ScalarSchemaType(type_name), **kwargs)


def fk(columns: tuple[str, ...], table: str, ref: tuple[str, ...] = (), name: str | None = None) -> TableConstraint:
    return TableConstraint(
        ForeignKey(
            columns=tuple(Ident(c) for c in columns),
            reference_table=p(table),
            reference_columns=tuple(Ident(c) for c in ref),
        ),
        name=Ident(name) if name else None,
    )


def ddl(text: str) -> dict:
    return build_schema(parse_ddl(text)).to_dict()


@pytest.fixture
def builder() -> SchemaBuilder:
    b = SchemaBuilder()
    b.consume(CreateTable(
        name=p("Users"),
        columns=(col("Id", not_null=True), col("Name", "STRING"), col("Email", "STRING")),
        primary_keys=(IndexKey(Ident("Id")),),
    ))
    return b


# ---------------------------------------------------------------------------
# Primary keys
# ---------------------------------------------------------------------------


class TestCollectPrimaryKeys:
    def test_explicit_then_inline(self) -> None:
        stmt = CreateTable(
            name=p("T"),
            columns=(col("A"), col("B"), col("C", primary_key=True)),
            primary_keys=(IndexKey(Ident("A")), IndexKey(Ident("B"))),
        )
        assert collect_primary_keys(stmt) == ["A", "B", "C"]

    def test_deduplicates_first_wins(self) -> None:
        stmt = CreateTable(
            name=p("T"),
            columns=(col("A", primary_key=True), col("B")),
            primary_keys=(IndexKey(Ident("B")), IndexKey(Ident("A")), IndexKey(Ident("B"))),
        )
        assert collect_primary_keys(stmt) == ["B", "A"]

    def test_no_keys(self) -> None:
        assert collect_primary_keys(CreateTable(name=p("T"), columns=(col("A"),))) == []


# ---------------------------------------------------------------------------
# CREATE TABLE
# ---------------------------------------------------------------------------


class TestCreateTable:
    def test_tables_in_creation_order(self) -> None:
        schema = build_schema([CreateTable(name=p(n)) for n in ("Zeta", "Alpha", "Mid")])
        assert [t.name for t in schema.tables] == ["Zeta", "Alpha", "Mid"]

    def test_empty_table(self) -> None:
        schema = build_schema([CreateTable(name=p("Empty"))])
        assert schema.to_dict() == {"tables": [{"name": "Empty", "columns": [], "primaryKey": []}]}

    def test_dotted_name(self) -> None:
        schema = build_schema([CreateTable(name=p("analytics", "Events"))])
        assert schema.tables[0].name == "analytics.Events"

    def test_missing_name(self) -> None:
        with pytest.raises(MissingNameError, match="CREATE TABLE is missing a name"):
            build_schema([CreateTable(name=None)])

    def test_duplicate_table_keeps_first(self, builder: SchemaBuilder) -> None:
        with pytest.raises(DuplicateTableError, match="'Users' already exists") as exc_info:
            builder.consume(CreateTable(name=p("Users"), columns=(col("Other"),)))
        assert exc_info.value.table == "Users"
        snapshot = builder.snapshot()
        assert len(snapshot.tables) == 1
        assert [c.name for c in snapshot.tables[0].columns] == ["Id", "Name", "Email"]

    def test_bad_column_type(self) -> None:
        stmt = CreateTable(name=p("T"), columns=(ColumnDef(Ident("Broken"), None),))
        with pytest.raises(ColumnTypeError, match="table T column Broken: column has no type"):
            build_schema([stmt])

    def test_interleave_and_policy(self) -> None:
        schema = build_schema([
            CreateTable(name=p("Parent"), columns=(col("Id"),)),
            CreateTable(
                name=p("Child"),
                columns=(col("Id"), col("CreatedAt", "TIMESTAMP")),
                cluster=Cluster(table_name=p("Parent"), on_delete="CASCADE"),
                row_deletion_policy=RowDeletionPolicy(Ident("CreatedAt"), IntLiteral("7")),
            ),
        ])
        child = schema.to_dict()["tables"][1]
        assert child["interleavedIn"] == "Parent"
        assert child["rowDeletionPolicy"] == {"columnName": "CreatedAt", "numDays": "7"}

    def test_check_constraint_ignored(self) -> None:
        schema = build_schema([
            CreateTable(name=p("T"), columns=(col("A"),), table_constraints=(TableConstraint(Check("A > 0")),)),
        ])
        assert schema.foreign_keys == []

    def test_array_of_sized_string(self) -> None:
        stmt = CreateTable(
            name=p("T"),
            columns=(ColumnDef(Ident("Tags"), ArraySchemaType(SizedSchemaType("STRING", size=IntLiteral("64")))),),
        )
        assert build_schema([stmt]).to_dict()["tables"][0]["columns"] == [
            {"name": "Tags", "type": "STRING(64)", "isArray": True},
        ]

    def test_explicit_key_does_not_imply_not_null(self) -> None:
        stmt = CreateTable(name=p("T"), columns=(col("Id"),), primary_keys=(IndexKey(Ident("Id")),))
        assert build_schema([stmt]).tables[0].columns[0].is_nullable is None


# ---------------------------------------------------------------------------
# Foreign keys
# ---------------------------------------------------------------------------


class TestForeignKeys:
    def test_named(self, builder: SchemaBuilder) -> None:
        builder.consume(CreateTable(
            name=p("Orders"),
            columns=(col("UserId", "STRING"),),
            table_constraints=(fk(("UserId",), "Users", ("Id",), name="FK_Orders_Users"),),
        ))
        assert builder.snapshot().foreign_keys[0].name == "FK_Orders_Users"

    def test_anonymous_named_after_columns(self, builder: SchemaBuilder) -> None:
        builder.consume(CreateTable(
            name=p("Orders"),
            columns=(col("A"), col("B")),
            table_constraints=(fk(("A", "B"), "Users", ("Id", "Name")),),
        ))
        assert builder.snapshot().foreign_keys[0].to_dict() == {
            "name": "Orders_A_B_fk",
            "referencingTable": "Orders",
            "referencingColumns": ["A", "B"],
            "referencedTable": "Users",
            "referencedColumns": ["Id", "Name"],
        }

    def test_zero_column_names_are_distinct(self, builder: SchemaBuilder) -> None:
        builder.consume(CreateTable(
            name=p("Orders"),
            table_constraints=(fk((), "Users"), fk((), "Users")),
        ))
        names = [f.name for f in builder.snapshot().foreign_keys]
        assert names == ["Orders_ref_0_fk", "Orders_ref_1_fk"]

    def test_counter_counts_every_anonymous_key(self, builder: SchemaBuilder) -> None:
        builder.consume(CreateTable(
            name=p("Orders"),
            columns=(col("UserId"),),
            table_constraints=(fk(("UserId",), "Users", ("Id",)), fk((), "Users")),
        ))
        assert [f.name for f in builder.snapshot().foreign_keys] == ["Orders_UserId_fk", "Orders_ref_1_fk"]

    def test_counter_is_per_builder(self) -> None:
        stmts = [CreateTable(name=p("T"), table_constraints=(fk((), "T"),))]
        assert build_schema(stmts).foreign_keys[0].name == "T_ref_0_fk"
        assert build_schema(stmts).foreign_keys[0].name == "T_ref_0_fk"

    def test_added_by_alter(self, builder: SchemaBuilder) -> None:
        builder.consume(AlterTable(p("Users"), AddTableConstraint(fk(("Email",), "Users", ("Id",), name="self_ref"))))
        assert builder.snapshot().foreign_keys[0].referencing_table == "Users"

    def test_drop_constraint_removes_all_matches(self, builder: SchemaBuilder) -> None:
        builder.consume(AlterTable(p("Users"), AddTableConstraint(fk(("Email",), "Users", ("Id",), name="dup"))))
        builder.consume(AlterTable(p("Users"), AddTableConstraint(fk(("Name",), "Users", ("Id",), name="keep"))))
        builder.consume(AlterTable(p("Users"), AddTableConstraint(fk(("Name",), "Users", ("Id",), name="dup"))))
        builder.consume(AlterTable(p("Users"), DropConstraint(Ident("dup"))))
        assert [f.name for f in builder.snapshot().foreign_keys] == ["keep"]

    def test_drop_constraint_without_name_is_noop(self, builder: SchemaBuilder) -> None:
        builder.consume(AlterTable(p("Users"), AddTableConstraint(fk(("Email",), "Users", ("Id",), name="x"))))
        builder.consume(AlterTable(p("Users"), DropConstraint(None)))
        assert len(builder.snapshot().foreign_keys) == 1


# ---------------------------------------------------------------------------
# ALTER TABLE
# ---------------------------------------------------------------------------


class TestAlterTable:
    def test_unknown_table(self, builder: SchemaBuilder) -> None:
        with pytest.raises(UnknownTableError, match="unknown table 'Ghost'"):
            builder.consume(AlterTable(p("Ghost"), AddColumn(col("X"))))

    def test_add_column(self, builder: SchemaBuilder) -> None:
        builder.consume(AlterTable(p("Users"), AddColumn(col("Age"))))
        assert builder.snapshot().tables[0].columns[-1].to_dict() == {"name": "Age", "type": "INT64"}

    def test_add_column_bad_type(self, builder: SchemaBuilder) -> None:
        with pytest.raises(ColumnTypeError, match="ALTER TABLE Users ADD COLUMN Bad: "):
            builder.consume(AlterTable(p("Users"), AddColumn(ColumnDef(Ident("Bad"), None))))

    def test_drop_column_removes_from_key(self, builder: SchemaBuilder) -> None:
        builder.consume(AlterTable(p("Users"), DropColumn(Ident("Id"))))
        users = builder.snapshot().tables[0]
        assert [c.name for c in users.columns] == ["Name", "Email"]
        assert users.primary_key == []

    def test_drop_column_preserves_order(self, builder: SchemaBuilder) -> None:
        builder.consume(AlterTable(p("Users"), DropColumn(Ident("Name"))))
        assert [c.name for c in builder.snapshot().tables[0].columns] == ["Id", "Email"]

    def test_drop_column_without_name_is_noop(self, builder: SchemaBuilder) -> None:
        builder.consume(AlterTable(p("Users"), DropColumn(None)))
        assert len(builder.snapshot().tables[0].columns) == 3

    def test_set_interleave(self, builder: SchemaBuilder) -> None:
        builder.consume(CreateTable(name=p("Child"), columns=(col("Id"),)))
        builder.consume(AlterTable(p("Child"), SetInterleaveIn(p("Users"), on_delete="CASCADE")))
        assert builder.snapshot().table("Child").interleaved_in == "Users"

    def test_row_deletion_policy_lifecycle(self, builder: SchemaBuilder) -> None:
        policy = RowDeletionPolicy(Ident("CreatedAt"), IntLiteral("30"))
        builder.consume(AlterTable(p("Users"), AddRowDeletionPolicy(policy)))
        assert builder.snapshot().tables[0].row_deletion_policy.num_days == "30"

        builder.consume(AlterTable(p("Users"), ReplaceRowDeletionPolicy(RowDeletionPolicy(Ident("CreatedAt"), IntLiteral("90")))))
        assert builder.snapshot().tables[0].row_deletion_policy.num_days == "90"

        builder.consume(AlterTable(p("Users"), DropRowDeletionPolicy()))
        assert "rowDeletionPolicy" not in builder.snapshot().to_dict()["tables"][0]

    def test_ignored_alterations(self, builder: SchemaBuilder) -> None:
        before = builder.snapshot().to_dict()
        builder.consume(AlterTable(p("Users"), AlterColumn(Ident("Name"), "STRING(MAX) NOT NULL")))
        builder.consume(AlterTable(p("Users"), SetOptions("deletion_protection = true")))
        builder.consume(AlterTable(p("Users"), OtherAlteration("RENAME TO People")))
        assert builder.snapshot().to_dict() == before


# ---------------------------------------------------------------------------
# CREATE INDEX
# ---------------------------------------------------------------------------


class TestCreateIndex:
    def test_full_index(self, builder: SchemaBuilder) -> None:
        builder.consume(CreateIndex(
            name=p("UsersByName"),
            table_name=p("Users"),
            keys=(IndexKey(Ident("Name"), Direction.DESC),),
            storing=Storing((Ident("Email"),)),
            interleave_in=InterleaveIn(Ident("Users")),
            unique=True,
            null_filtered=True,
        ))
        assert builder.snapshot().indexes[0].to_dict() == {
            "name": "UsersByName",
            "table": "Users",
            "columns": [{"name": "Name", "direction": "DESC"}],
            "storing": ["Email"],
            "interleavedIn": "Users",
            "isUnique": True,
            "isNullFiltered": True,
        }

    def test_index_on_unknown_table_is_recorded(self) -> None:
        schema = build_schema([CreateIndex(name=p("Idx"), table_name=p("Nowhere"))])
        assert schema.indexes[0].table == "Nowhere"

    def test_missing_name(self) -> None:
        with pytest.raises(MissingNameError, match="CREATE INDEX is missing a name"):
            build_schema([CreateIndex(name=None, table_name=p("Users"))])

    def test_missing_table(self) -> None:
        with pytest.raises(MissingNameError, match="CREATE INDEX Idx is missing a table name"):
            build_schema([CreateIndex(name=p("Idx"), table_name=None)])


# ---------------------------------------------------------------------------
# Snapshot and dispatch
# ---------------------------------------------------------------------------


class TestSnapshot:
    def test_other_statements_ignored(self, builder: SchemaBuilder) -> None:
        before = builder.snapshot().to_dict()
        builder.consume(OtherStatement("CREATE VIEW", "CREATE VIEW V AS SELECT 1"))
        assert builder.snapshot().to_dict() == before

    def test_snapshot_is_independent(self, builder: SchemaBuilder) -> None:
        snapshot = builder.snapshot()
        snapshot.tables[0].columns.clear()
        snapshot.tables[0].primary_key.append("Bogus")
        fresh = builder.snapshot()
        assert len(fresh.tables[0].columns) == 3
        assert fresh.tables[0].primary_key == ["Id"]

    def test_later_consume_does_not_touch_snapshot(self, builder: SchemaBuilder) -> None:
        snapshot = builder.snapshot()
        builder.consume(AlterTable(p("Users"), AddColumn(col("Age"))))
        assert len(snapshot.tables[0].columns) == 3

    def test_empty_builder(self) -> None:
        assert SchemaBuilder().snapshot().to_dict() == {"tables": []}


# ---------------------------------------------------------------------------
# End-to-end DDL scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    USERS = "CREATE TABLE Users (Id STRING(36) NOT NULL, Name STRING(100)) PRIMARY KEY (Id)"
    ORDERS = "CREATE TABLE Orders (UserId STRING(36), FOREIGN KEY (UserId) REFERENCES Users (Id))"

    def test_create_table(self) -> None:
        assert ddl(self.USERS) == {
            "tables": [{
                "name": "Users",
                "columns": [
                    {"name": "Id", "type": "STRING(36)", "isNullable": False},
                    {"name": "Name", "type": "STRING(100)"},
                ],
                "primaryKey": ["Id"],
            }],
        }

    def test_add_column(self) -> None:
        out = ddl(f"{self.USERS}; ALTER TABLE Users ADD COLUMN Age INT64")
        assert out["tables"][0]["columns"][-1] == {"name": "Age", "type": "INT64"}

    def test_anonymous_foreign_key(self) -> None:
        out = ddl(f"{self.USERS}; {self.ORDERS}")
        assert out["foreignKeys"] == [{
            "name": "Orders_UserId_fk",
            "referencingTable": "Orders",
            "referencingColumns": ["UserId"],
            "referencedTable": "Users",
            "referencedColumns": ["Id"],
        }]

    def test_drop_constraint_omits_foreign_keys(self) -> None:
        out = ddl(f"{self.USERS}; {self.ORDERS}; ALTER TABLE Orders DROP CONSTRAINT Orders_UserId_fk")
        assert "foreignKeys" not in out

    def test_create_index(self) -> None:
        out = ddl(f"{self.USERS}; CREATE INDEX UsersByName ON Users (Name) STORING (Id)")
        assert out["indexes"] == [{
            "name": "UsersByName",
            "table": "Users",
            "columns": [{"name": "Name"}],
            "storing": ["Id"],
        }]

    def test_composite_and_inline_keys(self) -> None:
        out = ddl("CREATE TABLE T (A INT64, B INT64, C INT64 PRIMARY KEY) PRIMARY KEY (A, B)")
        assert out["tables"][0]["primaryKey"] == ["A", "B", "C"]
