"""Cloud Spanner DDL to relational schema builder.

Parses CREATE TABLE / ALTER TABLE / CREATE INDEX statements, folds them into
a schema of tables, foreign keys and indexes, and renders that schema as a
JSON document or an ER diagram.
"""

__version__ = "0.3.0"

from spannerspy.builder import SchemaBuilder, build_schema
from spannerspy.diagram import DiagramModel, build_diagram
from spannerspy.errors import (
    BuildError,
    ColumnTypeError,
    DuplicateTableError,
    MissingNameError,
    SchemaDocumentError,
    SchemaError,
    SourceError,
    UnknownTableError,
)
from spannerspy.loader import (
    load_schema_from_ddl,
    load_schema_from_ddl_paths,
    load_schema_from_json,
    load_schema_from_json_paths,
    load_schema_from_json_strings,
)
from spannerspy.mermaid import render_mermaid
from spannerspy.models import Column, ForeignKey, Index, IndexKey, RowDeletionPolicy, Schema, Table
from spannerspy.parser import DDLParser, parse_ddl

__all__ = [
    "BuildError",
    "Column",
    "ColumnTypeError",
    "DDLParser",
    "DiagramModel",
    "DuplicateTableError",
    "ForeignKey",
    "Index",
    "IndexKey",
    "MissingNameError",
    "RowDeletionPolicy",
    "Schema",
    "SchemaBuilder",
    "SchemaDocumentError",
    "SchemaError",
    "SourceError",
    "Table",
    "UnknownTableError",
    "__version__",
    "build_diagram",
    "build_schema",
    "load_schema_from_ddl",
    "load_schema_from_ddl_paths",
    "load_schema_from_json",
    "load_schema_from_json_paths",
    "load_schema_from_json_strings",
    "parse_ddl",
    "render_mermaid",
]
