"""Load schemas from DDL files or previously exported JSON documents.

DDL sources go through the parser and a single :class:`SchemaBuilder`, so a
later file may ALTER a table created by an earlier one.  JSON sources are
validated, normalized and merged in the order given.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from spannerspy import models
from spannerspy.builder import SchemaBuilder
from spannerspy.errors import DuplicateTableError, SchemaDocumentError
from spannerspy.parser import parse_ddl
from spannerspy.validation import validate_schema_document

logger = logging.getLogger(__name__)


def _read_text(path: str | Path) -> str:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Schema file not found: {path}")
    return path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------


def load_schema_from_ddl(text: str, source: str = "<stdin>") -> models.Schema:
    """Parse and build a schema from one DDL document."""
    schema = SchemaBuilder().consume_all(parse_ddl(text, source)).snapshot()
    logger.info(
        "Built %d table(s), %d foreign key(s), %d index(es) from %s",
        len(schema.tables), len(schema.foreign_keys), len(schema.indexes), source,
    )
    return schema


def load_schema_from_ddl_paths(paths: Iterable[str | Path]) -> models.Schema:
    """Build one schema from several DDL files consumed in order."""
    builder = SchemaBuilder()
    for path in paths:
        builder.consume_all(parse_ddl(_read_text(path), str(path)))
    schema = builder.snapshot()
    logger.info("Built %d table(s) from DDL files", len(schema.tables))
    return schema


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def normalize_schema_document(doc: dict[str, Any]) -> models.Schema:
    """Fill defaults a hand-written document may leave out.

    ``primaryKey`` defaults to ``[]``, ``isNullable: true`` collapses to the
    absent state, and unnamed foreign keys are named
    ``<referencingTable>_<referencedTable>``.
    """
    schema = models.Schema.from_dict(doc)
    for fk in schema.foreign_keys:
        if not fk.name:
            fk.name = f"{fk.referencing_table}_{fk.referenced_table}"
    return schema


def merge_schemas(schemas: Iterable[models.Schema]) -> models.Schema:
    """Concatenate schemas in order.  Table names must be unique across all inputs."""
    merged = models.Schema()
    seen: set[str] = set()
    for schema in schemas:
        for table in schema.tables:
            if table.name in seen:
                raise DuplicateTableError(table.name)
            seen.add(table.name)
            merged.tables.append(table)
        merged.foreign_keys.extend(schema.foreign_keys)
        merged.indexes.extend(schema.indexes)
    return merged


def load_schema_from_json(text: str, source: str = "") -> models.Schema:
    """Decode, validate and normalize one JSON schema document."""
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaDocumentError([f"invalid JSON: {exc}"], source) from exc

    errors = validate_schema_document(doc, semantic=False)
    if errors:
        raise SchemaDocumentError(errors, source)

    for issue in validate_schema_document(doc):
        logger.warning("%s: %s", source or "schema", issue)
    return normalize_schema_document(doc)


def load_schema_from_json_strings(texts: Iterable[str]) -> models.Schema:
    return merge_schemas(
        load_schema_from_json(text, f"schema #{i + 1}") for i, text in enumerate(texts)
    )


def load_schema_from_json_paths(paths: Iterable[str | Path]) -> models.Schema:
    return merge_schemas(load_schema_from_json(_read_text(p), str(p)) for p in paths)
