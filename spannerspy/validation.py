"""Validate schema documents against the bundled JSON Schema."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "spanner_schema.json"


def load_schema() -> dict:
    """Load the canonical schema-document JSON Schema."""
    with open(SCHEMA_PATH) as f:
        return json.load(f)


def validate_schema_document(doc: Any, semantic: bool = True) -> list[str]:
    """Validate a decoded schema document.

    Returns a list of error messages. Empty list means valid. Semantic checks
    only run once the document is structurally valid.
    """
    validator = jsonschema.Draft202012Validator(load_schema())
    errors = []
    for error in sorted(validator.iter_errors(doc), key=lambda e: [str(p) for p in e.path]):
        path = ".".join(str(p) for p in error.absolute_path)
        errors.append(f"{path}: {error.message}" if path else error.message)

    if errors or not semantic:
        return errors

    # Additional semantic checks beyond JSON Schema
    tables = doc.get("tables", [])
    table_names = {t["name"] for t in tables}

    for i, table in enumerate(tables):
        column_names = {c["name"] for c in table["columns"]}
        for key in table.get("primaryKey", []):
            if key not in column_names:
                errors.append(f"tables.{i}.primaryKey: column '{key}' not found in table '{table['name']}'")
        parent = table.get("interleavedIn")
        if parent and parent not in table_names:
            errors.append(f"tables.{i}.interleavedIn: table '{parent}' not found in tables")

    for i, fk in enumerate(doc.get("foreignKeys", [])):
        for field in ("referencingTable", "referencedTable"):
            if fk[field] not in table_names:
                errors.append(f"foreignKeys.{i}.{field}: table '{fk[field]}' not found in tables")

    if errors:
        logger.debug("Schema document has %d semantic issue(s)", len(errors))
    return errors
