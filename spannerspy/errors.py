"""Exception taxonomy for schema parsing and building.

Every error is a ``ValueError`` so callers that only care about "bad input"
can catch one type.  The builder raises the first error it meets and never
recovers; only the CLI and MCP shells turn errors into text.
"""

from __future__ import annotations


class SchemaError(ValueError):
    """Base class for all spannerspy input errors."""


class SourceError(SchemaError):
    """Malformed DDL text reported by the statement source."""

    def __init__(self, message: str, source: str = "", line: int = 0, col: int = 0) -> None:
        self.source = source
        self.line = line
        self.col = col
        self.reason = message
        location = source or "<input>"
        if line:
            location = f"{location}:{line}:{col}"
        super().__init__(f"syntax error: {location}: {message}")


class BuildError(SchemaError):
    """Base class for errors raised while folding statements into a schema."""


class MissingNameError(BuildError):
    """CREATE TABLE or CREATE INDEX without a resolvable name."""


class DuplicateTableError(BuildError):
    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"table {table!r} already exists")


class UnknownTableError(BuildError):
    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"ALTER TABLE references unknown table {table!r}")


class ColumnTypeError(BuildError):
    """A column type could not be formatted."""

    def __init__(self, table: str, column: str, cause: Exception, *, context: str = "") -> None:
        self.table = table
        self.column = column
        self.cause = cause
        prefix = context or f"table {table} column {column}"
        super().__init__(f"{prefix}: {cause}")


class SchemaDocumentError(SchemaError):
    """A JSON schema document failed validation."""

    def __init__(self, errors: list[str], source: str = "") -> None:
        self.errors = list(errors)
        self.source = source
        where = f" in {source}" if source else ""
        detail = "; ".join(self.errors[:3])
        if len(self.errors) > 3:
            detail += f" (+{len(self.errors) - 3} more)"
        super().__init__(f"invalid schema document{where}: {detail}")
