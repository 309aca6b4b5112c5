"""Cloud Spanner DDL statement source.

Turns DDL text into the statement nodes of :mod:`spannerspy.nodes`.  Lexing
is delegated to sqlglot's GoogleSQL tokenizer (the BigQuery dialect shares
Spanner's lexical rules: backtick identifiers, ``'``/``"`` strings, ``--``,
``#`` and ``/* */`` comments).  The parser on top is a small recursive-descent
reader covering CREATE TABLE, ALTER TABLE and CREATE INDEX; every other
statement is passed through as :class:`~spannerspy.nodes.OtherStatement`.

Usage::

    statements = parse_ddl(Path("schema.sql").read_text(), source="schema.sql")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlglot.dialects.bigquery import BigQuery
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from spannerspy.errors import SourceError
from spannerspy.nodes import (
    AddColumn,
    AddRowDeletionPolicy,
    AddTableConstraint,
    AlterColumn,
    AlterTable,
    ArraySchemaType,
    CastIntValue,
    Check,
    Cluster,
    ColumnDef,
    Constraint,
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
    IntValue,
    NamedType,
    OtherAlteration,
    OtherStatement,
    Param,
    Path,
    ReplaceRowDeletionPolicy,
    RowDeletionPolicy,
    ScalarSchemaType,
    SchemaType,
    SetInterleaveIn,
    SetOnDelete,
    SetOptions,
    SizedSchemaType,
    Statement,
    Storing,
    TableAlteration,
    TableConstraint,
)

logger = logging.getLogger(__name__)

SCALAR_TYPES: frozenset[str] = frozenset({
    "BOOL",
    "BYTES",
    "DATE",
    "FLOAT32",
    "FLOAT64",
    "INT64",
    "INTERVAL",
    "JSON",
    "NUMERIC",
    "STRING",
    "TIMESTAMP",
    "TOKENLIST",
    "UUID",
})

_STRING_TOKEN_TYPES: frozenset[str] = frozenset({
    "STRING",
    "RAW_STRING",
    "BYTE_STRING",
    "NATIONAL_STRING",
    "HEREDOC_STRING",
    "UNICODE_STRING",
    "BIT_STRING",
    "HEX_STRING",
})


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Token:
    kind: str  # "word", "ident", "string", "number", "punct", "eof"
    text: str
    line: int = 0
    col: int = 0

    @property
    def upper(self) -> str:
        return self.text.upper() if self.kind == "word" else ""

    def describe(self) -> str:
        if self.kind == "eof":
            return "end of statement"
        if self.kind == "string":
            return repr(self.text)
        if self.kind == "ident":
            return f"`{self.text}`"
        return self.text

    def render(self) -> str:
        """Reproduce the token as SQL text."""
        if self.kind == "string":
            return "'" + self.text.replace("'", "\\'") + "'"
        if self.kind == "ident":
            return f"`{self.text}`"
        return self.text


def _render(tokens: list[Token]) -> str:
    out: list[str] = []
    for tok in tokens:
        text = tok.render()
        if out and (text in (")", ",", ".") or out[-1].endswith(("(", ".", "@"))):
            out[-1] += text
        elif out and text == "(" and out[-1][-1:].isalnum():
            out[-1] += text
        else:
            out.append(text)
    return " ".join(out)


def tokenize(text: str, source: str = "<stdin>") -> list[Token]:
    """Lex *text* into parser tokens.

    Multi-word keyword tokens (``PRIMARY KEY``) are split back into words and
    runs of ``>`` are split so ``ARRAY<ARRAY<INT64>>`` closes twice.
    """
    try:
        raw_tokens = BigQuery().tokenize(text)
    except TokenError as exc:
        raise SourceError(str(exc), source) from exc

    tokens: list[Token] = []
    for raw in raw_tokens:
        line, col = raw.line, raw.col
        if raw.token_type == TokenType.IDENTIFIER:
            tokens.append(Token("ident", raw.text, line, col))
        elif raw.token_type.name in _STRING_TOKEN_TYPES:
            tokens.append(Token("string", raw.text, line, col))
        elif raw.token_type == TokenType.NUMBER:
            tokens.append(Token("number", raw.text, line, col))
        elif raw.text and not any(ch.isalnum() or ch in "_@" for ch in raw.text):
            if set(raw.text) <= {">"} or set(raw.text) <= {"<"}:
                tokens.extend(Token("punct", ch, line, col) for ch in raw.text)
            else:
                tokens.append(Token("punct", raw.text, line, col))
        else:
            # Keyword tokens carry upper-cased text; keep the source spelling.
            word_text = text[raw.start:raw.end + 1] or raw.text
            tokens.extend(Token("word", word, line, col) for word in word_text.split())
    return tokens


def split_statements(tokens: list[Token]) -> list[list[Token]]:
    """Split a token stream on ``;``, dropping empty statements."""
    statements: list[list[Token]] = []
    current: list[Token] = []
    for tok in tokens:
        if tok.kind == "punct" and tok.text == ";":
            if current:
                statements.append(current)
            current = []
            continue
        current.append(tok)
    if current:
        statements.append(current)
    return statements


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------


class _Cursor:
    """Position within a single statement's tokens."""

    def __init__(self, tokens: list[Token], source: str) -> None:
        self.tokens = tokens
        self.source = source
        self.pos = 0
        last = tokens[-1] if tokens else Token("eof", "")
        self._eof = Token("eof", "", last.line, last.col)

    def peek(self, offset: int = 0) -> Token:
        i = self.pos + offset
        return self.tokens[i] if i < len(self.tokens) else self._eof

    def next(self) -> Token:
        tok = self.peek()
        if tok.kind != "eof":
            self.pos += 1
        return tok

    def at_end(self) -> bool:
        return self.peek().kind == "eof"

    def rest(self) -> list[Token]:
        rest = self.tokens[self.pos:]
        self.pos = len(self.tokens)
        return rest

    def error(self, expected: str) -> SourceError:
        tok = self.peek()
        return SourceError(f"expected {expected}, but got {tok.describe()}", self.source, tok.line, tok.col)

    # -- keywords -------------------------------------------------------------

    def at_keyword(self, *words: str) -> bool:
        return all(self.peek(i).upper == w for i, w in enumerate(words))

    def accept_keyword(self, *words: str) -> bool:
        if self.at_keyword(*words):
            self.pos += len(words)
            return True
        return False

    def expect_keyword(self, *words: str) -> None:
        if not self.accept_keyword(*words):
            raise self.error(" ".join(words))

    # -- punctuation ----------------------------------------------------------

    def at_punct(self, text: str) -> bool:
        tok = self.peek()
        return tok.kind == "punct" and tok.text == text

    def accept_punct(self, text: str) -> bool:
        if self.at_punct(text):
            self.pos += 1
            return True
        return False

    def expect_punct(self, text: str) -> None:
        if not self.accept_punct(text):
            raise self.error(f"'{text}'")

    def balanced(self) -> list[Token]:
        """Consume a parenthesized group and return the tokens inside it."""
        self.expect_punct("(")
        depth = 1
        inner: list[Token] = []
        while True:
            tok = self.next()
            if tok.kind == "eof":
                raise self.error("')'")
            if tok.kind == "punct" and tok.text == "(":
                depth += 1
            elif tok.kind == "punct" and tok.text == ")":
                depth -= 1
                if depth == 0:
                    return inner
            inner.append(tok)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class DDLParser:
    """Recursive-descent reader for the Spanner DDL statements the builder consumes."""

    def parse(self, text: str, source: str = "<stdin>") -> list[Statement]:
        statements = [
            self._parse_statement(_Cursor(tokens, source))
            for tokens in split_statements(tokenize(text, source))
        ]
        logger.debug("Parsed %d statement(s) from %s", len(statements), source)
        return statements

    def _parse_statement(self, cur: _Cursor) -> Statement:
        if cur.at_keyword("CREATE", "TABLE"):
            stmt: Statement = self._parse_create_table(cur)
        elif cur.at_keyword("ALTER", "TABLE"):
            stmt = self._parse_alter_table(cur)
        elif self._at_create_index(cur):
            stmt = self._parse_create_index(cur)
        else:
            return self._parse_other(cur)

        if not cur.at_end():
            raise cur.error("end of statement")
        return stmt

    @staticmethod
    def _at_create_index(cur: _Cursor) -> bool:
        if not cur.at_keyword("CREATE"):
            return False
        i = 1
        while cur.peek(i).upper in ("UNIQUE", "NULL_FILTERED"):
            i += 1
        return cur.peek(i).upper == "INDEX"

    @staticmethod
    def _parse_other(cur: _Cursor) -> OtherStatement:
        words = [cur.peek().upper or cur.peek().text]
        if words[0] in ("CREATE", "ALTER", "DROP") and cur.peek(1).upper:
            words.append(cur.peek(1).upper)
        return OtherStatement(keyword=" ".join(words), text=_render(cur.rest()))

    # -- names ----------------------------------------------------------------

    @staticmethod
    def _ident(cur: _Cursor) -> Ident:
        tok = cur.peek()
        if tok.kind not in ("word", "ident"):
            raise cur.error("identifier")
        cur.next()
        return Ident(tok.text)

    def _path(self, cur: _Cursor) -> Path:
        idents = [self._ident(cur)]
        while cur.accept_punct("."):
            idents.append(self._ident(cur))
        return Path(tuple(idents))

    def _ident_list(self, cur: _Cursor) -> tuple[Ident, ...]:
        cur.expect_punct("(")
        idents: list[Ident] = []
        if not cur.at_punct(")"):
            idents.append(self._ident(cur))
            while cur.accept_punct(","):
                idents.append(self._ident(cur))
        cur.expect_punct(")")
        return tuple(idents)

    def _key_list(self, cur: _Cursor) -> tuple[IndexKey, ...]:
        cur.expect_punct("(")
        keys: list[IndexKey] = []
        if not cur.at_punct(")"):
            keys.append(self._key(cur))
            while cur.accept_punct(","):
                keys.append(self._key(cur))
        cur.expect_punct(")")
        return tuple(keys)

    def _key(self, cur: _Cursor) -> IndexKey:
        name = self._ident(cur)
        direction = None
        if cur.accept_keyword("ASC"):
            direction = Direction.ASC
        elif cur.accept_keyword("DESC"):
            direction = Direction.DESC
        return IndexKey(name=name, dir=direction)

    # -- values and types -----------------------------------------------------

    def _int_value(self, cur: _Cursor) -> IntValue:
        tok = cur.peek()
        if tok.kind == "number":
            cur.next()
            return IntLiteral(tok.text)
        if tok.kind in ("punct", "word") and tok.text == "@":
            cur.next()
            return Param(self._ident(cur).name)
        if tok.kind == "word" and tok.text.startswith("@") and len(tok.text) > 1:
            cur.next()
            return Param(tok.text[1:])
        if cur.accept_keyword("CAST"):
            cur.expect_punct("(")
            inner = self._int_value(cur)
            cur.expect_keyword("AS")
            self._ident(cur)
            cur.expect_punct(")")
            return CastIntValue(inner)
        raise cur.error("integer value")

    def _schema_type(self, cur: _Cursor) -> SchemaType:
        if cur.accept_keyword("ARRAY"):
            cur.expect_punct("<")
            item = self._schema_type(cur)
            cur.expect_punct(">")
            vector_length = None
            if cur.at_punct("(") and cur.peek(1).upper == "VECTOR_LENGTH":
                cur.next()
                cur.next()
                if not cur.accept_punct("=>"):
                    cur.expect_punct("=")
                    cur.expect_punct(">")
                vector_length = self._int_value(cur)
                cur.expect_punct(")")
            return ArraySchemaType(item=item, vector_length=vector_length)

        path = self._path(cur)
        if len(path.idents) > 1:
            return NamedType(path.idents)

        name = path.idents[0].name
        if cur.accept_punct("("):
            if cur.accept_keyword("MAX"):
                sized = SizedSchemaType(name=name.upper(), max=True)
            else:
                sized = SizedSchemaType(name=name.upper(), size=self._int_value(cur))
            cur.expect_punct(")")
            return sized
        if name.upper() in SCALAR_TYPES:
            return ScalarSchemaType(name.upper())
        return NamedType(path.idents)

    # -- CREATE TABLE ---------------------------------------------------------

    def _parse_create_table(self, cur: _Cursor) -> CreateTable:
        cur.expect_keyword("CREATE", "TABLE")
        if_not_exists = cur.accept_keyword("IF", "NOT", "EXISTS")
        name = self._path(cur)

        columns: list[ColumnDef] = []
        constraints: list[TableConstraint] = []
        cur.expect_punct("(")
        while not cur.at_punct(")"):
            constraint = self._table_constraint(cur)
            if constraint is not None:
                constraints.append(constraint)
            elif cur.at_keyword("SYNONYM"):
                cur.next()
                cur.balanced()
            else:
                columns.append(self._column_def(cur))
            if not cur.accept_punct(","):
                break
        cur.expect_punct(")")

        primary_keys: tuple[IndexKey, ...] = ()
        if cur.accept_keyword("PRIMARY", "KEY"):
            primary_keys = self._key_list(cur)

        cluster = None
        policy = None
        while cur.accept_punct(","):
            if cur.at_keyword("INTERLEAVE"):
                cluster = self._cluster(cur)
            elif cur.at_keyword("ROW", "DELETION", "POLICY"):
                policy = self._row_deletion_policy(cur)
            else:
                raise cur.error("INTERLEAVE or ROW DELETION POLICY")

        return CreateTable(
            name=name,
            columns=tuple(columns),
            primary_keys=primary_keys,
            table_constraints=tuple(constraints),
            cluster=cluster,
            row_deletion_policy=policy,
            if_not_exists=if_not_exists,
        )

    def _column_def(self, cur: _Cursor) -> ColumnDef:
        name = self._ident(cur)
        col_type = self._schema_type(cur)
        not_null = primary_key = hidden = False
        default_sql = generated_sql = ""

        while not (cur.at_end() or cur.at_punct(",") or cur.at_punct(")")):
            if cur.accept_keyword("NOT", "NULL"):
                not_null = True
            elif cur.accept_keyword("PRIMARY", "KEY"):
                primary_key = True
            elif cur.accept_keyword("HIDDEN"):
                hidden = True
            elif cur.accept_keyword("PLACEMENT", "KEY"):
                continue
            elif cur.accept_keyword("DEFAULT"):
                default_sql = _render(cur.balanced())
            elif cur.accept_keyword("AS"):
                generated_sql = _render(cur.balanced())
                cur.accept_keyword("STORED")
            elif cur.accept_keyword("OPTIONS"):
                cur.balanced()
            elif cur.accept_keyword("AUTO_INCREMENT"):
                continue
            elif cur.accept_keyword("GENERATED", "BY", "DEFAULT", "AS", "IDENTITY"):
                if cur.at_punct("("):
                    cur.balanced()
            else:
                raise cur.error("column option")

        return ColumnDef(
            name=name,
            type=col_type,
            not_null=not_null,
            primary_key=primary_key,
            hidden=hidden,
            default_sql=default_sql,
            generated_sql=generated_sql,
        )

    def _table_constraint(self, cur: _Cursor) -> TableConstraint | None:
        """Parse ``[CONSTRAINT name] FOREIGN KEY ...|CHECK ...``, or return None."""
        name = None
        if cur.accept_keyword("CONSTRAINT"):
            name = self._ident(cur)
        elif not (cur.at_keyword("FOREIGN", "KEY") or cur.at_keyword("CHECK")):
            return None

        body: Constraint
        if cur.at_keyword("FOREIGN", "KEY"):
            body = self._foreign_key(cur)
        elif cur.accept_keyword("CHECK"):
            body = Check(expr_sql=_render(cur.balanced()))
        else:
            raise cur.error("FOREIGN KEY or CHECK")
        return TableConstraint(constraint=body, name=name)

    def _foreign_key(self, cur: _Cursor) -> ForeignKey:
        cur.expect_keyword("FOREIGN", "KEY")
        columns = self._ident_list(cur)
        cur.expect_keyword("REFERENCES")
        ref_table = self._path(cur)
        ref_columns = self._ident_list(cur)
        on_delete = self._on_delete(cur)
        if not cur.accept_keyword("NOT", "ENFORCED"):
            cur.accept_keyword("ENFORCED")
        return ForeignKey(
            columns=columns,
            reference_table=ref_table,
            reference_columns=ref_columns,
            on_delete=on_delete,
        )

    @staticmethod
    def _on_delete(cur: _Cursor) -> str:
        if not cur.accept_keyword("ON", "DELETE"):
            return ""
        if cur.accept_keyword("CASCADE"):
            return "CASCADE"
        if cur.accept_keyword("NO", "ACTION"):
            return "NO ACTION"
        raise cur.error("CASCADE or NO ACTION")

    def _cluster(self, cur: _Cursor) -> Cluster:
        cur.expect_keyword("INTERLEAVE", "IN")
        enforced = cur.accept_keyword("PARENT")
        table_name = self._path(cur)
        return Cluster(table_name=table_name, on_delete=self._on_delete(cur), enforced=enforced)

    def _row_deletion_policy(self, cur: _Cursor) -> RowDeletionPolicy:
        cur.expect_keyword("ROW", "DELETION", "POLICY")
        cur.expect_punct("(")
        cur.expect_keyword("OLDER_THAN")
        cur.expect_punct("(")
        column = self._ident(cur)
        cur.expect_punct(",")
        cur.expect_keyword("INTERVAL")
        num_days = self._int_value(cur)
        cur.expect_keyword("DAY")
        cur.expect_punct(")")
        cur.expect_punct(")")
        return RowDeletionPolicy(column_name=column, num_days=num_days)

    # -- ALTER TABLE ----------------------------------------------------------

    def _parse_alter_table(self, cur: _Cursor) -> AlterTable:
        cur.expect_keyword("ALTER", "TABLE")
        name = self._path(cur)
        return AlterTable(name=name, alteration=self._alteration(cur))

    def _alteration(self, cur: _Cursor) -> TableAlteration:
        if cur.at_keyword("ADD", "ROW", "DELETION", "POLICY"):
            cur.next()
            return AddRowDeletionPolicy(self._row_deletion_policy(cur))
        if cur.at_keyword("REPLACE", "ROW", "DELETION", "POLICY"):
            cur.next()
            return ReplaceRowDeletionPolicy(self._row_deletion_policy(cur))
        if cur.accept_keyword("DROP", "ROW", "DELETION", "POLICY"):
            return DropRowDeletionPolicy()
        if cur.accept_keyword("ADD", "COLUMN"):
            if_not_exists = cur.accept_keyword("IF", "NOT", "EXISTS")
            return AddColumn(column=self._column_def(cur), if_not_exists=if_not_exists)
        if cur.at_keyword("ADD") and cur.peek(1).upper in ("CONSTRAINT", "FOREIGN", "CHECK"):
            cur.next()
            constraint = self._table_constraint(cur)
            if constraint is None:
                raise cur.error("table constraint")
            return AddTableConstraint(constraint)
        if cur.accept_keyword("DROP", "COLUMN"):
            return DropColumn(self._ident(cur))
        if cur.accept_keyword("DROP", "CONSTRAINT"):
            return DropConstraint(self._ident(cur))
        if cur.at_keyword("SET", "INTERLEAVE"):
            cur.next()
            cluster = self._cluster(cur)
            return SetInterleaveIn(table_name=cluster.table_name, on_delete=cluster.on_delete)
        if cur.at_keyword("SET", "ON", "DELETE"):
            cur.next()
            return SetOnDelete(self._on_delete(cur))
        if cur.accept_keyword("SET", "OPTIONS"):
            return SetOptions(_render(cur.balanced()))
        if cur.accept_keyword("ALTER", "COLUMN"):
            column = self._ident(cur)
            return AlterColumn(name=column, text=_render(cur.rest()))
        if cur.at_end():
            raise cur.error("table alteration")
        return OtherAlteration(_render(cur.rest()))

    # -- CREATE INDEX ---------------------------------------------------------

    def _parse_create_index(self, cur: _Cursor) -> CreateIndex:
        cur.expect_keyword("CREATE")
        unique = null_filtered = False
        while True:
            if cur.accept_keyword("UNIQUE"):
                unique = True
            elif cur.accept_keyword("NULL_FILTERED"):
                null_filtered = True
            else:
                break
        cur.expect_keyword("INDEX")
        if_not_exists = cur.accept_keyword("IF", "NOT", "EXISTS")
        name = self._path(cur)
        cur.expect_keyword("ON")
        table_name = self._path(cur)
        keys = self._key_list(cur)

        storing = None
        if cur.accept_keyword("STORING"):
            storing = Storing(self._ident_list(cur))

        if cur.accept_keyword("WHERE"):
            # Partial index filter (col IS NOT NULL [AND ...]); nothing to record.
            while not (cur.at_end() or cur.at_punct(",") or cur.at_keyword("OPTIONS")):
                cur.next()

        interleave_in = None
        if cur.accept_punct(","):
            cur.expect_keyword("INTERLEAVE", "IN")
            interleave_in = InterleaveIn(self._ident(cur))

        if cur.accept_keyword("OPTIONS"):
            cur.balanced()

        return CreateIndex(
            name=name,
            table_name=table_name,
            keys=keys,
            storing=storing,
            interleave_in=interleave_in,
            unique=unique,
            null_filtered=null_filtered,
            if_not_exists=if_not_exists,
        )


def parse_ddl(text: str, source: str = "<stdin>") -> list[Statement]:
    """Parse DDL text into statement nodes.  Raises SourceError on bad syntax."""
    return DDLParser().parse(text, source)
