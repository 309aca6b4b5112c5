"""Built-in Singers/Albums schema used by ``--sample`` and the MCP server."""

from __future__ import annotations

from spannerspy import models


def sample_schema() -> models.Schema:
    """Return a fresh copy of the sample schema."""
    return models.Schema(
        tables=[
            models.Table(
                name="Singers",
                primary_key=["SingerId"],
                columns=[
                    models.Column("SingerId", "INT64", is_nullable=False),
                    models.Column("FirstName", "STRING"),
                    models.Column("LastName", "STRING", is_nullable=False),
                    models.Column("CreatedAt", "TIMESTAMP", is_nullable=False),
                ],
            ),
            models.Table(
                name="Albums",
                primary_key=["SingerId", "AlbumId"],
                columns=[
                    models.Column("SingerId", "INT64", is_nullable=False),
                    models.Column("AlbumId", "INT64", is_nullable=False),
                    models.Column("AlbumTitle", "STRING"),
                    models.Column("ReleaseDate", "DATE"),
                ],
                interleaved_in="Singers",
            ),
        ],
        foreign_keys=[
            models.ForeignKey(
                name="fk_albums_singers",
                referencing_table="Albums",
                referencing_columns=["SingerId"],
                referenced_table="Singers",
                referenced_columns=["SingerId"],
            ),
        ],
    )
