from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Float, Index, Integer, MetaData, Table, Text

metadata = MetaData()

shows_table = Table(
    "shows",
    metadata,
    Column("id", Text, primary_key=True),
    Column("series_id", Text),
    Column("organizer_id", Text),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("location", Text),
    Column("address", Text),
    Column("start_date", DateTime(timezone=True), nullable=False),
    Column("end_date", DateTime(timezone=True)),
    Column("entry_fee", Float),
    Column("image_url", Text),
    Column("rating", Float),
    Column("status", Text, nullable=False),
    Column("latitude", Float),
    Column("longitude", Float),
    Column("categories", JSON),
    Column("features", JSON),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

ix_shows_start_date = Index("ix_shows_start_date", shows_table.c.start_date)
ix_shows_status = Index("ix_shows_status", shows_table.c.status)

schema_migrations_table = Table(
    "schema_migrations",
    metadata,
    Column("version", Integer, primary_key=True, autoincrement=False),
    Column("name", Text, nullable=False),
    Column("applied_at", DateTime(timezone=True), nullable=False),
)
