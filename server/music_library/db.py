"""Songs schema, engine construction and the full-text search predicate.

SQLite databases get an FTS5 external-content table kept in sync by
triggers. PostgreSQL databases get GIN expression indexes over
``to_tsvector('simple', column)``, and search goes through ``plainto_tsquery``.
Both give the same matching rule: every word of the search text must occur
in the column.
"""

import logging
import re

from sqlalchemy import (
    Column,
    ColumnElement,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    column,
    false,
    func,
    literal_column,
    select,
    table,
    text,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

logger = logging.getLogger(__name__)

metadata = MetaData()

songs = Table(
    "songs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("song_name", Text, nullable=False),
    Column("group_name", Text, nullable=False),
    Column("release_date", Text, nullable=False, server_default=""),
    Column("lyrics", Text, nullable=False, server_default=""),
    Column("link", Text, nullable=False, server_default=""),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("song_name", "group_name", name="songs_song_name_group_name_key"),
)

SEARCHABLE_COLUMNS = ("song_name", "group_name", "release_date", "lyrics", "link")

_songs_fts = table("songs_fts", column("rowid"))

_FTS_COLUMN_LIST = ", ".join(SEARCHABLE_COLUMNS)
_NEW_VALUES = ", ".join(f"new.{name}" for name in SEARCHABLE_COLUMNS)
_OLD_VALUES = ", ".join(f"old.{name}" for name in SEARCHABLE_COLUMNS)

_SQLITE_FTS_DDL = (
    f"CREATE VIRTUAL TABLE IF NOT EXISTS songs_fts USING fts5("
    f"{_FTS_COLUMN_LIST}, content='songs', content_rowid='id')",
    f"CREATE TRIGGER IF NOT EXISTS songs_fts_ai AFTER INSERT ON songs BEGIN "
    f"INSERT INTO songs_fts(rowid, {_FTS_COLUMN_LIST}) VALUES (new.id, {_NEW_VALUES}); END",
    f"CREATE TRIGGER IF NOT EXISTS songs_fts_ad AFTER DELETE ON songs BEGIN "
    f"INSERT INTO songs_fts(songs_fts, rowid, {_FTS_COLUMN_LIST}) "
    f"VALUES ('delete', old.id, {_OLD_VALUES}); END",
    f"CREATE TRIGGER IF NOT EXISTS songs_fts_au AFTER UPDATE ON songs BEGIN "
    f"INSERT INTO songs_fts(songs_fts, rowid, {_FTS_COLUMN_LIST}) "
    f"VALUES ('delete', old.id, {_OLD_VALUES}); "
    f"INSERT INTO songs_fts(rowid, {_FTS_COLUMN_LIST}) VALUES (new.id, {_NEW_VALUES}); END",
)

_POSTGRES_FTS_DDL = tuple(
    f"CREATE INDEX IF NOT EXISTS songs_{name}_fts_idx ON songs "
    f"USING GIN (to_tsvector('simple', {name}))"
    for name in SEARCHABLE_COLUMNS
)

# Letters and digits only, the same tokens the FTS5 unicode61 tokenizer keeps
_WORD_RE = re.compile(r"[^\W_]+")

_SIMPLE_CONFIG = literal_column("'simple'::regconfig")

# SQLSTATE unique_violation
_PG_UNIQUE_VIOLATION = "23505"


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(database_url, echo=echo)


async def init_schema(engine: AsyncEngine) -> None:
    """Create the songs table and its full-text support if they are missing."""
    ddl = _SQLITE_FTS_DDL if engine.dialect.name == "sqlite" else _POSTGRES_FTS_DDL
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        for statement in ddl:
            await conn.exec_driver_sql(statement)
    logger.info("Schema ready on %s", engine.dialect.name)


def full_text_conditions(dialect_name: str, terms: dict[str, str]) -> list[ColumnElement[bool]]:
    """WHERE conditions requiring each column to match its search text.

    ``terms`` maps a searchable column name to the requested text. An empty
    text puts no constraint on its column. A non-empty text without any word
    characters matches nothing.
    """
    active = {name: value for name, value in terms.items() if value != ""}
    if not active:
        return []

    if dialect_name == "postgresql":
        return [
            func.to_tsvector(_SIMPLE_CONFIG, songs.c[name]).op("@@")(func.plainto_tsquery(_SIMPLE_CONFIG, value))
            for name, value in active.items()
        ]

    phrases: list[str] = []
    for name, value in active.items():
        words = _WORD_RE.findall(value)
        if not words:
            return [false()]
        phrases.extend(f'{name} : "{word}"' for word in words)

    match = text("songs_fts MATCH :fts_query").bindparams(fts_query=" AND ".join(phrases))
    return [songs.c.id.in_(select(_songs_fts.c.rowid).where(match))]


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == _PG_UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)
