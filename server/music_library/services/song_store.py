"""Songs catalog backed by the relational store.

Every operation runs on its own connection under a short timeout. A timeout
surfaces as ``TimeoutError`` and is never retried here.
"""

import asyncio
import logging
from typing import Any

from sqlalchemy import Row, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from music_library.db import full_text_conditions, is_unique_violation, songs
from music_library.errors import AlreadyExistsError, EditConflictError, RecordNotFoundError, UnsafeSortError
from music_library.models.pagination import Filters, Metadata, calculate_metadata
from music_library.models.song import Song
from music_library.services.verses import paginate_verses, split_into_verses

logger = logging.getLogger(__name__)

LogHandle = logging.Logger | logging.LoggerAdapter

SONG_SORT_SAFELIST = (
    "id", "song", "group", "release", "text", "link",
    "-id", "-song", "-group", "-release", "-text", "-link",
)

# Sort keys resolve to column objects here, so only these identifiers can reach ORDER BY
_SORT_COLUMNS = {
    "id": songs.c.id,
    "song": songs.c.song_name,
    "group": songs.c.group_name,
    "release": songs.c.release_date,
    "text": songs.c.lyrics,
    "link": songs.c.link,
}

_SONG_COLUMNS = (
    songs.c.id,
    songs.c.created_at,
    songs.c.updated_at,
    songs.c.song_name,
    songs.c.group_name,
    songs.c.release_date,
    songs.c.lyrics,
    songs.c.link,
)


def _row_to_song(row: Row[Any]) -> Song:
    return Song(
        id=row.id,
        song=row.song_name,
        group=row.group_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
        release=row.release_date,
        text=row.lyrics,
        link=row.link,
    )


class SongStore:
    """Search, verse pagination and single-row writes over the songs table.

    ``log`` is the request-scoped logging handle; pass a ``LoggerAdapter``
    carrying request context to have it on every record this store emits.
    """

    def __init__(self, engine: AsyncEngine, timeout: float = 3.0, log: LogHandle | None = None) -> None:
        self._engine = engine
        self._timeout = timeout
        self._log = log if log is not None else logger

    async def search(
        self,
        song: str,
        group: str,
        release: str,
        text: str,
        link: str,
        filters: Filters,
    ) -> tuple[list[Song], Metadata]:
        """Return one page of songs matching every non-empty filter, plus pagination metadata.

        The total match count comes from a window aggregate in the same
        statement as the page, so both reflect one snapshot.
        """
        sort_column = _SORT_COLUMNS.get(filters.sort_column())
        if sort_column is None:
            raise UnsafeSortError(filters.sort)
        order = sort_column.desc() if filters.sort_direction() == "DESC" else sort_column.asc()

        conditions = full_text_conditions(
            self._engine.dialect.name,
            {
                "song_name": song,
                "group_name": group,
                "release_date": release,
                "lyrics": text,
                "link": link,
            },
        )
        stmt = (
            select(func.count().over().label("total_records"), *_SONG_COLUMNS)
            .where(*conditions)
            .order_by(order, songs.c.id.asc())
            .limit(filters.limit())
            .offset(filters.offset())
        )

        async with asyncio.timeout(self._timeout):
            async with self._engine.connect() as conn:
                rows = (await conn.execute(stmt)).all()

        total_records = rows[0].total_records if rows else 0
        result = [_row_to_song(row) for row in rows]
        self._log.info("Listed %d of %d matching songs", len(result), total_records)
        return result, calculate_metadata(total_records, filters.page, filters.page_size)

    async def get(self, song_id: int) -> Song:
        if song_id < 1:
            raise RecordNotFoundError(song_id)

        stmt = select(*_SONG_COLUMNS).where(songs.c.id == song_id)
        async with asyncio.timeout(self._timeout):
            async with self._engine.connect() as conn:
                row = (await conn.execute(stmt)).one_or_none()

        if row is None:
            raise RecordNotFoundError(song_id)
        return _row_to_song(row)

    async def get_lyrics(self, song_id: int, page: int, page_size: int) -> tuple[list[str], Metadata]:
        """Return one page of verses from a song's lyrics.

        Pages past the last verse are empty, not an error.
        """
        if song_id < 1:
            raise RecordNotFoundError(song_id)

        stmt = select(songs.c.lyrics).where(songs.c.id == song_id)
        async with asyncio.timeout(self._timeout):
            async with self._engine.connect() as conn:
                row = (await conn.execute(stmt)).one_or_none()

        if row is None:
            raise RecordNotFoundError(song_id)

        verses = split_into_verses(row.lyrics)
        self._log.debug("Song %d has %d verses", song_id, len(verses))
        return paginate_verses(verses, page, page_size)

    async def insert(self, song: Song) -> Song:
        """Store a new song. Returns it with the storage-assigned ID and timestamps."""
        stmt = (
            insert(songs)
            .values(
                song_name=song.song,
                group_name=song.group,
                release_date=song.release,
                lyrics=song.text,
                link=song.link,
            )
            .returning(songs.c.id, songs.c.created_at, songs.c.updated_at)
        )

        try:
            async with asyncio.timeout(self._timeout):
                async with self._engine.begin() as conn:
                    row = (await conn.execute(stmt)).one()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise AlreadyExistsError(song.song, song.group) from e
            raise

        self._log.info("Inserted song %d", row.id)
        return song.model_copy(update={"id": row.id, "created_at": row.created_at, "updated_at": row.updated_at})

    async def update(self, song: Song) -> Song:
        """Replace the title and group of an existing song."""
        stmt = (
            update(songs)
            .where(songs.c.id == song.id)
            .values(song_name=song.song, group_name=song.group, updated_at=func.now())
            .returning(songs.c.updated_at)
        )

        try:
            async with asyncio.timeout(self._timeout):
                async with self._engine.begin() as conn:
                    row = (await conn.execute(stmt)).one_or_none()
        except IntegrityError as e:
            if is_unique_violation(e):
                raise AlreadyExistsError(song.song, song.group) from e
            raise

        if row is None:
            raise EditConflictError(song.id)

        self._log.info("Updated song %d", song.id)
        return song.model_copy(update={"updated_at": row.updated_at})

    async def delete(self, song_id: int) -> None:
        if song_id < 1:
            raise RecordNotFoundError(song_id)

        stmt = delete(songs).where(songs.c.id == song_id)
        async with asyncio.timeout(self._timeout):
            async with self._engine.begin() as conn:
                deleted = (await conn.execute(stmt)).rowcount

        if deleted == 0:
            raise RecordNotFoundError(song_id)
        self._log.info("Deleted song %d", song_id)
