"""Shared fixtures: a throwaway SQLite songs database per test."""

import pytest_asyncio

from music_library.db import create_engine, init_schema
from music_library.models.song import Song
from music_library.services.song_store import SongStore

SONGS = [
    Song(
        song="Supermassive Black Hole",
        group="Muse",
        release="16.07.2006",
        text=(
            "Ooh baby, don't you know I suffer?\nOoh baby, can you hear me moan?\n\n"
            "You caught me under false pretenses\nHow long before you let me go?\n\n"
            "Ooh\nYou set my soul alight"
        ),
        link="https://www.youtube.com/watch?v=Xsp3_a-PMTw",
    ),
    Song(
        song="Uprising",
        group="Muse",
        release="07.09.2009",
        text="Paranoia is in bloom\n\nThey will not force us",
        link="https://example.com/uprising",
    ),
    Song(
        song="Yellow",
        group="Coldplay",
        release="26.06.2000",
        text="Look at the stars\nLook how they shine for you\n\nAnd everything you do",
        link="https://example.com/yellow",
    ),
    Song(
        song="Hysteria",
        group="Muse",
        release="01.12.2003",
        text="It's bugging me\n\nGrating me",
        link="https://example.com/hysteria",
    ),
]


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'songs.db'}")
    await init_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(engine):
    return SongStore(engine, timeout=3.0)


@pytest_asyncio.fixture
async def seeded_store(store):
    """Store holding SONGS, inserted in order so their IDs are 1..4."""
    for song in SONGS:
        await store.insert(song)
    return store
