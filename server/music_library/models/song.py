from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from music_library.validator import Validator


class Song(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = 0
    song: str = ""
    group: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    release: str = Field(default="", alias="releaseDate")
    text: str = ""
    link: str = ""


class SongDetail(BaseModel):
    """Details returned by the external music info API."""

    model_config = ConfigDict(populate_by_name=True)

    release: str = Field(default="", alias="releaseDate")
    text: str = ""
    link: str = ""


class SongCreateRequest(BaseModel):
    song: str = ""
    group: str = ""


class SongUpdateRequest(BaseModel):
    song: str | None = None
    group: str | None = None


def validate_song(v: Validator, song: Song) -> None:
    v.check(song.song != "", "song", "must be provided")
    v.check(song.group != "", "group", "must be provided")
