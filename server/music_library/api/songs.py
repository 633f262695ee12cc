import logging
import re

from fastapi import APIRouter, HTTPException, Query, Request

from music_library.errors import FailedValidationError
from music_library.logging_utils import request_logger
from music_library.models.pagination import Filters, validate_filters, validate_page_params
from music_library.models.song import Song, SongCreateRequest, SongUpdateRequest, validate_song
from music_library.services.song_store import SONG_SORT_SAFELIST, SongStore
from music_library.validator import Validator

router = APIRouter()
logger = logging.getLogger(__name__)

# Optional sign and at most 19 ASCII digits, nothing else
_INTEGER_RE = re.compile(r"[+-]?[0-9]{1,19}")
_MAX_ID = 2**63 - 1


def _song_store(request: Request, log: logging.LoggerAdapter) -> SongStore:
    state = request.app.state
    return SongStore(state.engine, state.config.db_timeout_seconds, log=log)


def _read_id(raw: str) -> int:
    """Parse a song ID path segment. Anything but a positive integer is a 404."""
    song_id = int(raw) if _INTEGER_RE.fullmatch(raw) else 0
    if not 1 <= song_id <= _MAX_ID:
        raise HTTPException(status_code=404, detail="the requested resource could not be found")
    return song_id


def _read_int(raw: str | None, key: str, default: int, v: Validator) -> int:
    if raw is None or raw == "":
        return default
    if not _INTEGER_RE.fullmatch(raw):
        v.add_error(key, "must be an integer value")
        return default
    return int(raw)


def _ensure_valid(v: Validator) -> None:
    if not v.valid():
        raise FailedValidationError(v.errors)


def _dump(song: Song) -> dict:
    return song.model_dump(mode="json", by_alias=True)


@router.post("/song", status_code=201)
async def add_song(request: Request, body: SongCreateRequest) -> dict:
    """Add a song, filling in release date, lyrics and link from the music info API."""
    log = request_logger(logger, song=body.song, group=body.group)
    log.info("Attempting to add a new song")

    song = Song(song=body.song, group=body.group)
    v = Validator()
    validate_song(v, song)
    _ensure_valid(v)

    detail = await request.app.state.song_info.fetch_detail(song.song, song.group)
    song = song.model_copy(update={"release": detail.release, "text": detail.text, "link": detail.link})

    song = await _song_store(request, log).insert(song)
    log.info("Song added successfully")
    return {"song": _dump(song)}


@router.get("/song/{song_id}")
async def show_song(request: Request, song_id: str) -> dict:
    sid = _read_id(song_id)
    log = request_logger(logger, song_id=sid)

    song = await _song_store(request, log).get(sid)
    return {"song": _dump(song)}


@router.patch("/song/{song_id}")
async def update_song(request: Request, song_id: str, body: SongUpdateRequest) -> dict:
    """Rename a song and/or move it to another group. Omitted fields keep their value."""
    sid = _read_id(song_id)
    log = request_logger(logger, song_id=sid)
    log.info("Attempting to edit a song")

    store = _song_store(request, log)
    song = await store.get(sid)
    song = song.model_copy(update=body.model_dump(exclude_none=True))

    v = Validator()
    validate_song(v, song)
    _ensure_valid(v)

    song = await store.update(song)
    return {"song": _dump(song)}


@router.delete("/song/{song_id}")
async def delete_song(request: Request, song_id: str) -> dict[str, str]:
    sid = _read_id(song_id)
    log = request_logger(logger, song_id=sid)

    await _song_store(request, log).delete(sid)
    return {"message": "song successfully deleted"}


@router.get("/song/{song_id}/lyrics")
async def show_lyrics(
    request: Request,
    song_id: str,
    page: str | None = Query(default=None, description="Page number, default 1"),
    page_size: str | None = Query(default=None, description="Verses per page, default 1"),
) -> dict:
    """Get a song's lyrics one page of verses at a time."""
    sid = _read_id(song_id)

    v = Validator()
    page_num = _read_int(page, "page", 1, v)
    size = _read_int(page_size, "page_size", 1, v)
    validate_page_params(v, page_num, size)
    _ensure_valid(v)

    log = request_logger(logger, song_id=sid, page=page_num, page_size=size)
    lyrics, metadata = await _song_store(request, log).get_lyrics(sid, page_num, size)
    return {"lyrics": lyrics, "metadata": metadata.model_dump()}


@router.get("/songs")
async def list_songs(
    request: Request,
    song: str = "",
    group: str = "",
    release_date: str = Query(default="", alias="releaseDate"),
    text: str = "",
    link: str = "",
    page: str | None = Query(default=None, description="Page number, default 1"),
    page_size: str | None = Query(default=None, description="Songs per page, default 5"),
    sort: str | None = Query(default=None, description="Sort key, '-' prefix for descending"),
) -> dict:
    """List songs matching every given filter, sorted and paginated."""
    v = Validator()
    filters = Filters(
        page=_read_int(page, "page", 1, v),
        page_size=_read_int(page_size, "page_size", 5, v),
        sort=sort or "id",
        sort_safelist=SONG_SORT_SAFELIST,
    )
    validate_filters(v, filters)
    _ensure_valid(v)

    log = request_logger(logger, song_filter=song, group_filter=group, page=filters.page, sort=filters.sort)
    log.info("Listing songs")

    songs, metadata = await _song_store(request, log).search(song, group, release_date, text, link, filters)
    return {"songs": [_dump(s) for s in songs], "metadata": metadata.model_dump()}
