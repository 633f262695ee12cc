from music_library.models.pagination import Filters, Metadata, calculate_metadata, validate_filters
from music_library.models.song import Song, SongCreateRequest, SongDetail, SongUpdateRequest, validate_song

__all__ = [
    "Filters",
    "Metadata",
    "calculate_metadata",
    "validate_filters",
    "Song",
    "SongCreateRequest",
    "SongDetail",
    "SongUpdateRequest",
    "validate_song",
]
