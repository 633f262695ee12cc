class MusicLibraryError(Exception):
    """Base exception for music_library."""


class RecordNotFoundError(MusicLibraryError):
    """Raised when a song ID is invalid or no such song exists."""

    def __init__(self, song_id: int):
        self.song_id = song_id
        super().__init__(f"no records found for song {song_id}")


class AlreadyExistsError(MusicLibraryError):
    """Raised when a (song, group) pair is already stored."""

    def __init__(self, song: str, group: str):
        self.song = song
        self.group = group
        super().__init__(f"song '{song}' of group '{group}' already exists")


class EditConflictError(MusicLibraryError):
    """Raised when the row being updated vanished before the write landed."""

    def __init__(self, song_id: int):
        self.song_id = song_id
        super().__init__(f"edit conflict on song {song_id}")


class FailedValidationError(MusicLibraryError):
    """Raised with every field failure collected by a Validator."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__(f"validation failed: {', '.join(sorted(self.errors))}")


class UnsafeSortError(MusicLibraryError):
    """Raised when a sort key that is not in the safelist reaches the query layer."""

    def __init__(self, sort: str):
        self.sort = sort
        super().__init__(f"unsafe sort parameter: {sort!r}")


class SongInfoError(MusicLibraryError):
    """Raised when the external music info API cannot provide song details."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"music info request to {url} failed: {reason}")
