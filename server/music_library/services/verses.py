"""Verse splitting and verse-level pagination for lyric text."""

import re

from music_library.models.pagination import Metadata, calculate_metadata

# Two or more line breaks, allowing whitespace-only lines in between
_VERSE_BREAK_RE = re.compile(r"\n[ \t]*(?:\n[ \t]*)+")


def split_into_verses(text: str) -> list[str]:
    """Split lyric text into verses separated by blank lines.

    Verses keep their single line breaks. Leading and trailing blank lines
    never produce empty verses, and blank text has no verses at all.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    verses = (verse.strip() for verse in _VERSE_BREAK_RE.split(normalized))
    return [verse for verse in verses if verse]


def paginate_verses(verses: list[str], page: int, page_size: int) -> tuple[list[str], Metadata]:
    total_records = len(verses)
    start = max(0, (page - 1) * page_size)
    end = min(start + page_size, total_records)

    metadata = calculate_metadata(total_records, page, page_size)
    if start >= end:
        return [], metadata
    return verses[start:end], metadata
