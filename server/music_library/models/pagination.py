from typing import Literal

from pydantic import BaseModel, Field

from music_library.errors import UnsafeSortError
from music_library.validator import Validator, permitted_value

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100

SortDirection = Literal["ASC", "DESC"]


class Filters(BaseModel):
    """Requested page, page size and sort key plus the sort keys the endpoint allows."""

    page: int = 1
    page_size: int = 5
    sort: str = "id"
    sort_safelist: tuple[str, ...] = Field(default_factory=tuple)

    def _require_safe_sort(self) -> None:
        if not permitted_value(self.sort, self.sort_safelist):
            raise UnsafeSortError(self.sort)

    def sort_column(self) -> str:
        """Bare column name of the sort key. Only keys from the safelist are accepted."""
        self._require_safe_sort()
        return self.sort.removeprefix("-")

    def sort_direction(self) -> SortDirection:
        self._require_safe_sort()
        return "DESC" if self.sort.startswith("-") else "ASC"

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class Metadata(BaseModel):
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0


def validate_page_params(v: Validator, page: int, page_size: int) -> None:
    v.check(page > 0, "page", "must be greater than zero")
    v.check(page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(page_size > 0, "page_size", "must be greater than zero")
    v.check(page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")


def validate_filters(v: Validator, filters: Filters) -> None:
    validate_page_params(v, filters.page, filters.page_size)
    v.check(permitted_value(filters.sort, filters.sort_safelist), "sort", "invalid sort value")


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    """Summarize a page of results.

    Shared by row pagination and verse pagination. An empty result has no
    pages at all, so every field stays zero.
    """
    if total_records == 0:
        return Metadata()

    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=(total_records + page_size - 1) // page_size,
        total_records=total_records,
    )
