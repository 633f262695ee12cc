"""Client for the external music info API that supplies song details."""

import logging

import httpx

from music_library.errors import SongInfoError
from music_library.models.song import SongDetail

logger = logging.getLogger(__name__)


class SongInfoService:
    """Looks up release date, lyrics and link for a song by title and group."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._http

    async def fetch_detail(self, song: str, group: str) -> SongDetail:
        if not self._base_url:
            logger.warning("MUSIC_INFO_API_URL not configured, storing '%s' by '%s' without details", song, group)
            return SongDetail()

        url = f"{self._base_url}/info"
        try:
            resp = await self._client().get(url, params={"group": group, "song": song})
            resp.raise_for_status()
            detail = SongDetail.model_validate(resp.json())
        except httpx.HTTPStatusError as e:
            raise SongInfoError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SongInfoError(url, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise SongInfoError(url, f"malformed response: {e}") from e

        logger.info("Fetched details for '%s' by '%s'", song, group)
        return detail

    async def close(self) -> None:
        if self._http:
            await self._http.aclose()
            self._http = None
