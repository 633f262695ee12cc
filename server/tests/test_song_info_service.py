"""Tests for the music info API client."""

import httpx
import pytest

from music_library.errors import SongInfoError
from music_library.services.song_info_service import SongInfoService


def _service(handler) -> SongInfoService:
    return SongInfoService("http://music-info.test/", transport=httpx.MockTransport(handler))


class TestFetchDetail:
    @pytest.mark.asyncio
    async def test_returns_details(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={
                "releaseDate": "16.07.2006",
                "text": "Ooh baby, don't you know I suffer?\n\nYou caught me",
                "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
            })

        service = _service(handler)
        detail = await service.fetch_detail("Supermassive Black Hole", "Muse")
        await service.close()

        assert detail.release == "16.07.2006"
        assert detail.text.startswith("Ooh baby")
        assert detail.link.endswith("Xsp3_a-PMTw")
        assert seen[0].url.path == "/info"
        assert seen[0].url.params["song"] == "Supermassive Black Hole"
        assert seen[0].url.params["group"] == "Muse"

    @pytest.mark.asyncio
    async def test_missing_fields_default_to_empty(self):
        service = _service(lambda request: httpx.Response(200, json={"link": "https://example.com"}))
        detail = await service.fetch_detail("Song", "Group")
        assert detail.release == ""
        assert detail.text == ""
        assert detail.link == "https://example.com"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        service = _service(lambda request: httpx.Response(500))
        with pytest.raises(SongInfoError, match="HTTP 500"):
            await service.fetch_detail("Song", "Group")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SongInfoError, match="connection refused"):
            await _service(handler).fetch_detail("Song", "Group")

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        service = _service(lambda request: httpx.Response(200, content=b"not json"))
        with pytest.raises(SongInfoError, match="malformed response"):
            await service.fetch_detail("Song", "Group")

    @pytest.mark.asyncio
    async def test_unconfigured_returns_empty_detail(self):
        service = SongInfoService("")
        detail = await service.fetch_detail("Song", "Group")
        assert detail.release == ""
        assert detail.text == ""
        assert detail.link == ""
