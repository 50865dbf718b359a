"""
Unit tests for MetarRepository (HTTP METAR download and cache).

aiohttp is mocked; no network access.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from src.weather.repository import MetarRepository, StaticMetarRepository

KJFK_BODY = "KJFK 011251Z 25010G18KT 10SM FEW030 BKN250 22/12 A3002\n"


def _session_returning(body: str, status: int = 200):
    """Build a ClientSession context manager whose GET answers with ``body``."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.text = AsyncMock(return_value=body)

    mock_request_cm = AsyncMock()
    mock_request_cm.__aenter__ = AsyncMock(return_value=mock_response)
    mock_request_cm.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_request_cm)

    mock_session_cm = MagicMock()
    mock_session_cm.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session_cm.__aexit__ = AsyncMock(return_value=None)
    return mock_session_cm, mock_session


class TestMetarRepository:
    @pytest.fixture
    def repository(self):
        return MetarRepository(metar_url="http://metar.test/metar.php", user_agent="tester/1.0")

    @pytest.mark.asyncio
    async def test_download_and_cache(self, repository):
        session_cm, session = _session_returning(KJFK_BODY)

        with patch("aiohttp.ClientSession", return_value=session_cm):
            first = await repository.get_metar("kjfk")
            second = await repository.get_metar("KJFK")

        assert first is second
        assert first.icao == "KJFK"
        assert first.pressure.value.actual_value == 3002
        assert session.get.call_count == 1

        args, kwargs = session.get.call_args
        assert args[0] == "http://metar.test/metar.php"
        assert kwargs["params"]["id"] == "KJFK"
        assert kwargs["headers"]["User-Agent"] == "tester/1.0"

    @pytest.mark.asyncio
    async def test_zero_ttl_always_downloads(self):
        repository = MetarRepository(cache_ttl_seconds=0)
        session_cm, session = _session_returning(KJFK_BODY)

        with patch("aiohttp.ClientSession", return_value=session_cm):
            await repository.get_metar("KJFK")
            await repository.get_metar("KJFK")

        assert session.get.call_count == 2

    @pytest.mark.asyncio
    async def test_last_matching_line_wins(self, repository):
        body = (
            "# generated by test\n"
            "KLGA 011251Z 24008KT 10SM FEW040 21/11 A3001\n"
            "KJFK 011151Z 24008KT 10SM FEW030 21/12 A3004\n"
            "KJFK 011251Z 25010G18KT 10SM FEW030 BKN250 22/12 A3002=\n"
        )
        session_cm, _ = _session_returning(body)

        with patch("aiohttp.ClientSession", return_value=session_cm):
            metar = await repository.get_metar("KJFK")

        assert (metar.hour, metar.minute) == (12, 51)
        assert metar.pressure.value.actual_value == 3002

    @pytest.mark.asyncio
    async def test_non_200_returns_none(self, repository):
        session_cm, _ = _session_returning("", status=503)

        with patch("aiohttp.ClientSession", return_value=session_cm):
            assert await repository.get_metar("KJFK") is None

    @pytest.mark.asyncio
    async def test_station_missing_from_response(self, repository):
        session_cm, _ = _session_returning("KLGA 011251Z 24008KT 10SM FEW040 21/11 A3001\n")

        with patch("aiohttp.ClientSession", return_value=session_cm):
            assert await repository.get_metar("KJFK") is None

    @pytest.mark.asyncio
    async def test_client_error_returns_none(self, repository):
        with patch("aiohttp.ClientSession") as mock_client:
            mock_client.return_value.__aenter__ = AsyncMock(side_effect=aiohttp.ClientError("Connection refused"))
            mock_client.return_value.__aexit__ = AsyncMock(return_value=None)

            assert await repository.get_metar("KJFK") is None

    @pytest.mark.asyncio
    async def test_invalid_station(self, repository):
        with pytest.raises(ValueError):
            await repository.get_metar("JFK")
        with pytest.raises(ValueError):
            await repository.get_metar("")

    @pytest.mark.asyncio
    async def test_refresh_monitored(self, repository):
        session_cm, session = _session_returning(KJFK_BODY)
        with patch("aiohttp.ClientSession", return_value=session_cm):
            await repository.get_metar("KJFK", monitor=True)

        session_cm, session = _session_returning(
            "KJFK 011351Z 26012KT 10SM FEW035 23/12 A3001\n"
            "KLGA 011351Z 24008KT 10SM FEW040 21/11 A3000\n"
        )
        repository._monitored.add("KLGA")
        with patch("aiohttp.ClientSession", return_value=session_cm):
            updated = await repository.refresh_monitored()
            cached = await repository.get_metar("KJFK")

        assert repository.monitored_stations == ["KJFK", "KLGA"]
        assert sorted(updated) == ["KJFK", "KLGA"]
        assert session.get.call_args.kwargs["params"]["id"] == "KJFK,KLGA"
        assert cached is updated["KJFK"]
        assert cached.hour == 13
        assert session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_refresh_without_monitored_stations(self, repository):
        with patch("aiohttp.ClientSession") as mock_client:
            assert await repository.refresh_monitored() == {}
        mock_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_metar(self, repository):
        session_cm, session = _session_returning(KJFK_BODY)

        with patch("aiohttp.ClientSession", return_value=session_cm):
            await repository.get_metar("KJFK", monitor=True)
            await repository.remove_metar("kjfk")
            await repository.get_metar("KJFK")

        assert repository.monitored_stations == []
        assert session.get.call_count == 2


@pytest.mark.asyncio
async def test_static_repository() -> None:
    repository = StaticMetarRepository({"KJFK": KJFK_BODY.strip()})

    metar = await repository.get_metar("kjfk")

    assert metar.icao == "KJFK"
    assert await repository.get_metar("KBOS") is None
    added = repository.add("KBOS 011254Z 27015KT 10SM SCT050 20/08 A2998")
    assert await repository.get_metar("KBOS") is added
