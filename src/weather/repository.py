from __future__ import annotations

import asyncio
import re
import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

import aiohttp
import structlog
from prometheus_client import Counter

from .decoder import MetarDecoder
from .entities import DecodedMetar

logger = structlog.get_logger(__name__)

DEFAULT_METAR_URL = "https://metar.vatsim.net/metar.php"
DEFAULT_USER_AGENT = "atis-render/0.1"

_RE_ICAO = re.compile(r"^[A-Z0-9]{4}$")

_METAR_FETCH_FAILURES = Counter(
    "atis_metar_fetch_failures_total",
    "METAR downloads that failed or returned no report",
)


@dataclass
class _CacheEntry:
    metar: DecodedMetar
    fetched_at: float
    expires_at: float


class MetarRepository:
    """Downloads METARs over HTTP, decodes them leniently and caches them per station.

    Monitored stations are refreshed together by ``refresh_monitored``, either
    on demand or from ``run_refresh_loop``.
    """

    def __init__(
        self,
        *,
        metar_url: str = DEFAULT_METAR_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float = 10.0,
        cache_ttl_seconds: int = 300,
        decoder: Optional[MetarDecoder] = None,
    ):
        self.metar_url = metar_url
        self.user_agent = (user_agent or "").strip() or DEFAULT_USER_AGENT
        self.timeout_seconds = max(1.0, float(timeout_seconds))
        self.cache_ttl_seconds = max(0, int(cache_ttl_seconds))
        self._decoder = decoder or MetarDecoder()
        self._cache: Dict[str, _CacheEntry] = {}
        self._monitored: Set[str] = set()
        self._lock = asyncio.Lock()

    @property
    def monitored_stations(self) -> List[str]:
        return sorted(self._monitored)

    async def get_metar(self, station: str, *, monitor: bool = False) -> Optional[DecodedMetar]:
        """Latest decoded METAR for ``station``, or None when it cannot be downloaded."""
        icao = (station or "").strip().upper()
        if not _RE_ICAO.match(icao):
            raise ValueError(f"Invalid ICAO: {station!r}")

        now = time.time()
        async with self._lock:
            if monitor:
                self._monitored.add(icao)
            entry = self._cache.get(icao)
            if entry and now < entry.expires_at:
                return entry.metar

        body = await self._download([icao])
        if not body:
            _METAR_FETCH_FAILURES.inc()
            return None

        raw_metar = _extract_latest_metar_line(body, icao)
        if not raw_metar:
            _METAR_FETCH_FAILURES.inc()
            logger.warning("No METAR found in response", station=icao)
            return None

        metar = self._decoder.parse_not_strict(raw_metar)
        await self._store(icao, metar)
        return metar

    async def refresh_monitored(self) -> Dict[str, DecodedMetar]:
        """Download all monitored stations in one request and update the cache."""
        async with self._lock:
            stations = sorted(self._monitored)
        if not stations:
            return {}

        body = await self._download(stations)
        if not body:
            _METAR_FETCH_FAILURES.inc()
            return {}

        updated: Dict[str, DecodedMetar] = {}
        for line in body.splitlines():
            line = line.strip()
            if not line:
                continue
            metar = self._decoder.parse_not_strict(line)
            if not metar.icao:
                logger.warning("Discarding METAR without station", raw_metar=line)
                continue
            updated[metar.icao] = metar
            await self._store(metar.icao, metar)

        logger.info("Refreshed monitored METARs", stations=stations, updated=sorted(updated))
        return updated

    async def run_refresh_loop(self, interval_seconds: float = 300.0) -> None:
        """Refresh monitored stations forever; cancel the task to stop."""
        interval = max(60.0, float(interval_seconds))
        while True:
            await asyncio.sleep(interval)
            try:
                await self.refresh_monitored()
            except Exception:
                logger.exception("METAR refresh loop iteration failed")

    async def remove_metar(self, station: str) -> None:
        icao = (station or "").strip().upper()
        async with self._lock:
            self._cache.pop(icao, None)
            self._monitored.discard(icao)

    async def _store(self, icao: str, metar: DecodedMetar) -> None:
        fetched_at = time.time()
        async with self._lock:
            self._cache[icao] = _CacheEntry(
                metar=metar,
                fetched_at=fetched_at,
                expires_at=fetched_at + self.cache_ttl_seconds,
            )

    async def _download(self, stations: Iterable[str]) -> str:
        ids = ",".join(stations)
        params = {"id": ids, "ts": str(int(time.time()))}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        logger.info("Downloading METAR", url=self.metar_url, stations=ids)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(
                    self.metar_url,
                    params=params,
                    headers={"User-Agent": self.user_agent, "Accept": "text/plain"},
                ) as response:
                    if response.status != 200:
                        logger.warning("METAR download returned non-200", stations=ids, status=response.status)
                        return ""
                    return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Error downloading METAR", stations=ids, error=str(e))
            return ""


class StaticMetarRepository:
    """Serves fixed raw reports; used by the CLI ``--metar`` option and in tests."""

    def __init__(self, raw_metars: Optional[Dict[str, str]] = None, decoder: Optional[MetarDecoder] = None):
        self._decoder = decoder or MetarDecoder()
        self._metars: Dict[str, DecodedMetar] = {}
        for raw in (raw_metars or {}).values():
            self.add(raw)

    def add(self, raw_metar: str) -> DecodedMetar:
        metar = self._decoder.parse_not_strict(raw_metar)
        if metar.icao:
            self._metars[metar.icao] = metar
        return metar

    async def get_metar(self, station: str, *, monitor: bool = False) -> Optional[DecodedMetar]:
        return self._metars.get((station or "").strip().upper())


def _extract_latest_metar_line(body: str, station: str) -> str:
    lines = []
    for raw_line in (body or "").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if f" {station} " in f" {line} ":
            lines.append(line.rstrip("="))
    return lines[-1] if lines else ""
