"""
Navigation data lookups for ATIS rendering.

Airports and navaids are JSON lists of ``{"ID", "Name", "Lat", "Lon"}``
objects, read from a local file or downloaded over HTTP. Only name lookups
are needed: the builder uses the facility's airport name and the TTS
normalizer expands ``+IDENT`` references.
"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Airport:
    id: str
    name: str
    latitude: float = 0.0
    longitude: float = 0.0


@dataclass(frozen=True)
class Navaid:
    id: str
    name: str
    latitude: float = 0.0
    longitude: float = 0.0


def _parse_entries(data: Any, cls) -> Dict[str, Any]:
    entries: Dict[str, Any] = {}
    if not isinstance(data, list):
        logger.warning("Nav data is not a list; ignoring (%s)", cls.__name__)
        return entries
    for item in data:
        if not isinstance(item, dict):
            continue
        ident = str(item.get("ID") or "").strip().upper()
        name = " ".join(str(item.get("Name") or "").split())
        if not ident or not name:
            continue
        try:
            lat = float(item.get("Lat") or 0.0)
            lon = float(item.get("Lon") or 0.0)
        except (TypeError, ValueError):
            lat, lon = 0.0, 0.0
        # First entry wins on duplicate identifiers.
        entries.setdefault(ident, cls(id=ident, name=name, latitude=lat, longitude=lon))
    return entries


class NavDataRepository:
    """In-memory airport and navaid tables."""

    def __init__(self, airports: Optional[List[Airport]] = None, navaids: Optional[List[Navaid]] = None):
        self._airports: Dict[str, Airport] = {a.id.upper(): a for a in (airports or [])}
        self._navaids: Dict[str, Navaid] = {n.id.upper(): n for n in (navaids or [])}

    def get_airport(self, ident: str) -> Optional[Airport]:
        return self._airports.get((ident or "").strip().upper())

    def get_navaid(self, ident: str) -> Optional[Navaid]:
        return self._navaids.get((ident or "").strip().upper())

    @property
    def airport_count(self) -> int:
        return len(self._airports)

    @property
    def navaid_count(self) -> int:
        return len(self._navaids)

    async def load(
        self,
        airports: Optional[str] = None,
        navaids: Optional[str] = None,
        *,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Load both tables concurrently from file paths or http(s) URLs.

        A source that cannot be read leaves its table unchanged.
        """
        airport_data, navaid_data = await asyncio.gather(
            _read_source(airports, timeout_seconds),
            _read_source(navaids, timeout_seconds),
        )
        if airport_data is not None:
            self._airports = _parse_entries(airport_data, Airport)
        if navaid_data is not None:
            self._navaids = _parse_entries(navaid_data, Navaid)
        logger.info("Nav data loaded: %d airports, %d navaids", len(self._airports), len(self._navaids))


async def _read_source(source: Optional[str], timeout_seconds: float) -> Any:
    if not source:
        return None
    if source.startswith(("http://", "https://")):
        return await _download_json(source, timeout_seconds)
    path = os.path.expanduser(source)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read nav data from %s: %s", path, e)
        return None


async def _download_json(url: str, timeout_seconds: float) -> Any:
    timeout = aiohttp.ClientTimeout(total=max(1.0, float(timeout_seconds)))
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, headers={"Accept": "application/json"}) as response:
                if response.status != 200:
                    logger.warning("Nav data download returned HTTP %s for %s", response.status, url)
                    return None
                body = await response.text()
        return json.loads(body)
    except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
        logger.warning("Error downloading nav data from %s: %s", url, e)
        return None
