"""Decoding errors raised by the METAR chunk decoders."""

from __future__ import annotations

from typing import Optional


class Messages:
    BAD_FORMAT_FOR_CLOUDS = "Bad format for clouds information"
    BAD_DAY_HOUR_MINUTE = 'Missing or badly formatted day/hour/minute information ("ddhhmmZ" expected)'
    INVALID_DAY_HOUR_MINUTE_RANGES = "Invalid values for day/hour/minute"
    ICAO_NOT_FOUND = "Station ICAO code not found (4 char expected)"
    ATMOSPHERIC_PRESSURE_NOT_FOUND = "Atmospheric pressure not found"
    INVALID_REPORT_STATUS = "Invalid report status, expecting AUTO, NIL, or any other 3 letter word"
    NO_INFORMATION_EXPECTED_AFTER_NIL = "No information expected after NIL status"
    INVALID_RUNWAY_QFU_RUNWAY_VISUAL_RANGE = "Invalid runway QFU runway visual range information"
    BAD_FORMAT_FOR_SURFACE_WIND = "Bad format for surface wind information"
    NO_SURFACE_WIND_INFORMATION_MEASURED = "No information measured for surface wind"
    INVALID_WIND_DIRECTION = "Wind direction should be in [0,360]"
    INVALID_WIND_DIRECTION_VARIATIONS = "Wind direction variations should be in [0,360]"
    BAD_FORMAT_FOR_VISIBILITY = "Bad format for visibility information"


class MetarChunkDecoderError(Exception):
    """A single chunk decoder failed on the front of the remaining report.

    ``remaining_metar`` is the text the decoder was given and
    ``new_remaining_metar`` the text a lenient decode continues with.
    ``hard`` marks invariant violations that are never recovered by skipping a chunk.
    """

    def __init__(
        self,
        message: str,
        remaining_metar: str = "",
        new_remaining_metar: Optional[str] = None,
        chunk_decoder: str = "",
        *,
        hard: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.remaining_metar = remaining_metar
        self.new_remaining_metar = remaining_metar if new_remaining_metar is None else new_remaining_metar
        self.chunk_decoder = chunk_decoder
        self.hard = hard

    def _key(self):
        return (self.message, self.remaining_metar, self.new_remaining_metar, self.chunk_decoder, self.hard)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MetarChunkDecoderError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"MetarChunkDecoderError({self.chunk_decoder}: {self.message!r})"
