"""METAR decoder: runs the chunk decoder chain over a cleaned report."""

from __future__ import annotations

import re

import structlog

from .chunks import (
    DECODER_CHAIN,
    FORECAST_CHAIN,
    ChunkDecoder,
    ChunkResult,
    ReportStatusChunkDecoder,
    VisibilityChunkDecoder,
    consume_one_chunk,
)
from .entities import DecodedMetar
from .errors import MetarChunkDecoderError

logger = structlog.get_logger(__name__)

_RE_MULTI_SPACE = re.compile(r"[ ]{2,}")
_RE_END_OF_MESSAGE = re.compile(r"=$")


def clean_metar(raw_metar: str) -> str:
    """Upper-case, trim, drop the trailing ``=`` and collapse spaces; always ends with one space."""
    cleaned = (raw_metar or "").upper().strip()
    cleaned = _RE_END_OF_MESSAGE.sub("", cleaned)
    return _RE_MULTI_SPACE.sub(" ", cleaned) + " "


class MetarDecoder:
    """Sequential, regex-anchored METAR decoder.

    In lenient mode (the default) a failing chunk is retried once after
    skipping one token; errors are collected on the result instead of being
    raised. Strict mode stops at the first error.
    """

    def __init__(self, strict: bool = False):
        self._strict = strict

    def set_strict_parsing(self, strict: bool) -> None:
        self._strict = strict

    def parse(self, raw_metar: str) -> DecodedMetar:
        return self._parse_with_mode(raw_metar, self._strict)

    def parse_strict(self, raw_metar: str) -> DecodedMetar:
        return self._parse_with_mode(raw_metar, True)

    def parse_not_strict(self, raw_metar: str) -> DecodedMetar:
        return self._parse_with_mode(raw_metar, False)

    def decode_forecast(self, forecast: str) -> DecodedMetar:
        """Decode a trend forecast body (wind, visibility, weather, clouds).

        Every group is optional here: a decoder that does not match is skipped
        without consuming anything.
        """
        remaining = clean_metar(forecast)
        decoded = DecodedMetar(raw_metar=remaining)
        with_cavok = False

        for decoder in FORECAST_CHAIN:
            try:
                result = decoder.parse(remaining, with_cavok)
            except MetarChunkDecoderError:
                continue
            self._apply(decoded, result)
            remaining = result.remaining
            if isinstance(decoder, VisibilityChunkDecoder):
                with_cavok = decoded.cavok
        return decoded

    def _parse_with_mode(self, raw_metar: str, strict: bool) -> DecodedMetar:
        clean = clean_metar(raw_metar)
        remaining = clean
        decoded = DecodedMetar(raw_metar=clean)
        with_cavok = False

        for decoder in DECODER_CHAIN:
            try:
                result, primary_error = self._try_parsing(decoder, strict, remaining, with_cavok)
                if primary_error is not None:
                    decoded.add_decoding_exception(primary_error)
                self._apply(decoded, result)
                remaining = result.remaining
            except MetarChunkDecoderError as exc:
                decoded.add_decoding_exception(exc)
                if strict:
                    break
                remaining = exc.new_remaining_metar

            if isinstance(decoder, ReportStatusChunkDecoder) and decoded.status == "NIL":
                break
            if isinstance(decoder, VisibilityChunkDecoder):
                with_cavok = decoded.cavok

        if decoded.decoding_exceptions:
            logger.debug(
                "METAR decoded with errors",
                icao=decoded.icao,
                strict=strict,
                errors=[f"{e.chunk_decoder}: {e.message}" for e in decoded.decoding_exceptions],
            )
        return decoded

    @staticmethod
    def _try_parsing(decoder: ChunkDecoder, strict: bool, remaining: str, with_cavok: bool):
        try:
            return decoder.parse(remaining, with_cavok), None
        except MetarChunkDecoderError as primary_error:
            if strict or primary_error.hard:
                raise
            try:
                result = decoder.parse(consume_one_chunk(remaining), with_cavok)
            except MetarChunkDecoderError:
                raise primary_error from None
            return result, primary_error

    @staticmethod
    def _apply(decoded: DecodedMetar, result: ChunkResult) -> None:
        for name, value in result.fields.items():
            setattr(decoded, name, value)
