"""Command-line ATIS renderer.

    atis-render --profile config/facility.example.yaml --preset VFR --letter A \\
        --metar "KJFK 011251Z 25010G18KT 10SM FEW030 BKN250 22/12 A3002"

Without ``--metar`` the current report for the facility (or ``--station``) is
downloaded from the configured METAR service.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from typing import Optional

import structlog

from src.logging_config import configure_logging
from src.weather.repository import MetarRepository, StaticMetarRepository

from .builder import AtisBuilder
from .config import ConfigurationError, FacilityProfile, load_profile
from .navdata import NavDataRepository

logger = structlog.get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a text and voice ATIS from a METAR.")
    parser.add_argument("--profile", required=True, help="Path to the facility profile YAML")
    parser.add_argument("--preset", required=True, help="Preset name defined in the profile")
    parser.add_argument("--letter", default=None, help="ATIS letter (default: first letter of the code range)")
    parser.add_argument("--metar", default=None, help="Raw METAR to render instead of downloading one")
    parser.add_argument("--station", default=None, help="Station to download the METAR for (default: facility)")
    parser.add_argument("--output", choices=("text", "voice", "both"), default="both")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON, with diagnostics")
    parser.add_argument("--log-level", default=None, help="Log level (default ATIS_LOG_LEVEL or INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    return parser


async def _render(args: argparse.Namespace, profile: FacilityProfile) -> int:
    station = profile.station
    services = profile.services
    letter = (args.letter or station.code_range[0]).strip().upper()
    if len(letter) != 1 or not letter.isalpha():
        print(f"Invalid ATIS letter: {args.letter!r}", file=sys.stderr)
        return 2

    navdata = NavDataRepository()
    if services.airports or services.navaids:
        await navdata.load(services.airports, services.navaids)

    live = MetarRepository(
        metar_url=services.metar_url,
        user_agent=services.user_agent,
        timeout_seconds=services.timeout_seconds,
        cache_ttl_seconds=services.cache_ttl_seconds,
    )
    if args.metar:
        static = StaticMetarRepository()
        metar = static.add(args.metar)
    else:
        metar = await live.get_metar(args.station or station.identifier)
        if metar is None:
            print(f"No METAR available for {args.station or station.identifier}", file=sys.stderr)
            return 1

    for error in metar.decoding_exceptions:
        logger.warning("METAR decoding problem", chunk=error.chunk_decoder, message=error.message)

    # Cross-station references always use the live service.
    builder = AtisBuilder(live, navdata)
    result = await builder.build(station, args.preset, letter, metar)

    if args.json:
        payload = {
            "station": station.identifier,
            "letter": letter,
            "diagnostics": [asdict(d) for d in result.diagnostics],
        }
        if args.output in ("text", "both"):
            payload["text"] = result.text
        if args.output in ("voice", "both"):
            payload["voice"] = result.voice
        print(json.dumps(payload, indent=2))
        return 0

    if args.output in ("text", "both"):
        print(result.text)
    if args.output in ("voice", "both"):
        print(result.voice)
    for diagnostic in result.diagnostics:
        print(f"warning: [{diagnostic.kind}] {diagnostic.subject} {diagnostic.message}".replace("  ", " "), file=sys.stderr)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level, json_output=args.json_logs or None)

    try:
        profile = load_profile(args.profile)
        profile.station.preset(args.preset)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    return asyncio.run(_render(args, profile))


if __name__ == "__main__":
    raise SystemExit(main())
