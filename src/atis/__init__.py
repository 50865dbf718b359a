"""ATIS rendering: facility configuration, field renderers, builder and TTS normalizer."""

from .builder import AtisBuild, AtisBuilder, AtisResult
from .config import ConfigurationError, FacilityProfile, StationConfig, load_profile, load_station_config
from .diagnostics import Diagnostic
from .navdata import Airport, NavDataRepository, Navaid
from .scheduler import SpeechScheduler
from .tts import TtsNormalizer
from .variables import AtisVariable

__all__ = [
    "Airport",
    "AtisBuild",
    "AtisBuilder",
    "AtisResult",
    "AtisVariable",
    "ConfigurationError",
    "Diagnostic",
    "FacilityProfile",
    "NavDataRepository",
    "Navaid",
    "SpeechScheduler",
    "StationConfig",
    "TtsNormalizer",
    "load_profile",
    "load_station_config",
]
