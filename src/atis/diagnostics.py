"""Render-time warnings returned alongside a best-effort ATIS."""

from dataclasses import dataclass

from prometheus_client import Counter

_DIAGNOSTICS_TOTAL = Counter(
    "atis_render_diagnostics_total",
    "Fail-soft substitutions made while rendering an ATIS",
    ["kind"],
)

# Diagnostic kinds
RENDER_ERROR = "render_error"
PRESSURE_LOOKUP = "pressure_lookup"
ALTIMETER_LOOKUP = "altimeter_lookup"
CONTRACTION = "contraction"
NAVDATA = "navdata"
AIRPORT = "airport"


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    message: str
    subject: str = ""


def record(diagnostics: list, kind: str, message: str, subject: str = "") -> Diagnostic:
    diagnostic = Diagnostic(kind=kind, message=message, subject=subject)
    diagnostics.append(diagnostic)
    _DIAGNOSTICS_TOTAL.labels(kind=kind).inc()
    return diagnostic
