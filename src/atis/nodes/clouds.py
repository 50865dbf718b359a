import re
from typing import List, Optional, Tuple

from src.weather.entities import CloudAmount, CloudLayer, CloudType, DecodedMetar

from ..config import StationConfig
from ..speech import group_form, word_string
from .base import Node, fill

_RE_ALTITUDE = re.compile(r"\{altitude(?::(\d+))?\}", re.IGNORECASE)
_RE_SPACES = re.compile(r"\s+")

_CEILING_AMOUNTS = {
    "SCT": CloudAmount.SCATTERED,
    "BKN": CloudAmount.BROKEN,
    "OVC": CloudAmount.OVERCAST,
}


def _ceiling_layer(layers: List[CloudLayer], layer_types) -> Optional[CloudLayer]:
    amounts = [_CEILING_AMOUNTS[t] for t in layer_types if t in _CEILING_AMOUNTS]
    if not amounts:
        amounts = [CloudAmount.BROKEN, CloudAmount.OVERCAST]
    candidates = [
        layer
        for layer in layers
        if layer.amount in amounts and layer.base_height is not None and layer.base_height.actual_value > 0
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda layer: layer.base_height.actual_value)


def _undetermined(layer: CloudLayer) -> bool:
    return layer.base_height is None or layer.type == CloudType.CANNOT_MEASURE


def _is_automatic_cb(layer: CloudLayer, station: StationConfig) -> bool:
    return (
        not station.is_faa_atis
        and layer.amount == CloudAmount.NONE
        and layer.base_height is None
        and layer.type == CloudType.CUMULONIMBUS
    )


class CloudsNode(Node):
    """Cloud layers, joined with spaces (text) or commas (voice)."""

    name = "CLOUDS"

    def parse(self, metar: DecodedMetar, station: StationConfig) -> Tuple[str, str]:
        if not metar.clouds:
            return "", ""

        fmt = station.format.clouds
        ceiling = _ceiling_layer(metar.clouds, fmt.cloud_ceiling_layer_types)
        texts = [t for t in (self._layer_text(layer, layer is ceiling, station) for layer in metar.clouds) if t]
        voices = [v for v in (self._layer_voice(layer, layer is ceiling, station) for layer in metar.clouds) if v]

        text = fill(fmt.template.text, {"clouds": " ".join(texts)}) if texts else ""
        voice = fill(fmt.template.voice, {"clouds": ", ".join(voices)}) if voices else ""
        return text, voice

    @staticmethod
    def _layer_text(layer: CloudLayer, is_ceiling: bool, station: StationConfig) -> str:
        fmt = station.format.clouds
        if _is_automatic_cb(layer, station):
            return fmt.automatic_cb_detection.text or ""

        template = fmt.types.get(layer.amount.value)
        if template is None or template.text is None:
            return ""

        result = template.text
        if _undetermined(layer):
            result = _RE_ALTITUDE.sub(lambda _m: fmt.undetermined_layer_altitude.text or "", result)
        else:
            height = int(layer.base_height.actual_value)
            if fmt.convert_to_metric:
                height *= 30
            elif fmt.is_altitude_in_hundreds:
                height *= 100
            result = _RE_ALTITUDE.sub(lambda m: f"{height:0{int(m.group(1) or 3)}d}", result)

        convective = layer.type.value if layer.type != CloudType.NONE else ""
        result = fill(result, {"convective": convective}).strip().upper()
        if fmt.identify_ceiling_layer_text_atis and is_ceiling:
            return f"{fmt.text_atis_ceiling_prefix.strip() or 'CIG'} {result}"
        return result

    @staticmethod
    def _layer_voice(layer: CloudLayer, is_ceiling: bool, station: StationConfig) -> str:
        fmt = station.format.clouds
        if _is_automatic_cb(layer, station):
            return fmt.automatic_cb_detection.voice or ""

        template = fmt.types.get(layer.amount.value)
        if template is None or template.voice is None:
            return ""

        if _undetermined(layer):
            altitude = fmt.undetermined_layer_altitude.voice or ""
        else:
            height = int(layer.base_height.actual_value) * (30 if fmt.convert_to_metric else 100)
            altitude = group_form(height) if height < 1000 else word_string(height)
            if fmt.convert_to_metric:
                altitude += " meters"

        convective = fmt.convective_types.get(layer.type.value, "") if layer.type != CloudType.NONE else ""
        result = fill(template.voice, {"altitude": f" {altitude} ", "convective": convective})
        result = _RE_SPACES.sub(" ", result).strip().upper()
        if fmt.identify_ceiling_layer and is_ceiling:
            return "ceiling " + result
        return result
