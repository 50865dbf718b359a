"""
ATIS field renderers.

``NODE_TABLE`` maps each preset field name to its renderer class; the builder
creates one instance per render call.
"""

from typing import Dict, Type

from .altimeter import AltimeterNode, fetch_secondary_altimeters, secondary_stations
from .base import AtisRenderError, Node, RenderedNode, UnmappedWeatherCodeError, fill
from .closing import render_closing
from .clouds import CloudsNode
from .observation_time import ObservationTimeNode
from .runway_visual_range import RunwayVisualRangeNode
from .surface_wind import SurfaceWindNode
from .temperature import DewpointNode, TemperatureNode
from .transition_level import TransitionLevelNode
from .trend import TrendNode
from .visibility import VisibilityNode
from .weather import PresentWeatherNode, RecentWeatherNode
from .wind_shear import WindShearNode

NODE_TABLE: Dict[str, Type[Node]] = {
    node.name: node
    for node in (
        ObservationTimeNode,
        SurfaceWindNode,
        RunwayVisualRangeNode,
        VisibilityNode,
        PresentWeatherNode,
        CloudsNode,
        TemperatureNode,
        DewpointNode,
        AltimeterNode,
        TrendNode,
        RecentWeatherNode,
        WindShearNode,
        TransitionLevelNode,
    )
}

__all__ = [
    "NODE_TABLE",
    "AltimeterNode",
    "AtisRenderError",
    "CloudsNode",
    "DewpointNode",
    "Node",
    "ObservationTimeNode",
    "PresentWeatherNode",
    "RecentWeatherNode",
    "RenderedNode",
    "RunwayVisualRangeNode",
    "SurfaceWindNode",
    "TemperatureNode",
    "TransitionLevelNode",
    "TrendNode",
    "UnmappedWeatherCodeError",
    "VisibilityNode",
    "WindShearNode",
    "fetch_secondary_altimeters",
    "fill",
    "render_closing",
    "secondary_stations",
]
