"""
Unit tests for the ATIS field renderers.

Each test decodes a realistic report and checks the text and voice fragment
produced for one field with stock (or lightly overridden) formatting.
"""

from __future__ import annotations

import pytest

from src.atis.config import parse_station_config
from src.atis.nodes import (
    AltimeterNode,
    CloudsNode,
    DewpointNode,
    ObservationTimeNode,
    PresentWeatherNode,
    RecentWeatherNode,
    RunwayVisualRangeNode,
    SurfaceWindNode,
    TemperatureNode,
    TransitionLevelNode,
    TrendNode,
    UnmappedWeatherCodeError,
    VisibilityNode,
    WindShearNode,
    fetch_secondary_altimeters,
    fill,
    render_closing,
    secondary_stations,
)
from src.atis.nodes.weather import spoken_weather
from src.weather.decoder import MetarDecoder
from src.weather.entities import DecodedMetar, Visibility, WeatherPhenomenon
from src.weather.repository import StaticMetarRepository
from src.weather.value import Unit, Value

_decoder = MetarDecoder()


def _station(identifier: str = "KJFK", **format_overrides):
    return parse_station_config({"identifier": identifier, "format": format_overrides or None})


def _render(node, raw_metar: str, station=None):
    return node.render(_decoder.parse(raw_metar), station or _station())


def test_fill_is_case_insensitive() -> None:
    assert fill("WIND {WIND_DIR} AT {wind_spd}", {"wind_dir": "250", "wind_spd": "10"}) == "WIND 250 AT 10"
    assert fill(None, {"a": "b"}) == ""


def test_observation_time() -> None:
    rendered = _render(ObservationTimeNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002")
    assert rendered.text == "1251Z"
    assert rendered.voice == "one two five one ZULU ."


def test_observation_time_marks_special_reports() -> None:
    station = _station(observation_time={"standard_update_times": [51]})

    routine = _render(ObservationTimeNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002", station)
    special = _render(ObservationTimeNode(), "KJFK 011220Z 25010KT 10SM FEW030 22/12 A3002", station)

    assert "SPECIAL" not in routine.voice
    assert special.voice == "one two two zero ZULU SPECIAL."


class TestSurfaceWind:
    def test_gusting_wind(self):
        rendered = _render(SurfaceWindNode(), "KJFK 011251Z 25010G18KT 10SM FEW030 22/12 A3002")
        assert rendered.text == "25010G18KT"
        assert rendered.voice == "WIND two five zero AT one zero GUSTS one eight."

    def test_calm_at_threshold(self):
        rendered = _render(SurfaceWindNode(), "KJFK 011251Z 25002KT 10SM FEW030 22/12 A3002")
        assert rendered.text == "25002KT"
        assert rendered.voice == "WIND CALM."

    def test_not_calm_above_threshold(self):
        rendered = _render(SurfaceWindNode(), "KJFK 011251Z 25003KT 10SM FEW030 22/12 A3002")
        assert rendered.text == "25003KT"
        assert rendered.voice == "WIND two five zero AT three."

    def test_calm_threshold_is_configurable(self):
        station = _station(surface_wind={"calm_wind_speed": 0})
        rendered = _render(SurfaceWindNode(), "KJFK 011251Z 25002KT 10SM FEW030 22/12 A3002", station)
        assert rendered.voice == "WIND two five zero AT two."

    def test_zero_wind_is_calm(self):
        rendered = _render(SurfaceWindNode(), "KJFK 011251Z 00000KT 10SM FEW030 22/12 A3002")
        assert rendered.voice == "WIND CALM."

    def test_variable_direction(self):
        rendered = _render(SurfaceWindNode(), "KJFK 011251Z VRB03KT 10SM FEW030 22/12 A3002")
        assert rendered.text == "VRB03KT"
        assert rendered.voice == "WIND VARIABLE AT three."

    def test_direction_variations(self):
        rendered = _render(SurfaceWindNode(), "EGLL 011250Z 24010KT 210V270 9999 FEW030 15/10 Q1015")
        assert rendered.text == "24010KT 210V270"
        assert rendered.voice == "WIND two four zero AT one zero, WIND VARIABLE BETWEEN two one zero AND two seven zero."

    def test_magnetic_variation(self):
        station = _station(surface_wind={"magnetic_variation": {"enabled": True, "magnetic_degrees": -13}})
        rendered = _render(SurfaceWindNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002", station)
        assert rendered.text == "23710KT"

    def test_missing_wind(self):
        metar = _decoder.parse("KJFK 011251Z 10SM FEW030 22/12 A3002")
        metar.surface_wind = None
        rendered = SurfaceWindNode().render(metar, _station())
        assert (rendered.text, rendered.voice) == ("", "")


class TestVisibility:
    def test_statute_miles(self):
        rendered = _render(VisibilityNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002")
        assert rendered.text == "10SM"
        assert rendered.voice == "VISIBILITY 10."

    def test_fraction(self):
        rendered = _render(VisibilityNode(), "KJFK 011251Z 25010KT 1 1/2SM BR OVC005 12/11 A2992")
        assert rendered.text == "1 1/2SM"
        assert rendered.voice.startswith("VISIBILITY one and one half")

    def test_cavok(self):
        rendered = _render(VisibilityNode(), "LSZH 011250Z 24005KT CAVOK 15/10 Q1015", _station("LSZH"))
        assert rendered.text == "CAVOK"
        assert rendered.voice == "CAV-OK."

    def test_unlimited_meters(self):
        rendered = _render(VisibilityNode(), "EGLL 011250Z 24008KT 9999 FEW030 15/10 Q1015", _station("EGLL"))
        assert rendered.text == "VIS 10KM"
        assert rendered.voice == "visibility 10 kilometers or more."

    def test_meters_below_cutoff(self):
        rendered = _render(VisibilityNode(), "EGLL 011250Z 24008KT 4000 BR FEW030 15/10 Q1015", _station("EGLL"))
        assert rendered.text == "4000"
        assert rendered.voice == "VISIBILITY four thousand meters."

    def test_kilometers_above_cutoff(self):
        rendered = _render(VisibilityNode(), "EGLL 011250Z 24008KT 8000 FEW030 15/10 Q1015", _station("EGLL"))
        assert rendered.voice == "VISIBILITY 8 kilometers."

    def test_missing_visibility_renders_nothing(self):
        rendered = VisibilityNode().render(DecodedMetar(visibility=Visibility()), _station())
        assert rendered.text == ""
        assert rendered.voice == ""

    def test_unknown_fraction_renders_no_bare_label(self):
        visibility = Visibility(raw_value="5/3SM")
        rendered = VisibilityNode().render(DecodedMetar(visibility=visibility), _station())
        assert rendered.voice == ""


def test_runway_visual_range() -> None:
    rendered = _render(
        RunwayVisualRangeNode(), "EGLL 011250Z 24008KT 0600 R27R/0600U FG 05/05 Q1010", _station("EGLL")
    )
    assert rendered.text == "R27R/0600U"
    assert rendered.voice == "Runway two seven right R-V-R six hundred Going Up."


def test_runway_visual_range_variable() -> None:
    rendered = _render(
        RunwayVisualRangeNode(), "EGLL 011250Z 24008KT 0600 R27L/0400V0800D FG 05/05 Q1010", _station("EGLL")
    )
    assert rendered.voice == "Runway two seven left R-V-R variable between four hundred and eight hundred Going Down."


class TestWeather:
    def test_present_weather_uses_descriptor_table(self):
        rendered = _render(PresentWeatherNode(), "EGLL 011250Z 24008KT 9999 -TSRA VCSH SCT025CB 15/12 Q1010")
        assert rendered.text == "-TSRA VCSH"
        assert rendered.voice == "Thunderstorm With Light Rain, Showers In The Vicinity."

    def test_composed_from_parts_when_not_in_table(self):
        fmt = _station().format.present_weather
        weather = WeatherPhenomenon(intensity_proximity="-", characteristics="DR", types=["SN"])
        assert spoken_weather(weather, fmt) == "light low drifting Snow"

    def test_facility_descriptor_override(self):
        station = _station(present_weather={"descriptors": {"-RA": "Light rain showers"}})
        rendered = _render(PresentWeatherNode(), "KJFK 011251Z 25010KT 10SM -RA FEW030 22/12 A3002", station)
        assert rendered.voice == "Light rain showers."
        # stock entries survive the override
        assert station.format.present_weather.descriptors["FG"] == "Fog"

    def test_unmapped_code_raises(self):
        fmt = _station().format.present_weather
        with pytest.raises(UnmappedWeatherCodeError) as exc_info:
            spoken_weather(WeatherPhenomenon(types=["XX"]), fmt)
        assert exc_info.value.code == "XX"

    def test_nsw_has_no_spoken_form(self):
        fmt = _station().format.present_weather
        with pytest.raises(UnmappedWeatherCodeError):
            spoken_weather(WeatherPhenomenon(types=["NSW"]), fmt)

    def test_recent_weather(self):
        rendered = _render(RecentWeatherNode(), "EGLL 011250Z 24008KT 9999 FEW030 15/10 Q1010 RERA", _station("EGLL"))
        assert rendered.text == "RECENT WEATHER RA"
        assert rendered.voice == "RECENT WEATHER Rain."

    def test_no_weather(self):
        rendered = _render(PresentWeatherNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002")
        assert (rendered.text, rendered.voice) == ("", "")


class TestClouds:
    def test_layers_and_ceiling(self):
        rendered = _render(CloudsNode(), "KJFK 011251Z 25010KT 10SM FEW030 BKN250 22/12 A3002")
        assert rendered.text == "FEW030 BKN250"
        assert rendered.voice == "FEW CLOUDS AT THREE THOUSAND, ceiling TWO FIVE THOUSAND BROKEN."

    def test_low_layer_uses_group_form(self):
        rendered = _render(CloudsNode(), "KJFK 011251Z 25010KT 2SM BR OVC007 12/11 A2992")
        assert rendered.voice == "ceiling SEVEN HUNDRED OVERCAST."

    def test_ceiling_marker_in_text_atis(self):
        station = _station(clouds={"identify_ceiling_layer_text_atis": True})
        rendered = _render(CloudsNode(), "KJFK 011251Z 25010KT 10SM FEW030 BKN250 22/12 A3002", station)
        assert rendered.text == "FEW030 CIG BKN250"

    def test_convective_type(self):
        rendered = _render(CloudsNode(), "EGLL 011250Z 24008KT 9999 SCT025CB 15/12 Q1010", _station("EGLL"))
        assert rendered.text == "SCT025CB"
        assert rendered.voice == "TWO THOUSAND FIVE HUNDRED SCATTERED CUMULONIMBUS."

    def test_undetermined_base(self):
        rendered = _render(CloudsNode(), "EDDF 011250Z 24005KT 9999 BKN/// 15/10 Q1015", _station("EDDF"))
        assert rendered.voice == "UNDETERMINED BROKEN."

    def test_automatic_cb_detection(self):
        rendered = _render(CloudsNode(), "EDDF 011250Z 24005KT 9999 //////CB 15/10 Q1015", _station("EDDF"))
        assert rendered.text == "//////CB"
        assert rendered.voice == "RADAR DETECTED C-B CLOUDS."

    def test_metric_conversion(self):
        station = _station("UUEE", clouds={"convert_to_metric": True})
        rendered = _render(CloudsNode(), "UUEE 011250Z 24005KT 9999 BKN010 15/10 Q1015", station)
        assert rendered.text == "BKN300"
        assert rendered.voice == "ceiling THREE HUNDRED METERS BROKEN."

    def test_no_significant_clouds(self):
        rendered = _render(CloudsNode(), "EGLL 011250Z VRB03KT 9999 NSC 15/10 Q1015", _station("EGLL"))
        assert rendered.text == "NSC"
        assert rendered.voice == "NO SIGNIFICANT CLOUDS."


class TestTemperature:
    def test_temperature_and_dewpoint(self):
        raw = "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002"
        temp = _render(TemperatureNode(), raw)
        dew = _render(DewpointNode(), raw)
        assert (temp.text, temp.voice) == ("22", "TEMPERATURE two two.")
        assert (dew.text, dew.voice) == ("12", "DEWPOINT one two.")

    def test_negative_temperature(self):
        rendered = _render(TemperatureNode(), "ENGM 011250Z 36005KT 9999 BKN015 M02/M05 Q0998", _station("ENGM"))
        assert rendered.text == "M02"
        assert rendered.voice == "TEMPERATURE minus two."

    def test_plus_prefix_and_leading_zero(self):
        station = _station("EGLL", temperature={"use_plus_prefix": True, "speak_leading_zero": True})
        rendered = _render(TemperatureNode(), "EGLL 011250Z 24008KT 9999 FEW030 05/03 Q1010", station)
        assert rendered.voice == "TEMPERATURE plus zero five."

    def test_missing_temperature(self):
        rendered = _render(TemperatureNode(), "KJFK 011251Z 25010KT 10SM FEW030 A3002")
        assert rendered.text == ""
        assert rendered.voice == "Temperature missing."


class TestAltimeter:
    def test_inches_of_mercury(self):
        rendered = _render(AltimeterNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002")
        assert rendered.text == "A3002 (3002)"
        assert rendered.voice == "ALTIMETER three zero zero two."

    def test_unit_conversions_and_qfe(self):
        station = _station(
            "EDDF",
            altimeter={"template": {"text": "Q{altimeter} A{altimeter|inhg} QFE {qfe|300}", "voice": "QNH {altimeter}"}},
        )
        rendered = _render(AltimeterNode(), "EDDF 011250Z 24005KT 9999 FEW030 15/10 Q1013", station)
        assert rendered.text == "Q1013 A29.91 QFE 1003"
        assert rendered.voice == "QNH one zero one three."

    def test_hectopascals_from_inches(self):
        station = _station(altimeter={"template": {"text": "{altimeter|hpa}", "voice": "{altimeter|hpa}"}})
        rendered = _render(AltimeterNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002", station)
        assert rendered.text == "1016"

    def test_secondary_station_values(self):
        station = _station(
            altimeter={
                "template": {
                    "text": "A{altimeter} LGA {altimeter|KLGA}",
                    "voice": "ALTIMETER {altimeter}, LAGUARDIA {altimeter|KLGA}",
                }
            }
        )
        node = AltimeterNode({"KLGA": Value(3001.0, Unit.MERCURY_INCH)})
        rendered = _render(node, "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002", station)
        assert rendered.text == "A3002 LGA 3001"
        assert rendered.voice == "ALTIMETER three zero zero two, LAGUARDIA three zero zero one."

    def test_missing_secondary_renders_empty(self):
        station = _station(altimeter={"template": {"text": "A{altimeter} LGA {altimeter|KLGA}", "voice": "X"}})
        rendered = _render(AltimeterNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002", station)
        assert rendered.text == "A3002 LGA "

    def test_missing_pressure(self):
        rendered = _render(AltimeterNode(), "EDDF 011250Z 24005KT 9999 FEW030 15/10 Q////", _station("EDDF"))
        assert (rendered.text, rendered.voice) == ("", "")

    def test_secondary_stations_skip_modifiers(self):
        assert secondary_stations(
            "A{altimeter|KLGA} {altimeter|inhg} {altimeter|TEXT}",
            "{altimeter|klga} {altimeter|KEWR}",
        ) == ["KLGA", "KEWR"]

    @pytest.mark.asyncio
    async def test_fetch_secondary_altimeters(self):
        repository = StaticMetarRepository({"KLGA": "KLGA 011251Z 24008KT 10SM FEW040 21/11 A3001"})
        values, failures = await fetch_secondary_altimeters(repository, ["KLGA", "KXXX"])
        assert values == {"KLGA": Value(3001.0, Unit.MERCURY_INCH)}
        assert failures == {"KXXX": "no altimeter setting available"}

    @pytest.mark.asyncio
    async def test_fetch_secondary_altimeters_reports_exceptions(self):
        class FailingRepository:
            async def get_metar(self, station, *, monitor=False):
                raise RuntimeError("service down")

        values, failures = await fetch_secondary_altimeters(FailingRepository(), ["KLGA"])
        assert values == {}
        assert failures == {"KLGA": "service down"}


class TestTrend:
    def test_becoming_and_tempo(self):
        rendered = _render(
            TrendNode(),
            "EGLL 011250Z 24010KT 9999 SCT030 15/10 Q1015 BECMG FM1300 TL1400 25015KT 4000 RA BKN010 TEMPO 3000",
            _station("EGLL"),
        )
        assert rendered.text == "BECMG FM1300 TL1400 25015KT 4000 RA BKN010 TEMPO 3000"
        assert rendered.voice.startswith("TREND, BECOMING FROM one three zero zero UNTIL one four zero zero")
        assert "WIND two five zero AT one five." in rendered.voice
        assert "ceiling ONE THOUSAND BROKEN." in rendered.voice
        assert "TEMPORARY VISIBILITY three thousand meters" in rendered.voice
        assert rendered.voice.count("TREND") == 1

    def test_nosig(self):
        rendered = _render(TrendNode(), "EGLL 011250Z 24010KT 9999 SCT030 15/10 Q1015 NOSIG", _station("EGLL"))
        assert rendered.text == "NOSIG"
        assert rendered.voice == "TREND, NO SIGNIFICANT CHANGES."

    def test_not_available(self):
        raw = "EGLL 011250Z 24010KT 9999 SCT030 15/10 Q1015"
        assert _render(TrendNode(), raw, _station("EGLL")).text == ""

        station = _station("EGLL", trend={"not_available_text": "TREND N/A", "not_available_voice": "NO TREND"})
        rendered = _render(TrendNode(), raw, station)
        assert rendered.text == "TREND N/A"
        assert rendered.voice == "NO TREND."


def test_wind_shear() -> None:
    raw = "EGLL 011250Z 24008KT 9999 FEW030 05/05 Q1010 WS R27L WS R09"
    rendered = _render(WindShearNode(), raw, _station("EGLL"))
    assert rendered.text == "WS R27L WS R09"
    assert rendered.voice == "WIND SHEAR RUNWAY two seven LEFT, WIND SHEAR RUNWAY zero niner."


def test_wind_shear_all_runways() -> None:
    rendered = _render(WindShearNode(), "EGLL 011250Z 24008KT 9999 FEW030 05/05 Q1010 WS ALL RWY", _station("EGLL"))
    assert rendered.text == "WS ALL RWY"
    assert rendered.voice == "WIND SHEAR ALL RUNWAYS."


class TestTransitionLevel:
    @pytest.fixture
    def station(self):
        return _station(
            "EDDF",
            transition_level={
                "values": [
                    {"low": 978, "high": 1013, "altitude": 60},
                    {"low": 1014, "high": 1050, "altitude": 50},
                ]
            },
        )

    def test_level_from_table(self, station):
        rendered = _render(TransitionLevelNode(), "EDDF 011250Z 24005KT 9999 FEW030 15/10 Q1015", station)
        assert rendered.text == "TRANSITION LEVEL 50"
        # no sentence stop on the transition level
        assert rendered.voice == "TRANSITION LEVEL 50"

    def test_lower_band(self, station):
        rendered = _render(TransitionLevelNode(), "EDDF 011250Z 24005KT 9999 FEW030 15/10 Q1005", station)
        assert rendered.text == "TRANSITION LEVEL 60"

    def test_not_rendered_for_faa_stations(self):
        rendered = _render(TransitionLevelNode(), "KJFK 011251Z 25010KT 10SM FEW030 22/12 A3002")
        assert (rendered.text, rendered.voice) == ("", "")


def test_closing_statement() -> None:
    closing = render_closing(_station(), "b")
    assert closing.text == "...ADVS YOU HAVE INFO B."
    assert closing.voice == "ADVISE ON INITIAL CONTACT, YOU HAVE INFORMATION Bravo"
