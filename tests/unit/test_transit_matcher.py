"""Unit tests for transit accessibility matching"""

import pytest
from shapely.geometry import Point, mapping

from dvf_explorer.algorithms.transit_matcher import (
    group_lines_by_mode,
    haversine_distance_m,
    lines_serving_zone,
    serving_line_keys,
    stop_serves_zone,
    zone_geometry,
)
from dvf_explorer.config.constants import FALLBACK_LINE_COLOR
from dvf_explorer.models.transit import TransitLine, TransitMode, TransitStop


class TestDistance:
    """Test great-circle distance"""

    def test_one_degree_of_latitude(self):
        distance = haversine_distance_m(2.35, 48.0, 2.35, 49.0)
        assert abs(distance - 111195) < 1

    def test_zero_distance(self):
        assert haversine_distance_m(2.35, 48.85, 2.35, 48.85) == 0


class TestServingTest:
    """Test the two-stage serving rule"""

    def test_vertex_counts_as_inside(self, paris_square):
        """A stop exactly on a polygon vertex is covered"""
        west, south, _, _ = paris_square.bounds
        assert stop_serves_zone(Point(west, south), paris_square, paris_square.centroid, radius_m=0)

    def test_edge_counts_as_inside(self, paris_square):
        west, south, east, _ = paris_square.bounds
        point = Point((west + east) / 2, south)
        assert stop_serves_zone(point, paris_square, paris_square.centroid, radius_m=0)

    def test_proximity_stage(self, paris_square):
        _, _, _, north = paris_square.bounds
        outside = Point(paris_square.centroid.x, north + 0.0045)
        assert stop_serves_zone(outside, paris_square, paris_square.centroid, radius_m=1000)
        assert not stop_serves_zone(outside, paris_square, paris_square.centroid, radius_m=100)

    def test_distance_measured_from_centroid(self, paris_square):
        """Outside stops 500 m from the centroid are served, 2000 m are not"""
        centroid = paris_square.centroid
        near = Point(centroid.x, centroid.y + 500 / 111195.0)
        far = Point(centroid.x, centroid.y + 2000 / 111195.0)

        assert not paris_square.covers(near)
        assert not paris_square.covers(far)
        assert abs(haversine_distance_m(centroid.x, centroid.y, near.x, near.y) - 500) < 1
        assert abs(haversine_distance_m(centroid.x, centroid.y, far.x, far.y) - 2000) < 1
        assert stop_serves_zone(near, paris_square, centroid, radius_m=1000)
        assert not stop_serves_zone(far, paris_square, centroid, radius_m=1000)


class TestLinesServingZone:
    """Test line resolution for a zone"""

    def test_served_lines(self, paris_commune, transit_stops, transit_lines):
        lines = lines_serving_zone(paris_commune, transit_stops, transit_lines)
        keys = [line.key for line in lines]

        assert (TransitMode.METRO, "1") in keys
        assert (TransitMode.RER, "A") in keys
        assert (TransitMode.TRAMWAY, "T2") in keys

    def test_far_stop_never_matched(self, paris_commune, transit_stops, transit_lines):
        """A stop 2000 m outside the zone is out of range"""
        lines = lines_serving_zone(paris_commune, transit_stops, transit_lines)
        assert (TransitMode.TRAIN, "L") not in [line.key for line in lines]

    def test_deduplicated_by_mode_and_line(self, paris_commune, transit_stops, transit_lines):
        lines = lines_serving_zone(paris_commune, transit_stops, transit_lines)
        keys = [line.key for line in lines]
        assert len(keys) == len(set(keys))
        assert keys.count((TransitMode.METRO, "1")) == 1

    def test_catalog_order_then_fallback(self, paris_commune, transit_stops, transit_lines):
        lines = lines_serving_zone(paris_commune, transit_stops, transit_lines)

        assert [line.line_id for line in lines] == ["1", "A", "T2"]
        assert lines[0].color == "#FFCD00"
        assert lines[1].color == "#E3051C"
        assert lines[2].color == FALLBACK_LINE_COLOR

    def test_first_catalog_entry_wins(self, paris_commune, transit_stops):
        catalog = [
            TransitLine(mode=TransitMode.METRO, line_id="1", color="#111111"),
            TransitLine(mode=TransitMode.METRO, line_id="1", color="#222222"),
        ]
        lines = lines_serving_zone(paris_commune, transit_stops, catalog)
        assert lines[0].color == "#111111"

    def test_malformed_stops_skipped(self, paris_commune, transit_stops, transit_lines):
        stops = [
            TransitStop(position=None, mode=TransitMode.METRO, line_id="2"),
            TransitStop(position=("abc", 48.85), mode=TransitMode.METRO, line_id="3"),
            TransitStop(position=(float('nan'), 48.85), mode=TransitMode.METRO, line_id="4"),
        ] + transit_stops

        lines = lines_serving_zone(paris_commune, stops, transit_lines)
        assert [line.line_id for line in lines] == ["1", "A", "T2"]

    def test_no_stops(self, paris_commune, transit_lines):
        assert lines_serving_zone(paris_commune, [], transit_lines) == []

    def test_radius_override(self, paris_commune, transit_stops, transit_lines):
        """With no proximity radius only covered stops count"""
        keys = serving_line_keys(paris_commune, transit_stops, radius_m=0)
        assert keys == {(TransitMode.METRO, "1"), (TransitMode.RER, "A")}

    def test_accepts_geojson_feature(self, paris_square, transit_stops, transit_lines):
        feature = {'type': 'Feature', 'properties': {}, 'geometry': mapping(paris_square)}
        assert zone_geometry(feature).equals(paris_square)
        assert len(lines_serving_zone(feature, transit_stops, transit_lines)) == 3

    def test_stops_500_and_2000_m_from_centroid(self, paris_commune, transit_lines):
        centroid = paris_commune.geometry.centroid
        stops = [
            TransitStop(position=(centroid.x + 500 / 73130.0, centroid.y), mode=TransitMode.METRO,
                        line_id="1", name="East 500"),
            TransitStop(position=(centroid.x, centroid.y - 2000 / 111195.0), mode=TransitMode.TRAIN,
                        line_id="L", name="South 2000"),
        ]

        lines = lines_serving_zone(paris_commune, stops, transit_lines)
        assert [line.key for line in lines] == [(TransitMode.METRO, "1")]


class TestGroupByMode:
    """Test accessibility summary"""

    def test_group_lines_by_mode(self):
        lines = [
            TransitLine(mode=TransitMode.METRO, line_id="1", color="#FFCD00"),
            TransitLine(mode=TransitMode.METRO, line_id="4", color="#BE418D"),
            TransitLine(mode=TransitMode.RER, line_id="B", color="#5291CE"),
        ]
        grouped = group_lines_by_mode(lines)

        assert grouped == {
            TransitMode.METRO: {"1": "#FFCD00", "4": "#BE418D"},
            TransitMode.RER: {"B": "#5291CE"},
        }

    def test_empty(self):
        assert group_lines_by_mode([]) == {}
