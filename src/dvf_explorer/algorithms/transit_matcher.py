"""Transit lines serving a territory"""

from typing import Any, Dict, Iterable, List, Sequence, Set
import logging
import math

import numpy as np
from shapely.errors import ShapelyError
from shapely.geometry import Point, shape
from shapely.geometry.base import BaseGeometry

from ..config.constants import EARTH_RADIUS_M, FALLBACK_LINE_COLOR, SERVING_RADIUS_M
from ..models.geography import Territory
from ..models.transit import LineKey, TransitLine, TransitMode, TransitStop


logger = logging.getLogger(__name__)


def haversine_distance_m(lng1: float, lat1: float, lng2: float, lat2: float) -> float:
    """Great-circle distance in meters between two (lng, lat) points"""
    lng1, lat1, lng2, lat2 = np.radians([lng1, lat1, lng2, lat2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlng / 2) ** 2
    return float(2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(a)))


def zone_geometry(zone: Any) -> BaseGeometry:
    """Accept a Territory, a shapely geometry or a GeoJSON Feature/geometry"""
    if isinstance(zone, Territory):
        return zone.geometry
    if isinstance(zone, BaseGeometry):
        return zone
    if isinstance(zone, dict) and zone.get('type') == 'Feature':
        return shape(zone['geometry'])
    return shape(zone)


def stop_serves_zone(point: Point,
                     geometry: BaseGeometry,
                     centroid: Point,
                     radius_m: float = SERVING_RADIUS_M) -> bool:
    """
    Two-stage serving test

    A stop serves the zone when the zone covers it (points on the
    boundary, vertices included, count as inside) or when it lies within
    radius_m of the zone centroid.
    """
    if geometry.covers(point):
        return True
    return haversine_distance_m(point.x, point.y, centroid.x, centroid.y) <= radius_m


def serving_line_keys(zone: Any,
                      stops: Iterable[TransitStop],
                      radius_m: float = SERVING_RADIUS_M) -> Set[LineKey]:
    """Distinct (mode, line_id) keys of the stops serving a zone"""
    geometry = zone_geometry(zone)
    centroid = geometry.centroid

    keys = set()
    skipped = 0
    for stop in stops:
        try:
            lng, lat = stop.position
            lng, lat = float(lng), float(lat)
            if not (math.isfinite(lng) and math.isfinite(lat)):
                raise ValueError(f"non-finite position {stop.position}")
            if stop_serves_zone(Point(lng, lat), geometry, centroid, radius_m):
                keys.add(stop.key)
        except (TypeError, ValueError, AttributeError, ShapelyError) as e:
            skipped += 1
            logger.debug(f"Skipping stop with malformed geometry: {e}")

    if skipped:
        logger.debug(f"Skipped {skipped} malformed stops")
    return keys


def lines_serving_zone(zone: Any,
                       stops: Iterable[TransitStop],
                       lines: Sequence[TransitLine],
                       radius_m: float = SERVING_RADIUS_M) -> List[TransitLine]:
    """
    Transit lines with at least one stop in or near a zone

    Args:
        zone: Territory polygon or multipolygon
        stops: Station catalog
        lines: Line catalog used to resolve colors, first match wins
        radius_m: Proximity radius around the zone centroid

    Returns:
        Lines deduplicated by (mode, line_id): catalog order first, then
        lines missing from the catalog with the fallback color
    """
    keys = serving_line_keys(zone, stops, radius_m)
    if not keys:
        return []

    served = []
    used = set()
    for line in lines:
        if line is None or line.key not in keys or line.key in used:
            continue
        used.add(line.key)
        served.append(TransitLine(mode=line.mode, line_id=line.line_id, color=line.color))

    for mode, line_id in sorted(keys - used, key=lambda k: (k[0].value, k[1])):
        served.append(TransitLine(mode=mode, line_id=line_id, color=FALLBACK_LINE_COLOR))

    return served


def group_lines_by_mode(lines: Iterable[TransitLine]) -> Dict[TransitMode, Dict[str, str]]:
    """Summarize lines as {mode: {line_id: color}}"""
    by_mode: Dict[TransitMode, Dict[str, str]] = {}
    for line in lines:
        by_mode.setdefault(line.mode, {})[line.line_id] = line.color
    return by_mode
