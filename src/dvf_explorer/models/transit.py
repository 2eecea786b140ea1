"""Transit network data models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
import json
import math

from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from ..config.constants import FALLBACK_LINE_COLOR


class TransitMode(str, Enum):
    """Rail transit modes"""
    METRO = "METRO"
    RER = "RER"
    TRAMWAY = "TRAMWAY"
    TRAIN = "TRAIN"
    OTHER = "OTHER"


MODE_ALIASES = {
    "TRAM": TransitMode.TRAMWAY,
}

# Indicator columns of the line source, checked in this order
MODE_FLAG_COLUMNS = [
    ("metro", TransitMode.METRO),
    ("rer", TransitMode.RER),
    ("tramway", TransitMode.TRAMWAY),
    ("train", TransitMode.TRAIN),
]

LINE_ID_COLUMNS = ("SHAPE_Lig", "indice_lig", "res_com")
STOP_LINE_ID_COLUMNS = ("indice_lig", "res_com")


def normalize_mode(value: Any) -> Optional[TransitMode]:
    """
    Map a free-form mode string to a TransitMode

    Matching is case-insensitive; unknown modes become OTHER and
    empty values return None.
    """
    if isinstance(value, TransitMode):
        return value
    if value is None:
        return None
    text = str(value).strip().upper()
    if not text or text == "NAN":
        return None
    if text in MODE_ALIASES:
        return MODE_ALIASES[text]
    try:
        return TransitMode(text)
    except ValueError:
        return TransitMode.OTHER


LineKey = Tuple[TransitMode, str]


@dataclass(frozen=True)
class TransitLine:
    """A transit line, identified by (mode, line_id)"""
    mode: TransitMode
    line_id: str
    color: str = FALLBACK_LINE_COLOR
    geometry: Optional[BaseGeometry] = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> LineKey:
        return (self.mode, self.line_id)


@dataclass(frozen=True)
class TransitStop:
    """A station served by one line"""
    position: Tuple[float, float]  # (lng, lat)
    mode: TransitMode
    line_id: str
    name: Optional[str] = None

    @property
    def key(self) -> LineKey:
        return (self.mode, self.line_id)


def parse_geo_shape(cell: Any) -> Optional[Dict[str, Any]]:
    """Decode a GeoJSON geometry stored in a CSV cell"""
    if not isinstance(cell, str) or not cell.strip():
        return None
    try:
        return json.loads(cell)
    except json.JSONDecodeError:
        pass
    try:
        return json.loads(cell.replace('""', '"'))
    except json.JSONDecodeError:
        return None


def line_from_record(record: Mapping[str, Any]) -> Optional[TransitLine]:
    """Build a TransitLine from a line source row, None if unusable"""
    geo = parse_geo_shape(record.get("Geo Shape"))
    if geo is None:
        return None

    mode = TransitMode.OTHER
    for column, flag_mode in MODE_FLAG_COLUMNS:
        if _flag_set(record.get(column)):
            mode = flag_mode
            break

    line_id = _first_present(record, LINE_ID_COLUMNS)
    if line_id is None:
        return None

    hexa = _text(record.get("ColourWeb_hexa"))
    color = f"#{hexa.lstrip('#')}" if hexa else FALLBACK_LINE_COLOR

    try:
        geometry = shape(geo)
    except (TypeError, ValueError, AttributeError, KeyError, ShapelyError):
        geometry = None

    return TransitLine(mode=mode, line_id=line_id, color=color, geometry=geometry)


def stop_from_record(record: Mapping[str, Any]) -> Optional[TransitStop]:
    """Build a TransitStop from a station source row, None if unusable"""
    geo = parse_geo_shape(record.get("Geo Shape"))
    if not isinstance(geo, dict):
        return None

    coordinates = geo.get("coordinates")
    try:
        lng, lat = float(coordinates[0]), float(coordinates[1])
    except (TypeError, ValueError, IndexError, KeyError):
        return None

    mode = normalize_mode(record.get("mode"))
    line_id = _first_present(record, STOP_LINE_ID_COLUMNS)
    if mode is None or line_id is None:
        return None

    return TransitStop(position=(lng, lat), mode=mode, line_id=line_id,
                       name=_text(record.get("nom_long")))


def _flag_set(value: Any) -> bool:
    text = _text(value)
    return text is not None and text.lower() in ("1", "1.0", "true")


def _first_present(record: Mapping[str, Any], columns) -> Optional[str]:
    for column in columns:
        text = _text(record.get(column))
        if text:
            return text
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            value = int(value)
    text = str(value).strip()
    return text or None
