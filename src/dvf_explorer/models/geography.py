"""Geographic data models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
import logging
import math

import geopandas as gpd
from shapely.geometry import shape
from shapely.errors import ShapelyError
from shapely.geometry.base import BaseGeometry

from ..config.constants import SECTION_PARENT_PROPERTY, TERRITORY_PROPERTIES


logger = logging.getLogger(__name__)


class TerritoryScale(str, Enum):
    """Nested territorial scales, coarsest first"""
    DEPARTMENT = "department"
    COMMUNE = "commune"
    SECTION = "section"

    @property
    def child(self) -> Optional['TerritoryScale']:
        """Next finer scale, None for sections"""
        order = list(TerritoryScale)
        position = order.index(self)
        return order[position + 1] if position + 1 < len(order) else None


@dataclass
class Territory:
    """A department, commune or cadastral section boundary"""
    code: str
    name: str
    scale: TerritoryScale
    geometry: Optional[BaseGeometry] = field(default=None, repr=False)
    parent_code: Optional[str] = None
    short_code: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Label used in result tables"""
        if self.scale == TerritoryScale.SECTION:
            return f"Section {self.short_code or self.code}"
        return self.name


def territory_from_properties(properties: Mapping[str, Any],
                              geometry: BaseGeometry,
                              scale: TerritoryScale) -> Territory:
    """Build a Territory from a GeoJSON properties bag"""
    scale = TerritoryScale(scale)
    code_field, name_field = TERRITORY_PROPERTIES[scale.value]

    code = properties.get(code_field) or properties.get('code')
    if not code:
        raise ValueError(f"Missing territory code '{code_field}'")
    code = str(code)

    if scale == TerritoryScale.SECTION:
        short_code = properties.get(name_field)
        short_code = str(short_code) if short_code else None
        parent = properties.get(SECTION_PARENT_PROPERTY)
        return Territory(
            code=code,
            name=f"Section {short_code or code}",
            scale=scale,
            geometry=geometry,
            parent_code=str(parent) if parent else None,
            short_code=short_code,
        )

    name = properties.get(name_field) or code
    parent = code[:2] if scale == TerritoryScale.COMMUNE else None
    return Territory(code=code, name=str(name), scale=scale,
                     geometry=geometry, parent_code=parent)


def territories_from_geojson(geojson: Mapping[str, Any],
                             scale: TerritoryScale) -> List[Territory]:
    """
    Parse a GeoJSON Feature or FeatureCollection into territories

    Features with a missing code or unreadable geometry are skipped.
    """
    scale = TerritoryScale(scale)
    if geojson.get('type') == 'FeatureCollection':
        features = geojson.get('features') or []
    else:
        features = [geojson]

    territories = []
    skipped = 0
    for feature in features:
        try:
            geometry = shape(feature['geometry'])
            territories.append(
                territory_from_properties(feature.get('properties') or {}, geometry, scale)
            )
        except (KeyError, TypeError, ValueError, AttributeError, ShapelyError) as e:
            skipped += 1
            logger.debug(f"Skipping malformed {scale.value} feature: {e}")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed {scale.value} features")
    return territories


def territories_from_frame(gdf: gpd.GeoDataFrame,
                           scale: TerritoryScale) -> List[Territory]:
    """Convert a GeoDataFrame of boundaries to territories"""
    scale = TerritoryScale(scale)
    territories = []
    skipped = 0
    for _, row in gdf.iterrows():
        geometry = row.geometry
        if geometry is None or geometry.is_empty:
            skipped += 1
            continue
        properties = {
            k: v for k, v in row.items()
            if k != gdf.geometry.name and not (isinstance(v, float) and math.isnan(v))
        }
        try:
            territories.append(territory_from_properties(properties, geometry, scale))
        except ValueError as e:
            skipped += 1
            logger.debug(f"Skipping {scale.value} row: {e}")

    if skipped:
        logger.warning(f"Skipped {skipped} {scale.value} rows without code or geometry")
    return territories


def territories_by_code(territories: List[Territory]) -> Dict[str, Territory]:
    """Index territories by code"""
    return {t.code: t for t in territories}
