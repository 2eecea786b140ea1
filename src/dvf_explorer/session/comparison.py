"""Bounded set of zones selected for side-by-side comparison"""

from dataclasses import dataclass, replace
from typing import List, Tuple
import logging

import pandas as pd

from ..aggregation.aggregator import TerritoryStats
from ..config.constants import MAX_COMPARISON_ZONES, MIN_ZONES_TO_COMPARE
from ..models.geography import TerritoryScale
from ..models.transit import TransitLine


@dataclass(frozen=True)
class ComparisonZone:
    """Snapshot of a zone at the time it was selected"""
    id: str
    name: str
    scale: TerritoryScale
    stats: TerritoryStats
    transit_lines: Tuple[TransitLine, ...] = ()


class ComparisonSet:
    """
    Ordered collection of at most three zones

    Zones are identified by id only. Failed additions and removals return
    False and leave the collection untouched. The mode flag decides whether
    zone clicks feed this set instead of drilling down.
    """

    def __init__(self, max_zones: int = MAX_COMPARISON_ZONES):
        self.max_zones = max_zones
        self._zones: List[ComparisonZone] = []
        self._active = False
        self.logger = logging.getLogger("comparison_set")

    @property
    def zones(self) -> List[ComparisonZone]:
        return list(self._zones)

    @property
    def count(self) -> int:
        return len(self._zones)

    def can_add(self) -> bool:
        return len(self._zones) < self.max_zones

    def contains(self, zone_id: str) -> bool:
        return any(zone.id == zone_id for zone in self._zones)

    def add(self, zone: ComparisonZone) -> bool:
        """Append a zone snapshot; False when full or already present"""
        if not self.can_add():
            self.logger.warning(f"Cannot add {zone.name}: limit of {self.max_zones} zones reached")
            return False

        if self.contains(zone.id):
            self.logger.warning(f"Zone {zone.id} is already being compared")
            return False

        self._zones.append(replace(zone, transit_lines=tuple(zone.transit_lines)))
        self.logger.info(f"Zone added to comparison: {zone.name}")
        return True

    def remove(self, zone_id: str) -> bool:
        """Remove a zone by id; False when absent"""
        for i, zone in enumerate(self._zones):
            if zone.id == zone_id:
                del self._zones[i]
                self.logger.info(f"Zone removed from comparison: {zone.name}")
                return True

        self.logger.warning(f"Zone {zone_id} not found in comparison")
        return False

    def clear(self) -> None:
        self._zones.clear()
        self.logger.info("Comparison cleared")

    def toggle_mode(self) -> bool:
        """Flip comparison mode and return the new state"""
        self._active = not self._active
        return self._active

    def activate(self) -> None:
        self._active = True

    def deactivate(self) -> None:
        self._active = False

    def is_active(self) -> bool:
        return self._active

    def can_compare(self) -> bool:
        """At least two zones are needed for a comparison table"""
        return len(self._zones) >= MIN_ZONES_TO_COMPARE

    def comparison_table(self) -> pd.DataFrame:
        """One row per zone, in selection order"""
        rows = []
        for zone in self._zones:
            rows.append({
                'id': zone.id,
                'name': zone.name,
                'scale': TerritoryScale(zone.scale).value,
                'count': zone.stats.count,
                'median_price': zone.stats.median_price,
                'house_count': zone.stats.house_count,
                'apartment_count': zone.stats.apartment_count,
                'transit_lines': len(zone.transit_lines),
                'transit_modes': ", ".join(sorted({line.mode.value for line in zone.transit_lines})),
            })

        return pd.DataFrame(rows, columns=[
            'id', 'name', 'scale', 'count', 'median_price', 'house_count',
            'apartment_count', 'transit_lines', 'transit_modes'
        ])
