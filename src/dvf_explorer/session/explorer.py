"""Exploration session: navigation, filters and comparison for one user"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging

from ..aggregation.aggregator import AggregatedData, TerritoryStats, TransactionAggregator
from ..algorithms.filters import (
    CompatibilityScore,
    FilteredStats,
    FilterState,
    FilterCriteria,
    calculate_compatibility_score,
    get_filtered_stats,
)
from ..algorithms.purchasing_power import AffordabilityResult, analyze_affordability, top_n
from ..algorithms.statistics import LegendScale, build_legend, color_for_quantile
from ..algorithms.transit_matcher import group_lines_by_mode, lines_serving_zone
from ..config.constants import DEFAULT_TOP_N, SERVING_RADIUS_M
from ..models.geography import Territory, TerritoryScale
from ..models.transaction import Transaction
from ..models.transit import TransitLine, TransitMode, TransitStop
from .comparison import ComparisonSet, ComparisonZone


@dataclass
class ZoneReport:
    """What the side panel shows for a selected territory"""
    territory: Territory
    stats: FilteredStats
    transit_lines: List[TransitLine]
    compatibility: Optional[CompatibilityScore] = None
    added_to_comparison: Optional[bool] = None  # None outside comparison mode

    @property
    def accessibility(self) -> Dict[TransitMode, Dict[str, str]]:
        return group_lines_by_mode(self.transit_lines)


@dataclass
class Choropleth:
    """Fill colors by territory code plus the matching legend"""
    colors: Dict[str, str]
    legend: Optional[LegendScale]


class ExplorationSession:
    """
    Owns the state of one exploration session

    The session drills down department -> commune -> section. Clicking a
    territory either advances navigation or, in comparison mode, adds a
    snapshot of the zone to the comparison set.
    """

    def __init__(self,
                 data: AggregatedData,
                 stops: Iterable[TransitStop] = (),
                 lines: Iterable[TransitLine] = (),
                 communes: Iterable[Territory] = (),
                 sections: Iterable[Territory] = (),
                 serving_radius_m: float = SERVING_RADIUS_M):
        """
        Initialize session

        Args:
            data: Aggregates built by TransactionAggregator
            stops: Station catalog
            lines: Line catalog (colors)
            communes: Commune boundaries of the whole region
            sections: Section boundaries available for drill-down
            serving_radius_m: Proximity radius for transit matching
        """
        self.data = data
        self.stops = list(stops)
        self.lines = list(lines)
        self.communes = list(communes)
        self.sections = list(sections)
        self.serving_radius_m = serving_radius_m

        self.filters = FilterState()
        self.comparison = ComparisonSet()

        self.scale = TerritoryScale.DEPARTMENT
        self.current_department: Optional[str] = None
        self.current_commune: Optional[Territory] = None
        self.current_sections: List[Territory] = []

        self.last_budget: Optional[float] = None
        self.last_results: Optional[List[AffordabilityResult]] = None

        self.logger = logging.getLogger("exploration_session")

    @classmethod
    def from_transactions(cls, transactions: Iterable[Transaction], **kwargs) -> 'ExplorationSession':
        """Aggregate transactions and open a session on them"""
        return cls(TransactionAggregator().aggregate(transactions), **kwargs)

    @property
    def criteria(self) -> FilterCriteria:
        return self.filters.criteria

    def apply_filters(self, **criteria) -> FilterCriteria:
        return self.filters.set_filters(**criteria)

    def reset_filters(self) -> FilterCriteria:
        return self.filters.reset_filters()

    def transit_for(self, territory: Territory) -> List[TransitLine]:
        """Lines serving a territory, none when its boundary is unknown"""
        if territory.geometry is None:
            return []
        return lines_serving_zone(territory, self.stops, self.lines, self.serving_radius_m)

    def select_territory(self, territory: Territory) -> ZoneReport:
        """
        Handle a click on a territory

        Returns:
            ZoneReport with filtered statistics, serving lines and, except
            for sections, the compatibility score
        """
        transactions = self.data.index.get(territory.scale, territory.code)
        transit_lines = self.transit_for(territory)
        criteria = self.filters.criteria

        stats = get_filtered_stats(transactions, criteria, transit_lines)
        compatibility = None
        if territory.scale != TerritoryScale.SECTION:
            compatibility = calculate_compatibility_score(transactions, criteria, transit_lines)

        report = ZoneReport(territory=territory, stats=stats,
                            transit_lines=transit_lines, compatibility=compatibility)

        if self.comparison.is_active():
            report.added_to_comparison = self.comparison.add(
                self._comparison_zone(territory, stats, transit_lines)
            )
            return report

        self._navigate(territory)
        return report

    def reset_navigation(self) -> None:
        """Back to the regional department view"""
        self.scale = TerritoryScale.DEPARTMENT
        self.current_department = None
        self.current_commune = None
        self.current_sections = []

    def analysis_catalog(self) -> Tuple[TerritoryScale, List[Territory]]:
        """
        Territories scanned by the purchasing-power analysis

        Sections of the displayed commune at section scale, communes of
        the displayed department at commune scale, every commune otherwise.
        """
        if self.scale == TerritoryScale.SECTION and self.current_commune is not None:
            return TerritoryScale.SECTION, list(self.current_sections)

        if self.scale == TerritoryScale.COMMUNE and self.current_department:
            return TerritoryScale.COMMUNE, [
                c for c in self.communes if c.parent_code == self.current_department
            ]

        return TerritoryScale.COMMUNE, list(self.communes)

    def analyze_budget(self, budget: float, top: int = DEFAULT_TOP_N) -> List[AffordabilityResult]:
        """Rank the territories in view by affordable surface"""
        scale, catalog = self.analysis_catalog()
        results = analyze_affordability(budget, self.data.prices_for(scale), catalog)

        self.last_budget = budget
        self.last_results = results
        self.logger.info(
            f"Budget {budget:.0f} analysed over {len(catalog)} {scale.value} territories, "
            f"{len(results)} with a known price"
        )
        return top_n(results, top)

    def clear_budget_analysis(self) -> None:
        self.last_budget = None
        self.last_results = None

    def choropleth(self,
                   territories: Sequence[Territory],
                   scale: Optional[Union[TerritoryScale, str]] = None) -> Choropleth:
        """Quantile colors for the territories on display"""
        if scale is None:
            scale = territories[0].scale if territories else TerritoryScale.COMMUNE
        prices = self.data.prices_for(scale)

        legend = build_legend(prices.get(t.code) for t in territories)
        thresholds = legend.thresholds if legend else []
        colors = {t.code: color_for_quantile(prices.get(t.code), thresholds) for t in territories}
        return Choropleth(colors=colors, legend=legend)

    def _navigate(self, territory: Territory) -> None:
        if territory.scale == TerritoryScale.DEPARTMENT:
            self.scale = TerritoryScale.COMMUNE
            self.current_department = territory.code
            self.current_commune = None
            self.current_sections = []
        elif territory.scale == TerritoryScale.COMMUNE:
            self.scale = TerritoryScale.SECTION
            self.current_department = territory.parent_code or territory.code[:2]
            self.current_commune = territory
            self.current_sections = [s for s in self.sections if s.parent_code == territory.code]

        self.logger.debug(f"Navigated to {territory.scale.value} {territory.code}")

    def _comparison_zone(self,
                         territory: Territory,
                         stats: FilteredStats,
                         transit_lines: List[TransitLine]) -> ComparisonZone:
        name = territory.name
        if territory.scale == TerritoryScale.SECTION and self.current_commune is not None:
            name = f"{self.current_commune.name} - {territory.display_name}"

        snapshot = TerritoryStats(
            count=stats.count,
            median_price=stats.median_price,
            house_count=stats.house_count,
            apartment_count=stats.apartment_count,
        )
        return ComparisonZone(id=territory.code, name=name, scale=territory.scale,
                              stats=snapshot, transit_lines=tuple(transit_lines))
