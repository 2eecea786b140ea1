"""Purchasing-power analysis: surface affordable for a budget"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional
import math

from ..config.constants import DEFAULT_TOP_N
from ..models.geography import Territory


@dataclass(frozen=True)
class AffordabilityResult:
    """Affordable surface in one territory"""
    id: str
    name: str
    price_per_m2: float
    affordable_surface: int


def analyze_affordability(budget: float,
                          price_by_territory: Mapping[str, Optional[float]],
                          catalog: Iterable[Territory]) -> List[AffordabilityResult]:
    """
    Rank territories by the surface a budget buys

    Territories without a known positive price are left out. Results are
    sorted by affordable surface, largest first; ties keep catalog order.

    Args:
        budget: Budget in euros
        price_by_territory: Median price per m2 by territory code
        catalog: Territories to scan

    Returns:
        Ranked AffordabilityResult list
    """
    results = []
    for territory in catalog:
        price = price_by_territory.get(territory.code)
        if price is None or math.isnan(price) or price <= 0:
            continue
        results.append(AffordabilityResult(
            id=territory.code,
            name=territory.display_name,
            price_per_m2=price,
            affordable_surface=math.floor(budget / price),
        ))

    results.sort(key=lambda r: r.affordable_surface, reverse=True)
    return results


def top_n(results: List[AffordabilityResult], n: int = DEFAULT_TOP_N) -> List[AffordabilityResult]:
    """First n ranked results"""
    return results[:max(n, 0)]
