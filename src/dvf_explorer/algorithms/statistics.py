"""Statistics primitives for price maps and legends"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence
import math

import numpy as np

from ..config.constants import HEAT_PALETTE, NEUTRAL_COLOR, QUANTILE_BUCKETS


def median(values: Iterable[float]) -> Optional[float]:
    """
    Median of a list of prices

    Even-length input averages the two central values. Empty input
    has no median and returns None; the input is never modified.
    """
    data = np.sort(np.asarray(list(values if values is not None else []), dtype=float))
    if data.size == 0:
        return None

    mid = data.size // 2
    if data.size % 2:
        return float(data[mid])
    return float((data[mid - 1] + data[mid]) / 2)


def upper_middle_median(values: Iterable[float]) -> Optional[float]:
    """
    Element at position len // 2 of the sorted values

    Used by the filtered statistics panel. For even-length input this is
    the upper of the two central values, not their average.
    """
    data = np.sort(np.asarray(list(values if values is not None else []), dtype=float))
    if data.size == 0:
        return None
    return float(data[data.size // 2])


def compute_quantiles(values: Iterable[float], n: int = QUANTILE_BUCKETS) -> List[float]:
    """
    Quantile thresholds splitting values into n color buckets

    Threshold i (1 <= i < n) is the sorted value at floor(i / n * len).

    Returns:
        n - 1 thresholds, or an empty list for empty input
    """
    data = np.sort(np.asarray(list(values if values is not None else []), dtype=float))
    if data.size == 0:
        return []
    return [float(data[math.floor((i / n) * data.size)]) for i in range(1, n)]


def heat_palette() -> List[str]:
    """Palette from lowest (green) to highest (red) price"""
    return list(HEAT_PALETTE)


def color_for_quantile(value: Optional[float],
                       thresholds: Sequence[float],
                       palette: Optional[Sequence[str]] = None) -> str:
    """Palette color of the first bucket whose threshold is >= value"""
    if not _is_number(value):
        return NEUTRAL_COLOR

    palette = palette or HEAT_PALETTE
    for i, threshold in enumerate(thresholds):
        if value <= threshold:
            # More thresholds than colors share the last color
            return palette[min(i, len(palette) - 1)]
    return palette[-1]


def round_down_100(n: Optional[float]) -> Optional[int]:
    """735 -> 700"""
    if not _is_number(n):
        return None
    return int(math.floor(n / 100) * 100)


def round_up_100(n: Optional[float]) -> Optional[int]:
    """735 -> 800"""
    if not _is_number(n):
        return None
    return int(math.ceil(n / 100) * 100)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up"""
    return int(math.floor(value + 0.5))


def format_euro(value: Optional[float]) -> str:
    """Format an amount as '5 321 €'"""
    if not _is_number(value):
        return "—"
    return f"{round_half_up(value):,} €".replace(",", " ")


@dataclass
class LegendScale:
    """Inputs for a choropleth legend"""
    minimum: float
    maximum: float
    thresholds: List[float]
    colors: List[str] = field(default_factory=list)

    @property
    def min_label(self) -> str:
        return f"< {format_euro(round_up_100(self.minimum))}"

    @property
    def max_label(self) -> str:
        return f"> {format_euro(round_down_100(self.maximum))}"


def build_legend(values: Iterable[Optional[float]],
                 n: int = QUANTILE_BUCKETS) -> Optional[LegendScale]:
    """
    Build the legend for the prices currently on display

    Non-finite and missing values are ignored. Returns None when no
    value is left.
    """
    finite = [float(v) for v in values if _is_number(v) and math.isfinite(v)]
    if not finite:
        return None

    thresholds = compute_quantiles(finite, n)
    minimum, maximum = min(finite), max(finite)
    if thresholds:
        colors = [color_for_quantile(minimum, thresholds)]
        colors.extend(color_for_quantile(q, thresholds) for q in thresholds)
        colors.append(color_for_quantile(maximum, thresholds))
    else:
        colors = heat_palette()

    return LegendScale(minimum=minimum, maximum=maximum,
                       thresholds=thresholds, colors=colors)


def _is_number(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return not math.isnan(value)
    except TypeError:
        return False
