"""Core algorithms for the DVF explorer"""

from .statistics import median, upper_middle_median, compute_quantiles, color_for_quantile, build_legend
from .transit_matcher import lines_serving_zone, group_lines_by_mode
from .filters import FilterCriteria, FilterState, get_filtered_stats, calculate_compatibility_score
from .purchasing_power import analyze_affordability, top_n

__all__ = [
    'median',
    'upper_middle_median',
    'compute_quantiles',
    'color_for_quantile',
    'build_legend',
    'lines_serving_zone',
    'group_lines_by_mode',
    'FilterCriteria',
    'FilterState',
    'get_filtered_stats',
    'calculate_compatibility_score',
    'analyze_affordability',
    'top_n'
]
