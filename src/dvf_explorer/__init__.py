"""
DVF Île-de-France explorer

Price statistics, transit accessibility, filters and purchasing-power
analysis over DVF property sales in the Paris region.
"""

__version__ = "0.1.0"

from .aggregation import AggregatedData, TransactionAggregator
from .algorithms import FilterCriteria, FilterState, analyze_affordability
from .data import DataLoader, SyntheticDataGenerator
from .models import PropertyType, Territory, TerritoryScale, Transaction, TransitLine, TransitStop
from .session import ComparisonSet, ExplorationSession

__all__ = [
    "AggregatedData",
    "TransactionAggregator",
    "FilterCriteria",
    "FilterState",
    "analyze_affordability",
    "DataLoader",
    "SyntheticDataGenerator",
    "PropertyType",
    "Territory",
    "TerritoryScale",
    "Transaction",
    "TransitLine",
    "TransitStop",
    "ComparisonSet",
    "ExplorationSession",
]
