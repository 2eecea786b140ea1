"""Territorial aggregation of DVF transactions"""

from collections import defaultdict
from dataclasses import dataclass, field, asdict
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union
import logging

import pandas as pd

from ..algorithms.statistics import median
from ..models.geography import TerritoryScale
from ..models.transaction import PropertyType, Transaction


@dataclass(frozen=True)
class TerritoryStats:
    """Price statistics for one set of transactions"""
    count: int = 0
    median_price: Optional[float] = None
    house_count: int = 0
    apartment_count: int = 0
    house_median_price: Optional[float] = None
    apartment_median_price: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


EMPTY_STATS = TerritoryStats()


@dataclass(frozen=True)
class TerritoryIndex:
    """Transactions by territory code, one read-only mapping per scale"""
    by_department: Mapping[str, Tuple[Transaction, ...]] = field(default_factory=dict)
    by_commune: Mapping[str, Tuple[Transaction, ...]] = field(default_factory=dict)
    by_section: Mapping[str, Tuple[Transaction, ...]] = field(default_factory=dict)

    def __post_init__(self):
        for name in ('by_department', 'by_commune', 'by_section'):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def for_scale(self, scale: Union[TerritoryScale, str]) -> Mapping[str, Tuple[Transaction, ...]]:
        scale = TerritoryScale(scale)
        if scale == TerritoryScale.DEPARTMENT:
            return self.by_department
        if scale == TerritoryScale.COMMUNE:
            return self.by_commune
        return self.by_section

    def get(self, scale: Union[TerritoryScale, str], code: str) -> Tuple[Transaction, ...]:
        """Transactions of a territory, empty when unknown"""
        return self.for_scale(scale).get(code, ())


def compute_stats(transactions: Optional[Iterable[Transaction]]) -> TerritoryStats:
    """
    Compute statistics for an arbitrary list of transactions

    Records without a positive surface and value are ignored.
    """
    usable = [t for t in (transactions or []) if t.is_usable]
    if not usable:
        return EMPTY_STATS

    houses = [t.price_per_m2 for t in usable if t.property_type == PropertyType.HOUSE]
    apartments = [t.price_per_m2 for t in usable if t.property_type == PropertyType.APARTMENT]

    return TerritoryStats(
        count=len(usable),
        median_price=median(t.price_per_m2 for t in usable),
        house_count=len(houses),
        apartment_count=len(apartments),
        house_median_price=median(houses),
        apartment_median_price=median(apartments),
    )


def compute_stats_by_dept(transactions: Optional[Iterable[Transaction]]) -> Dict[str, TerritoryStats]:
    """Statistics per department code in a single pass"""
    groups = defaultdict(lambda: {'prices': [], 'houses': 0, 'apartments': 0})

    for t in transactions or []:
        if not t.department or not t.is_usable:
            continue
        group = groups[t.department]
        group['prices'].append(t.price_per_m2)
        if t.property_type == PropertyType.HOUSE:
            group['houses'] += 1
        elif t.property_type == PropertyType.APARTMENT:
            group['apartments'] += 1

    return {
        code: TerritoryStats(
            count=len(group['prices']),
            median_price=median(group['prices']),
            house_count=group['houses'],
            apartment_count=group['apartments'],
        )
        for code, group in groups.items()
    }


def aggregate_median_by_key(transactions: Optional[Iterable[Transaction]],
                            key: Union[TerritoryScale, str]) -> Dict[str, float]:
    """
    Median price per m2 grouped by a territorial key

    Args:
        transactions: DVF transactions
        key: Scale to group on ('commune' or 'section'; 'department' also works)

    Returns:
        Dict mapping territory code to median price
    """
    scale = TerritoryScale(key)
    groups = defaultdict(list)

    for t in transactions or []:
        code = t.key_for(scale)
        if not code or not t.is_usable:
            continue
        groups[code].append(t.price_per_m2)

    return {code: median(prices) for code, prices in groups.items()}


def build_indexes(transactions: Optional[Iterable[Transaction]]) -> TerritoryIndex:
    """
    Index transactions by department, commune and section

    A transaction without a code at some scale is absent from that index.
    Raw records are indexed whether or not they are usable for statistics.
    """
    by_department = defaultdict(list)
    by_commune = defaultdict(list)
    by_section = defaultdict(list)

    for t in transactions or []:
        if t.department:
            by_department[t.department].append(t)
        if t.commune:
            by_commune[t.commune].append(t)
        if t.section:
            by_section[t.section].append(t)

    return TerritoryIndex(
        by_department={k: tuple(v) for k, v in by_department.items()},
        by_commune={k: tuple(v) for k, v in by_commune.items()},
        by_section={k: tuple(v) for k, v in by_section.items()},
    )


@dataclass
class AggregatedData:
    """Everything derived from the transaction set at load time"""
    stats_by_department: Dict[str, TerritoryStats]
    median_by_commune: Dict[str, float]
    median_by_section: Dict[str, float]
    index: TerritoryIndex
    transaction_count: int = 0
    usable_count: int = 0

    def prices_for(self, scale: Union[TerritoryScale, str]) -> Dict[str, Optional[float]]:
        """Median price map for a scale, as a fresh dict"""
        scale = TerritoryScale(scale)
        if scale == TerritoryScale.DEPARTMENT:
            return {code: s.median_price for code, s in self.stats_by_department.items()}
        if scale == TerritoryScale.COMMUNE:
            return dict(self.median_by_commune)
        return dict(self.median_by_section)

    def stats_for(self, scale: Union[TerritoryScale, str], code: str) -> TerritoryStats:
        """Unfiltered statistics of one territory"""
        return compute_stats(self.index.get(scale, code))

    def stats_frame(self, scale: Union[TerritoryScale, str]) -> pd.DataFrame:
        """Per-territory statistics as a DataFrame, one row per code"""
        scale = TerritoryScale(scale)
        rows = []
        for code, transactions in sorted(self.index.for_scale(scale).items()):
            row = {'code': code}
            row.update(compute_stats(transactions).to_dict())
            rows.append(row)

        columns = ['code'] + list(TerritoryStats.__dataclass_fields__)
        return pd.DataFrame(rows, columns=columns)


class TransactionAggregator:
    """
    Build the load-time aggregates used by the map and the panels

    One call to aggregate() produces department statistics, median price
    maps for communes and sections, and the lookup indexes.
    """

    def __init__(self):
        self.logger = logging.getLogger("transaction_aggregator")

    def aggregate(self, transactions: Optional[Iterable[Transaction]]) -> AggregatedData:
        """
        Aggregate a full transaction set

        Args:
            transactions: All loaded transactions, usable or not

        Returns:
            AggregatedData bundle
        """
        transactions = list(transactions or [])
        usable_count = sum(1 for t in transactions if t.is_usable)

        if usable_count < len(transactions):
            self.logger.info(
                f"{len(transactions) - usable_count} transactions lack a positive "
                f"surface or value and are excluded from statistics"
            )

        data = AggregatedData(
            stats_by_department=compute_stats_by_dept(transactions),
            median_by_commune=aggregate_median_by_key(transactions, TerritoryScale.COMMUNE),
            median_by_section=aggregate_median_by_key(transactions, TerritoryScale.SECTION),
            index=build_indexes(transactions),
            transaction_count=len(transactions),
            usable_count=usable_count,
        )

        self.logger.info(
            f"Aggregated {len(transactions)} transactions into "
            f"{len(data.stats_by_department)} departments, "
            f"{len(data.median_by_commune)} communes and "
            f"{len(data.median_by_section)} sections"
        )
        return data
