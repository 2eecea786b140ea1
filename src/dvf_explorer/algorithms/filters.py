"""
Multi-criteria filtering of DVF transactions

Criteria (budget, minimum surface, property type, transit access) are held
in an immutable FilterCriteria value. The functions below take the criteria
explicitly; FilterState owns the current value for a session.
"""

from dataclasses import dataclass, field, fields, replace
from typing import FrozenSet, Iterable, List, Optional, Sequence
import logging

from ..models.transaction import PropertyType, Transaction
from ..models.transit import TransitLine
from .statistics import median, round_half_up, upper_middle_median


@dataclass(frozen=True)
class FilterCriteria:
    """Active filters; None (or False) means the criterion is off"""
    max_budget: Optional[float] = None
    min_surface: Optional[float] = None
    property_type: Optional[PropertyType] = None
    require_transit: bool = False

    def __post_init__(self):
        if self.property_type is not None and not isinstance(self.property_type, PropertyType):
            object.__setattr__(self, 'property_type', PropertyType.parse(self.property_type))
        object.__setattr__(self, 'require_transit', bool(self.require_transit))

    @property
    def is_active(self) -> bool:
        return (self.max_budget is not None or
                self.min_surface is not None or
                self.property_type is not None or
                self.require_transit)


class FilterState:
    """Holder of the session's current criteria"""

    def __init__(self):
        self._criteria = FilterCriteria()
        self.logger = logging.getLogger("filter_state")

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    def set_filters(self, **changes) -> FilterCriteria:
        """
        Replace the given criteria, leaving the others untouched

        Passing None for a criterion switches it off. Unknown names raise
        TypeError.
        """
        known = {f.name for f in fields(FilterCriteria)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise TypeError(f"Unknown filter criteria: {unknown}")

        self._criteria = replace(self._criteria, **changes)
        self.logger.debug(f"Filters set to {self._criteria}")
        return self._criteria

    def reset_filters(self) -> FilterCriteria:
        """Switch every criterion off"""
        self._criteria = FilterCriteria()
        self.logger.debug("Filters reset")
        return self._criteria


@dataclass(frozen=True)
class ZoneProfile:
    """Zone-level summary tested by matches_filters"""
    median_price: Optional[float] = None
    available_surface: Optional[float] = None
    property_types: Optional[FrozenSet[PropertyType]] = None

    @classmethod
    def from_transactions(cls, transactions: Iterable[Transaction]) -> 'ZoneProfile':
        """Profile a zone from its usable transactions"""
        usable = [t for t in transactions if t.is_usable]
        if not usable:
            return cls(property_types=frozenset())
        return cls(
            median_price=median(t.price_per_m2 for t in usable),
            available_surface=max(t.surface for t in usable),
            property_types=frozenset(t.property_type for t in usable),
        )


@dataclass
class FilteredStats:
    """Statistics recomputed on the transactions passing the filters"""
    count: int = 0
    house_count: int = 0
    apartment_count: int = 0
    median_price: Optional[float] = None
    filtered: List[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class CompatibilityScore:
    """Share of a zone's transactions matching the active filters"""
    score: int
    matched: int
    total: int


def matches_filters(zone: ZoneProfile,
                    criteria: FilterCriteria,
                    transit_lines: Sequence[TransitLine] = ()) -> bool:
    """
    Whether a zone satisfies every active criterion

    Unknown zone values (None) never fail the budget or surface checks; a
    zone without known property types fails an active type criterion.
    """
    if (criteria.max_budget is not None and zone.median_price is not None
            and zone.median_price > criteria.max_budget):
        return False

    if (criteria.min_surface is not None and zone.available_surface is not None
            and zone.available_surface < criteria.min_surface):
        return False

    if criteria.property_type is not None:
        if not zone.property_types or criteria.property_type not in zone.property_types:
            return False

    if criteria.require_transit and not transit_lines:
        return False

    return True


def transaction_matches(transaction: Transaction,
                        criteria: FilterCriteria,
                        has_transit: bool) -> bool:
    """Validity checks plus every active criterion for one sale"""
    if not transaction.is_usable:
        return False
    if criteria.max_budget is not None and transaction.value > criteria.max_budget:
        return False
    if criteria.min_surface is not None and transaction.surface < criteria.min_surface:
        return False
    if criteria.property_type is not None and transaction.property_type != criteria.property_type:
        return False
    if criteria.require_transit and not has_transit:
        return False
    return True


def get_filtered_stats(transactions: Optional[Iterable[Transaction]],
                       criteria: FilterCriteria,
                       transit_lines: Sequence[TransitLine] = ()) -> FilteredStats:
    """
    Recompute statistics on the transactions passing the filters

    The budget applies to the total sale value and the surface criterion
    to the built surface. The median is the upper-middle sorted price
    (see upper_middle_median), None when nothing survives.
    """
    has_transit = bool(transit_lines)
    survivors = [t for t in (transactions or []) if transaction_matches(t, criteria, has_transit)]

    return FilteredStats(
        count=len(survivors),
        house_count=sum(1 for t in survivors if t.property_type == PropertyType.HOUSE),
        apartment_count=sum(1 for t in survivors if t.property_type == PropertyType.APARTMENT),
        median_price=upper_middle_median(t.value / t.surface for t in survivors),
        filtered=survivors,
    )


def calculate_compatibility_score(transactions: Optional[Iterable[Transaction]],
                                  criteria: FilterCriteria,
                                  transit_lines: Sequence[TransitLine] = ()) -> CompatibilityScore:
    """
    Percentage of a zone's transactions matching the active filters

    An empty zone scores 0. Without active criteria every zone scores 100,
    whatever its data looks like.
    """
    transactions = list(transactions or [])
    total = len(transactions)
    if total == 0:
        return CompatibilityScore(score=0, matched=0, total=0)

    if not criteria.is_active:
        return CompatibilityScore(score=100, matched=total, total=total)

    has_transit = bool(transit_lines)
    matched = sum(1 for t in transactions if transaction_matches(t, criteria, has_transit))
    return CompatibilityScore(score=round_half_up(matched / total * 100),
                              matched=matched, total=total)
