"""Data models for the DVF explorer"""

from .transaction import (
    PropertyType,
    Transaction,
    transactions_from_dataframe,
    transactions_to_dataframe
)
from .geography import (
    TerritoryScale,
    Territory,
    territories_by_code,
    territories_from_geojson,
    territories_from_frame
)
from .transit import TransitMode, TransitLine, TransitStop, normalize_mode
from .validators import DataValidator

__all__ = [
    'PropertyType',
    'Transaction',
    'transactions_from_dataframe',
    'transactions_to_dataframe',
    'TerritoryScale',
    'Territory',
    'territories_by_code',
    'territories_from_geojson',
    'territories_from_frame',
    'TransitMode',
    'TransitLine',
    'TransitStop',
    'normalize_mode',
    'DataValidator'
]
