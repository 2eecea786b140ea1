"""Data loading utilities for DVF, transit and boundary files"""

import pandas as pd
import geopandas as gpd
from typing import Callable, List, Optional, TypeVar, Union
from pathlib import Path
import json
import logging

from ..config.constants import (
    DEFAULT_STOPS_FILE,
    DEFAULT_TRANSACTIONS_FILE,
    DEFAULT_TRANSIT_LINES_FILE,
    TRANSIT_CSV_SEPARATOR,
)
from ..models.geography import Territory, TerritoryScale, territories_from_frame, territories_from_geojson
from ..models.transaction import Transaction, transactions_from_dataframe
from ..models.transit import TransitLine, TransitStop, line_from_record, stop_from_record


T = TypeVar('T')

# Codes must keep their leading zeros and letters (2A, 0123)
CODE_COLUMNS = {
    'code_commune': str,
    'id_parcelle': str,
    'code_postal': str,
}


class DataLoader:
    """Load source files from a data directory"""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.logger = logging.getLogger("data_loader")

    def load_transactions_frame(self, filename: str = DEFAULT_TRANSACTIONS_FILE) -> pd.DataFrame:
        """Load the raw DVF table, codes kept as strings"""
        filepath = self.data_dir / filename

        df = pd.read_csv(filepath, dtype=CODE_COLUMNS, low_memory=False)

        if 'date_mutation' in df.columns:
            df['date_mutation'] = pd.to_datetime(df['date_mutation'], errors='coerce')

        return df

    def load_transactions(self, filename: str = DEFAULT_TRANSACTIONS_FILE) -> List[Transaction]:
        """
        Load DVF transactions

        Rows without a commune code cannot be placed on the map and are
        dropped. Rows with missing surface or value are kept: they count in
        the indexes but not in the price statistics.
        """
        df = self.load_transactions_frame(filename)
        total = len(df)

        if 'code_commune' not in df.columns:
            raise ValueError(f"{filename} has no 'code_commune' column")

        df = df[df['code_commune'].notna() & (df['code_commune'].str.strip() != '')]
        dropped = total - len(df)
        if dropped:
            self.logger.warning(f"Dropped {dropped} of {total} rows without a commune code")

        transactions = transactions_from_dataframe(df)
        self.logger.info(f"Loaded {len(transactions)} transactions from {filename}")
        return transactions

    def load_transit_lines(self, filename: str = DEFAULT_TRANSIT_LINES_FILE) -> List[TransitLine]:
        """Load the line catalog (geometry, mode flags and colors)"""
        df = self._read_transit_csv(filename)
        return self._convert_rows(df, line_from_record, "transit line", filename)

    def load_stops(self, filename: str = DEFAULT_STOPS_FILE) -> List[TransitStop]:
        """Load the station catalog"""
        df = self._read_transit_csv(filename)
        return self._convert_rows(df, stop_from_record, "stop", filename)

    def load_territories(self,
                         filename: str,
                         scale: Union[TerritoryScale, str]) -> List[Territory]:
        """Load boundaries of one territorial scale from a GeoJSON file"""
        gdf = gpd.read_file(self.data_dir / filename)
        territories = territories_from_frame(gdf, scale)
        self.logger.info(f"Loaded {len(territories)} {TerritoryScale(scale).value} boundaries from {filename}")
        return territories

    def load_territories_json(self,
                              filename: str,
                              scale: Union[TerritoryScale, str]) -> List[Territory]:
        """Same as load_territories, parsing the GeoJSON without geopandas"""
        with open(self.data_dir / filename, 'r', encoding='utf-8') as f:
            geojson = json.load(f)
        return territories_from_geojson(geojson, scale)

    def find(self, filename: Optional[str]) -> Optional[Path]:
        """Path of a file in the data directory, None when absent"""
        if not filename:
            return None
        path = self.data_dir / filename
        return path if path.exists() else None

    def _read_transit_csv(self, filename: str) -> pd.DataFrame:
        return pd.read_csv(self.data_dir / filename, sep=TRANSIT_CSV_SEPARATOR,
                           dtype=str, keep_default_na=False)

    def _convert_rows(self,
                      df: pd.DataFrame,
                      convert: Callable[[dict], Optional[T]],
                      label: str,
                      filename: str) -> List[T]:
        items = []
        skipped = 0
        for record in df.to_dict(orient='records'):
            item = convert(record)
            if item is None:
                skipped += 1
                continue
            items.append(item)

        if skipped:
            self.logger.warning(f"Skipped {skipped} unusable {label} rows in {filename}")
        self.logger.info(f"Loaded {len(items)} {label}s from {filename}")
        return items
