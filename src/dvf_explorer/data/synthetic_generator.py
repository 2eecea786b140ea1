"""Generate synthetic DVF, transit and boundary data for testing"""

import numpy as np
import pandas as pd
from datetime import date
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass
from pathlib import Path
import json
import logging

from ..config.constants import (
    DEFAULT_COMMUNES_FILE,
    DEFAULT_DEPARTMENTS_FILE,
    DEFAULT_SECTIONS_FILE,
    DEFAULT_STOPS_FILE,
    DEFAULT_TRANSACTIONS_FILE,
    DEFAULT_TRANSIT_LINES_FILE,
    TRANSIT_CSV_SEPARATOR,
)


@dataclass
class CommuneProfile:
    """Location and price level of a generated commune"""
    code: str
    name: str
    lng: float
    lat: float
    price_per_m2_mean: float
    apartment_share: float


DEFAULT_COMMUNES = [
    CommuneProfile("75056", "Paris", 2.3522, 48.8566, 10500, 0.95),
    CommuneProfile("92012", "Boulogne-Billancourt", 2.2400, 48.8350, 8200, 0.85),
    CommuneProfile("93066", "Saint-Denis", 2.3574, 48.9362, 4300, 0.75),
    CommuneProfile("94028", "Créteil", 2.4556, 48.7904, 4000, 0.70),
    CommuneProfile("78646", "Versailles", 2.1301, 48.8049, 7300, 0.65),
    CommuneProfile("77288", "Meaux", 2.8786, 48.9601, 2900, 0.45),
    CommuneProfile("91228", "Évry-Courcouronnes", 2.4500, 48.6290, 2700, 0.50),
    CommuneProfile("95127", "Cergy", 2.0655, 49.0364, 3300, 0.55),
]

DEPARTMENT_NAMES = {
    "75": "Paris",
    "77": "Seine-et-Marne",
    "78": "Yvelines",
    "91": "Essonne",
    "92": "Hauts-de-Seine",
    "93": "Seine-Saint-Denis",
    "94": "Val-de-Marne",
    "95": "Val-d'Oise",
}

STREET_NAMES = [
    "RUE DE LA REPUBLIQUE", "AVENUE JEAN JAURES", "RUE VICTOR HUGO",
    "BOULEVARD GAMBETTA", "RUE DE PARIS", "ALLEE DES TILLEULS",
]

# (mode, line id, color, station mode label)
DEFAULT_LINES = [
    ("metro", "1", "FFCD00", "METRO"),
    ("metro", "13", "98D4E2", "METRO"),
    ("rer", "A", "E3051C", "RER"),
    ("rer", "C", "FFCE00", "RER"),
    ("tramway", "T2", "CF009E", "TRAMWAY"),
    ("train", "L", "7584BC", "TRAIN"),
]


class SyntheticDataGenerator:
    """Generate synthetic DVF sales with matching boundaries and transit"""

    def __init__(self, seed: int = 42, communes: Optional[List[CommuneProfile]] = None):
        self.seed = seed
        self.rng = np.random.RandomState(seed)
        self.communes = communes or DEFAULT_COMMUNES
        self.logger = logging.getLogger("synthetic_generator")

    def section_codes(self, commune: CommuneProfile, num_sections: int = 4) -> List[str]:
        """Section codes of a commune: commune code + prefix 000 + two letters"""
        return [f"{commune.code}000A{chr(ord('A') + i)}" for i in range(num_sections)]

    def generate_transactions(self,
                              num_transactions: int = 1000,
                              start_year: int = 2020,
                              end_year: int = 2023,
                              num_sections: int = 4,
                              invalid_share: float = 0.02) -> pd.DataFrame:
        """
        Generate DVF-shaped sale rows

        A small share of rows has no built surface, as in the real data
        where lots without buildings carry an empty surface.
        """
        rows = []
        for i in range(num_transactions):
            commune = self.communes[self.rng.randint(len(self.communes))]
            sections = self.section_codes(commune, num_sections)
            section = sections[self.rng.randint(len(sections))]

            is_apartment = self.rng.uniform() < commune.apartment_share
            if is_apartment:
                surface = float(np.clip(self.rng.normal(55, 20), 12, 200))
                rooms = int(np.clip(round(surface / 20), 1, 6))
            else:
                surface = float(np.clip(self.rng.normal(110, 35), 40, 350))
                rooms = int(np.clip(round(surface / 25), 2, 9))

            price_per_m2 = max(1000.0, self.rng.normal(commune.price_per_m2_mean,
                                                       commune.price_per_m2_mean * 0.15))
            value = round(surface * price_per_m2, -2)

            sale_date = date(
                int(self.rng.randint(start_year, end_year + 1)),
                int(self.rng.randint(1, 13)),
                int(self.rng.randint(1, 29)),
            )

            row = {
                'id_mutation': f"{sale_date.year}-{i + 1}",
                'date_mutation': sale_date.isoformat(),
                'nature_mutation': 'Vente',
                'valeur_fonciere': value,
                'adresse_numero': int(self.rng.randint(1, 200)),
                'adresse_nom_voie': STREET_NAMES[self.rng.randint(len(STREET_NAMES))],
                'code_postal': f"{commune.code[:2]}0{self.rng.randint(0, 10)}0",
                'code_commune': commune.code,
                'nom_commune': commune.name,
                'id_parcelle': f"{section}{self.rng.randint(1, 10000):04d}",
                'type_local': 'Appartement' if is_apartment else 'Maison',
                'surface_reelle_bati': round(surface),
                'nombre_pieces_principales': rooms,
            }

            if self.rng.uniform() < invalid_share:
                row['surface_reelle_bati'] = None

            rows.append(row)

        return pd.DataFrame(rows)

    def generate_communes_geojson(self, half_size: float = 0.02) -> Dict[str, Any]:
        """Square commune boundaries centred on each commune"""
        features = [
            _square_feature(c.lng, c.lat, half_size, {'id': c.code, 'nom': c.name})
            for c in self.communes
        ]
        return {'type': 'FeatureCollection', 'features': features}

    def generate_sections_geojson(self,
                                  num_sections: int = 4,
                                  half_size: float = 0.02) -> Dict[str, Any]:
        """Split each commune square into vertical strips, one per section"""
        features = []
        width = 2 * half_size / num_sections
        for commune in self.communes:
            for i, code in enumerate(self.section_codes(commune, num_sections)):
                west = commune.lng - half_size + i * width
                features.append({
                    'type': 'Feature',
                    'properties': {'id': code, 'code': code[-2:], 'commune': commune.code},
                    'geometry': _box(west, commune.lat - half_size,
                                     west + width, commune.lat + half_size),
                })
        return {'type': 'FeatureCollection', 'features': features}

    def generate_departments_geojson(self, margin: float = 0.05) -> Dict[str, Any]:
        """Bounding box of the generated communes of each department"""
        features = []
        departments = sorted({c.code[:2] for c in self.communes})
        for dept in departments:
            members = [c for c in self.communes if c.code[:2] == dept]
            features.append({
                'type': 'Feature',
                'properties': {'code_insee': dept, 'nom': DEPARTMENT_NAMES.get(dept, dept)},
                'geometry': _box(min(c.lng for c in members) - margin,
                                 min(c.lat for c in members) - margin,
                                 max(c.lng for c in members) + margin,
                                 max(c.lat for c in members) + margin),
            })
        return {'type': 'FeatureCollection', 'features': features}

    def generate_stops(self, stops_per_commune: int = 2, spread: float = 0.005) -> pd.DataFrame:
        """Stations near commune centres, each on one catalog line"""
        rows = []
        for commune in self.communes:
            for k in range(stops_per_commune):
                mode, line_id, _, mode_label = DEFAULT_LINES[self.rng.randint(len(DEFAULT_LINES))]
                lng = commune.lng + self.rng.uniform(-spread, spread)
                lat = commune.lat + self.rng.uniform(-spread, spread)
                rows.append({
                    'Geo Shape': json.dumps({'type': 'Point', 'coordinates': [lng, lat]}),
                    'nom_long': f"{commune.name} {k + 1}",
                    'mode': mode_label,
                    'indice_lig': line_id,
                    'res_com': f"{mode_label} {line_id}",
                })
        return pd.DataFrame(rows)

    def generate_transit_lines(self) -> pd.DataFrame:
        """One line record per catalog line, drawn through the communes"""
        rows = []
        for mode, line_id, color, _ in DEFAULT_LINES:
            order = self.rng.permutation(len(self.communes))[:3]
            coordinates = [[self.communes[j].lng, self.communes[j].lat] for j in order]
            rows.append({
                'Geo Shape': json.dumps({'type': 'LineString', 'coordinates': coordinates}),
                'indice_lig': line_id,
                'res_com': f"{mode.upper()} {line_id}",
                'ColourWeb_hexa': color,
                'metro': '1' if mode == 'metro' else '0',
                'rer': '1' if mode == 'rer' else '0',
                'tramway': '1' if mode == 'tramway' else '0',
                'train': '1' if mode == 'train' else '0',
            })
        return pd.DataFrame(rows)

    def generate_complete_dataset(self,
                                  num_transactions: int = 1000,
                                  start_year: int = 2020,
                                  end_year: int = 2023,
                                  num_sections: int = 4) -> Dict[str, Any]:
        """
        Generate a complete synthetic dataset

        Returns dict with:
        - 'transactions': DVF sale rows
        - 'transit_lines': line catalog rows
        - 'stops': station rows
        - 'departments', 'communes', 'sections': GeoJSON FeatureCollections
        """
        self.logger.info(f"Generating {num_transactions} synthetic sales from {start_year} to {end_year}")

        dataset = {
            'transactions': self.generate_transactions(num_transactions, start_year, end_year, num_sections),
            'transit_lines': self.generate_transit_lines(),
            'stops': self.generate_stops(),
            'departments': self.generate_departments_geojson(),
            'communes': self.generate_communes_geojson(),
            'sections': self.generate_sections_geojson(num_sections),
        }

        self.logger.info(
            f"Generated {len(dataset['transactions']):,} sales in {len(self.communes)} communes, "
            f"{len(dataset['stops'])} stops"
        )
        return dataset

    def save_dataset(self, dataset: Dict[str, Any], output_dir: Union[str, Path]) -> Dict[str, Path]:
        """Write a generated dataset under the default DataLoader file names"""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        paths = {
            'transactions': output_dir / DEFAULT_TRANSACTIONS_FILE,
            'transit_lines': output_dir / DEFAULT_TRANSIT_LINES_FILE,
            'stops': output_dir / DEFAULT_STOPS_FILE,
            'departments': output_dir / DEFAULT_DEPARTMENTS_FILE,
            'communes': output_dir / DEFAULT_COMMUNES_FILE,
            'sections': output_dir / DEFAULT_SECTIONS_FILE,
        }

        dataset['transactions'].to_csv(paths['transactions'], index=False)
        dataset['transit_lines'].to_csv(paths['transit_lines'], sep=TRANSIT_CSV_SEPARATOR, index=False)
        dataset['stops'].to_csv(paths['stops'], sep=TRANSIT_CSV_SEPARATOR, index=False)

        for name in ('departments', 'communes', 'sections'):
            with open(paths[name], 'w', encoding='utf-8') as f:
                json.dump(dataset[name], f, ensure_ascii=False)

        return paths


def _box(west: float, south: float, east: float, north: float) -> Dict[str, Any]:
    return {
        'type': 'Polygon',
        'coordinates': [[
            [west, south], [east, south], [east, north], [west, north], [west, south]
        ]],
    }


def _square_feature(lng: float, lat: float, half_size: float, properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'type': 'Feature',
        'properties': properties,
        'geometry': _box(lng - half_size, lat - half_size, lng + half_size, lat + half_size),
    }
