"""Pytest configuration and fixtures"""

import pytest
import pandas as pd
from datetime import date
import tempfile
from pathlib import Path

from dvf_explorer.data import SyntheticDataGenerator
from dvf_explorer.models.geography import Territory, TerritoryScale
from dvf_explorer.models.transaction import PropertyType, Transaction
from dvf_explorer.models.transit import TransitLine, TransitMode, TransitStop
from shapely.geometry import box


# Paris test square, centred on (2.35, 48.85)
CENTER_LNG = 2.35
CENTER_LAT = 48.85
HALF_SIZE = 0.001
METERS_PER_DEGREE_LAT = 111195.0


def make_transaction(price_per_m2=None,
                     surface=50.0,
                     commune="75056",
                     section="75056000AB",
                     property_type=PropertyType.APARTMENT,
                     value=None,
                     **kwargs):
    """Build a Transaction from a price per m2 (or an explicit value)"""
    if value is None and price_per_m2 is not None and surface is not None:
        value = price_per_m2 * surface
    return Transaction(
        department=commune[:2] if commune else None,
        commune=commune,
        section=section,
        property_type=property_type,
        value=value,
        surface=surface,
        **kwargs
    )


@pytest.fixture
def paris_transactions():
    """Three Paris sales at 8000, 9000 and 10000 euros per m2"""
    return [
        make_transaction(8000, property_type=PropertyType.APARTMENT, sale_date=date(2022, 3, 1)),
        make_transaction(9000, property_type=PropertyType.HOUSE, sale_date=date(2022, 6, 1)),
        make_transaction(10000, property_type=PropertyType.APARTMENT, sale_date=date(2023, 1, 15)),
    ]


@pytest.fixture
def mixed_transactions(paris_transactions):
    """Paris sales plus Boulogne sales and unusable records"""
    return paris_transactions + [
        make_transaction(6000, commune="92012", section="92012000AC", property_type=PropertyType.HOUSE),
        make_transaction(7000, commune="92012", section="92012000AC"),
        make_transaction(value=300000, surface=None, commune="92012", section="92012000AD"),
        make_transaction(value=0, surface=40.0, commune="93066", section=None),
    ]


@pytest.fixture
def paris_square():
    return box(CENTER_LNG - HALF_SIZE, CENTER_LAT - HALF_SIZE,
               CENTER_LNG + HALF_SIZE, CENTER_LAT + HALF_SIZE)


@pytest.fixture
def paris_commune(paris_square):
    return Territory(code="75056", name="Paris", scale=TerritoryScale.COMMUNE,
                     geometry=paris_square, parent_code="75")


@pytest.fixture
def paris_department(paris_square):
    return Territory(code="75", name="Paris", scale=TerritoryScale.DEPARTMENT,
                     geometry=paris_square.buffer(0.01))


@pytest.fixture
def boulogne_commune():
    return Territory(code="92012", name="Boulogne-Billancourt", scale=TerritoryScale.COMMUNE,
                     geometry=box(2.23, 48.82, 2.25, 48.84), parent_code="92")


@pytest.fixture
def paris_sections(paris_square):
    """Two sections of Paris and one of Boulogne"""
    return [
        Territory(code="75056000AB", name="Section AB", scale=TerritoryScale.SECTION,
                  geometry=box(CENTER_LNG - HALF_SIZE, CENTER_LAT - HALF_SIZE, CENTER_LNG, CENTER_LAT + HALF_SIZE),
                  parent_code="75056", short_code="AB"),
        Territory(code="75056000AC", name="Section AC", scale=TerritoryScale.SECTION,
                  geometry=box(CENTER_LNG, CENTER_LAT - HALF_SIZE, CENTER_LNG + HALF_SIZE, CENTER_LAT + HALF_SIZE),
                  parent_code="75056", short_code="AC"),
        Territory(code="92012000AC", name="Section AC", scale=TerritoryScale.SECTION,
                  geometry=box(2.23, 48.82, 2.24, 48.84),
                  parent_code="92012", short_code="AC"),
    ]


@pytest.fixture
def transit_stops():
    """Stops inside, on a vertex, 500 m outside and 2000 m outside the Paris square"""
    north_edge = CENTER_LAT + HALF_SIZE
    return [
        TransitStop(position=(CENTER_LNG, CENTER_LAT), mode=TransitMode.METRO, line_id="1", name="Centre"),
        TransitStop(position=(CENTER_LNG + 0.0002, CENTER_LAT), mode=TransitMode.METRO, line_id="1", name="Centre bis"),
        TransitStop(position=(CENTER_LNG - HALF_SIZE, CENTER_LAT - HALF_SIZE), mode=TransitMode.RER,
                    line_id="A", name="Corner"),
        TransitStop(position=(CENTER_LNG, north_edge + 500 / METERS_PER_DEGREE_LAT), mode=TransitMode.TRAMWAY,
                    line_id="T2", name="Near"),
        TransitStop(position=(CENTER_LNG, north_edge + 2000 / METERS_PER_DEGREE_LAT), mode=TransitMode.TRAIN,
                    line_id="L", name="Far"),
    ]


@pytest.fixture
def transit_lines():
    """Line catalog; T2 is deliberately missing"""
    return [
        TransitLine(mode=TransitMode.METRO, line_id="1", color="#FFCD00"),
        TransitLine(mode=TransitMode.RER, line_id="A", color="#E3051C"),
        TransitLine(mode=TransitMode.TRAIN, line_id="L", color="#7584BC"),
    ]


@pytest.fixture
def dvf_records_df():
    """Raw DVF rows as read from the CSV"""
    return pd.DataFrame([
        {
            'date_mutation': '2022-03-01', 'valeur_fonciere': 400000.0,
            'adresse_numero': 12, 'adresse_nom_voie': 'RUE DE RIVOLI', 'code_postal': '75001',
            'code_commune': '75056', 'id_parcelle': '75056000AB0012',
            'type_local': 'Appartement', 'surface_reelle_bati': 50.0, 'nombre_pieces_principales': 2,
        },
        {
            'date_mutation': '2022-05-10', 'valeur_fonciere': 0.0,
            'adresse_numero': 3, 'adresse_nom_voie': 'RUE DE PARIS', 'code_postal': '92100',
            'code_commune': '92012', 'id_parcelle': '92012000AC0101',
            'type_local': 'Maison', 'surface_reelle_bati': 90.0, 'nombre_pieces_principales': 4,
        },
        {
            'date_mutation': '2023-01-20', 'valeur_fonciere': 250000.0,
            'adresse_numero': None, 'adresse_nom_voie': 'ALLEE DES TILLEULS', 'code_postal': '93200',
            'code_commune': '93066', 'id_parcelle': '93066000AD0007',
            'type_local': 'Maison', 'surface_reelle_bati': None, 'nombre_pieces_principales': 0,
        },
        {
            'date_mutation': '2023-02-02', 'valeur_fonciere': 180000.0,
            'adresse_numero': 8, 'adresse_nom_voie': 'RUE VICTOR HUGO', 'code_postal': None,
            'code_commune': None, 'id_parcelle': None,
            'type_local': 'Appartement', 'surface_reelle_bati': 30.0, 'nombre_pieces_principales': 1,
        },
    ])


@pytest.fixture
def synthetic_generator():
    """Create synthetic data generator with fixed seed"""
    return SyntheticDataGenerator(seed=42)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def generated_data_dir(synthetic_generator, temp_data_dir):
    """Directory holding a small synthetic dataset under the default file names"""
    dataset = synthetic_generator.generate_complete_dataset(num_transactions=400)
    synthetic_generator.save_dataset(dataset, temp_data_dir)
    return temp_data_dir


@pytest.fixture
def transaction_factory():
    """Factory building transactions from a price per m2"""
    return make_transaction
