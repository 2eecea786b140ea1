"""Transaction data models"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional
import math

import pandas as pd

from ..config.constants import DEPARTMENT_CODE_LENGTH, SECTION_SUFFIX_LENGTH


class PropertyType(str, Enum):
    """Kind of property sold"""
    HOUSE = "Maison"
    APARTMENT = "Appartement"
    OTHER = "Autre"

    @classmethod
    def parse(cls, value: Any) -> 'PropertyType':
        """
        Normalize a DVF label ("Maison") or type code (1, "2") to a PropertyType

        Unknown or missing values map to OTHER.
        """
        if isinstance(value, PropertyType):
            return value
        text = _clean_str(value)
        if text is None:
            return cls.OTHER

        lowered = text.lower()
        if lowered.endswith('.0'):
            lowered = lowered[:-2]
        if lowered in ('maison', 'house', '1'):
            return cls.HOUSE
        if lowered in ('appartement', 'apartment', '2'):
            return cls.APARTMENT
        return cls.OTHER


@dataclass(frozen=True)
class Transaction:
    """A single DVF sale record"""
    department: Optional[str]
    commune: Optional[str]
    section: Optional[str]
    property_type: PropertyType
    value: Optional[float]
    surface: Optional[float]
    rooms: Optional[int] = None
    sale_date: Optional[date] = None
    address: str = ""
    postal_code: Optional[str] = None

    @property
    def price_per_m2(self) -> Optional[float]:
        """Sale value divided by built surface"""
        if not _is_positive(self.surface) or self.value is None or math.isnan(self.value):
            return None
        return self.value / self.surface

    @property
    def is_usable(self) -> bool:
        """Whether the record can feed price statistics"""
        return _is_positive(self.surface) and _is_positive(self.value)

    def key_for(self, scale: str) -> Optional[str]:
        """Territory code of this transaction at the given scale"""
        scale_value = getattr(scale, 'value', scale)
        if scale_value == 'department':
            return self.department
        if scale_value == 'commune':
            return self.commune
        if scale_value == 'section':
            return self.section
        raise ValueError(f"Unknown territorial scale: {scale!r}")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Transaction':
        """Map a DVF CSV row to a Transaction"""
        commune = _clean_str(record.get('code_commune'))
        parcel = _clean_str(record.get('id_parcelle'))

        address = " ".join(
            part for part in (
                _clean_str(record.get('adresse_numero')),
                _clean_str(record.get('adresse_nom_voie')),
            ) if part
        )

        return cls(
            department=commune[:DEPARTMENT_CODE_LENGTH] if commune else None,
            commune=commune,
            section=parcel[:-SECTION_SUFFIX_LENGTH] if parcel and len(parcel) > SECTION_SUFFIX_LENGTH else None,
            property_type=PropertyType.parse(record.get('type_local')),
            value=_to_float(record.get('valeur_fonciere')),
            surface=_to_float(record.get('surface_reelle_bati')),
            rooms=_to_int(record.get('nombre_pieces_principales')),
            sale_date=_to_date(record.get('date_mutation')),
            address=address,
            postal_code=_clean_str(record.get('code_postal')),
        )


def transactions_from_dataframe(df: pd.DataFrame) -> List[Transaction]:
    """Convert a DVF DataFrame to Transaction objects"""
    return [Transaction.from_record(row) for row in df.to_dict(orient='records')]


def transactions_to_dataframe(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Convert Transaction objects to a DataFrame"""
    data = []
    for t in transactions:
        data.append({
            'department': t.department,
            'commune': t.commune,
            'section': t.section,
            'property_type': t.property_type.value,
            'value': t.value,
            'surface': t.surface,
            'price_per_m2': t.price_per_m2,
            'rooms': t.rooms,
            'sale_date': t.sale_date,
            'address': t.address,
            'postal_code': t.postal_code,
        })

    return pd.DataFrame(data, columns=[
        'department', 'commune', 'section', 'property_type', 'value',
        'surface', 'price_per_m2', 'rooms', 'sale_date', 'address', 'postal_code'
    ])


def _is_positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _clean_str(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # Codes read as numbers lose their type, not their digits
        value = int(value)
    return str(value).strip()


def _to_float(value: Any) -> Optional[float]:
    if _is_missing(value):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    # DVF uses 0 rooms for "not applicable"
    if number is None or number == 0:
        return None
    return int(number)


def _to_date(value: Any) -> Optional[date]:
    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None
