"""Session-scoped state: comparison set and exploration context"""

from .comparison import ComparisonSet, ComparisonZone
from .explorer import Choropleth, ExplorationSession, ZoneReport

__all__ = [
    'ComparisonSet',
    'ComparisonZone',
    'Choropleth',
    'ExplorationSession',
    'ZoneReport'
]
