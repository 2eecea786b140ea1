"""Configuration for the DVF explorer"""

from .settings import ExplorerSettings, load_config

__all__ = [
    'ExplorerSettings',
    'load_config'
]
