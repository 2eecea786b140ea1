"""Runtime configuration loaded from YAML files"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml

from .constants import (
    DEFAULT_COMMUNES_FILE,
    DEFAULT_DEPARTMENTS_FILE,
    DEFAULT_SECTIONS_FILE,
    DEFAULT_STOPS_FILE,
    DEFAULT_TRANSACTIONS_FILE,
    DEFAULT_TRANSIT_LINES_FILE,
    DEFAULT_TOP_N,
    SERVING_RADIUS_M,
)


logger = logging.getLogger(__name__)


@dataclass
class ExplorerSettings:
    """Settings shared by the loader, the session and the CLI"""
    data_dir: Path = Path("data")
    transactions_file: str = DEFAULT_TRANSACTIONS_FILE
    transit_lines_file: str = DEFAULT_TRANSIT_LINES_FILE
    stops_file: str = DEFAULT_STOPS_FILE
    departments_file: str = DEFAULT_DEPARTMENTS_FILE
    communes_file: str = DEFAULT_COMMUNES_FILE
    sections_file: str = DEFAULT_SECTIONS_FILE
    serving_radius_m: float = SERVING_RADIUS_M
    top_n: int = DEFAULT_TOP_N

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'ExplorerSettings':
        """Build settings from a mapping, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {unknown}")

        kwargs = {k: v for k, v in values.items() if k in known}
        if 'data_dir' in kwargs:
            kwargs['data_dir'] = Path(kwargs['data_dir'])
        return cls(**kwargs)


def load_config(path: Optional[Union[str, Path]]) -> ExplorerSettings:
    """
    Load explorer settings from a YAML file

    Args:
        path: YAML file path; None returns the defaults

    Returns:
        ExplorerSettings instance
    """
    if path is None:
        return ExplorerSettings()

    with open(path, 'r', encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")

    return ExplorerSettings.from_dict(raw)
