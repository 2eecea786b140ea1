"""Data loading and synthetic data generation"""

from .data_loader import DataLoader
from .synthetic_generator import CommuneProfile, SyntheticDataGenerator

__all__ = [
    'DataLoader',
    'CommuneProfile',
    'SyntheticDataGenerator'
]
